# mock_exchange/config.py
"""
Configuration for the mock exchange

Settings come from the environment (prefix MOCK_EXCHANGE_) or a .env file.
Account data (balances and deposit/withdraw addresses) lives in a YAML file
that is re-read on every request, so edits show up without a restart:

    balances:
      xbt: 1.5
      usd: 25000
    addresses:
      xbt: bc1q...
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, Union

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from .adapters.kraken_ticker import DEFAULT_TICKER_URL
from .errors import ConfigError
from .orders.settlement import FEE_RATE, SETTLE_DELAY_MAX, SETTLE_DELAY_MIN


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 7777

    account_config_path: str = "config.yaml"

    ticker_url: str = DEFAULT_TICKER_URL
    ticker_timeout: float = 10.0
    # pair -> price; non-empty switches settlement to the offline price table
    static_prices: Dict[str, float] = {}

    settle_delay_min: int = SETTLE_DELAY_MIN
    settle_delay_max: int = SETTLE_DELAY_MAX
    fee_rate: float = FEE_RATE

    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(env_prefix="MOCK_EXCHANGE_", env_file=".env", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


class AccountConfig:
    """Static balance and address tables read from a YAML file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                doc = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"cannot read config {self.path}: {e.strerror or e}") from e
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise ConfigError(f"cannot parse config {self.path}: {e}") from e

        if not isinstance(doc, dict):
            raise ConfigError(f"config {self.path} is not a mapping")
        return doc

    def _section(self, name: str) -> dict:
        section = self._load().get(name)
        if section is None:
            raise ConfigError(f"config key '{name}' not found")
        if not isinstance(section, dict):
            raise ConfigError(f"config key '{name}' is not a mapping")
        return section

    def balances(self) -> Dict[str, float]:
        """
        Balances keyed by upper-cased asset

        Raises:
            ConfigError: file unreadable, section missing or amount not numeric
        """
        out: Dict[str, float] = {}
        for asset, amount in self._section("balances").items():
            try:
                out[str(asset).upper()] = float(amount)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"invalid balance for {asset}: {amount!r}") from e
        return out

    def address(self, asset: str) -> str:
        """
        Address for an asset, matched case-insensitively

        Raises:
            ConfigError: file unreadable, section missing or asset unknown
        """
        addresses = {str(k).lower(): v for k, v in self._section("addresses").items()}
        addr = addresses.get(asset.lower())
        if addr is None:
            raise ConfigError(f"address not found for asset {asset}")
        return str(addr)
