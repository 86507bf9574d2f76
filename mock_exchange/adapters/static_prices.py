# mock_exchange/adapters/static_prices.py
"""
Static price table, for offline runs
"""

from typing import Dict

from .base_adapter import BasePriceSource, PriceQuote, UpstreamError


class StaticPriceSource(BasePriceSource):
    """Answers from a fixed pair -> price mapping; pair lookup ignores case"""

    def __init__(self, prices: Dict[str, float]):
        self.prices = {pair.upper(): float(price) for pair, price in prices.items()}

    async def get_price(self, pair: str) -> PriceQuote:
        price = self.prices.get(pair.upper())
        if price is None:
            raise UpstreamError(pair, "Unknown asset pair")
        return PriceQuote(pair=pair, price=price)
