# gateway/commands.py
"""
Request body parsing

Private endpoints accept either a JSON object or flat ``key=value`` pairs
joined by ``&``. Parsers are tried in that order; the first one that
recognises the body wins and its fields are validated into a command model.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence, Type, TypeVar
from urllib.parse import unquote_plus

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from mock_exchange.errors import BadRequest
from mock_exchange.orders import NewOrder


class AddOrderRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ordertype: str = Field("", validation_alias=AliasChoices("ordertype", "orderType"))
    type: str = ""
    pair: str = ""
    volume: float = Field(0.0, allow_inf_nan=False)

    def to_new_order(self) -> NewOrder:
        return NewOrder(order_type=self.ordertype, side=self.type, pair=self.pair, volume=self.volume)


class QueryOrderRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    txid: str = ""

    @field_validator("txid", mode="before")
    @classmethod
    def non_string_txid_matches_nothing(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class AddressRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    asset: str = ""
    method: Optional[str] = None


class BodyParser(ABC):
    """One request body encoding"""

    @abstractmethod
    def parse(self, body: bytes) -> Optional[Dict[str, Any]]:
        """
        Decode a body

        Returns:
            Field mapping, or None if the body is not in this encoding
        """
        pass


class JsonBodyParser(BodyParser):
    def parse(self, body: bytes) -> Optional[Dict[str, Any]]:
        try:
            doc = json.loads(body)
        except ValueError:
            return None
        return doc if isinstance(doc, dict) else None


class FormBodyParser(BodyParser):
    """``a=1&b=2``; values are percent-decoded, empty segments skipped"""

    def parse(self, body: bytes) -> Optional[Dict[str, Any]]:
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

        fields: Dict[str, Any] = {}
        for segment in text.strip().split("&"):
            if not segment:
                continue
            key, sep, value = segment.partition("=")
            if not sep or not key:
                return None
            fields[unquote_plus(key)] = unquote_plus(value)
        return fields or None


PARSERS: Sequence[BodyParser] = (JsonBodyParser(), FormBodyParser())

RequestT = TypeVar("RequestT", bound=BaseModel)


def parse_fields(body: bytes, parsers: Sequence[BodyParser] = PARSERS) -> Dict[str, Any]:
    """
    Decode a body with the first parser that accepts it

    Raises:
        BadRequest: body empty or in no supported encoding
    """
    if not body.strip():
        raise BadRequest()
    for parser in parsers:
        fields = parser.parse(body)
        if fields is not None:
            return fields
    raise BadRequest()


def parse_request(body: bytes, model: Type[RequestT]) -> RequestT:
    """
    Decode a body into a request model

    Raises:
        BadRequest: body undecodable, or a field has the wrong type
    """
    fields = parse_fields(body)
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        raise BadRequest() from e
