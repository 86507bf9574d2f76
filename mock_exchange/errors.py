# mock_exchange/errors.py
"""
Error taxonomy for the mock exchange

Every error a caller can observe derives from ExchangeError, which carries
the HTTP status and the JSON error payload the gateway should answer with.
"""

from typing import Any


class ExchangeError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500

    def __init__(self, message: str = "internal error"):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Any:
        """
        Build the value of the ``error`` field in the response body

        Returns:
            List of error strings, or a bare message for config style errors
        """
        return [self.message]


class BadRequest(ExchangeError):
    """Request body unreadable or unparsable in every supported encoding"""

    def __init__(self, message: str = "bad request"):
        super().__init__(message)


class MissingAsset(ExchangeError):
    """Address lookup without an asset"""

    status_code = 400

    def __init__(self, message: str = "missing asset"):
        super().__init__(message)

    def to_payload(self) -> Any:
        return self.message


class OrderNotFound(ExchangeError):
    """Query references an order id that was never issued"""

    status_code = 404

    def __init__(self, order_id: str):
        super().__init__("order not found")
        self.order_id = order_id


class ConfigError(ExchangeError):
    """Account configuration unreadable, or requested asset absent"""

    def to_payload(self) -> Any:
        return self.message


class InvalidOrderTransition(Exception):
    """Attempt to move an order out of a terminal state"""


class DuplicateOrderError(Exception):
    """Insert of an id that is already present in the store"""
