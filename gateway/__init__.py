"""HTTP gateway exposing the mock exchange as a Kraken-style private API"""

from .app import create_app

__all__ = ["create_app"]
