"""Exceptions raised by the metrics pipeline."""

from __future__ import annotations


class EncodeError(Exception):
    """
    Raised when the exposition payload cannot be written.

    Only the encoder raises this, and the response builder always converts it
    into a 500 response. It never crosses the component boundary.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"
