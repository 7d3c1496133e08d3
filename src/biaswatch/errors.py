"""Error types raised by the scoring core and its integration adapter."""

from __future__ import annotations


class InvalidInputError(Exception):
    """Raised when a record lacks the identity fields scoring depends on.

    Not a ``ValueError``: pydantic validators must let it propagate rather
    than wrap it in a ``ValidationError``.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class DataAccessError(RuntimeError):
    """Raised by the integration adapter when the data source fails.

    The pure scoring core never sees these failures; callers decide whether
    to retry or render an error state.
    """

    def __init__(self, message: str, *, mandate_id: str, stage: str) -> None:
        super().__init__(message)
        self.mandate_id = mandate_id
        self.stage = stage

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.args[0]} (mandate={self.mandate_id}, stage={self.stage})"


__all__ = ["DataAccessError", "InvalidInputError"]
