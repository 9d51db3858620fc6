"""Exception hierarchy for the walkthrough engine."""

from __future__ import annotations


class WalkthroughError(Exception):
    """Base exception for all walkthrough engine errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(WalkthroughError):
    """Malformed timeline or options. Programmer error, never user-facing."""


class InvalidProblemError(WalkthroughError):
    """Problem parameters make the underlying mathematics undefined.

    Raised while a walkthrough validates its parameters. The session catches it
    before any ticking starts and shows ``message`` instead of animating.
    """

    def __init__(self, message: str, *, operands: tuple[float, ...] = (), reason: str = "") -> None:
        details: dict = {"operands": list(operands)}
        if reason:
            details["reason"] = reason
        super().__init__(message, details)
        self.operands = tuple(operands)
        self.reason = reason
