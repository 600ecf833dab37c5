"""
Engine errors.

The core raises typed errors and never partially mutates a session:
validation always happens before the first write.
"""

from __future__ import annotations


class ColorWarsError(Exception):
    """Base class for every error raised by the engine."""

    error_code = "COLORWARS_ERROR"


class IllegalMove(ColorWarsError):
    """
    Raised when a move violates the turn rules.

    Recoverable: the caller rejects the move and re-prompts.
    The session is unchanged.
    """

    error_code = "ILLEGAL_MOVE"

    def __init__(self, message: str, row: int | None = None, col: int | None = None):
        self.row = row
        self.col = col
        super().__init__(message)


class InvalidConfiguration(ColorWarsError):
    """Raised when a session is requested with unsupported settings."""

    error_code = "INVALID_CONFIGURATION"


class InternalInvariant(ColorWarsError):
    """
    Raised when the board reaches a state normal play cannot produce.

    Fatal for the session: continuing would let two copies of the
    same game drift apart.
    """

    error_code = "INTERNAL_ERROR"
