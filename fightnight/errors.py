"""Error taxonomy.

"Nothing to post" is never an exception: selectors and providers return
``None`` for that. Configuration problems (bad time zone, bad hour) fall back
to defaults instead of raising.
"""

from __future__ import annotations


class FightNightError(Exception):
    """Base class for all errors raised by this package."""


class UpstreamError(FightNightError):
    """Network failure, timeout or non-2xx response from an upstream API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResolutionFailed(FightNightError):
    """Every resolver tier was exhausted for the selected calendar entry."""


class SendError(FightNightError):
    """The chat platform rejected a message or reminder."""
