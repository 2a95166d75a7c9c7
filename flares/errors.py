"""Exception types raised by the flare engine."""

from __future__ import annotations


class FlaresError(ValueError):
    """Base class for flare engine errors."""


class FlaresConfigError(FlaresError):
    """Invalid presentation mode, content token, or config value.

    Raised before any decoration is painted so a failing pass leaves the
    previously rendered flares untouched.
    """


__all__ = ["FlaresConfigError", "FlaresError"]
