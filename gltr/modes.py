"""Aspect-ratio fit modes."""

from enum import Enum

from gltr.errors import InvalidMode


class FitMode(Enum):
    """How source images are mapped into the destination aspect ratio."""

    CONTAIN = "contain"
    STRETCH = "stretch"
    COVER = "cover"


def resolve(token: str) -> FitMode:
    """Parse a fit mode token.

    Matching is case-sensitive and exhaustive: every token other than
    ``contain``, ``stretch`` and ``cover`` raises ``InvalidMode``.

    Args:
        token: Mode token from the command line or config

    Returns:
        The matching fit mode
    """
    if token == "contain":
        return FitMode.CONTAIN
    elif token == "stretch":
        return FitMode.STRETCH
    elif token == "cover":
        return FitMode.COVER
    raise InvalidMode(token)


__all__ = ["FitMode", "resolve"]
