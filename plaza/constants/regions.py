"""Region codes a listing can be filed under."""

from enum import StrEnum
from typing import Optional


class RegionCode(StrEnum):
    """Closed set of administrative region identifiers."""

    I = "I"  # noqa: E741
    II = "II"
    III = "III"
    IV = "IV"
    V = "V"
    RM = "RM"
    VI = "VI"
    VII = "VII"
    VIII = "VIII"
    IX = "IX"
    X = "X"
    XI = "XI"
    XII = "XII"
    XIV = "XIV"
    XV = "XV"
    XVI = "XVI"

    @classmethod
    def parse(cls, value: object) -> Optional["RegionCode"]:
        """Return the matching code, or None when value is not a known code."""
        if value is None:
            return None
        try:
            return cls(str(value))
        except ValueError:
            return None
