"""Hazards and the categorical severity scale."""

from enum import Enum, IntEnum

from outlook.errors import InvalidHazard


class Hazard(Enum):
    TORNADO = "tornado"
    WIND = "wind"
    HAIL = "hail"

    @classmethod
    def parse(cls, value: "Hazard | str") -> "Hazard":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidHazard(f"Unknown hazard: {value!r}") from None


class CategoricalTier(IntEnum):
    """Categorical outlook levels. Integer value is the total order used by merges."""

    NONE = 0
    MRGL = 1
    SLGT = 2
    ENH = 3
    MDT = 4
    HIGH = 5

    @property
    def label(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def color(self) -> str | None:
        return _COLORS.get(self)


_DISPLAY_NAMES: dict[CategoricalTier, str] = {
    CategoricalTier.NONE: "No Severe Risk",
    CategoricalTier.MRGL: "Marginal Risk (1/5)",
    CategoricalTier.SLGT: "Slight Risk (2/5)",
    CategoricalTier.ENH: "Enhanced Risk (3/5)",
    CategoricalTier.MDT: "Moderate Risk (4/5)",
    CategoricalTier.HIGH: "High Risk (5/5)",
}

# Standard categorical fills; NONE is never rendered
_COLORS: dict[CategoricalTier, str] = {
    CategoricalTier.MRGL: "#7dc580",
    CategoricalTier.SLGT: "#f3f67d",
    CategoricalTier.ENH: "#e5c27f",
    CategoricalTier.MDT: "#e67f7e",
    CategoricalTier.HIGH: "#fe7ffe",
}
