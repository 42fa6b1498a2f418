"""RiskArea: one drawn probability contour for one hazard."""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from shapely.geometry import Polygon

from outlook.config import settings
from outlook.engine import geometry
from outlook.engine.risk_table import classify, parse_probability, percent_value, to_literal
from outlook.models.tiers import CategoricalTier, Hazard

ExtensionValue = str | int | float | bool


@dataclass(frozen=True, eq=False)
class RiskArea:
    """Immutable risk area.

    Build through RiskArea.create(), which checks the probability literal
    against the hazard's table and rejects degenerate boundaries. Direct
    construction runs the same checks in __post_init__.

    `extensions` holds caller metadata (labels, author, etc.) as a read-only
    mapping. The engine never reads it.
    """

    id: str
    hazard: Hazard
    probability: str  # percent label without suffix, e.g. "10%"
    significant: bool
    boundary: Polygon
    extensions: Mapping[str, ExtensionValue] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "hazard", Hazard.parse(self.hazard))
        object.__setattr__(self, "boundary", geometry.as_polygon(self.boundary))
        label, sig = parse_probability(self.probability, self.significant)
        object.__setattr__(self, "probability", label)
        object.__setattr__(self, "significant", sig)
        # Raises InvalidProbability for literals outside the table
        classify(self.hazard, label, sig)
        geometry.check_boundary(self.boundary, settings.area_epsilon)
        for key, value in self.extensions.items():
            if not isinstance(key, str) or not isinstance(value, (str, int, float, bool)):
                raise TypeError(f"extension {key!r} must map str to str/int/float/bool")
        object.__setattr__(self, "extensions", MappingProxyType(dict(self.extensions)))

    @classmethod
    def create(
        cls,
        hazard: Hazard | str,
        probability: str,
        boundary,
        significant: bool = False,
        id: str | None = None,
        extensions: dict[str, ExtensionValue] | None = None,
    ) -> "RiskArea":
        return cls(
            id=id or uuid.uuid4().hex,
            hazard=Hazard.parse(hazard),
            probability=probability,
            significant=significant,
            boundary=geometry.as_polygon(boundary),
            extensions=dict(extensions or {}),
        )

    @property
    def literal(self) -> str:
        """Probability as written in the tables: "10%" or "10#"."""
        return to_literal(self.probability, self.significant)

    @property
    def percent(self) -> int:
        return percent_value(self.probability)

    @property
    def rank(self) -> tuple[int, bool]:
        """Nesting order inside one hazard: probability first, significance breaks ties."""
        return (self.percent, self.significant)

    @property
    def tier(self) -> CategoricalTier:
        return classify(self.hazard, self.probability, self.significant)

    def with_boundary(self, boundary) -> "RiskArea":
        """Same id and probability, new geometry (an edit)."""
        return RiskArea(
            id=self.id,
            hazard=self.hazard,
            probability=self.probability,
            significant=self.significant,
            boundary=geometry.as_polygon(boundary),
            extensions=dict(self.extensions),
        )

    def __repr__(self) -> str:
        return f"RiskArea({self.hazard.value} {self.literal} id={self.id})"
