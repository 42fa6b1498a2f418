"""Engine output: tier-tagged polygons, categorical regions and snapshots."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from shapely.geometry import Point, Polygon

from outlook.models.tiers import CategoricalTier, Hazard


@dataclass(frozen=True)
class TierTaggedPolygon:
    geometry: Polygon
    tier: CategoricalTier
    hazard: Hazard
    literal: str  # source probability, e.g. "15#"
    area_id: str


@dataclass(frozen=True)
class Contribution:
    """Provenance entry: which hazard probability produced a region's tier."""
    hazard: Hazard
    literal: str
    tier: CategoricalTier

    def sort_key(self) -> tuple:
        return (self.hazard.value, self.literal)


@dataclass(frozen=True)
class CategoricalRegion:
    geometry: Polygon
    tier: CategoricalTier
    sources: frozenset[Contribution] = frozenset()

    @property
    def hazards(self) -> frozenset[Hazard]:
        return frozenset(s.hazard for s in self.sources)

    @property
    def area(self) -> float:
        return self.geometry.area

    def sorted_sources(self) -> list[Contribution]:
        return sorted(self.sources, key=Contribution.sort_key)


@dataclass(frozen=True)
class OutlookSnapshot:
    """One published categorical outlook.

    Immutable once built. `regions` is in canonical order so two snapshots of
    the same input compare equal region by region.
    """

    generation: int
    hazard_polygons: Mapping[Hazard, tuple[TierTaggedPolygon, ...]] = field(default_factory=dict)
    regions: tuple[CategoricalRegion, ...] = ()
    fingerprint: str = ""

    def __post_init__(self):
        frozen = {h: tuple(polys) for h, polys in self.hazard_polygons.items()}
        object.__setattr__(self, "hazard_polygons", MappingProxyType(frozen))
        object.__setattr__(self, "regions", tuple(self.regions))

    @classmethod
    def empty(cls) -> "OutlookSnapshot":
        return cls(generation=0, hazard_polygons={h: () for h in Hazard})

    @property
    def is_empty(self) -> bool:
        return not self.regions

    @property
    def max_tier(self) -> CategoricalTier:
        return max((r.tier for r in self.regions), default=CategoricalTier.NONE)

    def regions_for(self, tier: CategoricalTier) -> list[CategoricalRegion]:
        return [r for r in self.regions if r.tier == tier]

    def tier_at(self, x: float, y: float) -> CategoricalTier:
        """Tier at a point. Points on a shared edge take the higher tier."""
        pt = Point(x, y)
        return max(
            (r.tier for r in self.regions if r.geometry.covers(pt)),
            default=CategoricalTier.NONE,
        )

    def region_keys(self) -> list[tuple]:
        """Comparable form of the region set (tier, WKB, sources), for diffing snapshots."""
        return [
            (r.tier, r.geometry.wkb, tuple(r.sorted_sources()))
            for r in self.regions
        ]
