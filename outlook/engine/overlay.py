"""Overlay engine: merge tier-tagged polygons from all hazards into one
categorical partition.

Each point of the plane takes the highest tier among the polygons covering
it. The output is a set of pairwise disjoint polygons, one per connected
same-tier area, in a canonical order.

Two ways to build the partition, chosen by total boundary segment count:

  arrangement  Node every ring against every other (unary union of the
               linework), polygonize the noded lines into faces, and look up
               which inputs cover each face through an STRtree. Faces of the
               same tier are then dissolved.
  clipping     For small inputs: walk tiers from HIGH down, each tier keeps
               the union of its polygons minus what higher tiers claimed.

Both run on a fixed precision grid (coincident_epsilon) so near-coincident
edges from different hazards snap together instead of leaving slivers.
Rounding to that grid can still shift a boundary by up to one grid step, so
"disjoint" and "sliver" are judged against grid size times boundary length
(see geometry.rounding_tolerance), never a fixed area.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import replace

import shapely
from shapely.geometry import LineString
from shapely.ops import polygonize
from shapely.strtree import STRtree

from outlook.config import Settings, settings as default_settings
from outlook.engine import geometry
from outlook.errors import InvariantViolation
from outlook.models.outlook import CategoricalRegion, Contribution, TierTaggedPolygon
from outlook.models.tiers import CategoricalTier

logger = logging.getLogger(__name__)

ARRANGEMENT = "arrangement"
CLIPPING = "clipping"


class OverlayEngine:
    def __init__(self, settings: Settings | None = None, sweep_threshold: int | None = None):
        self.settings = settings or default_settings
        self.sweep_threshold = (
            sweep_threshold if sweep_threshold is not None else self.settings.sweep_threshold
        )
        grid = self.settings.coincident_epsilon
        self._grid_size = grid if grid > 0 else None
        self._grid = max(grid, 0.0)
        self._eps = self.settings.area_epsilon
        self.last_path: str | None = None

    def overlay(self, tagged: Iterable[TierTaggedPolygon]) -> list[CategoricalRegion]:
        inputs = self._prepare(tagged)
        if not inputs:
            self.last_path = None
            return []

        segments = geometry.segment_count(t.geometry for t in inputs)
        if segments > self.sweep_threshold:
            self.last_path = ARRANGEMENT
            cells = self._arrangement(inputs)
        else:
            self.last_path = CLIPPING
            cells = self._clip(inputs)
        logger.debug(
            "Overlay of %d polygon(s), %d segment(s) via %s", len(inputs), segments, self.last_path
        )

        regions = self._build_regions(cells, inputs)
        self._check_disjoint(regions)
        return regions

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _prepare(self, tagged: Iterable[TierTaggedPolygon]) -> list[TierTaggedPolygon]:
        """Snap to the grid and drop NONE-tier or collapsed inputs."""
        prepared = []
        for t in tagged:
            if t.tier <= CategoricalTier.NONE:
                continue
            snapped = geometry.snap(t.geometry, self.settings.coincident_epsilon)
            for part in geometry.explode(snapped):
                if not geometry.is_sliver(part, self._grid, self._eps):
                    prepared.append(replace(t, geometry=part))
        return prepared

    # ------------------------------------------------------------------
    # Partition
    # ------------------------------------------------------------------

    def _arrangement(self, inputs: list[TierTaggedPolygon]) -> dict[CategoricalTier, object]:
        rings = [
            LineString(ring.coords)
            for t in inputs
            for ring in (t.geometry.exterior, *t.geometry.interiors)
        ]
        noded = shapely.union_all(rings, grid_size=self._grid_size)
        faces = list(polygonize(list(getattr(noded, "geoms", [noded]))))

        tree = STRtree([t.geometry for t in inputs])
        cells: dict[CategoricalTier, list] = defaultdict(list)
        dropped = 0
        for face in faces:
            if geometry.is_sliver(face, self._grid, self._eps):
                dropped += 1
                continue
            inner = face.representative_point()
            covering = [inputs[i].tier for i in tree.query(inner, predicate="intersects")]
            if not covering:
                # Hole or gap between inputs: NONE, not rendered
                continue
            cells[max(covering)].append(face)

        logger.debug("Arrangement: %d face(s), %d sliver(s) dropped", len(faces), dropped)
        return {
            tier: shapely.union_all(tier_faces, grid_size=self._grid_size)
            for tier, tier_faces in cells.items()
        }

    def _clip(self, inputs: list[TierTaggedPolygon]) -> dict[CategoricalTier, object]:
        by_tier: dict[CategoricalTier, list] = defaultdict(list)
        for t in inputs:
            by_tier[t.tier].append(t.geometry)

        cells = {}
        claimed = None
        for tier in sorted(by_tier, reverse=True):
            union = shapely.union_all(by_tier[tier], grid_size=self._grid_size)
            if claimed is None:
                cell = union
                claimed = cell
            else:
                cell = union.difference(claimed, grid_size=self._grid_size)
                # claimed is always the union of emitted cells
                claimed = shapely.union_all([claimed, cell], grid_size=self._grid_size)
            cells[tier] = cell
        return cells

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _build_regions(self, cells, inputs: list[TierTaggedPolygon]) -> list[CategoricalRegion]:
        by_tier: dict[CategoricalTier, list[TierTaggedPolygon]] = defaultdict(list)
        for t in inputs:
            by_tier[t.tier].append(t)

        regions = []
        slivers = 0
        for tier, geom in cells.items():
            tier_inputs = by_tier[tier]
            tree = STRtree([t.geometry for t in tier_inputs])
            for part in geometry.explode(geom):
                if geometry.is_sliver(part, self._grid, self._eps):
                    slivers += 1
                    continue
                part = geometry.canonical(part)
                # Inputs that only graze the part along a rounded edge are not sources
                graze = geometry.rounding_tolerance([part], self._grid, self._eps)
                sources = frozenset(
                    Contribution(t.hazard, t.literal, t.tier)
                    for t in (tier_inputs[i] for i in tree.query(part, predicate="intersects"))
                    if geometry.overlap_area(t.geometry, part) > graze
                )
                if not sources:
                    raise InvariantViolation(f"{tier.label} cell has no {tier.label} input under it")
                regions.append(CategoricalRegion(geometry=part, tier=tier, sources=sources))

        if slivers:
            logger.debug("Suppressed %d sliver region(s) on grid %g", slivers, self._grid)

        regions.sort(key=lambda r: (*geometry.sort_key(r.geometry)[:2], r.tier, r.geometry.wkt))
        return regions

    def _check_disjoint(self, regions: list[CategoricalRegion]) -> None:
        if len(regions) < 2:
            return
        tree = STRtree([r.geometry for r in regions])
        for i, region in enumerate(regions):
            for j in tree.query(region.geometry, predicate="intersects"):
                if j <= i:
                    continue
                other = regions[j]
                tolerance = geometry.rounding_tolerance(
                    [region.geometry, other.geometry], self._grid, self._eps
                )
                overlap = geometry.overlap_area(region.geometry, other.geometry)
                if overlap > tolerance:
                    raise InvariantViolation(
                        f"Overlapping output regions {region.tier.label} and {other.tier.label}"
                        f" ({overlap:g} > {tolerance:g})"
                    )
