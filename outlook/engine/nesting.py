"""Nesting validator for the risk areas of one hazard.

Within a hazard, probability contours must nest: a higher-probability area is
drawn inside a lower-probability one, never across its edge, and two areas of
the same probability never share interior. Pairs of areas that do not
overlap at all are always fine, so a 5% contour can be drawn before the 2%
shell that will later surround it.

For a pair (hi, lo) with rank(hi) > rank(lo) the only accepted relations are
"hi inside lo" and "no overlap". Which violation is reported depends on which
side of the pair is the candidate being added:

    existing hi, candidate lo  -> CROSSING
    candidate hi, existing lo  -> UNSUPPORTED_HIGHER_TIER
    equal rank, overlapping    -> SAME_TIER_OVERLAP

The validator only reports. It never edits geometry.
"""

import logging
from collections.abc import Iterable

from outlook.config import Settings, settings as default_settings
from outlook.engine import geometry
from outlook.errors import NestingViolation, NestingViolationKind
from outlook.models.risk_area import RiskArea

logger = logging.getLogger(__name__)


class NestingValidator:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings
        self._grid = self.settings.coincident_epsilon
        self._eps = self.settings.area_epsilon

    def _snapped(self, area: RiskArea):
        return geometry.snap(area.boundary, self._grid)

    def _pair_violation(self, candidate: RiskArea, existing: RiskArea) -> NestingViolation | None:
        if candidate.hazard != existing.hazard:
            return None

        cand_geom = self._snapped(candidate)
        exist_geom = self._snapped(existing)

        if not geometry.overlaps(cand_geom, exist_geom, self._eps):
            return None

        if candidate.rank == existing.rank:
            kind = NestingViolationKind.SAME_TIER_OVERLAP
        elif existing.rank > candidate.rank:
            if geometry.inside(exist_geom, cand_geom, self._eps):
                return None
            kind = NestingViolationKind.CROSSING
        else:
            if geometry.inside(cand_geom, exist_geom, self._eps):
                return None
            kind = NestingViolationKind.UNSUPPORTED_HIGHER_TIER

        return NestingViolation(kind, candidate.id, existing.id, candidate.hazard)

    def violations(self, existing: Iterable[RiskArea], candidate: RiskArea) -> list[NestingViolation]:
        """Every conflict between candidate and the existing areas, in their order.

        An existing area with the candidate's id is the version being edited
        and is skipped.
        """
        found = []
        for area in existing:
            if area.id == candidate.id:
                continue
            violation = self._pair_violation(candidate, area)
            if violation is not None:
                found.append(violation)
        if found:
            logger.debug("Candidate %r rejected: %d conflict(s)", candidate, len(found))
        return found

    def validate(self, existing: Iterable[RiskArea], candidate: RiskArea) -> None:
        """Raise the first NestingViolation for candidate, if any."""
        found = self.violations(existing, candidate)
        if found:
            raise found[0]

    def validate_set(self, areas: Iterable[RiskArea]) -> list[NestingViolation]:
        """Check a whole set. Each conflicting pair is reported once.

        Areas are checked in order, each against the ones before it, as if the
        set had been built one add() at a time.
        """
        areas = list(areas)
        found = []
        for i, candidate in enumerate(areas):
            found.extend(self.violations(areas[:i], candidate))
        return found
