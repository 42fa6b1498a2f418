"""Conversion service: probabilistic hazard sets in, categorical snapshot out.

Pure computation behind one published reference. `recompute` re-validates
the inputs, labels tiers, runs the overlay and swaps in a new
OutlookSnapshot. Readers of `snapshot` see either the previous snapshot or
the new one, never a half-built result.

One writer only. The caller serializes recompute calls (an editor event
loop, typically); overlapping calls raise ConcurrentRecompute.
"""

import hashlib
import logging
import threading
from collections.abc import Mapping

from outlook.config import Settings, settings as default_settings
from outlook.engine.nesting import NestingValidator
from outlook.engine.overlay import OverlayEngine
from outlook.engine.risk_set import HazardRiskSet
from outlook.engine.tier_assigner import TierAssigner
from outlook.errors import ConcurrentRecompute, InputTooLarge, InvalidHazard, ValidationError
from outlook.models.outlook import OutlookSnapshot
from outlook.models.tiers import Hazard

logger = logging.getLogger(__name__)


def _normalize_inputs(hazard_sets: Mapping) -> dict[Hazard, HazardRiskSet | None]:
    normalized: dict[Hazard, HazardRiskSet | None] = {h: None for h in Hazard}
    for key, risk_set in hazard_sets.items():
        hazard = Hazard.parse(key)
        if risk_set is not None and risk_set.hazard != hazard:
            raise ValidationError(
                [],
                f"{risk_set.hazard.value} risk set supplied under the {hazard.value} key",
            )
        normalized[hazard] = risk_set
    return normalized


def combined_fingerprint(sets: Mapping[Hazard, HazardRiskSet | None]) -> str:
    h = hashlib.sha256()
    for hazard in Hazard:
        risk_set = sets.get(hazard)
        h.update(hazard.value.encode())
        h.update((risk_set.fingerprint() if risk_set is not None else "-").encode())
    return h.hexdigest()[:32]


class ConversionService:
    def __init__(self, settings: Settings | None = None, sweep_threshold: int | None = None):
        self.settings = settings or default_settings
        self.validator = NestingValidator(self.settings)
        self.assigner = TierAssigner(self.validator)
        self.overlay_engine = OverlayEngine(self.settings, sweep_threshold=sweep_threshold)
        self._snapshot = OutlookSnapshot.empty()
        self._writer = threading.Lock()

    @property
    def snapshot(self) -> OutlookSnapshot:
        return self._snapshot

    def recompute(self, hazard_sets: Mapping, force: bool = False) -> OutlookSnapshot:
        """Rebuild and publish the categorical outlook.

        Args:
            hazard_sets: Hazard (or "tornado"/"wind"/"hail") -> HazardRiskSet.
                Missing hazards count as empty.
            force: Rebuild even when the inputs match the published snapshot.

        Raises:
            ValidationError: any set fails the nesting re-check. The previous
                snapshot stays published.
            InputTooLarge: more areas than settings.max_areas.
        """
        if not self._writer.acquire(blocking=False):
            raise ConcurrentRecompute("recompute is already running on this service")
        try:
            return self._recompute(hazard_sets, force)
        finally:
            self._writer.release()

    def _recompute(self, hazard_sets: Mapping, force: bool) -> OutlookSnapshot:
        try:
            sets = _normalize_inputs(hazard_sets)
        except InvalidHazard as e:
            raise ValidationError([], str(e)) from e

        total = sum(len(s) for s in sets.values() if s is not None)
        if total > self.settings.max_areas:
            raise InputTooLarge(f"{total} risk areas exceeds the limit of {self.settings.max_areas}")

        fingerprint = combined_fingerprint(sets)
        current = self._snapshot
        if not force and fingerprint == current.fingerprint:
            logger.debug("Inputs unchanged, keeping generation %d", current.generation)
            return current

        violations = []
        for hazard, risk_set in sets.items():
            if risk_set is not None:
                violations.extend(self.validator.validate_set(risk_set.areas))
        if violations:
            logger.warning(
                "Recompute rejected with %d nesting violation(s); generation %d stays published",
                len(violations), current.generation,
            )
            raise ValidationError(violations)

        hazard_polygons = {}
        tagged = []
        for hazard, risk_set in sets.items():
            assigned = tuple(self.assigner.assign(risk_set)) if risk_set is not None else ()
            hazard_polygons[hazard] = assigned
            tagged.extend(assigned)

        regions = self.overlay_engine.overlay(tagged)

        snapshot = OutlookSnapshot(
            generation=current.generation + 1,
            hazard_polygons=hazard_polygons,
            regions=tuple(regions),
            fingerprint=fingerprint,
        )
        self._snapshot = snapshot
        logger.info(
            "Published outlook generation %d: %d region(s), max tier %s",
            snapshot.generation, len(snapshot.regions), snapshot.max_tier.label,
        )
        return snapshot
