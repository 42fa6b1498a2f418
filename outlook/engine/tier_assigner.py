"""Label every risk area of a hazard with its categorical tier.

Assumes the set already passed nesting validation. The re-check here is a
guard against callers that bypassed HazardRiskSet; a failure is an internal
error, not a user-facing one.
"""

import logging

from outlook.engine.nesting import NestingValidator
from outlook.engine.risk_set import HazardRiskSet
from outlook.engine.risk_table import classify
from outlook.errors import InvariantViolation
from outlook.models.outlook import TierTaggedPolygon

logger = logging.getLogger(__name__)


class TierAssigner:
    def __init__(self, validator: NestingValidator | None = None):
        self.validator = validator or NestingValidator()

    def assign(self, hazard_set: HazardRiskSet) -> list[TierTaggedPolygon]:
        areas = hazard_set.areas
        for area in areas:
            if area.hazard != hazard_set.hazard:
                raise InvariantViolation(
                    f"{area.hazard.value} area {area.id} found in {hazard_set.hazard.value} set"
                )

        violations = self.validator.validate_set(areas)
        if violations:
            raise InvariantViolation(
                f"Tier assignment on non-nested {hazard_set.hazard.value} set: "
                + "; ".join(str(v) for v in violations)
            )

        tagged = [
            TierTaggedPolygon(
                geometry=area.boundary,
                tier=classify(area.hazard, area.probability, area.significant),
                hazard=area.hazard,
                literal=area.literal,
                area_id=area.id,
            )
            for area in areas
        ]
        logger.debug("Assigned tiers to %d %s area(s)", len(tagged), hazard_set.hazard.value)
        return tagged
