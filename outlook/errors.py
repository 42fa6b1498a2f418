"""Error taxonomy for the outlook engine.

OutlookError subclasses are user-facing: bad input or a rejected edit. The
caller rejects the action and shows the message.

InvariantViolation and ConcurrentRecompute are RuntimeErrors, not
OutlookErrors. They mean the engine was driven past its validation gate or
misused, i.e. a programming error on the caller's side.
"""

from enum import Enum


class OutlookError(Exception):
    """Base class for errors caused by the input or the requested edit."""


class InvalidProbability(OutlookError, ValueError):
    def __init__(self, hazard, probability: str):
        self.hazard = hazard
        self.probability = probability
        name = getattr(hazard, "value", hazard)
        super().__init__(f"Probability {probability!r} is not defined for {name}")


class InvalidGeometry(OutlookError, ValueError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid risk area boundary: {reason}")


class InvalidHazard(OutlookError, ValueError):
    pass


class InvalidDocument(OutlookError, ValueError):
    """A saved forecast document does not have the expected structure."""


class InputTooLarge(OutlookError):
    pass


class NestingViolationKind(Enum):
    CROSSING = "crossing"
    SAME_TIER_OVERLAP = "same_tier_overlap"
    UNSUPPORTED_HIGHER_TIER = "unsupported_higher_tier"


_KIND_MESSAGES = {
    NestingViolationKind.CROSSING: "crosses higher-probability area",
    NestingViolationKind.SAME_TIER_OVERLAP: "overlaps same-probability area",
    NestingViolationKind.UNSUPPORTED_HIGHER_TIER: "is not contained in lower-probability area",
}


class NestingViolation(OutlookError):
    """One pairwise conflict between a candidate area and an existing one."""

    def __init__(self, kind: NestingViolationKind, area_id: str, conflicting_id: str, hazard=None):
        self.kind = kind
        self.area_id = area_id
        self.conflicting_id = conflicting_id
        self.hazard = hazard
        prefix = f"[{hazard.value}] " if hazard is not None else ""
        super().__init__(f"{prefix}Area {area_id} {_KIND_MESSAGES[kind]} {conflicting_id}")

    def __eq__(self, other):
        if not isinstance(other, NestingViolation):
            return NotImplemented
        return (self.kind, self.area_id, self.conflicting_id, self.hazard) == (
            other.kind, other.area_id, other.conflicting_id, other.hazard,
        )

    def __hash__(self):
        return hash((self.kind, self.area_id, self.conflicting_id, self.hazard))


class ValidationError(OutlookError):
    """Aggregate of every nesting violation found across hazards."""

    def __init__(self, violations: list[NestingViolation], message: str | None = None):
        self.violations = list(violations)
        if message is None:
            message = f"{len(self.violations)} nesting violation(s): " + "; ".join(
                str(v) for v in self.violations
            )
        super().__init__(message)


class InvariantViolation(RuntimeError):
    """The engine saw input that should have been rejected upstream."""


class ConcurrentRecompute(RuntimeError):
    pass


class StaleTransaction(RuntimeError):
    """The risk set changed outside the transaction before it committed."""
