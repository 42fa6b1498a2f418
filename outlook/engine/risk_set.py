"""HazardRiskSet: the validated collection of risk areas for one hazard.

Every mutation is proposed, validated against the nesting rules, then
applied. A rejected mutation leaves the set exactly as it was.
"""

import hashlib
import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from outlook.engine.nesting import NestingValidator
from outlook.errors import InvalidHazard, StaleTransaction, ValidationError
from outlook.models.risk_area import RiskArea
from outlook.models.tiers import Hazard

logger = logging.getLogger(__name__)


def _check_hazard(hazard: Hazard, area: RiskArea) -> None:
    if area.hazard != hazard:
        raise InvalidHazard(
            f"{area.hazard.value} area {area.id} cannot join the {hazard.value} set"
        )


def _index_of(areas: list[RiskArea], area_id: str) -> int:
    for i, area in enumerate(areas):
        if area.id == area_id:
            return i
    raise KeyError(area_id)


class HazardRiskSet:
    def __init__(
        self,
        hazard: Hazard | str,
        areas: Iterable[RiskArea] = (),
        validator: NestingValidator | None = None,
    ):
        self.hazard = Hazard.parse(hazard)
        self.validator = validator or NestingValidator()
        self._areas: list[RiskArea] = []
        self.revision = 0
        for area in areas:
            self.add(area)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def areas(self) -> tuple[RiskArea, ...]:
        return tuple(self._areas)

    def get(self, area_id: str) -> RiskArea | None:
        for area in self._areas:
            if area.id == area_id:
                return area
        return None

    def __len__(self) -> int:
        return len(self._areas)

    def __iter__(self) -> Iterator[RiskArea]:
        return iter(tuple(self._areas))

    def __contains__(self, area_id: object) -> bool:
        return any(area.id == area_id for area in self._areas)

    def fingerprint(self) -> str:
        """Digest of ids, literals and boundaries, in insertion order."""
        h = hashlib.sha256(self.hazard.value.encode())
        for area in self._areas:
            h.update(area.id.encode())
            h.update(area.literal.encode())
            h.update(area.boundary.wkb)
        return h.hexdigest()[:32]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, area: RiskArea) -> RiskArea:
        """Append a new area. Raises NestingViolation if it breaks nesting."""
        _check_hazard(self.hazard, area)
        if area.id in self:
            raise ValueError(f"Area {area.id} already exists; use replace() to edit it")
        self.validator.validate(self._areas, area)
        self._areas.append(area)
        self.revision += 1
        logger.debug("Added %r (revision %d)", area, self.revision)
        return area

    def replace(self, area: RiskArea) -> RiskArea:
        """Swap in an edited version of an existing area (matched by id)."""
        _check_hazard(self.hazard, area)
        idx = _index_of(self._areas, area.id)
        self.validator.validate(self._areas, area)
        self._areas[idx] = area
        self.revision += 1
        logger.debug("Replaced %r (revision %d)", area, self.revision)
        return area

    def remove(self, area_id: str) -> RiskArea:
        """Delete an area. Removing never creates a crossing or an overlap."""
        idx = _index_of(self._areas, area_id)
        removed = self._areas.pop(idx)
        self.revision += 1
        logger.debug("Removed %r (revision %d)", removed, self.revision)
        return removed

    def clear(self) -> None:
        if self._areas:
            self._areas.clear()
            self.revision += 1

    @contextmanager
    def transaction(self):
        """Stage several mutations and apply them together.

        Usage:
            with risk_set.transaction() as tx:
                tx.remove(old_shell.id)
                tx.add(new_shell)
                tx.add(inner)

        The staged result is validated as a whole on exit. On a violation
        ValidationError is raised and the set is unchanged; an exception
        inside the block also discards the staged changes. Mutating the set
        directly while the block is open makes the commit raise
        StaleTransaction, again leaving the set as the direct edits left it.
        """
        tx = RiskSetTransaction(self)
        yield tx
        tx.commit()

    def _apply(self, areas: list[RiskArea]) -> None:
        self._areas = areas
        self.revision += 1

    def __repr__(self) -> str:
        return f"HazardRiskSet({self.hazard.value}, {len(self._areas)} areas, rev={self.revision})"


class RiskSetTransaction:
    """Staged copy of a HazardRiskSet. Nesting is checked only at commit."""

    def __init__(self, target: HazardRiskSet):
        self._target = target
        self._staged: list[RiskArea] = list(target.areas)
        self._base_revision = target.revision
        self._committed = False

    @property
    def areas(self) -> tuple[RiskArea, ...]:
        return tuple(self._staged)

    def add(self, area: RiskArea) -> RiskArea:
        _check_hazard(self._target.hazard, area)
        if any(a.id == area.id for a in self._staged):
            raise ValueError(f"Area {area.id} already staged; use replace() to edit it")
        self._staged.append(area)
        return area

    def replace(self, area: RiskArea) -> RiskArea:
        _check_hazard(self._target.hazard, area)
        self._staged[_index_of(self._staged, area.id)] = area
        return area

    def remove(self, area_id: str) -> RiskArea:
        return self._staged.pop(_index_of(self._staged, area_id))

    def commit(self) -> None:
        if self._committed:
            raise RuntimeError("transaction already committed")
        if self._target.revision != self._base_revision:
            raise StaleTransaction(
                f"{self._target.hazard.value} set moved from revision {self._base_revision} "
                f"to {self._target.revision} during the transaction"
            )
        violations = self._target.validator.validate_set(self._staged)
        if violations:
            logger.warning(
                "Rejected %s transaction: %d nesting violation(s)",
                self._target.hazard.value, len(violations),
            )
            raise ValidationError(violations)
        self._target._apply(list(self._staged))
        self._committed = True
