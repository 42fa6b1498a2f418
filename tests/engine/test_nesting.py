"""Tests for the per-hazard nesting validator."""

import pytest
from shapely.geometry import box

from outlook.errors import NestingViolation, NestingViolationKind as Kind
from outlook.models.risk_area import RiskArea
from outlook.models.tiers import Hazard


def tornado(literal, geom, area_id):
    return RiskArea.create("tornado", literal, geom, id=area_id)


class TestAccepted:
    def test_three_level_nesting(self, validator):
        shell = tornado("2%", box(0, 0, 30, 30), "a")
        mid = tornado("5%", box(5, 5, 25, 25), "b")
        core = tornado("10#", box(10, 10, 20, 20), "c")
        assert validator.validate_set([shell, mid, core]) == []

    def test_order_independent(self, validator):
        shell = tornado("2%", box(0, 0, 30, 30), "a")
        core = tornado("10#", box(10, 10, 20, 20), "c")
        assert validator.validate_set([core, shell]) == []

    def test_higher_tier_before_its_shell_is_drawn(self, validator):
        existing = [tornado("2%", box(0, 0, 10, 10), "a")]
        candidate = tornado("5%", box(20, 20, 30, 30), "b")
        assert validator.violations(existing, candidate) == []

    def test_same_tier_touching_edges(self, validator):
        existing = [tornado("5%", box(0, 0, 10, 10), "a")]
        candidate = tornado("5%", box(10, 0, 20, 10), "b")
        assert validator.violations(existing, candidate) == []

    def test_same_tier_touching_vertex(self, validator):
        existing = [tornado("5%", box(0, 0, 10, 10), "a")]
        candidate = tornado("5%", box(10, 10, 20, 20), "b")
        assert validator.violations(existing, candidate) == []

    def test_shared_edges_count_as_inside(self, validator):
        existing = [tornado("2%", box(0, 0, 10, 10), "a")]
        candidate = tornado("5%", box(0, 0, 10, 5), "b")
        assert validator.violations(existing, candidate) == []

    def test_near_coincident_edge_snaps(self, validator):
        existing = [tornado("2%", box(0, 0, 10, 10), "a")]
        candidate = tornado("5%", box(0, 0, 10 + 1e-12, 5), "b")
        assert validator.violations(existing, candidate) == []

    def test_significant_inside_plain_same_percent(self, validator):
        existing = [tornado("10%", box(0, 0, 10, 10), "a")]
        candidate = tornado("10#", box(2, 2, 8, 8), "b")
        assert validator.violations(existing, candidate) == []

    def test_other_hazard_ignored(self, validator):
        existing = [RiskArea.create("wind", "5%", box(0, 0, 10, 10), id="w")]
        candidate = tornado("5%", box(5, 5, 15, 15), "t")
        assert validator.violations(existing, candidate) == []

    def test_edit_skips_previous_version(self, validator):
        existing = [tornado("5%", box(0, 0, 10, 10), "a")]
        edited = tornado("5%", box(2, 2, 12, 12), "a")
        assert validator.violations(existing, edited) == []


class TestRejected:
    def test_same_tier_overlap(self, validator):
        existing = [tornado("5%", box(0, 0, 10, 10), "a")]
        candidate = tornado("5%", box(5, 5, 15, 15), "b")
        violations = validator.violations(existing, candidate)
        assert len(violations) == 1
        v = violations[0]
        assert v.kind == Kind.SAME_TIER_OVERLAP
        assert (v.area_id, v.conflicting_id) == ("b", "a")
        assert v.hazard == Hazard.TORNADO

    def test_lower_tier_crossing_higher(self, validator):
        existing = [tornado("5%", box(0, 0, 10, 10), "hi")]
        candidate = tornado("2%", box(5, 5, 20, 20), "lo")
        [v] = validator.violations(existing, candidate)
        assert v.kind == Kind.CROSSING
        assert (v.area_id, v.conflicting_id) == ("lo", "hi")

    def test_lower_tier_inside_higher(self, validator):
        existing = [tornado("5%", box(0, 0, 10, 10), "hi")]
        candidate = tornado("2%", box(2, 2, 8, 8), "lo")
        [v] = validator.violations(existing, candidate)
        assert v.kind == Kind.CROSSING

    def test_higher_tier_spilling_out_of_shell(self, validator):
        existing = [tornado("2%", box(0, 0, 10, 10), "lo")]
        candidate = tornado("5%", box(5, 5, 15, 15), "hi")
        [v] = validator.violations(existing, candidate)
        assert v.kind == Kind.UNSUPPORTED_HIGHER_TIER
        assert (v.area_id, v.conflicting_id) == ("hi", "lo")

    def test_higher_tier_swallowing_shell(self, validator):
        existing = [tornado("2%", box(0, 0, 10, 10), "lo")]
        candidate = tornado("5%", box(-5, -5, 20, 20), "hi")
        [v] = validator.violations(existing, candidate)
        assert v.kind == Kind.UNSUPPORTED_HIGHER_TIER

    def test_all_conflicts_reported_in_order(self, validator):
        existing = [
            tornado("2%", box(0, 0, 10, 10), "a"),
            tornado("2%", box(20, 0, 30, 10), "b"),
        ]
        candidate = tornado("5%", box(5, 2, 25, 8), "c")
        violations = validator.violations(existing, candidate)
        assert [v.conflicting_id for v in violations] == ["a", "b"]

    def test_validate_raises_first(self, validator):
        existing = [tornado("5%", box(0, 0, 10, 10), "a")]
        candidate = tornado("5%", box(5, 5, 15, 15), "b")
        with pytest.raises(NestingViolation) as exc:
            validator.validate(existing, candidate)
        assert exc.value.kind == Kind.SAME_TIER_OVERLAP
        assert "b" in str(exc.value) and "a" in str(exc.value)

    def test_validate_set_reports_each_pair_once(self, validator):
        areas = [
            tornado("5%", box(0, 0, 10, 10), "a"),
            tornado("5%", box(5, 5, 15, 15), "b"),
        ]
        violations = validator.validate_set(areas)
        assert len(violations) == 1
        assert violations[0] == NestingViolation(Kind.SAME_TIER_OVERLAP, "b", "a", Hazard.TORNADO)

    def test_tiny_overlap_below_epsilon_ignored(self, validator):
        existing = [tornado("5%", box(0, 0, 10, 10), "a")]
        candidate = tornado("5%", box(10 - 1e-12, 0, 20, 10), "b")
        assert validator.violations(existing, candidate) == []
