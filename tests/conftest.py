"""Shared fixtures for engine, model and data tests.

Geometry is planar and axis-aligned so expected areas are exact:
the canonical tornado outlook is a 30x30 2% shell, a 20x20 5% area and a
10x10 10# core, all centred on (15, 15). `random_star` builds skewed
polygons for the fuzz tests.
"""

import math

import pytest
from shapely.geometry import Polygon, box

from outlook.engine.nesting import NestingValidator
from outlook.engine.risk_set import HazardRiskSet
from outlook.models.risk_area import RiskArea
from outlook.models.tiers import Hazard


def ring(x0, y0, x1, y1) -> list[list[float]]:
    """Closed GeoJSON ring for an axis-aligned rectangle."""
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]


def polygon_feature(fid, x0, y0, x1, y1, **properties) -> dict:
    return {
        "type": "Feature",
        "id": fid,
        "geometry": {"type": "Polygon", "coordinates": [ring(x0, y0, x1, y1)]},
        "properties": properties,
    }


@pytest.fixture
def validator() -> NestingValidator:
    return NestingValidator()


@pytest.fixture
def tornado_set(validator) -> HazardRiskSet:
    """2% ⊃ 5% ⊃ 10# tornado contours."""
    return HazardRiskSet(
        Hazard.TORNADO,
        [
            RiskArea.create("tornado", "2%", box(0, 0, 30, 30), id="t2"),
            RiskArea.create("tornado", "5%", box(5, 5, 25, 25), id="t5"),
            RiskArea.create("tornado", "10#", box(10, 10, 20, 20), id="t10s"),
        ],
        validator=validator,
    )


@pytest.fixture
def wind_set(validator) -> HazardRiskSet:
    return HazardRiskSet(
        Hazard.WIND,
        [RiskArea.create("wind", "30%", box(0, 0, 10, 10), id="w30")],
        validator=validator,
    )


@pytest.fixture
def hail_set(validator) -> HazardRiskSet:
    return HazardRiskSet(
        Hazard.HAIL,
        [RiskArea.create("hail", "30#", box(5, 0, 15, 10), id="h30s")],
        validator=validator,
    )


@pytest.fixture
def saved_forecast() -> dict:
    """Saved-forecast document in the forecast creator's format."""
    return {
        "outlooks": {
            "tornado": [
                ["2%", [polygon_feature("t2", 0, 0, 30, 30)]],
                ["5%", [polygon_feature("t5", 5, 5, 25, 25)]],
                ["15#", [polygon_feature("t15s", 10, 10, 20, 20, label="core")]],
            ],
            "wind": [
                ["30%", [polygon_feature("w30", 40, 0, 50, 10)]],
            ],
            "hail": [],
            "categorical": [
                ["TSTM", []],
            ],
        },
        "mapView": {"center": [39.8, -98.5], "zoom": 4},
    }


def star_polygon(rng, cx, cy, radius, sides=6) -> Polygon:
    """Simple polygon with vertices at sorted random angles around (cx, cy).

    Edges run at arbitrary slopes, so intersections land off the snapping grid.
    """
    angles = sorted(rng.uniform(0, 2 * math.pi) for _ in range(sides))
    return Polygon([
        (cx + r * math.cos(a), cy + r * math.sin(a))
        for a, r in ((a, rng.uniform(0.4, 1.0) * radius) for a in angles)
    ])


@pytest.fixture
def random_star():
    return star_polygon
