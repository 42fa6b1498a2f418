"""GeoJSON import/export.

Reads the forecast creator's saved-forecast document (probabilistic outlooks
keyed by hazard, then by probability literal) into validated HazardRiskSets,
and writes an OutlookSnapshot back out as a categorical FeatureCollection.
"""

import json
import logging
from pathlib import Path
from typing import Any

import pydantic
from shapely.errors import GEOSException
from shapely.geometry import mapping, shape

from outlook.data.schemas import RiskFeature, SavedForecast
from outlook.engine import geometry
from outlook.engine.nesting import NestingValidator
from outlook.engine.risk_set import HazardRiskSet
from outlook.errors import InvalidDocument
from outlook.models.outlook import OutlookSnapshot
from outlook.models.risk_area import RiskArea
from outlook.models.tiers import Hazard

logger = logging.getLogger(__name__)

# Feature properties owned by the engine; everything else scalar becomes an extension
RESERVED_PROPERTIES = {
    "outlookType", "probability", "isSignificant", "derivedFrom", "originalProbability", "id",
}


def _extensions(properties: dict[str, Any] | None) -> dict[str, str | int | float | bool]:
    if not properties:
        return {}
    return {
        key: value
        for key, value in properties.items()
        if key not in RESERVED_PROPERTIES and isinstance(value, (str, int, float, bool))
    }


def areas_from_feature(
    hazard: Hazard,
    probability: str,
    feature: RiskFeature,
    fallback_id: str,
) -> list[RiskArea]:
    """One RiskArea per polygon part. Multipart ids get a -<n> suffix.

    The probability key alone decides significance ("15#"); a feature's
    isSignificant property is display state and is ignored.
    """
    props = feature.properties or {}
    base_id = str(feature.id if feature.id is not None else props.get("id", fallback_id))
    try:
        geom = shape(feature.geometry.model_dump())
    except (TypeError, ValueError, IndexError, GEOSException) as e:
        raise InvalidDocument(f"Feature {base_id} has malformed coordinates: {e}") from e
    parts = geometry.explode(geom)
    if not parts:
        raise InvalidDocument(f"Feature {base_id} has no polygon area")

    extensions = _extensions(props)
    if len(parts) == 1:
        ids = [base_id]
    else:
        ids = [f"{base_id}-{n}" for n in range(1, len(parts) + 1)]
    return [
        RiskArea.create(
            hazard,
            probability,
            part,
            id=area_id,
            extensions=extensions,
        )
        for area_id, part in zip(ids, parts)
    ]


def load_forecast(
    payload: dict | str,
    validator: NestingValidator | None = None,
) -> dict[Hazard, HazardRiskSet]:
    """Build one HazardRiskSet per hazard from a saved-forecast document.

    Raises InvalidDocument for structural problems, InvalidProbability /
    InvalidGeometry for bad areas and NestingViolation when two areas of one
    hazard conflict.
    """
    try:
        if isinstance(payload, str):
            doc = SavedForecast.model_validate_json(payload)
        else:
            doc = SavedForecast.model_validate(payload)
    except pydantic.ValidationError as e:
        raise InvalidDocument(f"Not a saved forecast: {e}") from e

    validator = validator or NestingValidator()
    sets = {h: HazardRiskSet(h, validator=validator) for h in Hazard}
    for hazard in Hazard:
        for probability, features in getattr(doc.outlooks, hazard.value):
            for n, feature in enumerate(features):
                fallback = f"{hazard.value}-{probability}-{n}"
                for area in areas_from_feature(hazard, probability, feature, fallback):
                    sets[hazard].add(area)
        logger.debug("Loaded %d %s area(s)", len(sets[hazard]), hazard.value)
    return sets


def load_forecast_file(path: str | Path, validator: NestingValidator | None = None):
    text = Path(path).read_text(encoding="utf-8")
    return load_forecast(text, validator=validator)


def snapshot_to_geojson(snapshot: OutlookSnapshot) -> dict:
    """Categorical FeatureCollection, one feature per region, in snapshot order."""
    features = []
    for n, region in enumerate(snapshot.regions, start=1):
        sources = region.sorted_sources()
        features.append({
            "type": "Feature",
            "id": f"categorical-{snapshot.generation}-{n}",
            "geometry": mapping(region.geometry),
            "properties": {
                "outlookType": "categorical",
                "probability": region.tier.label,
                "displayName": region.tier.display_name,
                "color": region.tier.color,
                "derivedFrom": sorted(h.value for h in region.hazards),
                "sources": [
                    {"hazard": s.hazard.value, "probability": s.literal, "tier": s.tier.label}
                    for s in sources
                ],
            },
        })
    return {
        "type": "FeatureCollection",
        "generation": snapshot.generation,
        "features": features,
    }


def dump_geojson(snapshot: OutlookSnapshot, path: str | Path) -> None:
    Path(path).write_text(json.dumps(snapshot_to_geojson(snapshot), indent=2), encoding="utf-8")
