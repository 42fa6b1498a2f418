"""Pydantic schemas for saved forecast documents (GeoJSON based)."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class PolygonGeometry(BaseModel):
    type: Literal["Polygon", "MultiPolygon"]
    coordinates: list[Any]


class RiskFeature(BaseModel):
    type: Literal["Feature"]
    id: str | int | None = None
    geometry: PolygonGeometry
    properties: dict[str, Any] | None = None


# Each hazard is a list of [probability, [feature, ...]] pairs
OutlookEntries = list[tuple[str, list[RiskFeature]]]


class SavedOutlooks(BaseModel):
    tornado: OutlookEntries = Field(default_factory=list)
    wind: OutlookEntries = Field(default_factory=list)
    hail: OutlookEntries = Field(default_factory=list)
    # Derived output in saved files; read but never used as input
    categorical: list[tuple[str, list[dict[str, Any]]]] = Field(default_factory=list)


class MapView(BaseModel):
    center: tuple[float, float]
    zoom: float


class SavedForecast(BaseModel):
    outlooks: SavedOutlooks
    mapView: MapView | None = None
