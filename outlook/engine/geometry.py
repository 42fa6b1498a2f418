"""Planar geometry helpers shared by the validator and the overlay.

All predicates run on geometry snapped to a fixed grid so that edges drawn
on top of each other (a shell redrawn along an existing contour) compare as
coincident instead of producing hairline overlaps.
"""

import shapely
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon, shape
from shapely.geometry.base import BaseGeometry
from shapely.errors import GEOSException
from shapely.validation import explain_validity

from outlook.errors import InvalidGeometry

EMPTY = GeometryCollection()


def as_polygon(boundary) -> Polygon:
    """Accept a shapely Polygon, a GeoJSON-like mapping or a shell coordinate list."""
    if isinstance(boundary, BaseGeometry):
        return boundary
    try:
        if isinstance(boundary, dict):
            return shape(boundary)
        return Polygon(boundary)
    except (TypeError, ValueError, GEOSException) as e:
        raise InvalidGeometry(f"cannot build polygon: {e}") from e


def check_boundary(geom: BaseGeometry, area_epsilon: float) -> Polygon:
    """Reject anything that is not a simple polygon with non-degenerate rings."""
    if not isinstance(geom, Polygon):
        kind = getattr(geom, "geom_type", type(geom).__name__)
        raise InvalidGeometry(f"expected Polygon, got {kind}")
    if geom.is_empty:
        raise InvalidGeometry("empty polygon")
    if not geom.is_valid:
        raise InvalidGeometry(explain_validity(geom))
    if Polygon(geom.exterior).area <= area_epsilon:
        raise InvalidGeometry("exterior ring has zero area")
    for i, ring in enumerate(geom.interiors):
        if Polygon(ring).area <= area_epsilon:
            raise InvalidGeometry(f"hole {i} has zero area")
    return geom


def snap(geom: BaseGeometry, grid_size: float) -> BaseGeometry:
    if grid_size <= 0:
        return geom
    return shapely.set_precision(geom, grid_size)


def overlap_area(a: BaseGeometry, b: BaseGeometry) -> float:
    if not a.intersects(b):
        return 0.0
    return a.intersection(b).area


def overlaps(a: BaseGeometry, b: BaseGeometry, area_epsilon: float) -> bool:
    """True when a and b share interior with positive area (touching does not count)."""
    return overlap_area(a, b) > area_epsilon


def rounding_tolerance(geoms, grid_size: float, area_epsilon: float) -> float:
    """Largest area that snapping to grid_size can shift along the given boundaries.

    Rounding moves each vertex by at most one grid step, so the area it can
    add or remove is bounded by grid_size times the boundary length.
    """
    return max(area_epsilon, grid_size * sum(g.length for g in geoms))


def is_sliver(poly: BaseGeometry, grid_size: float, area_epsilon: float) -> bool:
    """True for a part no wider than twice the rounding band along its boundary.

    Anything kept still overlaps its sources by more than one band after
    rounding.
    """
    return poly.area <= 2 * rounding_tolerance([poly], grid_size, area_epsilon)


def inside(inner: BaseGeometry, outer: BaseGeometry, area_epsilon: float) -> bool:
    """True when inner lies within outer, up to area_epsilon of spill."""
    if inner.within(outer):
        return True
    if not inner.intersects(outer):
        return False
    return inner.difference(outer).area <= area_epsilon


def segment_count(polygons) -> int:
    """Total boundary segments over all rings of the given polygons."""
    total = 0
    for poly in polygons:
        for ring in (poly.exterior, *poly.interiors):
            total += max(len(ring.coords) - 1, 0)
    return total


def explode(geom: BaseGeometry) -> list[Polygon]:
    """Flatten a (multi)polygon or collection into its polygon parts."""
    if geom is None or geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, (MultiPolygon, GeometryCollection)):
        parts = []
        for part in geom.geoms:
            parts.extend(explode(part))
        return parts
    # Lines and points left behind by snapping carry no area
    return []


def canonical(poly: Polygon) -> Polygon:
    """Normalized ring orientation and start vertex, so equal shapes compare equal."""
    return shapely.normalize(poly)


def sort_key(poly: Polygon, ndigits: int = 9) -> tuple:
    c = poly.centroid
    return (round(c.x, ndigits), round(c.y, ndigits), poly.wkt)
