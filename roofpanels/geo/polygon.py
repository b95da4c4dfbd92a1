"""Roof ring normalisation and the shapely-backed geometry collaborator.

A ring is a tuple of (lng, lat) float pairs in EPSG:4326, closed (first point
repeated at the end). The grid fitter only talks to the collaborator through
three calls: ``bounding_box``, ``is_fully_contained`` and ``area``, so any
object with those methods can stand in for ``ShapelyGeometry``.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence, Tuple

import numpy as np
import shapely
from pyproj import Transformer
from shapely.errors import GEOSException
from shapely.geometry import Polygon
from shapely.prepared import prep

from roofpanels.errors import GeometryCollaboratorFailure, InvalidPolygon, PreconditionFailed
from roofpanels.geo.crs import equal_area_crs_for

Coord = Tuple[float, float]
Ring = Tuple[Coord, ...]
BBox = Tuple[float, float, float, float]


def _coords_from_input(polygon: Any) -> Sequence[Sequence[float]]:
    if isinstance(polygon, Polygon):
        return list(polygon.exterior.coords)

    if isinstance(polygon, dict):
        gtype = polygon.get("type")
        if gtype == "Feature":
            return _coords_from_input(polygon.get("geometry"))
        if gtype == "Polygon":
            rings = polygon.get("coordinates") or []
            if not rings:
                raise InvalidPolygon("GeoJSON polygon has no coordinates")
            # Only the outer ring is filled; holes are ignored.
            return rings[0]
        raise InvalidPolygon(f"unsupported GeoJSON type for a roof outline: {gtype!r}")

    return polygon


def normalize_ring(polygon: Any) -> Ring:
    """Turn caller input into a closed ring of (lng, lat) floats.

    Accepts a sequence of (lng, lat[, z]) pairs, a GeoJSON Polygon (or Feature
    wrapping one) or a shapely Polygon. An open ring is closed by repeating
    its first vertex.

    Raises:
        PreconditionFailed: polygon is None.
        InvalidPolygon: non-finite or out-of-range coordinates, fewer than
            3 distinct vertices.
    """

    if polygon is None:
        raise PreconditionFailed("polygon is required")

    raw = _coords_from_input(polygon)
    if raw is None:
        raise PreconditionFailed("polygon is required")

    pts = []
    try:
        for c in raw:
            pts.append((float(c[0]), float(c[1])))
    except (TypeError, ValueError, IndexError) as e:
        raise InvalidPolygon(f"could not read polygon coordinates: {e}") from e

    if not pts:
        raise InvalidPolygon("polygon has no coordinates")

    arr = np.asarray(pts, dtype=np.float64)
    if not np.isfinite(arr).all():
        raise InvalidPolygon("polygon coordinates must be finite")
    if (np.abs(arr[:, 1]) > 90.0).any() or (np.abs(arr[:, 0]) > 180.0).any():
        raise InvalidPolygon("polygon coordinates must be (lng, lat) in degrees")

    if pts[0] != pts[-1]:
        pts.append(pts[0])

    distinct = len(set(pts[:-1]))
    if len(pts) < 4 or distinct < 3:
        raise InvalidPolygon(f"polygon needs at least 3 distinct vertices, got {distinct}")

    return tuple(pts)


class ShapelyGeometry:
    """Geometry collaborator built on shapely (containment) and pyproj (area)."""

    def __init__(self) -> None:
        self._prepared_ring: Optional[Ring] = None
        self._prepared = None

    def _prepared_for(self, ring: Ring):
        # Grid fits test thousands of candidates against one roof.
        if self._prepared is None or not (ring is self._prepared_ring or ring == self._prepared_ring):
            self._prepared = prep(Polygon(ring))
            self._prepared_ring = ring
        return self._prepared

    def bounding_box(self, ring: Ring) -> BBox:
        """Return (min_lng, min_lat, max_lng, max_lat)."""
        arr = np.asarray(ring, dtype=np.float64)
        min_lng, min_lat = arr.min(axis=0)
        max_lng, max_lat = arr.max(axis=0)
        return float(min_lng), float(min_lat), float(max_lng), float(max_lat)

    def is_fully_contained(self, candidate: Ring, ring: Ring) -> bool:
        """True when ``candidate`` lies entirely inside ``ring`` (touching the edge is allowed)."""
        try:
            return bool(self._prepared_for(ring).contains(Polygon(candidate)))
        except (GEOSException, ValueError) as e:
            raise GeometryCollaboratorFailure(f"containment test failed: {e}") from e

    def area(self, ring: Ring) -> float:
        """Area of ``ring`` in square metres, measured in a local equal-area projection."""
        poly = Polygon(ring)
        if poly.is_empty:
            return 0.0

        min_lng, min_lat, max_lng, max_lat = self.bounding_box(ring)
        crs = equal_area_crs_for((min_lat + max_lat) / 2.0, (min_lng + max_lng) / 2.0)
        tx = Transformer.from_crs("EPSG:4326", crs, always_xy=True)

        projected = shapely.transform(poly, lambda c: np.column_stack(tx.transform(c[:, 0], c[:, 1])))
        area = float(abs(projected.area))
        return area if math.isfinite(area) else 0.0
