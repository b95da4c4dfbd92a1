"""Fit a regular grid of panels inside a roof outline.

The grid is laid out in degree space, anchored at the south-west corner of
the roof's bounding box, and scanned row by row (south to north, west to east
within a row). Every candidate rectangle is kept only if it lies entirely
inside the roof. Since the step between rectangles is the panel size plus a
non-negative gap, kept panels never overlap.

Metres are converted to degrees with one reference latitude (middle of the
bounding box) for the whole roof, see ``roofpanels.geo.convert``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

from shapely.geometry import Polygon

from roofpanels.config import MAX_CANDIDATES
from roofpanels.errors import ExcessiveCandidateCount, InvalidDimension, InvalidPolygon
from roofpanels.geo.convert import (
    MIN_METRES_PER_DEGREE,
    metres_per_degree_latitude,
    metres_per_degree_longitude,
    metres_to_degrees,
)
from roofpanels.geo.polygon import BBox, Coord, Ring, ShapelyGeometry, normalize_ring
from roofpanels.utils.logger import get_logger

logger = get_logger(__name__)

# Slack at the bounding box edges, as a fraction of the panel size. A panel that
# overshoots the box by less than this is snapped back onto the edge.
EDGE_TOLERANCE = 1e-6


@dataclass
class PlacedTile:
    index: int
    row: int
    col: int
    bounds_geo: Ring
    removed: bool = False

    def as_polygon(self) -> Polygon:
        return Polygon(self.bounds_geo)

    @property
    def centroid(self) -> Coord:
        corners = self.bounds_geo[:4]
        return (
            sum(c[0] for c in corners) / 4.0,
            sum(c[1] for c in corners) / 4.0,
        )


@dataclass(frozen=True)
class GridPlan:
    """Degree-space sizes for one fit pass."""

    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float
    reference_latitude: float
    tile_width_deg: float
    tile_height_deg: float
    step_width_deg: float
    step_height_deg: float
    n_rows: int
    n_cols: int

    @property
    def candidate_count(self) -> int:
        return self.n_rows * self.n_cols


def _count_steps(span: float, size: float, step: float) -> int:
    eps = EDGE_TOLERANCE * size
    if span + eps < size:
        return 0
    return int(math.floor((span + eps - size) / step)) + 1


def plan_grid(bbox: BBox, tile_width_m: float, tile_height_m: float, gap_m: float) -> Optional[GridPlan]:
    """Work out the degree-space grid for a bounding box.

    Returns None when no grid can be laid out: the box has zero width or
    height, or the reference latitude is so close to a pole that a degree of
    longitude has no usable width.
    """

    for name, v in (("tile width", tile_width_m), ("tile height", tile_height_m)):
        if not math.isfinite(v) or v <= 0:
            raise InvalidDimension(f"{name} must be positive and finite, got {v!r}")
    if not math.isfinite(gap_m) or gap_m < 0:
        raise InvalidDimension(f"gap must be >= 0 metres, got {gap_m!r}")

    min_lng, min_lat, max_lng, max_lat = (float(v) for v in bbox)
    if max_lng - min_lng <= 0 or max_lat - min_lat <= 0:
        return None

    reference_latitude = (min_lat + max_lat) / 2.0
    m_per_deg_lat = metres_per_degree_latitude()
    m_per_deg_lng = metres_per_degree_longitude(reference_latitude)
    if m_per_deg_lng < MIN_METRES_PER_DEGREE:
        logger.warning(f"Reference latitude {reference_latitude:.6f} is too close to a pole to fit panels")
        return None

    tile_width_deg = metres_to_degrees(tile_width_m, m_per_deg_lng)
    tile_height_deg = metres_to_degrees(tile_height_m, m_per_deg_lat)
    step_width_deg = metres_to_degrees(tile_width_m + gap_m, m_per_deg_lng)
    step_height_deg = metres_to_degrees(tile_height_m + gap_m, m_per_deg_lat)

    return GridPlan(
        min_lng=min_lng,
        min_lat=min_lat,
        max_lng=max_lng,
        max_lat=max_lat,
        reference_latitude=reference_latitude,
        tile_width_deg=tile_width_deg,
        tile_height_deg=tile_height_deg,
        step_width_deg=step_width_deg,
        step_height_deg=step_height_deg,
        n_rows=_count_steps(max_lat - min_lat, tile_height_deg, step_height_deg),
        n_cols=_count_steps(max_lng - min_lng, tile_width_deg, step_width_deg),
    )


def iter_candidates(plan: GridPlan) -> Iterator[Tuple[int, int, Ring]]:
    """Yield (row, col, ring) for every candidate rectangle, row-major.

    The loop conditions below decide the extent, not ``n_rows``/``n_cols``.
    A rectangle that overshoots the bounding box by less than
    ``EDGE_TOLERANCE`` of its size (floating-point noise) is kept with its
    far edge snapped onto the box, so it never pokes past it.
    """

    w = plan.tile_width_deg
    h = plan.tile_height_deg
    eps_w = EDGE_TOLERANCE * w
    eps_h = EDGE_TOLERANCE * h

    row = 0
    while True:
        lat = plan.min_lat + row * plan.step_height_deg
        if lat + h > plan.max_lat + eps_h:
            break
        top = min(lat + h, plan.max_lat)
        col = 0
        while True:
            lng = plan.min_lng + col * plan.step_width_deg
            if lng + w > plan.max_lng + eps_w:
                break
            right = min(lng + w, plan.max_lng)
            yield row, col, (
                (lng, lat),
                (right, lat),
                (right, top),
                (lng, top),
                (lng, lat),
            )
            col += 1
        row += 1


def fit_grid(
    polygon: Any,
    tile_width_m: float,
    tile_height_m: float,
    gap_m: float,
    geometry: Any = None,
    max_candidates: Optional[int] = MAX_CANDIDATES,
) -> List[PlacedTile]:
    """Return every grid rectangle that fits entirely inside ``polygon``.

    Args:
        polygon: roof outline (anything ``normalize_ring`` accepts).
        tile_width_m, tile_height_m: resolved panel size in metres.
        gap_m: minimum spacing between panels in metres.
        geometry: collaborator with bounding_box / is_fully_contained.
        max_candidates: ceiling on containment tests, None for no limit.

    Returns:
        PlacedTile list indexed 0..n-1 in scan order. Empty for unusable
        outlines.

    Raises:
        PreconditionFailed: polygon is None.
        InvalidDimension: bad panel size or gap.
        ExcessiveCandidateCount: the grid is larger than ``max_candidates``.
    """

    try:
        ring = normalize_ring(polygon)
    except InvalidPolygon as e:
        logger.warning(f"Roof outline rejected, no panels fitted: {e}")
        return []

    geometry = geometry if geometry is not None else ShapelyGeometry()

    plan = plan_grid(geometry.bounding_box(ring), tile_width_m, tile_height_m, gap_m)
    if plan is None:
        logger.info("Roof outline has no usable extent; no panels fitted")
        return []
    if plan.candidate_count == 0:
        logger.info("Panel is larger than the roof outline; no panels fitted")
        return []

    if max_candidates is not None and plan.candidate_count > max_candidates:
        raise ExcessiveCandidateCount(plan.candidate_count, max_candidates)

    logger.debug(
        f"Grid plan: {plan.n_rows} rows x {plan.n_cols} cols at reference latitude "
        f"{plan.reference_latitude:.6f}"
    )

    tiles: List[PlacedTile] = []
    failures = 0
    for row, col, candidate in iter_candidates(plan):
        try:
            fits = geometry.is_fully_contained(candidate, ring)
        except Exception as e:
            failures += 1
            logger.debug(f"Containment test failed for candidate row={row} col={col}: {e}")
            continue
        if fits:
            tiles.append(PlacedTile(index=len(tiles), row=row, col=col, bounds_geo=candidate))

    if failures:
        logger.warning(f"{failures} candidate panels skipped after geometry errors")
    logger.info(f"{len(tiles)} panels fitted ({plan.candidate_count} candidates tested)")
    return tiles
