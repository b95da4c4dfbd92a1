"""Degree <-> metre conversion and unit constants.

Uses a spherical-Earth, single-reference-latitude model: one metres-per-degree
pair is computed for the middle of the roof and applied to the whole outline.
That is a local flat-earth (tangent plane) approximation. It is fine for
roof-scale polygons, a few hundred metres across at most, and drifts for
anything much larger because metres-per-degree of longitude changes with
latitude.
"""

from __future__ import annotations

import math

import numpy as np

from roofpanels.errors import PreconditionFailed

METRES_PER_DEGREE = 111_320.0

# Below this a degree of longitude has no usable width (reference latitude at a pole).
MIN_METRES_PER_DEGREE = 1e-6

INCHES_TO_METRES = 0.0254
MM_TO_METRES = 0.001
SQ_METRES_TO_SQ_FEET = 10.764


def metres_per_degree_latitude() -> float:
    """Metres in one degree of latitude (fixed in this model)."""
    return METRES_PER_DEGREE


def metres_per_degree_longitude(reference_latitude: float) -> float:
    """Metres in one degree of longitude at ``reference_latitude`` (degrees).

    Approaches 0 towards the poles; callers compare against
    ``MIN_METRES_PER_DEGREE`` instead of dividing blindly.
    """
    lat = float(reference_latitude)
    if not math.isfinite(lat) or lat < -90.0 or lat > 90.0:
        raise PreconditionFailed(f"reference latitude must be within [-90, 90], got {reference_latitude}")
    return float(METRES_PER_DEGREE * np.cos(np.deg2rad(lat)))


def metres_to_degrees(metres: float, metres_per_degree: float) -> float:
    if metres_per_degree < MIN_METRES_PER_DEGREE:
        raise PreconditionFailed("metres_per_degree is too small to convert distances")
    return float(metres) / float(metres_per_degree)


def inches_to_metres(value: float) -> float:
    return float(value) * INCHES_TO_METRES


def sq_metres_to_sq_feet(value: float) -> float:
    return float(value) * SQ_METRES_TO_SQ_FEET
