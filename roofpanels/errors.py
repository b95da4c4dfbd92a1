"""Error types raised by the panel layout engine.

Precondition, dimension and index errors are raised straight to the caller.
Geometry failures for a single candidate are caught inside the grid fitter.
"""

from __future__ import annotations

from typing import Optional


class PanelLayoutError(Exception):
    """Base class for every error raised by roofpanels."""


class PreconditionFailed(PanelLayoutError, ValueError):
    """A required input is missing or outside its contract (e.g. polygon is None)."""


class InvalidPolygon(PanelLayoutError, ValueError):
    """Roof ring is unusable: too few distinct vertices, non-finite or out of range."""


class InvalidDimension(PanelLayoutError, ValueError):
    """Tile size, gap or wattage is non-positive or non-finite."""


class IndexOutOfRange(PanelLayoutError, IndexError):
    """A tile index does not exist in the current batch."""


class GeometryCollaboratorFailure(PanelLayoutError):
    """The geometry backend failed while testing a single candidate."""


class ExcessiveCandidateCount(PanelLayoutError):
    """The grid would need more containment tests than the configured ceiling."""

    def __init__(self, candidate_count: int, limit: int, message: Optional[str] = None):
        self.candidate_count = int(candidate_count)
        self.limit = int(limit)
        if message is None:
            message = (
                f"Grid would test {self.candidate_count} candidate panels (limit {self.limit}). "
                "Use a larger panel or a smaller roof outline."
            )
        super().__init__(message)
