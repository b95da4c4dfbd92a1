"""Layout session: one roof, one fitted batch of panels, and the user's removals.

A session starts empty, becomes fitted after ``fit`` and goes back to empty
on ``clear``. Removing a panel (a chimney, skylight or vent sits there) is a
single ``toggle_removed(index)`` command.

Removals that survive a re-fit (``preserve_removals=True``) are matched by
index by default. If the new grid emits tiles in a different order, a
removal can land on a different physical panel. ``removal_match="centroid"``
matches by position instead but changes that behaviour, so it is opt-in.
"""

from __future__ import annotations

import operator
from enum import Enum
from typing import Any, Iterator, List, Optional, Set

from shapely.geometry import Point

from roofpanels.config import MAX_CANDIDATES, LayoutConfig
from roofpanels.errors import IndexOutOfRange, InvalidPolygon, PreconditionFailed
from roofpanels.geo.polygon import Ring, ShapelyGeometry, normalize_ring
from roofpanels.layout.grid import PlacedTile, fit_grid
from roofpanels.layout.tiles import resolve
from roofpanels.score.stats import Stats, build_stats
from roofpanels.utils.logger import get_logger

logger = get_logger(__name__)

REMOVAL_MATCHES = ("index", "centroid")


class SessionState(str, Enum):
    EMPTY = "empty"
    FITTED = "fitted"
    FITTED_WITH_REMOVALS = "fitted_with_removals"


class LayoutSession:
    """Owns a fitted panel batch plus removals. Not thread-safe; serialise calls."""

    def __init__(self, geometry: Any = None, max_candidates: Optional[int] = MAX_CANDIDATES):
        self.geometry = geometry if geometry is not None else ShapelyGeometry()
        self.max_candidates = max_candidates
        self.polygon: Optional[Ring] = None
        self.config: Optional[LayoutConfig] = None
        self.tiles: List[PlacedTile] = []
        self.removed_indices: Set[int] = set()
        self._fitted = False

    def __repr__(self) -> str:
        return (
            f"LayoutSession(state={self.state.value}, tiles={len(self.tiles)}, "
            f"removed={len(self.removed_indices)})"
        )

    @property
    def state(self) -> SessionState:
        if not self._fitted:
            return SessionState.EMPTY
        if self.removed_indices:
            return SessionState.FITTED_WITH_REMOVALS
        return SessionState.FITTED

    @property
    def is_fitted(self) -> bool:
        return self._fitted

    @property
    def active_count(self) -> int:
        return sum(1 for _ in self.active_tiles())

    def fit(
        self,
        polygon: Any,
        config: LayoutConfig,
        preserve_removals: bool = False,
        removal_match: str = "index",
    ) -> "LayoutSession":
        """Fit a fresh panel batch into ``polygon``.

        Raises PreconditionFailed for a missing polygon/config and lets
        ExcessiveCandidateCount through; in both cases the session is left as
        it was. An unusable outline still fits, with zero panels.
        """

        if polygon is None:
            raise PreconditionFailed("polygon is required to fit panels")
        if not isinstance(config, LayoutConfig):
            raise PreconditionFailed("a LayoutConfig is required to fit panels")
        if removal_match not in REMOVAL_MATCHES:
            raise PreconditionFailed(f"removal_match must be one of {REMOVAL_MATCHES}, got {removal_match!r}")

        width_m, height_m = resolve(config.tile)

        try:
            ring: Optional[Ring] = normalize_ring(polygon)
        except InvalidPolygon as e:
            logger.warning(f"Roof outline rejected, no panels fitted: {e}")
            ring = None

        if ring is None:
            tiles: List[PlacedTile] = []
        else:
            tiles = fit_grid(
                ring,
                width_m,
                height_m,
                config.gap_metres,
                geometry=self.geometry,
                max_candidates=self.max_candidates,
            )

        removed: Set[int] = set()
        if preserve_removals and self.removed_indices:
            if removal_match == "centroid":
                removed = self._match_by_centroid(tiles)
            else:
                removed = {i for i in self.removed_indices if 0 <= i < len(tiles)}
            dropped = len(self.removed_indices) - len(removed)
            if dropped:
                logger.debug(f"{dropped} removed panels had no counterpart in the new batch")

        for t in tiles:
            t.removed = t.index in removed

        self.polygon = ring
        self.config = config
        self.tiles = tiles
        self.removed_indices = removed
        self._fitted = True
        return self

    def _match_by_centroid(self, new_tiles: List[PlacedTile]) -> Set[int]:
        old = [t for t in self.tiles if t.index in self.removed_indices]
        matched: Set[int] = set()
        for t in old:
            pt = Point(t.centroid)
            for candidate in new_tiles:
                if candidate.index not in matched and candidate.as_polygon().intersects(pt):
                    matched.add(candidate.index)
                    break
        return matched

    def reconfigure(self, config: LayoutConfig) -> "LayoutSession":
        """Apply new settings to a fitted session.

        Panel size, orientation or gap changes re-fit and clear removals.
        A wattage-only change keeps the batch and just swaps the config.
        """

        if not self._fitted:
            raise PreconditionFailed("fit a roof outline before reconfiguring")
        if not isinstance(config, LayoutConfig):
            raise PreconditionFailed("a LayoutConfig is required")
        if config.same_grid_as(self.config):
            self.config = config
            return self
        if self.polygon is None:
            # Outline was rejected on the last fit; nothing to place.
            self.config = config
            return self
        return self.fit(self.polygon, config, preserve_removals=False)

    def toggle_removed(self, index: int) -> "LayoutSession":
        try:
            i = operator.index(index)
        except TypeError:
            i = None
        if i is None or isinstance(index, bool) or not 0 <= i < len(self.tiles):
            raise IndexOutOfRange(f"no panel with index {index!r} in the current batch of {len(self.tiles)}")

        index = i
        tile = self.tiles[index]
        if index in self.removed_indices:
            self.removed_indices.discard(index)
            tile.removed = False
        else:
            self.removed_indices.add(index)
            tile.removed = True
        return self

    def active_tiles(self) -> Iterator[PlacedTile]:
        return (t for t in self.tiles if t.index not in self.removed_indices)

    def removed_tiles(self) -> Iterator[PlacedTile]:
        return (t for t in self.tiles if t.index in self.removed_indices)

    def clear(self) -> "LayoutSession":
        self.polygon = None
        self.config = None
        self.tiles = []
        self.removed_indices = set()
        self._fitted = False
        return self

    def roof_area(self) -> float:
        if self.polygon is None:
            return 0.0
        return float(self.geometry.area(self.polygon))

    def stats(self) -> Optional[Stats]:
        """Headline numbers for the current batch; None while the session is empty."""
        if not self._fitted:
            return None
        return build_stats(self.active_count, self.roof_area(), self.config.watts_per_tile)
