"""Layout configuration and global assumption constants.

The energy constants are rough, conservative global defaults, not
physically authoritative numbers. Actual output depends heavily on location,
roof pitch and azimuth, shading, panel efficiency and the local grid mix.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from roofpanels.errors import InvalidDimension, PreconditionFailed
from roofpanels.geo.convert import MM_TO_METRES
from roofpanels.layout.tiles import (
    CUSTOM_PRESET,
    Orientation,
    TileSpec,
    UnitSystem,
    custom_tile_spec,
    preset_tile_spec,
)

# Energy / emissions assumptions
PEAK_SUN_HOURS_PER_DAY = 3.5   # kWh/m2/day equivalent
PERFORMANCE_RATIO = 0.75
CO2_KG_PER_KWH = 0.20
DAYS_PER_YEAR = 365

# Widget defaults
DEFAULT_PRESET = "standard"
DEFAULT_GAP_MM = 20
DEFAULT_WATTS = 400

# Upper bound on containment tests per fit; None disables the check.
MAX_CANDIDATES: Optional[int] = 100_000


@dataclass(frozen=True)
class LayoutConfig:
    """Everything one fit pass needs. Any change means a new pass."""

    tile: TileSpec
    gap_metres: float = DEFAULT_GAP_MM * MM_TO_METRES
    watts_per_tile: float = float(DEFAULT_WATTS)

    def __post_init__(self) -> None:
        if not isinstance(self.tile, TileSpec):
            raise PreconditionFailed(f"tile must be a TileSpec, got {type(self.tile).__name__}")

        try:
            gap = float(self.gap_metres)
            watts = float(self.watts_per_tile)
        except (TypeError, ValueError) as e:
            raise InvalidDimension(f"gap and watts must be numbers: {e}") from e

        if not math.isfinite(gap) or gap < 0:
            raise InvalidDimension(f"gap must be >= 0 metres, got {self.gap_metres!r}")
        if not math.isfinite(watts) or watts <= 0:
            raise InvalidDimension(f"watts per panel must be > 0, got {self.watts_per_tile!r}")

        object.__setattr__(self, "gap_metres", gap)
        object.__setattr__(self, "watts_per_tile", watts)

    def same_grid_as(self, other: Optional["LayoutConfig"]) -> bool:
        """True when ``other`` would produce exactly the same tiles (wattage aside)."""
        return other is not None and self.tile == other.tile and self.gap_metres == other.gap_metres


def make_layout_config(
    preset: str = DEFAULT_PRESET,
    orientation: Any = Orientation.PORTRAIT,
    gap_mm: Optional[float] = None,
    watts: Optional[float] = None,
    custom_width: Optional[float] = None,
    custom_height: Optional[float] = None,
    units: Any = UnitSystem.METRIC,
) -> LayoutConfig:
    """Build a LayoutConfig the way the panel controls are read.

    ``None`` means "use the default". The gap is entered in millimetres;
    custom sizes are metres, or inches when ``units`` is imperial.
    """

    if str(preset).strip().lower() == CUSTOM_PRESET:
        tile = custom_tile_spec(custom_width, custom_height, orientation, units)
    else:
        tile = preset_tile_spec(preset, orientation)

    gap_mm = DEFAULT_GAP_MM if gap_mm is None else gap_mm
    watts = DEFAULT_WATTS if watts is None else watts
    try:
        gap_m = float(gap_mm) * MM_TO_METRES
    except (TypeError, ValueError) as e:
        raise InvalidDimension(f"gap must be a number of millimetres, got {gap_mm!r}") from e

    return LayoutConfig(tile=tile, gap_metres=gap_m, watts_per_tile=watts)


def layout_config_from_dict(d: Optional[Dict[str, Any]]) -> LayoutConfig:
    """Build a LayoutConfig from a plain dict (parsed JSON, query params...).

    Recognised keys: preset, orientation, gap_mm, watts, custom_width,
    custom_height, units. Unknown keys are ignored; missing ones use defaults.
    """

    d = dict(d or {})
    kwargs = {}
    for key in ("preset", "orientation", "units"):
        if d.get(key) not in (None, ""):
            kwargs[key] = d[key]
    for key in ("gap_mm", "watts", "custom_width", "custom_height"):
        if d.get(key) not in (None, ""):
            try:
                kwargs[key] = float(d[key])
            except (TypeError, ValueError) as e:
                raise InvalidDimension(f"{key} must be a number, got {d[key]!r}") from e
    return make_layout_config(**kwargs)
