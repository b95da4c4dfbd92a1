"""Panel (tile) dimensions: presets, custom sizes and orientation.

Sizes are stored as (long edge, short edge) in metres, which is how panels are
listed on datasheets. Portrait places the long edge along the grid's x axis
(east-west) exactly as stored; landscape swaps the two.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from roofpanels.errors import InvalidDimension, PreconditionFailed
from roofpanels.geo.convert import inches_to_metres


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    @classmethod
    def parse(cls, value) -> "Orientation":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise PreconditionFailed(f"orientation must be 'portrait' or 'landscape', got {value!r}") from e


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"

    @classmethod
    def parse(cls, value) -> "UnitSystem":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise PreconditionFailed(f"units must be 'metric' or 'imperial', got {value!r}") from e


def _check_dimension(name: str, value: float) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidDimension(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(v) or v <= 0:
        raise InvalidDimension(f"{name} must be positive and finite, got {value!r}")
    return v


@dataclass(frozen=True)
class TileSpec:
    long_edge: float
    short_edge: float
    orientation: Orientation = Orientation.PORTRAIT

    def __post_init__(self) -> None:
        object.__setattr__(self, "long_edge", _check_dimension("tile width", self.long_edge))
        object.__setattr__(self, "short_edge", _check_dimension("tile height", self.short_edge))
        object.__setattr__(self, "orientation", Orientation.parse(self.orientation))

    @property
    def effective_width(self) -> float:
        return resolve(self)[0]

    @property
    def effective_height(self) -> float:
        return resolve(self)[1]

    def rotated(self) -> "TileSpec":
        """Same panel turned 90 degrees."""
        other = Orientation.LANDSCAPE if self.orientation == Orientation.PORTRAIT else Orientation.PORTRAIT
        return replace(self, orientation=other)


def resolve(spec: TileSpec) -> Tuple[float, float]:
    """Return (width_m, height_m) to place on the grid for ``spec``."""

    if spec.orientation == Orientation.LANDSCAPE:
        w, h = spec.short_edge, spec.long_edge
    else:
        w, h = spec.long_edge, spec.short_edge

    for name, v in (("resolved width", w), ("resolved height", h)):
        if not math.isfinite(v) or v <= 0:
            raise InvalidDimension(f"{name} must be positive and finite, got {v!r}")
    return w, h


@dataclass(frozen=True)
class PanelPreset:
    key: str
    label: str
    width: Optional[float]
    height: Optional[float]


CUSTOM_PRESET = "custom"

PRESETS: Dict[str, PanelPreset] = {
    "standard": PanelPreset("standard", "Standard UK / AU / NZ  (1.72 x 1.04 m)", 1.722, 1.040),
    "us": PanelPreset("us", "US Standard  (1.65 x 0.99 m)", 1.651, 0.991),
    "large": PanelPreset("large", "Large Format  (2.00 x 1.05 m)", 2.000, 1.052),
    CUSTOM_PRESET: PanelPreset(CUSTOM_PRESET, "Custom", None, None),
}

# Defaults used when a custom size field is left empty.
DEFAULT_CUSTOM_METRES = (1.722, 1.040)
DEFAULT_CUSTOM_INCHES = (67.8, 40.9)


def custom_tile_spec(
    width: Optional[float] = None,
    height: Optional[float] = None,
    orientation=Orientation.PORTRAIT,
    units=UnitSystem.METRIC,
) -> TileSpec:
    """Build a TileSpec from user-entered dimensions.

    Imperial input is in inches and is converted to metres before the
    orientation is applied. ``None`` falls back to the default custom size for
    the unit system; an explicit non-positive value raises InvalidDimension.
    """

    units = UnitSystem.parse(units)
    if units == UnitSystem.IMPERIAL:
        dw, dh = DEFAULT_CUSTOM_INCHES
        w = _check_dimension("custom width", dw if width is None else width)
        h = _check_dimension("custom height", dh if height is None else height)
        w, h = inches_to_metres(w), inches_to_metres(h)
    else:
        dw, dh = DEFAULT_CUSTOM_METRES
        w = dw if width is None else width
        h = dh if height is None else height

    return TileSpec(w, h, orientation)


def preset_tile_spec(key: str, orientation=Orientation.PORTRAIT) -> TileSpec:
    preset = PRESETS.get(str(key).strip().lower())
    if preset is None:
        raise PreconditionFailed(f"unknown panel preset {key!r}; choose one of {sorted(PRESETS)}")
    if preset.key == CUSTOM_PRESET:
        return custom_tile_spec(orientation=orientation)
    return TileSpec(preset.width, preset.height, orientation)
