"""Headline statistics for a panel layout.

capacity_kw       = active_count * watts_per_tile / 1000
annual_output_kwh = capacity_kw * PEAK_SUN_HOURS_PER_DAY * DAYS_PER_YEAR * PERFORMANCE_RATIO
co2_avoided_t     = annual_output_kwh * CO2_KG_PER_KWH / 1000

The assumption constants live in ``roofpanels.config`` and are rough global
defaults. Everything here is a pure function.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from roofpanels.config import CO2_KG_PER_KWH, DAYS_PER_YEAR, PEAK_SUN_HOURS_PER_DAY, PERFORMANCE_RATIO
from roofpanels.geo.convert import sq_metres_to_sq_feet
from roofpanels.layout.tiles import UnitSystem


@dataclass(frozen=True)
class Stats:
    active_count: int
    area_sq_metres: float
    capacity_kw: float
    annual_output_kwh: float
    co2_avoided_tonnes: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def estimate(active_count: int, watts_per_tile: float) -> Dict[str, float]:
    """Capacity / output / CO2 for ``active_count`` panels of ``watts_per_tile`` each.

    Zero panels or non-positive wattage give all zeros; callers are expected
    to reject bad wattage before getting here.
    """

    if active_count <= 0 or watts_per_tile <= 0:
        return {"capacity_kw": 0.0, "annual_output_kwh": 0.0, "co2_avoided_tonnes": 0.0}

    capacity_kw = float(active_count) * float(watts_per_tile) / 1000.0
    annual_output_kwh = capacity_kw * PEAK_SUN_HOURS_PER_DAY * DAYS_PER_YEAR * PERFORMANCE_RATIO
    co2_avoided_tonnes = annual_output_kwh * CO2_KG_PER_KWH / 1000.0

    return {
        "capacity_kw": float(capacity_kw),
        "annual_output_kwh": float(annual_output_kwh),
        "co2_avoided_tonnes": float(co2_avoided_tonnes),
    }


def build_stats(active_count: int, area_sq_metres: float, watts_per_tile: float) -> Stats:
    e = estimate(active_count, watts_per_tile)
    return Stats(
        active_count=int(max(0, active_count)),
        area_sq_metres=float(area_sq_metres),
        capacity_kw=e["capacity_kw"],
        annual_output_kwh=e["annual_output_kwh"],
        co2_avoided_tonnes=e["co2_avoided_tonnes"],
    )


def format_stats(stats: Optional[Stats], units: Any = UnitSystem.METRIC) -> Dict[str, str]:
    """Display strings for the results panel ("-" everywhere before a fit)."""

    if stats is None:
        return {"count": "-", "area": "-", "capacity": "-", "output": "-", "co2": "-"}

    if UnitSystem.parse(units) == UnitSystem.IMPERIAL:
        area = f"{sq_metres_to_sq_feet(stats.area_sq_metres):.0f} ft²"
    else:
        area = f"{stats.area_sq_metres:.1f} m²"

    return {
        "count": str(stats.active_count),
        "area": area,
        "capacity": f"{stats.capacity_kw:.2f} kWp",
        "output": f"{stats.annual_output_kwh:.0f} kWh",
        "co2": f"{stats.co2_avoided_tonnes:.2f} t",
    }
