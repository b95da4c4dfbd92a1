import argparse
from pathlib import Path

# Import matplotlib optionally; without it the demo runs without visualization.
try:
    import matplotlib.pyplot as plt
    HAS_MPL = True
except Exception:
    plt = None
    HAS_MPL = False

from roofpanels.config import DEFAULT_GAP_MM, DEFAULT_PRESET, DEFAULT_WATTS, make_layout_config
from roofpanels.errors import PanelLayoutError
from roofpanels.geo.convert import metres_per_degree_latitude, metres_per_degree_longitude
from roofpanels.layout.session import LayoutSession
from roofpanels.layout.tiles import PRESETS, Orientation, UnitSystem
from roofpanels.score.stats import format_stats
from roofpanels.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

# 1) A sample roof: an outline in metres east/north of a corner in Sydney
ROOF_ORIGIN = (151.2093, -33.8688)  # lng, lat
ROOF_METRES = [(0.0, 0.0), (14.0, 0.0), (14.0, 7.0), (10.0, 9.5), (0.0, 9.5)]


def sample_roof():
    lng0, lat0 = ROOF_ORIGIN
    m_lat = metres_per_degree_latitude()
    m_lng = metres_per_degree_longitude(lat0)
    return [(lng0 + x / m_lng, lat0 + y / m_lat) for x, y in ROOF_METRES]


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Fit solar panels onto a sample roof outline.")
    p.add_argument("--preset", default=DEFAULT_PRESET, choices=sorted(PRESETS))
    p.add_argument("--orientation", default=Orientation.PORTRAIT.value, choices=[o.value for o in Orientation])
    p.add_argument("--gap-mm", type=float, default=DEFAULT_GAP_MM)
    p.add_argument("--watts", type=float, default=DEFAULT_WATTS)
    p.add_argument("--units", default=UnitSystem.METRIC.value, choices=[u.value for u in UnitSystem])
    p.add_argument("--custom-width", type=float, default=None, help="custom panel width (m, or inches if imperial)")
    p.add_argument("--custom-height", type=float, default=None, help="custom panel height (m, or inches if imperial)")
    p.add_argument("--remove", type=int, nargs="*", default=[], help="panel indices to remove")
    p.add_argument("--plot", action="store_true")
    p.add_argument("--log-dir", type=Path, default=None)
    p.add_argument("--verbose", action="store_true")
    return p.parse_args(argv)


def summary(session, units):
    text = format_stats(session.stats(), units)
    print(f"Panels:      {text['count']} of {len(session.tiles)} fitted")
    print(f"Roof area:   {text['area']}")
    print(f"Capacity:    {text['capacity']}")
    print(f"Output/yr:   {text['output']}")
    print(f"CO2/yr:      {text['co2']}")


def visualize(session):
    if not HAS_MPL:
        print("matplotlib not available; skipping visualization. Install with: python -m pip install matplotlib")
        return
    fig, ax = plt.subplots()
    xs, ys = zip(*session.polygon)
    ax.plot(xs, ys, color="black")

    for t in session.tiles:
        x, y = zip(*t.bounds_geo)
        if t.removed:
            ax.fill(x, y, alpha=0.25, color="grey")
        else:
            ax.fill(x, y, alpha=0.65, color="gold")

    ax.set_aspect("equal", "datalim")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title("Solar panel layout (sample roof)")
    plt.show()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_dir, verbose=args.verbose)

    try:
        config = make_layout_config(
            preset=args.preset,
            orientation=args.orientation,
            gap_mm=args.gap_mm,
            watts=args.watts,
            custom_width=args.custom_width,
            custom_height=args.custom_height,
            units=args.units,
        )
        session = LayoutSession().fit(sample_roof(), config)
        for i in args.remove:
            session.toggle_removed(i)
    except PanelLayoutError as e:
        logger.error(f"Could not fit panels: {e}")
        return 1

    summary(session, args.units)
    if args.plot:
        visualize(session)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
