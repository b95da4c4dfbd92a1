"""CRS helpers."""

from pyproj import CRS


def equal_area_crs_for(lat: float, lon: float) -> CRS:
    """Return a Lambert azimuthal equal-area CRS centred on a lat/lon.

    Areas measured in it are true on the WGS84 ellipsoid, which is what the
    roof-area statistic needs.
    """
    return CRS.from_dict({
        "proj": "laea",
        "lat_0": float(lat),
        "lon_0": float(lon),
        "datum": "WGS84",
        "units": "m",
    })
