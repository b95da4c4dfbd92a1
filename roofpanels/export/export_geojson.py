"""GeoJSON-compatible view of a layout.

Builds a FeatureCollection dict in EPSG:4326 with the roof outline and one
feature per panel. Coordinates are passed through at full double precision so
downstream serialisers (GeoJSON, KML...) lose nothing. Writing files is left
to the caller.
"""

from typing import Any, Dict, List, Optional

from shapely.geometry import Polygon, mapping

from roofpanels.layout.session import LayoutSession


def _feature(ring, properties: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "Feature", "properties": dict(properties), "geometry": mapping(Polygon(ring))}


def layout_feature_collection(
    session: LayoutSession,
    include_removed: bool = False,
    properties: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """FeatureCollection for the session's roof and panels.

    Args:
        session: a LayoutSession (empty sessions give an empty collection).
        include_removed: also export panels the user removed.
        properties: extra properties copied onto every feature.

    Panel features are named "Panel 1", "Panel 2", ... over the exported
    panels and keep their batch ``index``.
    """

    if session is None:
        raise ValueError("session cannot be None")

    extra = dict(properties or {})
    features: List[Dict[str, Any]] = []

    if session.polygon is not None:
        features.append(_feature(session.polygon, {**extra, "kind": "roof", "name": "Roof Area"}))

    tiles = session.tiles if include_removed else list(session.active_tiles())
    for n, tile in enumerate(tiles, start=1):
        features.append(
            _feature(
                tile.bounds_geo,
                {
                    **extra,
                    "kind": "panel",
                    "name": f"Panel {n}",
                    "index": tile.index,
                    "removed": tile.index in session.removed_indices,
                },
            )
        )

    return {"type": "FeatureCollection", "features": features}
