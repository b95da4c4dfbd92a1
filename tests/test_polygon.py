import unittest
import warnings

from shapely.geometry import Polygon

from roofpanels.errors import GeometryCollaboratorFailure, InvalidPolygon, PreconditionFailed
from roofpanels.geo.convert import metres_per_degree_latitude, metres_per_degree_longitude
from roofpanels.geo.polygon import ShapelyGeometry, normalize_ring


def rect_ring(width_m, height_m, lng0=0.0, lat0=0.0):
    lat1 = lat0 + height_m / metres_per_degree_latitude()
    lng1 = lng0 + width_m / metres_per_degree_longitude((lat0 + lat1) / 2.0)
    return [(lng0, lat0), (lng1, lat0), (lng1, lat1), (lng0, lat1), (lng0, lat0)]


class NormalizeRingTests(unittest.TestCase):
    def test_closed_ring_is_kept(self):
        ring = normalize_ring([(0, 0), (1, 0), (1, 1), (0, 0)])
        self.assertEqual(((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)), ring)

    def test_open_ring_is_closed(self):
        ring = normalize_ring([(0, 0), (1, 0), (1, 1)])
        self.assertEqual(ring[0], ring[-1])
        self.assertEqual(4, len(ring))

    def test_z_values_are_dropped(self):
        ring = normalize_ring([(0, 0, 5), (1, 0, 5), (1, 1, 5), (0, 0, 5)])
        self.assertEqual((1.0, 1.0), ring[2])

    def test_geojson_polygon_and_feature(self):
        coords = [[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]
        geom = {"type": "Polygon", "coordinates": [coords]}
        feature = {"type": "Feature", "properties": {}, "geometry": geom}
        self.assertEqual(normalize_ring(coords), normalize_ring(geom))
        self.assertEqual(normalize_ring(coords), normalize_ring(feature))

    def test_shapely_polygon(self):
        ring = normalize_ring(Polygon([(0, 0), (1, 0), (1, 1), (0, 1)]))
        self.assertEqual(5, len(ring))

    def test_none_is_a_precondition_failure(self):
        with self.assertRaises(PreconditionFailed):
            normalize_ring(None)

    def test_repeated_point_is_invalid(self):
        with self.assertRaises(InvalidPolygon):
            normalize_ring([(1.0, 1.0)] * 4)

    def test_two_distinct_vertices_are_invalid(self):
        with self.assertRaises(InvalidPolygon):
            normalize_ring([(0, 0), (1, 1), (0, 0), (0, 0)])

    def test_non_finite_and_out_of_range_coordinates(self):
        bad = [
            [(0, 0), (float("nan"), 0), (1, 1), (0, 0)],
            [(0, 0), (1, 95), (1, 1), (0, 0)],
            [(0, 0), (181, 0), (1, 1), (0, 0)],
            [(0, 0), ("x", 0), (1, 1), (0, 0)],
            [],
        ]
        for coords in bad:
            with self.subTest(coords=coords):
                with self.assertRaises(InvalidPolygon):
                    normalize_ring(coords)

    def test_unsupported_geojson_type(self):
        with self.assertRaises(InvalidPolygon):
            normalize_ring({"type": "LineString", "coordinates": [[0, 0], [1, 1]]})


class ShapelyGeometryTests(unittest.TestCase):
    def setUp(self):
        self.geometry = ShapelyGeometry()
        self.roof = normalize_ring(rect_ring(10.0, 10.0))

    def test_bounding_box(self):
        min_lng, min_lat, max_lng, max_lat = self.geometry.bounding_box(self.roof)
        self.assertEqual((0.0, 0.0), (min_lng, min_lat))
        self.assertAlmostEqual(10.0 / 111320.0, max_lat)
        self.assertGreater(max_lng, 0.0)

    def test_containment_allows_touching_edges(self):
        inner = normalize_ring(rect_ring(5.0, 5.0))
        self.assertTrue(self.geometry.is_fully_contained(inner, self.roof))

    def test_partial_overlap_is_not_containment(self):
        straddling = normalize_ring(rect_ring(5.0, 5.0, lng0=8.0 / 111320.0))
        self.assertFalse(self.geometry.is_fully_contained(straddling, self.roof))

    def test_prepared_roof_follows_the_ring(self):
        inner = normalize_ring(rect_ring(5.0, 5.0))
        small_roof = normalize_ring(rect_ring(2.0, 2.0))
        self.assertTrue(self.geometry.is_fully_contained(inner, self.roof))
        self.assertFalse(self.geometry.is_fully_contained(inner, small_roof))

    def test_bad_candidate_raises_collaborator_failure(self):
        with self.assertRaises(GeometryCollaboratorFailure):
            self.geometry.is_fully_contained(((0.0, 0.0), (1.0, 1.0)), self.roof)

    def test_area_is_close_to_planar_area(self):
        # 10 m x 10 m on the simple sphere model; the ellipsoid makes the
        # north-south side slightly shorter near the equator.
        area = self.geometry.area(self.roof)
        self.assertAlmostEqual(100.0, area, delta=2.0)

    def test_area_away_from_the_equator(self):
        roof = normalize_ring(rect_ring(20.0, 10.0, lng0=151.2093, lat0=-33.8688))
        self.assertAlmostEqual(200.0, self.geometry.area(roof), delta=4.0)

    def test_area_uses_no_deprecated_shapely_calls(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            area = self.geometry.area(self.roof)
        self.assertGreater(area, 0.0)


if __name__ == "__main__":
    unittest.main()
