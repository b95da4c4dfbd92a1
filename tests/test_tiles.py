import unittest

from roofpanels.errors import InvalidDimension, PreconditionFailed
from roofpanels.layout.tiles import (
    PRESETS,
    Orientation,
    TileSpec,
    UnitSystem,
    custom_tile_spec,
    preset_tile_spec,
    resolve,
)


class ResolveTests(unittest.TestCase):
    def test_portrait_keeps_stored_dimensions(self):
        spec = TileSpec(1.722, 1.040, Orientation.PORTRAIT)
        self.assertEqual((1.722, 1.040), resolve(spec))

    def test_landscape_swaps_dimensions(self):
        spec = TileSpec(1.722, 1.040, Orientation.LANDSCAPE)
        self.assertEqual((1.040, 1.722), resolve(spec))
        self.assertEqual(1.040, spec.effective_width)
        self.assertEqual(1.722, spec.effective_height)

    def test_rotating_twice_is_the_identity(self):
        spec = TileSpec(1.722, 1.040, "portrait")
        self.assertEqual(spec, spec.rotated().rotated())
        self.assertEqual(resolve(spec), resolve(spec.rotated().rotated()))
        self.assertEqual(Orientation.LANDSCAPE, spec.rotated().orientation)

    def test_orientation_accepts_strings(self):
        self.assertEqual(Orientation.LANDSCAPE, TileSpec(2.0, 1.0, " Landscape ").orientation)

    def test_unknown_orientation_is_rejected(self):
        with self.assertRaises(PreconditionFailed):
            TileSpec(2.0, 1.0, "sideways")

    def test_non_positive_or_non_finite_dimensions_are_rejected(self):
        for w, h in ((0.0, 1.0), (1.0, -0.5), (float("nan"), 1.0), (1.0, float("inf")), ("wide", 1.0)):
            with self.subTest(w=w, h=h):
                with self.assertRaises(InvalidDimension):
                    TileSpec(w, h)


class CustomTileTests(unittest.TestCase):
    def test_imperial_inches_are_converted_before_orientation(self):
        spec = custom_tile_spec(67.8, 40.9, Orientation.LANDSCAPE, UnitSystem.IMPERIAL)
        w, h = resolve(spec)
        self.assertAlmostEqual(40.9 * 0.0254, w)
        self.assertAlmostEqual(67.8 * 0.0254, h)

    def test_metric_values_are_metres(self):
        self.assertEqual((1.5, 0.8), resolve(custom_tile_spec(1.5, 0.8)))

    def test_missing_values_fall_back_to_defaults(self):
        self.assertEqual((1.722, 1.040), resolve(custom_tile_spec()))
        w, h = resolve(custom_tile_spec(units="imperial"))
        self.assertAlmostEqual(67.8 * 0.0254, w)
        self.assertAlmostEqual(40.9 * 0.0254, h)

    def test_explicit_zero_is_an_error(self):
        with self.assertRaises(InvalidDimension):
            custom_tile_spec(0.0, 1.0)
        with self.assertRaises(InvalidDimension):
            custom_tile_spec(60.0, 0.0, units="imperial")


class PresetTests(unittest.TestCase):
    def test_presets_match_datasheet_sizes(self):
        self.assertEqual((1.722, 1.040), resolve(preset_tile_spec("standard")))
        self.assertEqual((1.651, 0.991), resolve(preset_tile_spec("us")))
        self.assertEqual((1.052, 2.000), resolve(preset_tile_spec("large", "landscape")))

    def test_custom_preset_uses_default_custom_size(self):
        self.assertEqual((1.722, 1.040), resolve(preset_tile_spec("custom")))

    def test_unknown_preset(self):
        with self.assertRaises(PreconditionFailed):
            preset_tile_spec("jumbo")

    def test_every_preset_has_a_label(self):
        for key, preset in PRESETS.items():
            with self.subTest(key=key):
                self.assertEqual(key, preset.key)
                self.assertTrue(preset.label)


if __name__ == "__main__":
    unittest.main()
