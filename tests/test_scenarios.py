import json
import math
import unittest

from impact_effects import (
    ImpactorSpecification,
    InvalidImpactorError,
    Mortality,
    assess_impact,
    estimate_mortality,
)
from impact_effects.config import (
    EARTH_DIAMETER_M,
    EARTH_VOLUME_KM3,
    HALF_CIRCUMFERENCE_M,
    R_EARTH,
)

SMALL_AIRBURST = {"diameter_m": 20.0, "density_kgpm3": 3000.0, "speed_mps": 19000.0, "angle_deg": 45.0}
CHICXULUB = {"diameter_m": 10_000.0, "density_kgpm3": 3000.0, "speed_mps": 20_000.0, "angle_deg": 45.0}
CRATER_FIELDS = (
    "regime", "transient_diameter_m", "transient_depth_m", "final_diameter_m",
    "final_depth_m", "volume_km3", "earth_volume_ratio", "earth_effect",
)


class TestScenarios(unittest.TestCase):
    def test_small_airburst(self):
        result = assess_impact(SMALL_AIRBURST)
        self.assertTrue(result.airburst)
        self.assertIn(result.regime.burst, ("low_airburst", "high_airburst"))
        self.assertIsNone(result.regime.crater)
        self.assertTrue(0.01 <= result.energy.energy_mt <= 1.0)
        for field in CRATER_FIELDS:
            self.assertIsNone(getattr(result.crater, field))
        self.assertIsNone(result.seismic.magnitude)
        self.assertIsNone(result.seismic.radius_m_ge_7_5)
        self.assertIsNone(result.tsunami)
        for value in (result.thermal.fireball_radius_m, result.thermal.third_degree_burn_radius_m):
            self.assertTrue(math.isfinite(value))
            self.assertGreater(value, 0.0)
        # the high burst never reaches the collapse or shatter thresholds on the ground
        self.assertEqual(result.regime.burst, "high_airburst")
        self.assertLess(result.blast.overpressure_at_50_km_pa, 2.0)
        self.assertEqual(result.blast.building_collapse_radius_m, 1e-6)
        self.assertEqual(result.blast.glass_shatter_radius_m, 1e-6)
        self.assertEqual(result.blast.ionization_radius_m, 1e-6)

    def test_chicxulub_scale_land_impact(self):
        result = assess_impact(CHICXULUB)
        self.assertFalse(result.airburst)
        self.assertEqual(result.regime.burst, "surface")
        self.assertEqual(result.regime.crater, "complex")
        self.assertTrue(100e3 <= result.crater.final_diameter_m <= 200e3)
        self.assertEqual(result.crater.earth_effect, "negligible_disturbed")
        self.assertLess(result.crater.earth_volume_ratio, 1e-6)
        self.assertGreater(result.seismic.magnitude, 9.5)
        self.assertAlmostEqual(result.seismic.radius_m_ge_7_5 / 1000.0,
                               (result.seismic.magnitude - 1.1644 - 7.5) / 0.0048)
        self.assertIsNone(result.crater.ocean_floor_transient_diameter_m)
        self.assertGreaterEqual(result.blast.building_collapse_radius_m, result.thermal.fireball_radius_m)
        self.assertGreater(result.blast.glass_shatter_radius_m, result.blast.building_collapse_radius_m)
        self.assertLess(result.blast.glass_shatter_radius_m, HALF_CIRCUMFERENCE_M)

    def test_ocean_impact(self):
        land = assess_impact(CHICXULUB)
        ocean = assess_impact(dict(CHICXULUB, is_water=True))
        self.assertEqual(ocean.regime.target, "water")
        self.assertIsNotNone(ocean.tsunami)
        self.assertLessEqual(ocean.tsunami.rim_wave_height_m, 3682.0)
        self.assertGreater(ocean.tsunami.max_speed_mps, 0.0)
        self.assertLessEqual(ocean.tsunami.tsunami_radius_m, HALF_CIRCUMFERENCE_M)
        self.assertAlmostEqual(ocean.tsunami.time_to_reach_100_km_s,
                               100.0 * ocean.tsunami.time_to_reach_1_km_s)
        # water column slows the body before it reaches the seafloor
        self.assertLess(ocean.crater.transient_diameter_m, land.crater.transient_diameter_m)
        self.assertNotEqual(ocean.crater.ocean_floor_transient_diameter_m, ocean.crater.transient_diameter_m)

    def test_grazing_angle(self):
        result = assess_impact(dict(SMALL_AIRBURST, angle_deg=1.0))
        payload = json.dumps(result.to_dict(), allow_nan=False)
        self.assertIn("thermal", payload)
        self.assertTrue(result.airburst)

    def test_cap_enforcement(self):
        spec = {"diameter_m": 1e7, "density_kgpm3": 3000.0, "speed_mps": 20_000.0, "angle_deg": 45.0}
        result = assess_impact(spec)
        self.assertGreater(result.energy.kinetic_energy_j, 1e30)
        self.assertLessEqual(result.thermal.fireball_radius_m, R_EARTH)
        for radius in (result.thermal.clothing_ignition_radius_m,
                       result.thermal.second_degree_burn_radius_m,
                       result.thermal.third_degree_burn_radius_m):
            self.assertLessEqual(radius, 1_500_000.0)
        self.assertLessEqual(result.crater.transient_diameter_m, EARTH_DIAMETER_M)
        self.assertLessEqual(result.crater.final_diameter_m, EARTH_DIAMETER_M)
        self.assertEqual(result.crater.volume_km3, EARTH_VOLUME_KM3)
        self.assertEqual(result.crater.earth_effect, "destroyed")
        self.assertIsNone(result.seismic.radius_m_ge_7_5)
        self.assertEqual(result.seismic.description, "Beyond threshold to vaporize Earth's oceans")

        ocean = assess_impact(dict(spec, is_water=True))
        self.assertEqual(ocean.tsunami.rim_wave_height_m, 3682.0)

    def test_determinism(self):
        for spec in (SMALL_AIRBURST, CHICXULUB, dict(CHICXULUB, is_water=True)):
            self.assertEqual(assess_impact(spec), assess_impact(spec))
            self.assertEqual(assess_impact(spec).to_dict(), assess_impact(spec).to_dict())

    def test_airburst_and_crater_are_exclusive(self):
        specs = [
            SMALL_AIRBURST,
            CHICXULUB,
            dict(SMALL_AIRBURST, diameter_m=200.0, density_kgpm3=8000.0),
            dict(SMALL_AIRBURST, diameter_m=60.0, angle_deg=80.0),
            dict(CHICXULUB, diameter_m=1_000.0, angle_deg=15.0),
        ]
        for spec in specs:
            result = assess_impact(spec)
            crater_values = [getattr(result.crater, f) for f in CRATER_FIELDS]
            if result.airburst:
                self.assertTrue(all(v is None for v in crater_values), spec)
                self.assertIsNone(result.seismic.magnitude)
            else:
                self.assertTrue(all(v is not None for v in crater_values), spec)
                self.assertIsNotNone(result.seismic.magnitude)

    def test_to_dict_is_json_serializable(self):
        for spec in (SMALL_AIRBURST, dict(CHICXULUB, is_water=True)):
            data = assess_impact(spec).to_dict()
            self.assertEqual(
                set(data), {"regime", "energy", "entry", "thermal", "crater", "seismic", "blast", "tsunami"})
            json.dumps(data, allow_nan=False)

    def test_invalid_input_rejected_before_physics(self):
        with self.assertRaises(InvalidImpactorError) as ctx:
            assess_impact(dict(CHICXULUB, angle_deg=95.0))
        self.assertEqual(ctx.exception.field, "angle_deg")

    def test_assessment_is_logged(self):
        with self.assertLogs("impact_effects.pipeline", level="INFO") as logs:
            assess_impact(CHICXULUB)
        self.assertTrue(any("[assess]" in line for line in logs.output))


class TestCollaborators(unittest.TestCase):
    def test_water_classifier_decides_target(self):
        calls = []

        def over_ocean(lat, lon):
            calls.append((lat, lon))
            return True

        spec = dict(CHICXULUB, latitude=21.4, longitude=-89.5)
        result = assess_impact(spec, water_classifier=over_ocean)
        self.assertEqual(calls, [(21.4, -89.5)])
        self.assertEqual(result.regime.target, "water")
        self.assertIsNotNone(result.tsunami)

    def test_water_classifier_needs_coordinates(self):
        result = assess_impact(CHICXULUB, water_classifier=lambda lat, lon: True)
        self.assertEqual(result.regime.target, "land")

    def test_damage_radii(self):
        result = assess_impact(CHICXULUB)
        radii = result.damage_radii()
        self.assertEqual(radii["fireball"], result.thermal.fireball_radius_m)
        self.assertEqual(radii["glass_shatter"], result.blast.glass_shatter_radius_m)
        self.assertEqual(radii["building_collapse_earthquake"], result.seismic.radius_m_ge_7_5)
        self.assertIsNone(assess_impact(SMALL_AIRBURST).damage_radii()["building_collapse_earthquake"])

    def test_estimate_mortality(self):
        spec = ImpactorSpecification.parse(dict(CHICXULUB, latitude=21.4, longitude=-89.5))
        assessment = assess_impact(spec)
        seen = {}

        def estimator(a, lat, lon, diameter_m):
            seen.update(lat=lat, lon=lon, diameter_m=diameter_m, radii=a.damage_radii())
            return Mortality(death_count=1000, injury_count=5000)

        result = estimate_mortality(assessment, spec, estimator)
        self.assertEqual(result, Mortality(1000, 5000))
        self.assertEqual((seen["lat"], seen["lon"], seen["diameter_m"]), (21.4, -89.5, 10_000.0))

    def test_estimate_mortality_requires_location(self):
        spec = ImpactorSpecification.parse(dict(CHICXULUB, latitude=21.4))
        with self.assertRaises(InvalidImpactorError) as ctx:
            estimate_mortality(assess_impact(spec), spec, lambda *args: Mortality(0, 0))
        self.assertEqual(ctx.exception.field, "longitude")


if __name__ == '__main__':
    unittest.main()
