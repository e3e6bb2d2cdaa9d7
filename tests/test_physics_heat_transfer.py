"""Tests for reefersim/physics/heat_transfer.py"""

import math
import unittest

from reefersim.core.config import CommodityConfig
from reefersim.physics.heat_transfer import (
    convective_heat,
    evaporation_rate,
    evaporative_heat,
    heat_transfer_coefficient,
    mass_transfer_coefficient,
    position_factor,
    respiration_heat,
    respiration_rate,
    vapor_pressure_deficit,
    wall_heat_gain,
)
from reefersim.physics.properties import latent_heat, saturation_humidity_ratio


class TestRespiration(unittest.TestCase):
    """Tests for respiration heat generation."""

    def test_rate_at_reference_temperature(self):
        """At the reference temperature the rate equals the reference rate."""
        self.assertAlmostEqual(respiration_rate(5.0, 15.0, 0.1, 5.0), 15.0)

    def test_rate_doubles(self):
        """The rate doubles every ln(2)/k degrees."""
        rise = math.log(2.0) / 0.1
        self.assertAlmostEqual(respiration_rate(5.0 + rise, 15.0, 0.1, 5.0), 30.0, places=9)

    def test_hourly_rate_converted_to_watts(self):
        """3600 mg/(kg·h) at 1 J/mg is 1 W per kg."""
        commodity = CommodityConfig(
            respiration_rate=3600.0, respiration_heat=1.0, reference_temperature=5.0
        )
        self.assertAlmostEqual(respiration_heat(5.0, 1.0, commodity), 1.0, places=12)
        self.assertAlmostEqual(respiration_heat(5.0, 250.0, commodity), 250.0, places=9)

    def test_strawberry_at_reference(self):
        """15 mg/(kg·h) at 10.7 J/mg for one tonne of strawberries."""
        self.assertAlmostEqual(
            respiration_heat(5.0, 1000.0, CommodityConfig()), 15.0 * 1000.0 * 10.7 / 3600.0
        )


class TestConvection(unittest.TestCase):
    """Tests for convective heat exchange."""

    def test_positive_product_to_air(self):
        """Heat flows from warmer product to colder air."""
        self.assertAlmostEqual(convective_heat(10.0, 2.0, 15.0, 5.0), 200.0)
        self.assertLess(convective_heat(10.0, 2.0, 5.0, 15.0), 0.0)

    def test_position_factor_range(self):
        """Position factors are in (0, 1] and rise with height."""
        factors = [position_factor(j, 4) for j in range(4)]
        self.assertEqual(factors, sorted(factors))
        for value in factors:
            self.assertGreater(value, 0.0)
            self.assertLessEqual(value, 1.0)

    def test_coefficient_with_developed_flow(self):
        """Developed flow, unit factors: the base coefficient is returned."""
        self.assertAlmostEqual(heat_transfer_coefficient(12.0, 1.0, 1.0, 1.0), 12.0)

    def test_coefficient_entry_enhancement(self):
        """Undeveloped flow enhances heat transfer."""
        self.assertAlmostEqual(heat_transfer_coefficient(10.0, 1.0, 1.0, 0.0), 12.0)

    def test_coefficient_scaled_by_tcpi(self):
        """TCPI scales the coefficient linearly."""
        self.assertAlmostEqual(
            heat_transfer_coefficient(10.0, 0.9, 0.5, 1.0),
            0.5 * heat_transfer_coefficient(10.0, 0.9, 1.0, 1.0),
        )

    def test_wall_heat_gain(self):
        """A warm wall heats the air."""
        self.assertAlmostEqual(wall_heat_gain(0.4, 10.0, 30.0, 5.0), 100.0)


class TestEvaporation(unittest.TestCase):
    """Tests for vapor pressure deficit driven evaporation."""

    def test_no_deficit_at_saturation(self):
        """Air saturated at the product temperature has no deficit for aw = 1."""
        w_sat = saturation_humidity_ratio(10.0, 101325.0)
        self.assertAlmostEqual(vapor_pressure_deficit(10.0, 1.0, w_sat, 101325.0), 0.0, places=6)

    def test_dry_air_evaporates(self):
        """Dry air draws water from the product."""
        deficit = vapor_pressure_deficit(15.0, 0.98, 0.003, 101325.0)
        self.assertGreater(deficit, 0.0)
        self.assertGreater(evaporation_rate(0.01, 10.0, 0.5, deficit, 15.0), 0.0)

    def test_humid_air_condenses(self):
        """Air wetter than the surface gives a negative rate."""
        deficit = vapor_pressure_deficit(2.0, 0.98, 0.012, 101325.0)
        self.assertLess(deficit, 0.0)
        self.assertLess(evaporation_rate(0.01, 10.0, 0.5, deficit, 2.0), 0.0)

    def test_evaporation_rate_formula(self):
        """m = hm A f VPD / (Rv T)."""
        expected = 0.01 * 10.0 * 0.5 * 1000.0 / (461.5 * 293.15)
        self.assertAlmostEqual(evaporation_rate(0.01, 10.0, 0.5, 1000.0, 20.0), expected, places=12)

    def test_evaporative_heat(self):
        """Evaporative heat is rate times latent heat."""
        self.assertAlmostEqual(evaporative_heat(1e-4, 10.0), 1e-4 * latent_heat(10.0))

    def test_mass_transfer_coefficient(self):
        """Lewis analogy hm = h / (rho cp)."""
        self.assertAlmostEqual(mass_transfer_coefficient(12.0, 1.2, 1000.0), 0.01)


if __name__ == "__main__":
    unittest.main()
