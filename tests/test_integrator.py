"""Tests for reefersim/integrator.py"""

import math
import unittest

import numpy as np

from reefersim.controls.timestep import system_time_step
from reefersim.core.config import (
    CommodityConfig,
    ContainerConfig,
    GeometryConfig,
    SimulationConfig,
    Vector3D,
)
from reefersim.core.errors import NumericalDomainError
from reefersim.integrator import InletConditions, ZoneIntegrator
from reefersim.physics.properties import saturation_humidity_ratio, specific_heat
from reefersim.zones import GridShape, ZoneGrid, ZoneIndex


def single_zone_config(**sections) -> ContainerConfig:
    sections.setdefault("commodity", CommodityConfig(respiration_rate=5.0))
    return ContainerConfig(
        geometry=GeometryConfig.create(Vector3D(3.0, 2.4, 2.2), num_zones=1),
        **sections,
    )


class TestSingleZone(unittest.TestCase):
    """End-to-end behaviour of one zone cooled by inlet air."""

    def setUp(self):
        self.config = single_zone_config()
        self.boundary = self.config.boundary
        self.integrator = ZoneIntegrator(self.config)
        self.index = ZoneIndex(0, 0, 0)
        self.state = self.integrator.initial_state(self.index, self.boundary)
        self.inlet = InletConditions.from_boundary(self.boundary)

    def step(self, state, dt=0.1, inlet=None):
        return self.integrator.integrate(self.index, state, inlet or self.inlet, dt, self.boundary)

    def test_initial_state(self):
        """The zone starts at rest temperature with forward flow."""
        self.assertEqual(self.state.product_temperature, 20.0)
        self.assertEqual(self.state.air_temperature, 20.0)
        self.assertEqual(self.state.pressure, self.boundary.outlet_pressure)
        self.assertGreater(self.state.velocity, 0.0)
        self.assertGreater(self.state.mass_flow, 0.0)
        self.assertEqual(self.state.product_moisture, 0.908)

    def test_cold_inlet_cools_zone(self):
        """Cold supply air cools the air and, after evaporation, the product."""
        first = self.step(self.state)
        second = self.step(first.state)
        self.assertLess(first.state.air_temperature, 20.0)
        self.assertLess(first.state.product_temperature, 20.0)
        self.assertLess(second.state.air_temperature, first.state.air_temperature)
        self.assertGreater(second.fluxes.convective_heat, 0.0)
        self.assertGreater(first.fluxes.evaporation_rate, 0.0)
        self.assertLess(first.state.product_moisture, self.state.product_moisture)

    def test_pressure_gradient_accelerates_flow(self):
        """A positive inlet-outlet difference accelerates the air."""
        new = self.step(self.state).state
        self.assertGreater(new.velocity, self.state.velocity)
        self.assertEqual(new.pressure, self.boundary.outlet_pressure)

    def test_old_state_untouched(self):
        """Integration returns a new state."""
        before = self.state
        self.step(self.state)
        self.assertIs(self.state, before)
        self.assertEqual(self.state.air_temperature, 20.0)

    def test_derived_quantities_consistent(self):
        """Mass flow and energy follow from the new primitive variables."""
        new = self.step(self.state).state
        zone = self.integrator.zone
        self.assertAlmostEqual(new.mass_flow, new.density * new.velocity * zone.flow_area, places=9)
        self.assertAlmostEqual(
            new.energy,
            new.density * zone.air_volume * specific_heat(new.air_temperature) * new.air_temperature,
            places=6,
        )
        self.assertGreaterEqual(new.development_factor, 0.0)
        self.assertLessEqual(new.development_factor, 1.0)

    def test_invalid_time_step(self):
        """Non-positive or non-finite steps are rejected."""
        for dt in (0.0, -1.0, float("nan"), float("inf")):
            with self.assertRaises(NumericalDomainError) as ctx:
                self.step(self.state, dt=dt)
            self.assertEqual(ctx.exception.quantity, "time_step")

    def test_non_finite_result_names_zone(self):
        """A NaN inlet produces a fatal error carrying the zone index."""
        inlet = InletConditions(float("nan"), 0.005, self.boundary.inlet_pressure)
        with self.assertRaises(NumericalDomainError) as ctx:
            self.step(self.state, inlet=inlet)
        self.assertEqual(tuple(ctx.exception.zone), (0, 0, 0))
        self.assertIn("(0, 0, 0)", str(ctx.exception))

    def test_humidity_clamped_to_saturation(self):
        """Supersaturated inflow is clamped to the saturation humidity."""
        inlet = InletConditions(self.inlet.temperature, 0.2, self.inlet.pressure)
        new = self.step(self.state, dt=1.0, inlet=inlet).state
        self.assertAlmostEqual(
            new.air_humidity, saturation_humidity_ratio(new.air_temperature, new.pressure), places=12
        )

    def test_moisture_clamped_at_zero(self):
        """Dry produce cannot lose more water."""
        dry = self.state.evolve(product_moisture=0.0, air_humidity=0.001)
        new = self.step(dry).state
        self.assertEqual(new.product_moisture, 0.0)

    def test_temperature_clamped(self):
        """Air temperature is clamped to the configured minimum."""
        config = single_zone_config(simulation=SimulationConfig(min_temperature=19.0))
        integrator = ZoneIntegrator(config)
        state = integrator.initial_state(self.index, config.boundary)
        new = integrator.integrate(self.index, state, self.inlet, 0.15, config.boundary).state
        self.assertEqual(new.air_temperature, 19.0)

    def test_tcpi_scales_heat_transfer(self):
        """A lower TCPI reduces the heat transfer coefficient."""
        full = self.integrator.integrate(self.index, self.state, self.inlet, 0.1, self.boundary, 1.0)
        half = self.integrator.integrate(self.index, self.state, self.inlet, 0.1, self.boundary, 0.5)
        self.assertAlmostEqual(
            half.fluxes.heat_transfer_coefficient, 0.5 * full.fluxes.heat_transfer_coefficient
        )


class TestSingleZoneSystemStep(unittest.TestCase):
    """One zone advanced with the step chosen by system_time_step."""

    def setUp(self):
        self.config = single_zone_config()
        self.boundary = self.config.boundary
        self.integrator = ZoneIntegrator(self.config)
        self.index = ZoneIndex(0, 0, 0)
        self.grid = ZoneGrid.uniform(
            GridShape(1, 1, 1), lambda index: self.integrator.initial_state(index, self.boundary)
        )
        self.dt = system_time_step(
            self.grid,
            self.config.geometry,
            self.config.simulation,
            exchange=lambda index, state: self.integrator.heat_exchange(
                index, state, self.boundary
            ),
        )

    def test_step_resolves_exchange(self):
        """The chosen step is no longer than the air time constant allows."""
        state = self.grid[self.index]
        exchange = self.integrator.heat_exchange(self.index, state, self.boundary)
        self.assertGreater(self.dt, 0.0)
        self.assertLessEqual(
            self.dt, exchange.air_capacity / (10.0 * exchange.air_conductance) + 1e-12
        )

    def test_one_step_cools_and_accelerates(self):
        """A 20 °C zone behind a 100 Pa drive speeds up and cools without overshoot."""
        state = self.grid[self.index]
        new = self.integrator.integrate(
            self.index, state, InletConditions.from_boundary(self.boundary), self.dt, self.boundary
        ).state
        wall = self.boundary.wall_temperature
        zone = self.integrator.zone
        self.assertGreater(new.velocity, state.velocity)
        self.assertLess(new.air_temperature, 20.0)
        self.assertLess(new.product_temperature, 20.0)
        self.assertGreater(new.air_temperature, self.boundary.inlet_temperature)
        self.assertLess(new.energy, new.density * zone.air_volume * specific_heat(wall) * wall)


class TestHeatExchange(unittest.TestCase):
    """Tests for the capacities and conductances bounding the step."""

    def setUp(self):
        self.config = single_zone_config()
        self.integrator = ZoneIntegrator(self.config)
        self.index = ZoneIndex(0, 0, 0)
        self.state = self.integrator.initial_state(self.index, self.config.boundary)

    def test_capacities(self):
        zone = self.integrator.zone
        exchange = self.integrator.heat_exchange(self.index, self.state, self.config.boundary)
        self.assertEqual(exchange.product_capacity, zone.heat_capacity)
        self.assertGreater(exchange.air_capacity, 0.0)
        self.assertLess(exchange.air_capacity, exchange.product_capacity)

    def test_through_flow_adds_conductance(self):
        """Air conductance includes the product, the through-flow and the envelope."""
        exchange = self.integrator.heat_exchange(self.index, self.state, self.config.boundary)
        self.assertGreater(exchange.air_conductance, exchange.product_conductance)
        self.assertGreater(exchange.product_conductance, 0.0)

    def test_finite_without_flow(self):
        still = self.state.evolve(velocity=0.0, mass_flow=0.0)
        exchange = self.integrator.heat_exchange(self.index, still, self.config.boundary)
        self.assertTrue(all(math.isfinite(value) for value in exchange))
        self.assertGreater(exchange.product_conductance, 0.0)

    def test_tcpi_scales_product_conductance(self):
        boundary = self.config.boundary
        full = self.integrator.heat_exchange(self.index, self.state, boundary, 1.0)
        half = self.integrator.heat_exchange(self.index, self.state, boundary, 0.5)
        self.assertAlmostEqual(half.product_conductance, 0.5 * full.product_conductance)


class TestEnvelope(unittest.TestCase):
    """Tests for envelope heat gain areas."""

    def test_single_zone_envelope(self):
        """A lone zone touches floor, roof and both side walls."""
        integrator = ZoneIntegrator(single_zone_config())
        self.assertAlmostEqual(integrator.envelope_area(ZoneIndex(0, 0, 0)), 2 * 3.0 * 2.2 + 2 * 3.0 * 2.4)

    def test_interior_zone_has_no_envelope(self):
        """Zones surrounded by other zones gain no wall heat."""
        config = ContainerConfig(
            geometry=GeometryConfig.create(Vector3D(3.0, 2.4, 2.2), 1, num_layers=3, num_pallets=3)
        )
        integrator = ZoneIntegrator(config)
        self.assertEqual(integrator.envelope_area(ZoneIndex(0, 1, 1)), 0.0)
        self.assertGreater(integrator.envelope_area(ZoneIndex(0, 0, 1)), 0.0)


class TestFluctuation(unittest.TestCase):
    """Tests for seeded turbulent fluctuation."""

    def setUp(self):
        self.config = single_zone_config(simulation=SimulationConfig(turbulence_fluctuation=1.0))
        self.index = ZoneIndex(0, 0, 0)
        self.inlet = InletConditions.from_boundary(self.config.boundary)

    def run_once(self, rng):
        integrator = ZoneIntegrator(self.config, rng=rng)
        state = integrator.initial_state(self.index, self.config.boundary)
        return integrator.integrate(self.index, state, self.inlet, 0.1, self.config.boundary)

    def test_same_seed_same_result(self):
        a = self.run_once(np.random.default_rng(7))
        b = self.run_once(np.random.default_rng(7))
        self.assertEqual(a.state, b.state)

    def test_fluctuation_changes_coefficient(self):
        seeded = self.run_once(np.random.default_rng(7))
        plain = self.run_once(None)
        self.assertNotEqual(
            seeded.fluxes.heat_transfer_coefficient, plain.fluxes.heat_transfer_coefficient
        )
        self.assertTrue(math.isfinite(seeded.fluxes.heat_transfer_coefficient))


if __name__ == "__main__":
    unittest.main()
