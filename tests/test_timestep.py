"""Tests for reefersim/controls/timestep.py"""

import math
import unittest

from reefersim.controls.timestep import system_time_step, time_step_candidates, zone_time_step
from reefersim.core.config import (
    BoundaryConfig,
    ContainerConfig,
    GeometryConfig,
    SimulationConfig,
    Vector3D,
)
from reefersim.core.errors import ConfigurationError, NumericalDomainError
from reefersim.integrator import HeatExchange, ZoneIntegrator
from reefersim.zones import GridShape, ZoneGrid


class TestZoneTimeStep(unittest.TestCase):
    """Tests for the per-zone stability limits."""

    def test_convective_scale(self):
        """v = 2 m/s across a 0.75 m zone gives 0.0375 s."""
        scales = time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 1.2 * 2.0 * 3.0)
        self.assertAlmostEqual(scales.convective, 0.0375, places=12)
        self.assertLessEqual(zone_time_step(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2), 0.0375 + 1e-15)

    def test_diffusive_scale(self):
        """Fourier limit dx² / (20 alpha)."""
        scales = time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2)
        self.assertAlmostEqual(scales.diffusive, 0.5625 / (20 * 2e-5))

    def test_minimum_of_candidates(self):
        """The zone step is the smallest candidate."""
        scales = time_step_candidates(0.75, 0.1, 2e-5, 1.2, 3.0, 50.0)
        self.assertEqual(scales.limiting, scales.mass_flow)
        self.assertEqual(zone_time_step(0.75, 0.1, 2e-5, 1.2, 3.0, 50.0), scales.mass_flow)

    def test_stagnant_zone_is_finite(self):
        """Zero velocity and mass flow are floored rather than dividing by zero."""
        dt = zone_time_step(0.75, 0.0, 2e-5, 1.2, 3.0, 0.0)
        self.assertTrue(math.isfinite(dt))
        self.assertGreater(dt, 0.0)

    def test_exchange_time_constants(self):
        """Capacity over conductance, divided by the exchange safety factor."""
        exchange = HeatExchange(4800.0, 240.0, 5.0e6, 200.0)
        scales = time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2, exchange)
        self.assertAlmostEqual(scales.air_exchange, 4800.0 / (10.0 * 240.0))
        self.assertAlmostEqual(scales.product_exchange, 5.0e6 / (10.0 * 200.0))

    def test_exchange_limits_stagnant_zone(self):
        """Without flow the air time constant, not the floored CFL limit, sets the step."""
        exchange = HeatExchange(4800.0, 240.0, 5.0e6, 200.0)
        scales = time_step_candidates(0.75, 0.0, 2e-5, 1.2, 3.0, 0.0, exchange)
        self.assertEqual(scales.limiting, scales.air_exchange)
        self.assertAlmostEqual(zone_time_step(0.75, 0.0, 2e-5, 1.2, 3.0, 0.0, exchange), 2.0)

    def test_exchange_ignored_when_absent(self):
        scales = time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2)
        self.assertEqual(scales.air_exchange, math.inf)
        self.assertEqual(scales.product_exchange, math.inf)


class TestTimeStepSettings(unittest.TestCase):
    """Tests for the safety factors taken from SimulationConfig."""

    def test_default_settings(self):
        """Omitting settings matches SimulationConfig defaults."""
        self.assertEqual(
            time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2),
            time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2, settings=SimulationConfig()),
        )

    def test_convective_safety(self):
        """Doubling the CFL divisor halves the convective scale."""
        settings = SimulationConfig(convective_safety=20.0)
        scales = time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2, settings=settings)
        self.assertAlmostEqual(scales.convective, 0.0375 / 2.0)

    def test_diffusive_and_mass_flow_safety(self):
        settings = SimulationConfig(diffusive_safety=10.0, mass_flow_safety=5.0)
        scales = time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2, settings=settings)
        self.assertAlmostEqual(scales.diffusive, 0.5625 / (10.0 * 2e-5))
        self.assertAlmostEqual(scales.mass_flow, 1.2 * 3.0 * 0.75 / (5.0 * 7.2))

    def test_exchange_safety(self):
        exchange = HeatExchange(4800.0, 240.0, 5.0e6, 200.0)
        settings = SimulationConfig(exchange_safety=5.0)
        scales = time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2, exchange, settings)
        self.assertAlmostEqual(scales.air_exchange, 4.0)

    def test_epsilon_floors_divisors(self):
        """A larger floor shortens the stagnant-zone convective scale."""
        settings = SimulationConfig(epsilon=1e-3)
        scales = time_step_candidates(0.75, 0.0, 2e-5, 1.2, 3.0, 0.0, settings=settings)
        self.assertAlmostEqual(scales.convective, 0.75 / (10.0 * 1e-3))

    def test_zone_time_step_passes_settings(self):
        settings = SimulationConfig(convective_safety=40.0)
        self.assertAlmostEqual(
            zone_time_step(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2, settings=settings), 0.75 / 80.0
        )

    def test_non_positive_settings_rejected(self):
        """Safety factors and the floor must be positive."""
        for name in (
            "convective_safety",
            "diffusive_safety",
            "mass_flow_safety",
            "exchange_safety",
            "epsilon",
        ):
            with self.subTest(name=name):
                with self.assertRaises(ConfigurationError) as ctx:
                    SimulationConfig(**{name: 0.0}).validate()
                self.assertEqual(ctx.exception.quantity, name)


class TestSystemTimeStep(unittest.TestCase):
    """Tests for the global time step over a grid."""

    def setUp(self):
        self.config = ContainerConfig(
            geometry=GeometryConfig.create(Vector3D(3.0, 2.4, 2.2), num_zones=4)
        )
        integrator = ZoneIntegrator(self.config)
        area = integrator.zone.flow_area
        self.grid = ZoneGrid.uniform(
            GridShape(4, 1, 1),
            lambda index: (lambda s: s.evolve(velocity=2.0, mass_flow=s.density * 2.0 * area))(
                integrator.initial_state(index, self.config.boundary)
            ),
        )

    def test_four_zone_container(self):
        """A 3 m, 4-zone container at 2 m/s steps at most 0.0375 s."""
        dt = system_time_step(self.grid, self.config.geometry)
        self.assertLessEqual(dt, 0.0375 + 1e-12)
        self.assertGreater(dt, 0.0)

    def test_fastest_zone_limits(self):
        """One fast zone limits the whole grid."""
        fast = self.grid[(2, 0, 0)].evolve(velocity=4.0)
        grid = self.grid.replace({(2, 0, 0): fast})
        self.assertLessEqual(system_time_step(grid, self.config.geometry), 0.75 / 40.0 + 1e-12)

    def test_max_time_step_cap(self):
        """The configured cap bounds the step."""
        dt = system_time_step(self.grid, self.config.geometry, SimulationConfig(max_time_step=0.01))
        self.assertEqual(dt, 0.01)

    def test_non_finite_step_raises(self):
        """A NaN velocity produces a fatal error naming the zone."""
        bad = self.grid[(1, 0, 0)].evolve(velocity=float("nan"))
        grid = self.grid.replace({(1, 0, 0): bad})
        with self.assertRaises(NumericalDomainError) as ctx:
            system_time_step(grid, self.config.geometry)
        self.assertEqual(ctx.exception.quantity, "time_step")
        self.assertEqual(tuple(ctx.exception.zone), (1, 0, 0))

    def test_stagnant_grid_limited_by_exchange(self):
        """With equal inlet and outlet pressure the heat exchange keeps the step short."""
        boundary = BoundaryConfig(inlet_pressure=101325.0, outlet_pressure=101325.0)
        config = ContainerConfig(
            geometry=GeometryConfig.create(Vector3D(3.0, 2.4, 2.2), num_zones=2),
            boundary=boundary,
        )
        integrator = ZoneIntegrator(config)
        grid = ZoneGrid.uniform(
            GridShape(2, 1, 1),
            lambda index: integrator.initial_state(index, boundary).evolve(
                velocity=0.0, mass_flow=0.0
            ),
        )

        def exchange(index, state):
            return integrator.heat_exchange(index, state, boundary)

        without = system_time_step(grid, config.geometry)
        dt = system_time_step(grid, config.geometry, exchange=exchange)
        air_limit = min(
            exchange(index, state).air_capacity
            / (10.0 * exchange(index, state).air_conductance)
            for index, state in grid
        )
        self.assertGreater(without, 1000.0)
        self.assertLess(dt, 60.0)
        self.assertAlmostEqual(dt, air_limit)


if __name__ == "__main__":
    unittest.main()
