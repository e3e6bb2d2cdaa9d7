"""Integration tests for complete reefer container simulations.

These tests verify that configuration, zone integration, the cooling unit
and performance tracking work together in realistic precooling scenarios.
"""

import tempfile
import unittest
from pathlib import Path

from reefersim.container import ReeferContainer
from reefersim.core.config import (
    BoundaryConfig,
    CommodityConfig,
    ContainerConfig,
    CoolingUnitConfig,
    GeometryConfig,
    Vector3D,
    config_to_dict,
    create_container_config,
    load_config,
    save_config,
)
from reefersim.zones import ZoneIndex


class TestOpenLoopPrecooling(unittest.TestCase):
    """Test a two-zone container cooled by fixed supply air."""

    def setUp(self):
        """Set up a two-zone container without a cooling unit."""
        self.config = ContainerConfig(
            geometry=GeometryConfig.create(Vector3D(3.0, 2.4, 2.2), num_zones=2),
            boundary=BoundaryConfig(inlet_temperature=2.0),
            commodity=CommodityConfig(respiration_rate=5.0),
            name="Open-Loop",
        )
        self.container = ReeferContainer.from_config(self.config, with_cooling_unit=False)

    def test_product_cools(self):
        """Product temperature falls steadily under cold supply air."""
        snapshots = self.container.run(steps=200)
        averages = [s.average_temperature for s in snapshots]
        self.assertLess(averages[-1], averages[0])
        self.assertLess(averages[-1], 20.0)
        self.assertGreater(averages[-1], 2.0)
        self.assertGreater(snapshots[-1].energy_removed, snapshots[0].energy_removed)

    def test_upstream_zone_coldest(self):
        """Air nearest the supply is coldest."""
        self.container.run(steps=200)
        upstream = self.container.grid[ZoneIndex(0, 0, 0)]
        downstream = self.container.grid[ZoneIndex(1, 0, 0)]
        self.assertLess(upstream.air_temperature, downstream.air_temperature)
        self.assertGreater(self.container.latest.cooling_effectiveness, 0.0)

    def test_conservation_over_run(self):
        """Residuals stay within tolerance for the whole run."""
        tolerance = self.config.geometry.tolerance.conservation
        for snapshot in self.container.run(steps=200):
            self.assertLessEqual(snapshot.mass_residual, tolerance)
            self.assertLessEqual(snapshot.energy_residual, tolerance)

    def test_states_stay_physical(self):
        """Temperatures, moisture and humidity stay within their bounds."""
        self.container.run(steps=200)
        settings = self.config.simulation
        for _, state in self.container.grid:
            self.assertGreaterEqual(state.air_temperature, settings.min_temperature)
            self.assertLessEqual(state.air_temperature, settings.max_temperature)
            self.assertGreaterEqual(state.product_moisture, 0.0)
            self.assertLessEqual(state.product_moisture, 1.0)
            self.assertGreaterEqual(state.air_humidity, 0.0)
            self.assertGreater(state.velocity, 0.0)


class TestClosedLoopPrecooling(unittest.TestCase):
    """Test a container whose supply air comes from its cooling unit."""

    def setUp(self):
        config = ContainerConfig(
            geometry=GeometryConfig.create(Vector3D(3.0, 2.4, 2.2), num_zones=2),
            commodity=CommodityConfig(respiration_rate=5.0),
            cooling_unit=CoolingUnitConfig(control_update_interval=1.0),
            name="Closed-Loop",
        )
        self.container = ReeferContainer.from_config(config)

    def test_cooling_unit_engages(self):
        """After the first control interval the unit delivers cooling."""
        self.container.run(duration=3.0)
        unit = self.container.cooling_unit
        self.assertGreater(unit.current_power, 0.0)
        self.assertLessEqual(unit.current_power, unit.rated_power)
        self.assertLessEqual(unit.coil_temperature, unit.settings.target_temperature)
        self.assertGreater(self.container.latest.cooling_power, 0.0)
        self.assertTrue(0.0 <= self.container.latest.tcpi <= 1.0)

    def test_process_variables(self):
        """Container and unit expose their process variables."""
        self.container.run(duration=2.0)
        container_pv = self.container.get_process_variables()
        unit_pv = self.container.cooling_unit.get_process_variables()
        self.assertEqual(container_pv["name"], "Closed-Loop")
        self.assertEqual(unit_pv["name"], "Closed-Loop-CU")
        self.assertEqual(container_pv["cooling_power"], self.container.latest.cooling_power)


class TestConfigFileSimulation(unittest.TestCase):
    """Test building a simulation from a saved configuration file."""

    def test_yaml_config_runs(self):
        """A container loaded from YAML simulates like the original."""
        config = ContainerConfig(
            geometry=GeometryConfig.create(Vector3D(3.0, 2.4, 2.2), num_zones=2, num_layers=2),
            commodity=CommodityConfig(respiration_rate=5.0),
            name="From-File",
        )
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reefer.yaml"
            save_config(config_to_dict(config), path)
            loaded = create_container_config(load_config(path))

        original = ReeferContainer.from_config(config, with_cooling_unit=False)
        restored = ReeferContainer.from_config(loaded, with_cooling_unit=False)
        self.assertEqual(original.run(steps=20), restored.run(steps=20))
        self.assertEqual(tuple(restored.shape), (2, 2, 1))


if __name__ == "__main__":
    unittest.main()
