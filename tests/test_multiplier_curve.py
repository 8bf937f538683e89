"""Tests for the geometric multiplier curve."""

import math

import pytest

from src.simulation_engine.models import ConfigurationError, GameConfig
from src.simulation_engine.multiplier_curve import (
    MultiplierTable,
    build_multiplier_table,
)


class TestBuildMultiplierTable:
    def test_starts_at_one(self, config_50):
        table = build_multiplier_table(config_50)
        assert table.multiplier(0) == 1.0

    @pytest.mark.parametrize("preset", ["50", "100"])
    def test_reaches_max_multiplier(self, preset):
        config = GameConfig.from_preset(preset)
        table = build_multiplier_table(config)
        assert table.multiplier(config.total_steps) == pytest.approx(15000.0, rel=1e-9)

    def test_one_entry_per_step(self, config_50):
        table = build_multiplier_table(config_50)
        assert len(table.values) == 51
        assert table.total_steps == 50

    def test_strictly_increasing(self, config_100):
        values = build_multiplier_table(config_100).values
        assert all(b > a for a, b in zip(values, values[1:]))

    def test_geometric_ratio(self, config_50):
        table = build_multiplier_table(config_50)
        base = 15000.0 ** (1 / 50)
        assert math.isclose(config_50.multiplier_base, base)
        assert table.multiplier(10) / table.multiplier(9) == pytest.approx(base)

    def test_custom_max_multiplier(self):
        config = GameConfig.from_preset("50", target_max_multiplier=100.0)
        table = build_multiplier_table(config)
        assert table.multiplier(25) == pytest.approx(10.0)


class TestMultiplierTable:
    def test_lookup_outside_range_raises(self, config_50):
        table = build_multiplier_table(config_50)
        with pytest.raises(ValueError, match="outside multiplier range"):
            table.multiplier(-1)
        with pytest.raises(ValueError, match="outside multiplier range"):
            table.multiplier(51)

    def test_rejects_non_increasing_values(self):
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            MultiplierTable.from_values([1.0, 2.0, 2.0])

    def test_rejects_table_not_starting_at_one(self):
        with pytest.raises(ConfigurationError, match="must start at 1"):
            MultiplierTable.from_values([2.0, 3.0, 5.0])

    def test_rejects_single_step(self):
        with pytest.raises(ConfigurationError, match="at least two"):
            MultiplierTable.from_values([1.0])

    def test_from_values_converts_to_float(self):
        table = MultiplierTable.from_values([1, 2, 4])
        assert table.values == (1.0, 2.0, 4.0)
        assert table.total_steps == 2
