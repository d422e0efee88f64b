"""Tests for the versioned reward configuration snapshot."""

import dataclasses

import pytest

from dlprewards.deployer.reward_engine.models.reward_config import RewardConfig
from dlprewards.deployer.utils.error_handling import InvalidParameters, ValidationError


class TestRewardConfigDefaults:
    def test_default_curve_shape(self):
        """Default multiplier curve should have 64 buckets from 1.00x to 3.00x."""
        config = RewardConfig()

        assert len(config.multiplier_table) == 64
        assert config.multiplier_table[0] == 100
        assert config.multiplier_table[-1] == 300

    def test_default_weights_cover_full_score(self):
        """Default stake and performance weights should sum to 100%."""
        config = RewardConfig()
        assert config.stake_weight_percentage + config.performance_weight_percentage == 100_000

    def test_is_immutable(self):
        """Config snapshots should not be mutable in place."""
        config = RewardConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.number_of_tranches = 1

    def test_list_table_is_stored_as_tuple(self):
        """A list multiplier table should be frozen into a tuple."""
        config = RewardConfig(multiplier_table=[100, 150, 200])
        assert config.multiplier_table == (100, 150, 200)


class TestRewardConfigValidation:
    @pytest.mark.parametrize("changes", [
        {"maximum_slippage_percentage": 100_001},
        {"reward_percentage": -1},
        {"stake_weight_percentage": 1.5},
        {"number_of_tranches": 0},
        {"stake_bucket_size": 0},
        {"remediation_window": -10},
        {"multiplier_table": ()},
        {"multiplier_table": (100, 120, 110)},
        {"settlement_asset": ""},
    ])
    def test_rejects_invalid_values(self, changes):
        """Should raise InvalidParameters for out-of-range options."""
        with pytest.raises(InvalidParameters):
            RewardConfig(**changes)

    def test_invalid_parameters_is_validation_error(self):
        """Config errors should be catchable as ValueError."""
        with pytest.raises(ValueError):
            RewardConfig(number_of_tranches=0)
        assert issubclass(InvalidParameters, ValidationError)

    def test_to_dict_from_dict(self):
        """Serialization should preserve every option."""
        config = RewardConfig(version=3, number_of_tranches=12, reward_asset="XYZ")

        restored = RewardConfig.from_dict(config.to_dict())

        assert restored == config
