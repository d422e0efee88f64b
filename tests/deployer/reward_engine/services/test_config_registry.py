"""Tests for versioned configuration and role checks."""

import pytest

from dlprewards.deployer.reward_engine.models.reward_config import RewardConfig
from dlprewards.deployer.reward_engine.services.access_control import (
    ADMIN_ROLE,
    ORACLE_ROLE,
    REWARD_DEPLOYER_ROLE,
    AccessControl,
)
from dlprewards.deployer.reward_engine.services.config_registry import ConfigRegistry
from dlprewards.deployer.utils.error_handling import AccessDenied, InvalidParameters


class TestConfigRegistry:
    def test_update_creates_new_version(self):
        """Each update should produce a new, higher version."""
        registry = ConfigRegistry(RewardConfig(number_of_tranches=4))

        updated = registry.update(number_of_tranches=8)

        assert updated.version == 2
        assert registry.current().number_of_tranches == 8
        assert registry.get(1).number_of_tranches == 4
        assert registry.versions() == [1, 2]

    def test_unknown_option_rejected(self):
        """Unrecognized option names should be rejected without a new version."""
        registry = ConfigRegistry()

        with pytest.raises(InvalidParameters):
            registry.update(number_of_epochs=3)
        assert registry.versions() == [1]

    def test_invalid_value_rejected(self):
        """Invalid values should be rejected without a new version."""
        registry = ConfigRegistry()

        with pytest.raises(InvalidParameters):
            registry.update(maximum_slippage_percentage=200_000)
        assert registry.current().version == 1

    def test_unknown_version(self):
        """Looking up a missing version should fail."""
        with pytest.raises(InvalidParameters):
            ConfigRegistry().get(5)


class TestAccessControl:
    def test_initial_roles(self):
        """Admins and granted members should hold their roles."""
        acl = AccessControl(admins=["alice"], grants={ORACLE_ROLE: ["oracle"]})

        assert acl.has_role(ADMIN_ROLE, "alice")
        assert acl.has_role(ORACLE_ROLE, "oracle")
        assert not acl.has_role(REWARD_DEPLOYER_ROLE, "alice")

    def test_require_raises_access_denied(self):
        """Callers without the role should be denied."""
        acl = AccessControl(admins=["alice"])

        with pytest.raises(AccessDenied):
            acl.require(REWARD_DEPLOYER_ROLE, "mallory")

    def test_admin_grants_and_revokes(self):
        """Only admins should manage roles."""
        acl = AccessControl(admins=["alice"])

        acl.grant_role("alice", REWARD_DEPLOYER_ROLE, "bob")
        assert acl.has_role(REWARD_DEPLOYER_ROLE, "bob")

        with pytest.raises(AccessDenied):
            acl.grant_role("bob", ADMIN_ROLE, "bob")

        acl.revoke_role("alice", REWARD_DEPLOYER_ROLE, "bob")
        assert not acl.has_role(REWARD_DEPLOYER_ROLE, "bob")
