"""Registry of versioned reward configuration snapshots."""

import threading
from dataclasses import fields, replace
from typing import Dict, List, Optional

import bittensor as bt

from dlprewards.deployer.utils.error_handling import log_and_raise_config_error
from ..models.reward_config import RewardConfig


class ConfigRegistry:
    """Keeps every configuration version; epochs reference one by number."""

    def __init__(self, initial: Optional[RewardConfig] = None):
        initial = initial or RewardConfig()
        self._versions: Dict[int, RewardConfig] = {initial.version: initial}
        self._current_version = initial.version
        self._lock = threading.Lock()

    def current(self) -> RewardConfig:
        """The configuration new epochs will bind."""
        with self._lock:
            return self._versions[self._current_version]

    def get(self, version: int) -> RewardConfig:
        """A specific configuration version."""
        with self._lock:
            if version not in self._versions:
                log_and_raise_config_error(f"Unknown config version {version}", "version", version)
            return self._versions[version]

    def update(self, **changes) -> RewardConfig:
        """
        Create a new configuration version from the current one.

        Unknown option names and invalid values are rejected without creating a
        version. Already-bound epochs keep their version.
        """
        known = {f.name for f in fields(RewardConfig)} - {"version"}
        unknown = sorted(set(changes) - known)
        if unknown:
            log_and_raise_config_error(f"Unknown config options: {unknown}", ", ".join(unknown))

        with self._lock:
            new_config = replace(
                self._versions[self._current_version],
                version=self._current_version + 1,
                **changes
            )
            self._versions[new_config.version] = new_config
            self._current_version = new_config.version

        bt.logging.info(f"Reward config updated to version {new_config.version}: {sorted(changes)}")
        return new_config

    def versions(self) -> List[int]:
        with self._lock:
            return sorted(self._versions)
