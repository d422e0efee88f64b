"""
Global pytest configuration and fixtures.

Provides in-memory stand-ins for the external collaborators (participant
registry, treasury, swap venue, chain clock) so tests never touch a network.
"""

from typing import Dict, List, Optional, Tuple

import pytest

from dlprewards.deployer.reward_engine.interfaces import (
    ChainClock,
    ParticipantRegistry,
    PriceSource,
    SwapResult,
    SwapVenue,
    Treasury,
)
from dlprewards.deployer.reward_engine.models.reward_config import RewardConfig
from dlprewards.deployer.reward_engine.orchestrator import RewardOrchestrator
from dlprewards.deployer.reward_engine.services.access_control import (
    AccessControl,
    ORACLE_ROLE,
    REWARD_DEPLOYER_ROLE,
)
from dlprewards.deployer.reward_engine.services.config_registry import ConfigRegistry

ADMIN = "admin-key"
ORACLE = "oracle-key"
DEPLOYER = "deployer-key"


class FakeRegistry(ParticipantRegistry):
    def __init__(self, stakes: Optional[Dict[int, int]] = None):
        self.stakes = dict(stakes or {})
        self.treasuries: Dict[int, str] = {}
        self.lookup_failures: Dict[int, int] = {}  # participant id -> remaining failing lookups

    def exists(self, participant_id):
        return participant_id in self.stakes

    def owner_of(self, participant_id):
        return f"owner-{participant_id}"

    def treasury_of(self, participant_id):
        if self.lookup_failures.get(participant_id, 0) > 0:
            self.lookup_failures[participant_id] -= 1
            raise ConnectionError("registry rpc down")
        return self.treasuries.get(participant_id, f"treasury-{participant_id}")

    def stake_of(self, participant_id):
        return self.stakes.get(participant_id, 0)

    def participant_ids(self):
        return list(self.stakes)


class FakeTreasury(Treasury):
    def __init__(self):
        self.credits: List[Tuple[int, str, str, int]] = []
        self.transfers: List[Tuple[str, str, int]] = []
        self.fail_transfers = False
        self.fail_credits = False

    def credit(self, participant_id, recipient, asset, amount):
        if self.fail_credits:
            raise RuntimeError("treasury paused")
        self.credits.append((participant_id, recipient, asset, amount))

    def transfer(self, recipient, asset, amount):
        if self.fail_transfers:
            raise RuntimeError("insufficient treasury balance")
        self.transfers.append((recipient, asset, amount))

    def credited(self, participant_id, asset):
        return sum(a for pid, _, ast, a in self.credits if pid == participant_id and ast == asset)


class FakeSwapVenue(SwapVenue):
    """
    Quotes 1:1 and realizes ``quote * (1 - shortfall)`` per participant call.

    ``shortfalls`` maps an input amount to a fractional shortfall so a single
    tranche can be made to underperform.
    """

    def __init__(self):
        self.shortfalls: Dict[int, float] = {}
        self.unused: Dict[int, int] = {}
        self.spare_in = 0
        self.spare_out = 0
        self.conversions: List[Tuple[str, str, int, int]] = []

    def quote(self, asset_in, asset_out, amount_in):
        return amount_in

    def convert(self, asset_in, asset_out, amount_in, min_amount_out):
        realized = int(amount_in * (1 - self.shortfalls.get(amount_in, 0.0)))
        if realized < min_amount_out:
            raise RuntimeError(f"output {realized} below minimum {min_amount_out}")
        self.conversions.append((asset_in, asset_out, amount_in, min_amount_out))
        unused = self.unused.get(amount_in, 0)
        return SwapResult(
            amount_out=realized,
            spare_in=self.spare_in,
            spare_out=self.spare_out,
            used_in=amount_in - self.spare_in - unused,
        )


class FixedPriceSource(PriceSource):
    def __init__(self, ratio: float = 1.0):
        self.ratio = ratio

    def quote(self, asset_in, asset_out, amount_in):
        return int(amount_in * self.ratio)


class FakeClock(ChainClock):
    def __init__(self, block: int = 1_000):
        self.block = block

    def current_block(self):
        return self.block

    def advance(self, blocks: int):
        self.block += blocks


@pytest.fixture(autouse=True)
def fast_logging():
    """
    Reduce logging verbosity during tests for better performance.
    """
    import logging
    import bittensor as bt

    logging.getLogger().setLevel(logging.WARNING)
    bt.logging.set_debug(False)

    yield

    logging.getLogger().setLevel(logging.INFO)


@pytest.fixture
def registry():
    """Five participants with stakes spread across the multiplier curve."""
    return FakeRegistry({1: 50_000, 2: 120_000, 3: 0, 4: 640_000, 5: 10_000})


@pytest.fixture
def treasury():
    return FakeTreasury()


@pytest.fixture
def venue():
    return FakeSwapVenue()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def reward_config():
    """Small schedule: 1000 budget, 4 tranches every 100 blocks after a 50-block window."""
    return RewardConfig(
        epoch_reward_amount=1_000,
        reward_percentage=100_000,
        number_of_tranches=4,
        number_of_blocks_between_tranches=100,
        remediation_window=50,
        maximum_slippage_percentage=5_000,
        number_of_top_participants=3,
        settlement_asset="VANA",
        reward_asset="DLPT",
    )


@pytest.fixture
def access_control():
    return AccessControl(admins=[ADMIN], grants={ORACLE_ROLE: [ORACLE], REWARD_DEPLOYER_ROLE: [DEPLOYER]})


@pytest.fixture
def orchestrator(registry, treasury, venue, clock, access_control, reward_config):
    """Orchestrator wired to the fakes, with snapshots and events disabled."""
    return RewardOrchestrator(
        participant_registry=registry,
        treasury=treasury,
        swap_venue=venue,
        clock=clock,
        access_control=access_control,
        config_registry=ConfigRegistry(reward_config),
        enable_snapshots=False,
        events_log_dir=None,
    )
