"""
Reward distribution engine for the DLP reward deployer.

Ranks participants from stake and performance, splits each epoch's budget
into per-participant entitlements and releases them in slippage-protected
tranches.
"""

from .orchestrator import RewardOrchestrator

__all__ = [
    "RewardOrchestrator",
]

__version__ = "1.0.0"
