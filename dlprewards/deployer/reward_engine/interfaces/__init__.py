"""Collaborator interfaces for the reward distribution engine."""

from .participant_registry import ParticipantRegistry
from .treasury import Treasury
from .swap_venue import SwapVenue, SwapResult, PriceSource
from .chain_clock import ChainClock
from .rating_aggregator import RatingAggregator

__all__ = [
    "ParticipantRegistry",
    "Treasury",
    "SwapVenue",
    "SwapResult",
    "PriceSource",
    "ChainClock",
    "RatingAggregator",
]
