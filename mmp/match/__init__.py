"""Matching package exposing the pool and pairing-rule primitives."""

from .errors import MatchmakingError, DuplicatePlayerError, PlayerNotFoundError
from .models import MatchReason, Player, PairEvaluation, Match, PoolSnapshot, PoolStats
from .rules import PairingRules, evaluate_pair, scan_pairs
from .pool import MatchmakingPool
from .clock import SystemClock, ManualClock

__all__ = [
    "MatchmakingError",
    "DuplicatePlayerError",
    "PlayerNotFoundError",
    "MatchReason",
    "Player",
    "PairEvaluation",
    "Match",
    "PoolSnapshot",
    "PoolStats",
    "PairingRules",
    "evaluate_pair",
    "scan_pairs",
    "MatchmakingPool",
    "SystemClock",
    "ManualClock",
]
