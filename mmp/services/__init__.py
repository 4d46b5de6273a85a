"""Service layer for pair-matchmaker.

This package contains orchestration logic around the pool, keeping CLI
commands focused on input parsing and output formatting.

Services handle:
- The live matchmaking loop (arrivals, retries, checkpoints)
- Deterministic simulated replays of arrival scripts
"""

from .matchmaking_service import MatchmakingService, build_service
from .simulation_service import (
    Arrival,
    Withdrawal,
    SimulationResult,
    run_simulation,
    load_script,
    load_pool,
)

__all__ = [
    'MatchmakingService',
    'build_service',
    'Arrival',
    'Withdrawal',
    'SimulationResult',
    'run_simulation',
    'load_script',
    'load_pool',
]
