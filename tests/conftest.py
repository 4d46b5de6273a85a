"""Pytest fixtures for test configuration.

Config loading already skips .env files while PYTEST_CURRENT_TEST is set.
"""
import pytest
from pathlib import Path
from typing import Dict, Any, Callable

from mmp.match import ManualClock, MatchmakingPool, PairingRules, Player


@pytest.fixture
def rules() -> PairingRules:
    """Default rules: tolerance 10, long wait 30s, both must wait long."""
    return PairingRules(skill_tolerance=10, long_wait_threshold=30.0, both_must_wait_long=True)


@pytest.fixture
def pool(rules: PairingRules) -> MatchmakingPool:
    return MatchmakingPool(rules)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(0.0)


@pytest.fixture
def make_player() -> Callable[..., Player]:
    """Factory for admission requests: make_player('A', 50, 'NA')."""
    def _make(player_id: str, skill: float = 50, location: str = "NA") -> Player:
        return Player(id=player_id, skill_level=skill, location=location)
    return _make


@pytest.fixture
def test_config() -> Dict[str, Any]:
    """Provide a minimal test configuration as a dict.

    Tests should pass this dict to the CLI via ``obj=`` or to services
    directly rather than setting environment variables.
    """
    return {
        'log_level': 'DEBUG',
        'matching': {
            'skill_tolerance': 10,
            'long_wait_threshold': 30.0,
            'both_must_wait_long': True,
        },
        'driver': {
            'retry_delay': 0.01,
            'continue_as_new_after': 1000,
            'simulation_tick': 1.0,
        },
    }


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write CSV text to tmp_path/<name> and return the path."""
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding='utf-8')
        return path
    return _write
