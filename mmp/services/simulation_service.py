"""Simulation service: replay scripted arrivals against a pool in simulated time.

The simulation mirrors the driver loop without threads: it wakes either at
the next scripted event or when the retry timer (``tick``) fires, whichever
comes first, applies due events and drains matches. Time comes from a
:class:`ManualClock`, so a run is fully deterministic.

Script CSV format (header required):
    id,skill,location,arrive_at[,withdraw_at]
"""

from __future__ import annotations
import csv
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..match.clock import ManualClock
from ..match.errors import DuplicatePlayerError
from ..match.models import Match, Player
from ..match.pool import MatchmakingPool
from ..match.rules import PairingRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Arrival:
    at: float
    player: Player


@dataclass(frozen=True)
class Withdrawal:
    at: float
    player_id: str


ScriptEvent = Union[Arrival, Withdrawal]


@dataclass
class SimulationResult:
    """Results from a simulation run."""
    matches: List[Match] = field(default_factory=list)
    waiting: List[Player] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    withdrawn: List[str] = field(default_factory=list)
    iterations: int = 0
    ended_at: float = 0.0
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matches": [m.to_dict() for m in self.matches],
            "waiting": [p.to_dict() for p in self.waiting],
            "rejected": list(self.rejected),
            "withdrawn": list(self.withdrawn),
            "iterations": self.iterations,
            "ended_at": self.ended_at,
        }


def run_simulation(
    events: Iterable[ScriptEvent],
    rules: PairingRules,
    tick: float = 1.0,
    until: Optional[float] = None,
) -> SimulationResult:
    """Run a scripted simulation.

    Args:
        events: Arrivals and withdrawals; equal times keep script order
        rules: Pairing rules for the pool
        tick: Simulated retry delay in seconds
        until: Simulated end time. Defaults to the last event time plus the
            long-wait threshold, after which every remaining pair qualifies.

    Returns:
        SimulationResult with matches in emission order and leftovers
    """
    if tick <= 0:
        raise ValueError(f"tick must be > 0 (got {tick})")

    # sorted() is stable, so same-time events keep script order
    script = sorted(events, key=lambda e: e.at)
    result = SimulationResult()
    if not script:
        return result

    start = time.time()
    horizon = until if until is not None else script[-1].at + rules.long_wait_threshold
    clock = ManualClock(script[0].at)
    pool = MatchmakingPool(rules)
    idx = 0
    next_tick = clock.now()

    while True:
        next_event_at = script[idx].at if idx < len(script) else None
        if next_event_at is not None and next_event_at <= next_tick:
            now = next_event_at
        else:
            now = next_tick
        if now > horizon:
            break
        clock.set(now)

        while idx < len(script) and script[idx].at <= now:
            _apply(pool, script[idx], now, result)
            idx += 1

        for match in pool.drain_matches(now):
            result.matches.append(match)
            logger.debug(f"t={now:g} matched {match.player_a.id} + {match.player_b.id} ({match.reason.value})")

        result.iterations += 1
        next_tick = now + tick
        if now < horizon < next_tick:
            next_tick = horizon

    result.waiting = pool.players()
    result.ended_at = clock.now()
    result.duration_seconds = time.time() - start
    logger.debug(
        f"Simulation done: {len(result.matches)} matches, {len(result.waiting)} waiting, "
        f"{result.iterations} iterations"
    )
    return result


def _apply(pool: MatchmakingPool, event: ScriptEvent, now: float, result: SimulationResult) -> None:
    if isinstance(event, Arrival):
        try:
            pool.admit(event.player, now)
        except DuplicatePlayerError as e:
            logger.warning(f"t={now:g} dropped arrival: {e}")
            result.rejected.append(event.player.id)
    elif pool.withdraw(event.player_id):
        result.withdrawn.append(event.player_id)


def _require(row: Dict[str, str], column: str, line: int) -> str:
    value = (row.get(column) or "").strip()
    if not value:
        raise ValueError(f"line {line}: missing '{column}'")
    return value


def _number(row: Dict[str, str], column: str, line: int) -> float:
    value = _require(row, column, line)
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"line {line}: '{column}' is not a number: {value!r}") from None


def load_script(path: Path) -> List[ScriptEvent]:
    """Load arrivals (and optional withdrawals) from a CSV script.

    Raises:
        ValueError: On missing columns or non-numeric values, or a withdrawal
            scheduled before its arrival
    """
    events: List[ScriptEvent] = []
    with path.open(newline='', encoding='utf-8') as fh:
        reader = csv.DictReader(fh)
        for line, row in enumerate(reader, start=2):
            player = Player(
                id=_require(row, 'id', line),
                skill_level=_number(row, 'skill', line),
                location=_require(row, 'location', line),
            )
            arrive_at = _number(row, 'arrive_at', line)
            events.append(Arrival(arrive_at, player))
            if (row.get('withdraw_at') or "").strip():
                withdraw_at = _number(row, 'withdraw_at', line)
                if withdraw_at < arrive_at:
                    raise ValueError(
                        f"line {line}: withdraw_at ({withdraw_at}) is before arrive_at ({arrive_at})"
                    )
                events.append(Withdrawal(withdraw_at, player.id))
    return events


def load_pool(path: Path) -> List[Player]:
    """Load already-waiting players (CSV: id,skill,location,joined_at).

    Raises:
        ValueError: On missing columns or non-numeric values
    """
    players: List[Player] = []
    with path.open(newline='', encoding='utf-8') as fh:
        reader = csv.DictReader(fh)
        for line, row in enumerate(reader, start=2):
            players.append(Player(
                id=_require(row, 'id', line),
                skill_level=_number(row, 'skill', line),
                location=_require(row, 'location', line),
                joined_at=_number(row, 'joined_at', line),
            ))
    return players


__all__ = [
    "Arrival",
    "Withdrawal",
    "SimulationResult",
    "run_simulation",
    "load_script",
    "load_pool",
]
