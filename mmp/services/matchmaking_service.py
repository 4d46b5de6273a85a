"""Matchmaking service: drive a pool with arrivals, retries and checkpoints.

This service owns the long-running loop around a :class:`MatchmakingPool`.
Arrivals and withdrawals are submitted from any thread onto one command
queue; the loop thread is the only writer to the pool. A single blocking
``queue.get(timeout=retry_delay)`` serves both as the arrival notification
and as the retry timer.

Every ``continue_as_new_after`` iterations the loop snapshots the pool,
hands the snapshot to ``on_checkpoint`` and rebuilds the pool from it, so
long-lived state is carried forward while per-run history is dropped.
"""

from __future__ import annotations
import logging
import queue
from threading import Event, Thread
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from ..config_types import AppConfig
from ..match.clock import SystemClock
from ..match.errors import DuplicatePlayerError
from ..match.models import Match, Player, PoolSnapshot
from ..match.pool import MatchmakingPool
from ..match.rules import PairingRules
from ..utils.logging_helpers import log_pool_status

logger = logging.getLogger(__name__)

_ARRIVE = "arrive"
_WITHDRAW = "withdraw"
_WAKE = "wake"


class _Command(NamedTuple):
    kind: str
    payload: Any = None


class MatchmakingService:
    """Serialized driver loop around one pool instance."""

    def __init__(
        self,
        pool: MatchmakingPool,
        on_match: Callable[[Match], None],
        clock=None,
        retry_delay: float = 1.0,
        continue_as_new_after: int = 1000,
        on_checkpoint: Callable[[PoolSnapshot], None] | None = None,
    ):
        """Initialize the service.

        Args:
            pool: Pool to drive; the service becomes its only writer
            on_match: Sink for every emitted match
            clock: Object with ``now()`` (default: SystemClock)
            retry_delay: Seconds to wait for a command before re-scanning
            continue_as_new_after: Iterations between checkpoints (0 disables)
            on_checkpoint: Optional callback receiving each checkpoint snapshot
        """
        if retry_delay <= 0:
            raise ValueError(f"retry_delay must be > 0 (got {retry_delay})")
        if continue_as_new_after < 0:
            raise ValueError(f"continue_as_new_after must be >= 0 (got {continue_as_new_after})")
        self.pool = pool
        self.on_match = on_match
        self.clock = clock or SystemClock()
        self.retry_delay = retry_delay
        self.continue_as_new_after = continue_as_new_after
        self.on_checkpoint = on_checkpoint

        self.iterations = 0
        self.generation = 0
        self.matches_emitted = 0
        self._commands: "queue.Queue[_Command]" = queue.Queue()
        self._stop = Event()
        self._thread: Thread | None = None

    # --- inbound -----------------------------------------------------------

    def submit_arrival(self, player: Player) -> None:
        """Queue an admission request; safe to call from any thread."""
        self._commands.put(_Command(_ARRIVE, player))

    def submit_withdrawal(self, player_id: str) -> None:
        """Queue a withdrawal; safe to call from any thread."""
        self._commands.put(_Command(_WITHDRAW, player_id))

    # --- loop --------------------------------------------------------------

    def step(self, timeout: float = 0.0) -> List[Match]:
        """Run one iteration: wait, apply commands, then drain matches.

        Args:
            timeout: Max seconds to block for the first command (0 = poll)

        Returns:
            Matches emitted during this iteration
        """
        for command in self._collect(timeout):
            self._apply(command)

        now = self.clock.now()
        matches = self.pool.drain_matches(now)
        for match in matches:
            self._emit(match)

        self.iterations += 1
        if self.continue_as_new_after and self.iterations >= self.continue_as_new_after:
            self.continue_as_new()
        return matches

    def run(self, stop_event: Event | None = None) -> None:
        """Loop until ``stop_event`` (or :meth:`stop`) is set."""
        stop_event = stop_event or self._stop
        logger.info(
            f"Matchmaking loop started (retry={self.retry_delay}s, "
            f"checkpoint every {self.continue_as_new_after} iterations)"
        )
        while not stop_event.is_set() and not self._stop.is_set():
            self.step(self.retry_delay)
        # Apply commands queued before the stop request
        self.step(0.0)
        logger.info(f"Matchmaking loop stopped ({self.matches_emitted} matches, {len(self.pool)} waiting)")

    def continue_as_new(self) -> PoolSnapshot:
        """Checkpoint the pool and restart the loop from that state."""
        snapshot = self.pool.snapshot()
        log_pool_status(self.pool.stats(self.clock.now()))
        if self.on_checkpoint is not None:
            self.on_checkpoint(snapshot)
        self.pool = MatchmakingPool.from_snapshot(snapshot, self.pool.rules)
        self.generation += 1
        self.iterations = 0
        logger.debug(f"continued as new: generation={self.generation} carried={len(snapshot)} player(s)")
        return snapshot

    # --- thread management -------------------------------------------------

    def start(self) -> None:
        """Run the loop in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Matchmaking loop already running")
            return
        self._stop.clear()
        self._thread = Thread(target=self.run, name="matchmaking-loop", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop to stop, wake it and wait for the thread."""
        self._stop.set()
        self._commands.put(_Command(_WAKE))
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Matchmaking loop did not stop within {timeout}s")
            else:
                self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> MatchmakingService:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # --- internals ---------------------------------------------------------

    def _collect(self, timeout: float) -> List[_Command]:
        commands: List[_Command] = []
        try:
            if timeout > 0:
                commands.append(self._commands.get(timeout=timeout))
            else:
                commands.append(self._commands.get_nowait())
        except queue.Empty:
            return commands
        while True:
            try:
                commands.append(self._commands.get_nowait())
            except queue.Empty:
                return commands

    def _apply(self, command: _Command) -> None:
        if command.kind == _ARRIVE:
            try:
                self.pool.admit(command.payload, self.clock.now())
            except DuplicatePlayerError as e:
                logger.warning(f"Dropped arrival: {e}")
        elif command.kind == _WITHDRAW:
            self.pool.withdraw(command.payload)

    def _emit(self, match: Match) -> None:
        self.matches_emitted += 1
        logger.debug(f"emit {match.player_a.id} + {match.player_b.id} ({match.reason.value})")
        try:
            self.on_match(match)
        except Exception as e:
            logger.error(f"Match sink failed for {match.player_ids}: {e}", exc_info=True)


def build_service(
    config: Dict[str, Any],
    on_match: Callable[[Match], None],
    clock=None,
    on_checkpoint: Optional[Callable[[PoolSnapshot], None]] = None,
) -> MatchmakingService:
    """Create a pool and service from a config dict (see mmp.config)."""
    typed = AppConfig.from_dict(config)
    typed.matching.validate()
    typed.driver.validate()
    driver_config = typed.driver
    pool = MatchmakingPool(PairingRules.from_config(typed.matching))
    return MatchmakingService(
        pool,
        on_match,
        clock=clock,
        retry_delay=driver_config.retry_delay,
        continue_as_new_after=driver_config.continue_as_new_after,
        on_checkpoint=on_checkpoint,
    )


__all__ = ["MatchmakingService", "build_service"]
