"""Matchmaking pool: the in-memory set of players awaiting a match.

The pool owns admission, withdrawal and atomic pair removal. Pair selection
itself is delegated to :func:`mmp.match.rules.scan_pairs`, which runs on an
immutable snapshot so that a scan never observes a half-removed pair.

Example usage:
    pool = MatchmakingPool(PairingRules(skill_tolerance=10))
    pool.admit(Player("A", 50, "NA"), now=0.0)
    pool.admit(Player("B", 55, "NA"), now=0.0)
    match = pool.find_match(now=1.0)   # -> Match(A, B)
"""

from __future__ import annotations
import logging
from threading import RLock
from typing import Dict, List, Optional

from .errors import DuplicatePlayerError, PlayerNotFoundError
from .models import Match, Player, PoolSnapshot, PoolStats
from .rules import PairingRules, scan_pairs

logger = logging.getLogger(__name__)


class MatchmakingPool:
    """Ordered pool of waiting players with a two-player pairing scan.

    Insertion order is preserved (dicts keep it) and drives the scan's
    tie-break. All mutation happens under one re-entrant lock per instance.
    """

    def __init__(self, rules: PairingRules | None = None):
        self.rules = rules or PairingRules()
        self._players: Dict[str, Player] = {}
        self._lock = RLock()

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot, rules: PairingRules | None = None) -> MatchmakingPool:
        """Rebuild a pool with the same players, order and join times.

        Raises:
            DuplicatePlayerError: If the snapshot repeats an id
            ValueError: If a snapshot player was never admitted
        """
        pool = cls(rules)
        for player in snapshot.players:
            if player.joined_at is None:
                raise ValueError(f"Snapshot player {player.id!r} has no joined_at")
            if player.id in pool._players:
                raise DuplicatePlayerError(player.id)
            pool._players[player.id] = player
        return pool

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        with self._lock:
            return player_id in self._players

    def players(self) -> List[Player]:
        """Waiting players in arrival order."""
        with self._lock:
            return list(self._players.values())

    def snapshot(self) -> PoolSnapshot:
        with self._lock:
            return PoolSnapshot.of(self._players.values())

    def admit(self, player: Player, now: float) -> Player:
        """Stamp ``joined_at = now`` and append the player in arrival order.

        Args:
            player: Admission request (any existing joined_at is replaced)
            now: Current timestamp

        Returns:
            The stamped Player as stored in the pool

        Raises:
            DuplicatePlayerError: If the id is already waiting
        """
        stamped = player.stamped(now)
        with self._lock:
            if stamped.id in self._players:
                raise DuplicatePlayerError(stamped.id)
            self._players[stamped.id] = stamped
            size = len(self._players)
        logger.debug(f"admitted {stamped.id} (skill={stamped.skill_level:g}, loc={stamped.location}) pool={size}")
        return stamped

    def withdraw(self, player_id: str, strict: bool = False) -> bool:
        """Remove a waiting player.

        Unknown ids, including players matched a moment ago, are a no-op
        returning False unless ``strict`` is set.

        Raises:
            PlayerNotFoundError: Only when ``strict`` and the id is not waiting
        """
        with self._lock:
            removed = self._players.pop(player_id, None)
        if removed is None:
            if strict:
                raise PlayerNotFoundError(player_id)
            logger.debug(f"withdraw ignored for {player_id} (not waiting)")
            return False
        logger.debug(f"withdrew {player_id}")
        return True

    def peek_match(self, now: float) -> Optional[Match]:
        """Find the first acceptable pair without removing it."""
        return self._scan(self.snapshot(), now)

    def find_match(self, now: float) -> Optional[Match]:
        """Find the first acceptable pair and remove both players atomically.

        The scan runs against a snapshot outside the lock. The commit step
        removes both players only if both are still the same waiting
        entries; otherwise the match is discarded and None is returned, and
        the caller retries on its next tick.
        """
        match = self._scan(self.snapshot(), now)
        if match is None:
            return None

        a, b = match.player_a, match.player_b
        with self._lock:
            if self._players.get(a.id) is not a or self._players.get(b.id) is not b:
                logger.info(f"Discarded match {a.id} + {b.id}: a player left during the scan")
                return None
            del self._players[a.id]
            del self._players[b.id]
        logger.debug(f"matched {a.id} + {b.id} ({match.reason.value})")
        return match

    def drain_matches(self, now: float) -> List[Match]:
        """Call :meth:`find_match` until no pair qualifies."""
        matches: List[Match] = []
        while True:
            match = self.find_match(now)
            if match is None:
                return matches
            matches.append(match)

    def wait_time(self, player_id: str, now: float) -> float:
        with self._lock:
            player = self._players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player.wait_time(now)

    def stats(self, now: float) -> PoolStats:
        players = self.snapshot().players
        waits = [p.wait_time(now) for p in players]
        by_region: Dict[str, int] = {}
        for p in players:
            by_region[p.location] = by_region.get(p.location, 0) + 1
        return PoolStats(
            size=len(players),
            avg_wait=(sum(waits) / len(waits)) if waits else 0.0,
            max_wait=max(waits) if waits else 0.0,
            long_waiters=sum(1 for w in waits if self.rules.is_long_wait(w)),
            by_region=by_region,
        )

    def _scan(self, snapshot: PoolSnapshot, now: float) -> Optional[Match]:
        found = scan_pairs(snapshot.players, now, self.rules)
        if found is None:
            return None
        a, b, evaluation = found
        return Match(player_a=a, player_b=b, matched_at=now, evaluation=evaluation)


__all__ = ["MatchmakingPool"]
