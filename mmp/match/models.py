"""Value records shared by the pool, the driver and the CLI."""

from __future__ import annotations
from dataclasses import dataclass, field, replace, asdict
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class MatchReason(str, Enum):
    SKILL_REGION = "skill_region"
    LONG_WAIT = "long_wait"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Player:
    """A player waiting for (or requesting) a match.

    ``joined_at`` is None on an admission request and is stamped exactly once
    by :meth:`MatchmakingPool.admit`. Wait time is always derived from it.
    """
    id: str
    skill_level: float
    location: str
    joined_at: Optional[float] = None

    def stamped(self, now: float) -> Player:
        return replace(self, joined_at=now)

    def wait_time(self, now: float) -> float:
        if self.joined_at is None:
            raise ValueError(f"Player {self.id!r} has not been admitted")
        return now - self.joined_at

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Player:
        joined_at = data.get("joined_at")
        return cls(
            id=str(data["id"]),
            skill_level=float(data["skill_level"]),
            location=str(data["location"]),
            joined_at=float(joined_at) if joined_at is not None else None,
        )


@dataclass(frozen=True)
class PairEvaluation:
    """Transparent breakdown of one pair check (for diagnostics and tests)."""
    skill_diff: float
    same_region: bool
    wait_a: float
    wait_b: float
    long_wait_a: bool
    long_wait_b: bool
    reason: MatchReason

    @property
    def accepted(self) -> bool:
        return self.reason != MatchReason.REJECTED


@dataclass(frozen=True)
class Match:
    """Two distinct players paired at the same evaluation instant."""
    player_a: Player
    player_b: Player
    matched_at: float
    evaluation: PairEvaluation

    @property
    def reason(self) -> MatchReason:
        return self.evaluation.reason

    @property
    def player_ids(self) -> Tuple[str, str]:
        return (self.player_a.id, self.player_b.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "players": list(self.player_ids),
            "matched_at": self.matched_at,
            "reason": self.reason.value,
            "skill_diff": self.evaluation.skill_diff,
            "waits": [self.evaluation.wait_a, self.evaluation.wait_b],
        }


@dataclass(frozen=True)
class PoolSnapshot:
    """Immutable, ordered copy of the pool contents.

    Used both as the input of a pairing scan and as the state carried over
    when the driver continues as new.
    """
    players: Tuple[Player, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, players: Iterable[Player]) -> PoolSnapshot:
        return cls(tuple(players))

    def __len__(self) -> int:
        return len(self.players)

    def to_dict(self) -> Dict[str, Any]:
        return {"players": [p.to_dict() for p in self.players]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PoolSnapshot:
        return cls.of(Player.from_dict(p) for p in data.get("players", []))


@dataclass(frozen=True)
class PoolStats:
    size: int
    avg_wait: float
    max_wait: float
    long_waiters: int
    by_region: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "MatchReason",
    "Player",
    "PairEvaluation",
    "Match",
    "PoolSnapshot",
    "PoolStats",
]
