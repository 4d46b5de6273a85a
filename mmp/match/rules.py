"""Pairing rules for two-player matchmaking.

This module defines the rule configuration and the pure functions that
evaluate a candidate pair and scan a pool snapshot for the first acceptable
pair. It does NOT mutate any pool; :class:`mmp.match.pool.MatchmakingPool`
owns removal.

Acceptance rule:
- skill/region: ``|skill_a - skill_b| <= skill_tolerance`` and same location
- long wait: both players (or either, when ``both_must_wait_long`` is off)
  have waited at least ``long_wait_threshold`` seconds

Scan order is ``i`` ascending then ``j`` ascending over the pool's arrival
order, so the earliest-arrived candidates win ties.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .models import Player, PairEvaluation, MatchReason
from ..config_types import MatchingConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PairingRules:
    skill_tolerance: float = 10
    long_wait_threshold: float = 30.0
    both_must_wait_long: bool = True

    def __post_init__(self):
        MatchingConfig(
            skill_tolerance=self.skill_tolerance,
            long_wait_threshold=self.long_wait_threshold,
            both_must_wait_long=self.both_must_wait_long,
        ).validate()

    @classmethod
    def from_config(cls, matching_config: MatchingConfig) -> PairingRules:
        return cls(
            skill_tolerance=matching_config.skill_tolerance,
            long_wait_threshold=matching_config.long_wait_threshold,
            both_must_wait_long=matching_config.both_must_wait_long,
        )

    def is_long_wait(self, wait: float) -> bool:
        return wait >= self.long_wait_threshold


def evaluate_pair(a: Player, b: Player, now: float, rules: PairingRules) -> PairEvaluation:
    """Evaluate one unordered pair at ``now``.

    Skill/region compatibility is checked first so a pair that qualifies on
    both grounds is reported as ``SKILL_REGION``.
    """
    skill_diff = abs(a.skill_level - b.skill_level)
    same_region = a.location == b.location
    wait_a = a.wait_time(now)
    wait_b = b.wait_time(now)
    long_a = rules.is_long_wait(wait_a)
    long_b = rules.is_long_wait(wait_b)

    if rules.both_must_wait_long:
        long_wait_ok = long_a and long_b
    else:
        long_wait_ok = long_a or long_b

    if skill_diff <= rules.skill_tolerance and same_region:
        reason = MatchReason.SKILL_REGION
    elif long_wait_ok:
        reason = MatchReason.LONG_WAIT
    else:
        reason = MatchReason.REJECTED

    return PairEvaluation(
        skill_diff=skill_diff,
        same_region=same_region,
        wait_a=wait_a,
        wait_b=wait_b,
        long_wait_a=long_a,
        long_wait_b=long_b,
        reason=reason,
    )


def scan_pairs(
    players: Sequence[Player],
    now: float,
    rules: PairingRules,
) -> Optional[Tuple[Player, Player, PairEvaluation]]:
    """Return the first accepted pair in scan order, or None.

    Pure function of (players, now, rules): O(n^2) comparisons, no state.
    """
    debug_logging = logger.isEnabledFor(logging.DEBUG)
    n = len(players)
    for i in range(n):
        a = players[i]
        for j in range(i + 1, n):
            b = players[j]
            evaluation = evaluate_pair(a, b, now, rules)
            if evaluation.accepted:
                return a, b, evaluation
            if debug_logging:
                logger.debug(
                    f"reject {a.id} vs {b.id}: diff={evaluation.skill_diff:g} "
                    f"same_region={evaluation.same_region} "
                    f"waits=({evaluation.wait_a:.1f}s, {evaluation.wait_b:.1f}s)"
                )
    return None


__all__ = ["PairingRules", "evaluate_pair", "scan_pairs"]
