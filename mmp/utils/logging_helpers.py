"""Logging helper utilities for consistent match and pool reporting."""

import logging
import click

from ..match.models import Match, MatchReason, PoolStats

logger = logging.getLogger(__name__)

_REASON_COLORS = {
    MatchReason.SKILL_REGION: 'green',
    MatchReason.LONG_WAIT: 'yellow',
}


def format_match(match: Match) -> str:
    """Format one match as a single coloured line.

    Example:
        ✓ A + B @ 1.0s [skill_region] diff=5 waits=1.0s/1.0s
    """
    ev = match.evaluation
    reason = click.style(f"[{match.reason.value}]", fg=_REASON_COLORS.get(match.reason, 'white'))
    pair = click.style(f"{match.player_a.id} + {match.player_b.id}", fg='cyan')
    return (
        f"{click.style('✓', fg='green')} {pair} @ {match.matched_at:g}s {reason} "
        f"diff={ev.skill_diff:g} waits={ev.wait_a:.1f}s/{ev.wait_b:.1f}s"
    )


def format_pool_status(stats: PoolStats, item_name: str = "players") -> str:
    """Format a pool summary line with coloured counts."""
    parts = [f"{click.style(str(stats.size), fg='cyan')} {item_name} waiting"]
    if stats.size:
        parts.append(f"avg wait {stats.avg_wait:.1f}s")
        parts.append(f"max wait {stats.max_wait:.1f}s")
    if stats.long_waiters:
        parts.append(click.style(f"{stats.long_waiters} long-waiting", fg='yellow'))
    if stats.by_region:
        regions = ", ".join(f"{region}={count}" for region, count in sorted(stats.by_region.items()))
        parts.append(regions)
    return " | ".join(parts)


def log_pool_status(stats: PoolStats) -> None:
    logger.info(format_pool_status(stats))


__all__ = ["format_match", "format_pool_status", "log_pool_status"]
