from __future__ import annotations
from typing import Any, Dict
import click

from ..config import load_typed_config
from ..config_types import MatchingConfig
from ..match.rules import PairingRules
from ..version import __version__


def build_overrides(
    log_level: str | None,
    skill_tolerance: float | None,
    long_wait: float | None,
    both_wait_long: bool | None,
) -> Dict[str, Any]:
    """Translate root CLI flags into a config override dict."""
    overrides: Dict[str, Any] = {}
    if log_level is not None:
        overrides['log_level'] = log_level
    matching: Dict[str, Any] = {}
    if skill_tolerance is not None:
        matching['skill_tolerance'] = skill_tolerance
    if long_wait is not None:
        matching['long_wait_threshold'] = long_wait
    if both_wait_long is not None:
        matching['both_must_wait_long'] = both_wait_long
    if matching:
        overrides['matching'] = matching
    return overrides


def get_rules(cfg: Dict[str, Any]) -> PairingRules:
    """Build pairing rules from the config dict stored on the click context."""
    return PairingRules.from_config(MatchingConfig(**cfg.get('matching', {})))


@click.group()
@click.version_option(version=__version__, prog_name="pair-matchmaker")
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default=None, help='Logging level (overrides config)')
@click.option('--skill-tolerance', type=float, default=None, help='Max skill difference for same-region pairs')
@click.option('--long-wait', type=float, default=None, help='Seconds after which a player counts as long-waiting')
@click.option('--both-wait-long/--any-wait-long', default=None,
              help='Require both players (default) or either player to be long-waiting')
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, skill_tolerance: float | None,
        long_wait: float | None, both_wait_long: bool | None):
    """Two-player matchmaking pool: pair waiting players by skill, region and wait time.

    \b
    TYPICAL WORKFLOWS:

    \b
    Inspect settings:
      mmp config                     # Effective configuration (JSON)

    \b
    One-shot pairing:
      mmp pair pool.csv --at 31      # Pair a waiting pool at time 31s

    \b
    Replay arrivals:
      mmp simulate arrivals.csv      # Deterministic simulated run

    \b
    Live loop:
      mmp run < commands.txt         # arrive/withdraw commands on stdin

    \b
    Environment: MMP__MATCHING__SKILL_TOLERANCE=15 etc. (also read from .env)
    """
    if isinstance(ctx.obj, dict):
        return
    overrides = build_overrides(log_level, skill_tolerance, long_wait, both_wait_long)
    try:
        ctx.obj = load_typed_config(overrides).to_dict()
    except (TypeError, ValueError) as e:
        raise click.UsageError(f"Invalid configuration: {e}")


__all__ = ["cli", "get_rules", "build_overrides"]
