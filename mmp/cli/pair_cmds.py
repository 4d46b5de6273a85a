"""One-shot pairing command."""

from __future__ import annotations
import json as _json
import logging
from pathlib import Path

import click

from .helpers import cli, get_rules
from ..match.errors import MatchmakingError
from ..match.pool import MatchmakingPool
from ..services.simulation_service import load_pool
from ..utils.logging_helpers import format_match, format_pool_status

logger = logging.getLogger(__name__)


@cli.command()
@click.argument('pool_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--at', 'at', type=float, required=True, help='Evaluation time in seconds (same scale as joined_at)')
@click.option('--json', 'as_json', is_flag=True, help='Print results as JSON')
@click.pass_context
def pair(ctx: click.Context, pool_file: Path, at: float, as_json: bool):
    """Pair every qualifying couple in a waiting pool at time --at.

    POOL_FILE is a CSV with columns id,skill,location,joined_at listed in
    arrival order. Matches are taken one at a time, earliest arrivals first,
    until no remaining pair qualifies.
    """
    try:
        players = load_pool(pool_file)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='POOL_FILE')

    pool = MatchmakingPool(get_rules(ctx.obj))
    try:
        for player in players:
            pool.admit(player, player.joined_at)
    except MatchmakingError as e:
        raise click.ClickException(str(e))

    matches = pool.drain_matches(at)

    if as_json:
        click.echo(_json.dumps({
            "matches": [m.to_dict() for m in matches],
            "waiting": [p.id for p in pool.players()],
        }, indent=2))
        return

    click.echo(click.style(f"=== Pairing {len(players)} player(s) at t={at:g}s ===", fg='cyan', bold=True))
    for match in matches:
        click.echo(format_match(match))
    if not matches:
        click.echo(click.style("⚠ No qualifying pair", fg='yellow'))
    click.echo(format_pool_status(pool.stats(at)))


__all__ = ["pair"]
