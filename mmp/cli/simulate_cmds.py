"""Simulation command."""

from __future__ import annotations
import json as _json
from pathlib import Path

import click

from .helpers import cli, get_rules
from ..services.simulation_service import load_script, run_simulation
from ..utils.logging_helpers import format_match


@cli.command()
@click.argument('script_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--tick', type=float, default=None, help='Simulated retry delay in seconds (default: driver.simulation_tick)')
@click.option('--until', type=float, default=None, help='Stop at this simulated time (default: last arrival + long wait)')
@click.option('--json', 'as_json', is_flag=True, help='Print results as JSON')
@click.pass_context
def simulate(ctx: click.Context, script_file: Path, tick: float | None, until: float | None, as_json: bool):
    """Replay an arrival script in simulated time.

    SCRIPT_FILE is a CSV with columns id,skill,location,arrive_at and an
    optional withdraw_at. The run is deterministic: the same script and
    settings always produce the same matches.
    """
    cfg = ctx.obj
    if tick is None:
        tick = float(cfg.get('driver', {}).get('simulation_tick', 1.0))
    if tick <= 0:
        raise click.BadParameter("must be > 0", param_hint='--tick')

    try:
        events = load_script(script_file)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='SCRIPT_FILE')

    result = run_simulation(events, get_rules(cfg), tick=tick, until=until)

    if as_json:
        click.echo(_json.dumps(result.to_dict(), indent=2))
        return

    click.echo(click.style(f"=== Simulating {script_file.name} (tick={tick:g}s) ===", fg='cyan', bold=True))
    for match in result.matches:
        click.echo(format_match(match))
    for player_id in result.rejected:
        click.echo(click.style(f"⚠ Duplicate arrival ignored: {player_id}", fg='yellow'))
    summary = f"{len(result.matches)} match(es), {len(result.waiting)} still waiting"
    if result.withdrawn:
        summary += f", {len(result.withdrawn)} withdrawn"
    click.echo(f"{summary} at t={result.ended_at:g}s ({result.iterations} iterations)")
    if result.waiting:
        click.echo("Waiting: " + ", ".join(p.id for p in result.waiting))


__all__ = ["simulate"]
