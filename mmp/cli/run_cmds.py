"""Live matchmaking loop command."""

from __future__ import annotations
import json as _json
import logging
import time
from pathlib import Path

import click

from .helpers import cli
from ..match.models import Match, Player, PoolSnapshot
from ..services.matchmaking_service import build_service
from ..utils.logging_helpers import format_match, format_pool_status

logger = logging.getLogger(__name__)


def parse_command(line: str):
    """Parse one stdin command line.

    Returns:
        ('arrive', Player) | ('withdraw', id) | ('wait', seconds) | None for blank/comment lines

    Raises:
        ValueError: On unknown verbs or malformed arguments
    """
    parts = line.split('#', 1)[0].split()
    if not parts:
        return None
    verb, args = parts[0].lower(), parts[1:]
    if verb == 'arrive':
        if len(args) != 3:
            raise ValueError("usage: arrive ID SKILL LOCATION")
        return 'arrive', Player(id=args[0], skill_level=float(args[1]), location=args[2])
    if verb == 'withdraw':
        if len(args) != 1:
            raise ValueError("usage: withdraw ID")
        return 'withdraw', args[0]
    if verb == 'wait':
        if len(args) != 1:
            raise ValueError("usage: wait SECONDS")
        return 'wait', float(args[0])
    raise ValueError(f"unknown command '{verb}'")


@cli.command(name="run")
@click.option('--retry-delay', type=float, default=None, help='Seconds between re-scans (default: driver.retry_delay)')
@click.option('--linger', type=float, default=0.0, help='Keep matching for N seconds after input ends')
@click.option('--checkpoint-file', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Write the pool snapshot here at every continue-as-new checkpoint')
@click.pass_context
def run(ctx: click.Context, retry_delay: float | None, linger: float, checkpoint_file: Path | None):
    """Run the matchmaking loop on commands read from stdin.

    \b
    Commands (one per line, '#' starts a comment):
      arrive ID SKILL LOCATION
      withdraw ID
      wait SECONDS
    """
    cfg = ctx.obj

    def on_match(match: Match) -> None:
        click.echo(format_match(match))

    def on_checkpoint(snapshot: PoolSnapshot) -> None:
        if checkpoint_file is not None:
            checkpoint_file.write_text(_json.dumps(snapshot.to_dict(), indent=2), encoding='utf-8')
            logger.debug(f"checkpoint written: {checkpoint_file} ({len(snapshot)} player(s))")

    service = build_service(cfg, on_match, on_checkpoint=on_checkpoint)
    if retry_delay is not None:
        if retry_delay <= 0:
            raise click.BadParameter("must be > 0", param_hint='--retry-delay')
        service.retry_delay = retry_delay

    click.echo(click.style("=== Matchmaking loop (Ctrl+C to stop) ===", fg='cyan', bold=True))
    stdin = click.get_text_stream('stdin')
    with service:
        try:
            for lineno, line in enumerate(stdin, start=1):
                try:
                    command = parse_command(line)
                except ValueError as e:
                    click.echo(click.style(f"⚠ line {lineno}: {e}", fg='yellow'), err=True)
                    continue
                if command is None:
                    continue
                verb, arg = command
                if verb == 'arrive':
                    service.submit_arrival(arg)
                elif verb == 'withdraw':
                    service.submit_withdrawal(arg)
                else:
                    time.sleep(arg)
            if linger > 0:
                time.sleep(linger)
        except KeyboardInterrupt:
            click.echo("")

    click.echo(format_pool_status(service.pool.stats(service.clock.now())))


__all__ = ["run", "parse_command"]
