"""Core CLI module - registers every command with the root group.

Command modules are organized by functionality:
- config_cmds: Configuration display
- pair_cmds: One-shot pairing of a waiting pool
- simulate_cmds: Deterministic replay of an arrival script
- run_cmds: Live matchmaking loop fed from stdin
"""

from __future__ import annotations

from .helpers import cli  # noqa: F401

from . import config_cmds  # noqa: F401
from . import pair_cmds  # noqa: F401
from . import simulate_cmds  # noqa: F401
from . import run_cmds  # noqa: F401
