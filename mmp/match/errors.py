"""Exceptions raised by the matchmaking pool."""


class MatchmakingError(Exception):
    """Base class for pool contract violations."""


class DuplicatePlayerError(MatchmakingError, ValueError):
    """A player id was admitted while an earlier admission is still waiting."""

    def __init__(self, player_id: str):
        super().__init__(f"Player {player_id!r} is already waiting in the pool")
        self.player_id = player_id


class PlayerNotFoundError(MatchmakingError, KeyError):
    """A lookup or strict withdrawal named an id that is not waiting."""

    def __init__(self, player_id: str):
        super().__init__(player_id)
        self.player_id = player_id

    def __str__(self) -> str:
        return f"Player {self.player_id!r} is not waiting in the pool"


__all__ = ["MatchmakingError", "DuplicatePlayerError", "PlayerNotFoundError"]
