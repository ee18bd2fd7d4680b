"""
Game configuration settings.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass
class GameSettings:
    """Rules settings for a single game. Persisted with the game state."""

    max_players: int = 6
    starting_cash: int = 1500
    turn_time_limit: int = 60
    free_parking: str = "classic"
    auction_enabled: bool = True

    go_salary: int = 200
    jail_fine: int = 50
    jail_position: int = 10
    max_jail_turns: int = 3

    house_limit: int = 32
    hotel_limit: int = 12

    mortgage_interest_rate: float = 0.10

    @classmethod
    def with_overrides(cls, overrides: Optional[Dict[str, Any]] = None) -> "GameSettings":
        """Build settings from defaults plus a partial override mapping."""
        if not overrides:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown game settings: {sorted(unknown)}")
        return cls(**overrides)


MIN_PLAYERS = 2
BOARD_SIZE = 40
GO_TO_JAIL_POSITION = 30
