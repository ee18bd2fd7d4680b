"""
Player state and roster setup.
"""

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_TOKENS = ["car", "dog", "hat", "ship", "boot", "thimble", "iron", "wheelbarrow"]


@dataclass
class JailStatus:
    """Jail flag plus the number of failed doubles attempts (0-2)."""

    in_jail: bool = False
    turns_in_jail: int = 0


@dataclass
class Player:
    """Represents the complete state of a player in the game."""

    id: str
    name: str
    token: str
    cash: int
    position: int = 0
    properties: List[int] = field(default_factory=list)
    jail_status: JailStatus = field(default_factory=JailStatus)
    is_active: bool = True
    is_bankrupt: bool = False
    get_out_of_jail_free_cards: int = 0
    consecutive_doubles: int = 0

    @property
    def in_jail(self) -> bool:
        return self.jail_status.in_jail

    @property
    def is_in_game(self) -> bool:
        """Active and not bankrupt."""
        return self.is_active and not self.is_bankrupt

    def __repr__(self) -> str:
        return (
            f"Player(id='{self.id}', name='{self.name}', "
            f"cash={self.cash}, position={self.position}, bankrupt={self.is_bankrupt})"
        )


@dataclass
class PlayerSetup:
    """Roster entry handed to the initializer by the lobby."""

    id: str
    name: str
    token: Optional[str] = None
