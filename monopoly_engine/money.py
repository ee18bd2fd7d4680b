"""
Money transfers, building supply and per-property mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from monopoly_engine.exceptions import BuildRuleError, InsufficientFundsError

if TYPE_CHECKING:
    from monopoly_engine.player import Player

HOTEL = 5


@dataclass
class PropertyStateEntry:
    """Buildings (5 means hotel) and mortgage flag of one property."""

    houses: int = 0
    mortgaged: bool = False

    @property
    def has_hotel(self) -> bool:
        return self.houses == HOTEL


@dataclass
class BuildingSupply:
    """
    The bank's pool of houses and hotels.

    Money is unlimited but buildings are not. Houses on the board plus
    houses in the pool always add up to the configured limit.
    """

    houses: int = 32
    hotels: int = 12

    def can_buy_houses(self, count: int = 1) -> bool:
        return self.houses >= count

    def can_buy_hotel(self) -> bool:
        return self.hotels > 0

    def buy_house(self) -> None:
        if not self.can_buy_houses(1):
            raise BuildRuleError("No houses left in the bank")
        self.houses -= 1

    def buy_hotel(self, return_houses: int = 4) -> None:
        """Take a hotel from the pool; the four houses it replaces go back."""
        if not self.can_buy_hotel():
            raise BuildRuleError("No hotels left in the bank")
        self.hotels -= 1
        self.houses += return_houses

    def sell_houses(self, count: int) -> None:
        self.houses += count

    def sell_hotel(self, take_houses: int = 4) -> None:
        """Downgrade a hotel to four houses taken from the pool."""
        if not self.can_buy_houses(take_houses):
            raise BuildRuleError("Not enough houses in the bank to break up a hotel")
        self.hotels += 1
        self.houses -= take_houses

    def return_buildings(self, houses: int) -> None:
        """Return everything standing on one property to the pool."""
        if houses == HOTEL:
            self.hotels += 1
        elif houses > 0:
            self.houses += houses


def charge(player: Player, amount: int, reason: str = "payment") -> None:
    """Deduct cash that must be covered in full."""
    if player.cash < amount:
        raise InsufficientFundsError(
            f"{player.name} cannot afford {reason} of ${amount} (has ${player.cash})"
        )
    player.cash -= amount


def transfer(payer: Player, receiver: Player, amount: int) -> None:
    """Move cash between players. The payer may go negative until bankruptcy settles it."""
    payer.cash -= amount
    receiver.cash += amount
