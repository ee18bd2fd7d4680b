"""
Space resolution: what landing on a space means for the player.

resolve_space only inspects the state. apply_space_resolution charges
rent and tax or sends the player to jail.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from monopoly_engine.config import GO_TO_JAIL_POSITION
from monopoly_engine.dice import DiceResult
from monopoly_engine.events import EventType
from monopoly_engine.jail import send_to_jail
from monopoly_engine.money import transfer
from monopoly_engine.spaces import Space, SpaceType

if TYPE_CHECKING:
    from monopoly_engine.state import GameState


class ResolutionType(Enum):
    UNOWNED_PROPERTY = "unownedProperty"
    OWN_PROPERTY = "ownProperty"
    RENT_PAYMENT = "rentPayment"
    TAX = "tax"
    DRAW_CARD = "drawCard"
    GO_TO_JAIL = "goToJail"
    NO_ACTION = "noAction"


@dataclass
class SpaceResolution:
    type: ResolutionType
    space_id: int
    space_name: str
    cost: int = 0
    rent_amount: int = 0
    owner_id: Optional[str] = None
    tax_amount: int = 0
    deck_name: Optional[str] = None


def calculate_street_rent(space: Space, houses: int, has_monopoly: bool) -> int:
    """
    Rent for a street.

    With buildings the matching tier applies, clamped to the hotel tier.
    Without buildings the base rent doubles when the owner holds the whole
    color group.
    """
    tiers: List[int] = space.rent_tiers
    if not tiers:
        return 0
    if houses > 0:
        return tiers[min(houses, len(tiers) - 1)]
    return tiers[0] * 2 if has_monopoly else tiers[0]


def calculate_railroad_rent(railroads_owned: int) -> int:
    """25, 50, 100, 200 for one to four railroads."""
    if railroads_owned <= 0:
        return 0
    return 25 * (2 ** (railroads_owned - 1))


def calculate_utility_rent(dice_total: int, utilities_owned: int) -> int:
    if utilities_owned <= 0:
        return 0
    multiplier = 4 if utilities_owned == 1 else 10
    return dice_total * multiplier


def calculate_rent(state: GameState, space: Space, owner_id: str, dice_total: int = 0) -> int:
    """Rent owed to owner_id for the space, ignoring mortgage."""
    if space.space_type == SpaceType.PROPERTY:
        houses = state.get_property_state(space.id).houses
        return calculate_street_rent(space, houses, state.has_monopoly(owner_id, space.color_group))
    if space.space_type == SpaceType.RAILROAD:
        return calculate_railroad_rent(state.count_owned_of_type(owner_id, SpaceType.RAILROAD))
    if space.space_type == SpaceType.UTILITY:
        return calculate_utility_rent(dice_total, state.count_owned_of_type(owner_id, SpaceType.UTILITY))
    return 0


def resolve_space(state: GameState, player_id: str, dice: Optional[DiceResult] = None) -> SpaceResolution:
    """Work out what the player's current space demands. Does not mutate."""
    player = state.get_player_by_id(player_id)
    space = state.get_space(player.position)
    base = dict(space_id=space.id, space_name=space.name)

    if space.is_purchasable:
        owner_id = state.get_owner_id(space.id)
        if owner_id is None:
            return SpaceResolution(ResolutionType.UNOWNED_PROPERTY, cost=space.cost, **base)
        if owner_id == player_id:
            return SpaceResolution(ResolutionType.OWN_PROPERTY, owner_id=owner_id, **base)
        if state.get_property_state(space.id).mortgaged:
            return SpaceResolution(ResolutionType.NO_ACTION, owner_id=owner_id, **base)
        rent = calculate_rent(state, space, owner_id, dice.total if dice else 0)
        return SpaceResolution(ResolutionType.RENT_PAYMENT, rent_amount=rent, owner_id=owner_id, **base)

    if space.space_type == SpaceType.TAX:
        return SpaceResolution(ResolutionType.TAX, tax_amount=space.tax_amount, **base)
    if space.space_type == SpaceType.CHANCE:
        return SpaceResolution(ResolutionType.DRAW_CARD, deck_name="chance", **base)
    if space.space_type == SpaceType.COMMUNITY_CHEST:
        return SpaceResolution(ResolutionType.DRAW_CARD, deck_name="community_chest", **base)
    if space.space_type == SpaceType.CORNER and space.position == GO_TO_JAIL_POSITION:
        return SpaceResolution(ResolutionType.GO_TO_JAIL, **base)
    return SpaceResolution(ResolutionType.NO_ACTION, **base)


def pay_rent(state: GameState, payer_id: str, owner_id: str, amount: int, space_id: int) -> None:
    transfer(state.get_player_by_id(payer_id), state.get_player_by_id(owner_id), amount)
    state.events.append(
        EventType.RENT_PAID,
        {"payerId": payer_id, "receiverId": owner_id, "amount": amount, "propertyId": space_id},
    )


def pay_tax(state: GameState, player_id: str, amount: int) -> None:
    state.get_player_by_id(player_id).cash -= amount
    state.events.append(EventType.TAX_PAID, {"playerId": player_id, "amount": amount})


def apply_space_resolution(state: GameState, player_id: str, resolution: SpaceResolution) -> None:
    """Apply the automatic consequences of a landing: rent, tax, jail."""
    if resolution.type == ResolutionType.TAX:
        pay_tax(state, player_id, resolution.tax_amount)
    elif resolution.type == ResolutionType.RENT_PAYMENT and resolution.owner_id:
        pay_rent(state, player_id, resolution.owner_id, resolution.rent_amount, resolution.space_id)
    elif resolution.type == ResolutionType.GO_TO_JAIL:
        send_to_jail(state, player_id)
