"""
Property economy: purchase, houses and hotels, mortgages.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, List

from monopoly_engine.events import EventType
from monopoly_engine.exceptions import (
    BuildRuleError,
    InsufficientFundsError,
    InvalidStateError,
    OwnershipError,
    ValidationError,
)
from monopoly_engine.money import HOTEL, PropertyStateEntry, charge
from monopoly_engine.spaces import Space, SpaceType

if TYPE_CHECKING:
    from monopoly_engine.state import GameState


def _color_group(state: GameState, space: Space) -> List[Space]:
    return [s for s in state.board if s.space_type == SpaceType.PROPERTY and s.color_group == space.color_group]


def _require_owner(state: GameState, player_id: str, space_id: int) -> Space:
    space = state.get_space(space_id)
    if space_id not in state.get_player_by_id(player_id).properties:
        raise OwnershipError(f"Player {player_id} does not own {space.name}")
    return space


def group_has_buildings(state: GameState, space: Space) -> bool:
    """True if any street in the space's color group carries buildings."""
    if not space.color_group:
        return False
    return any(state.get_property_state(s.id).houses > 0 for s in _color_group(state, space))


def buy_property(state: GameState, player_id: str, space_id: int) -> None:
    """Buy the space the player stands on at face value."""
    player = state.get_player_by_id(player_id)
    space = state.get_space(space_id)

    if not space.is_purchasable:
        raise OwnershipError(f"{space.name} is not purchasable")
    owner_id = state.get_owner_id(space_id)
    if owner_id is not None:
        raise OwnershipError(f"{space.name} is already owned by {owner_id}")
    if player.cash < space.cost:
        raise InsufficientFundsError(
            f"Player {player_id} cannot afford ${space.cost} (has ${player.cash})"
        )
    if player.position != space.position:
        raise InvalidStateError(f"Player {player_id} is not on {space.name}")

    player.cash -= space.cost
    player.properties.append(space_id)
    state.property_states[space_id] = PropertyStateEntry()
    state.events.append(
        EventType.PROPERTY_PURCHASED,
        {"playerId": player_id, "propertyId": space_id, "price": space.cost},
    )


def check_can_build(state: GameState, player_id: str, space_id: int) -> None:
    """
    Validate one more building on a street.

    Raises:
        BuildRuleError: no monopoly, hotel already, uneven build, mortgaged
            group or empty supply
        InsufficientFundsError: cannot pay the house cost
    """
    player = state.get_player_by_id(player_id)
    space = state.get_space(space_id)
    if space.space_type != SpaceType.PROPERTY or not space.color_group:
        raise BuildRuleError("Can only build on street properties")
    if not state.has_monopoly(player_id, space.color_group):
        raise BuildRuleError("Must own all properties in color group")

    group = _color_group(state, space)
    if any(state.get_property_state(s.id).mortgaged for s in group):
        raise BuildRuleError("Cannot build while a property in the group is mortgaged")

    houses = state.get_property_state(space_id).houses
    if houses >= HOTEL:
        raise BuildRuleError(f"{space.name} already has a hotel")
    for peer in group:
        if peer.id != space_id and houses > state.get_property_state(peer.id).houses:
            raise BuildRuleError(f"Must build evenly: {peer.name} has fewer buildings")

    if player.cash < space.house_cost:
        raise InsufficientFundsError(f"Cannot afford ${space.house_cost} for a building")

    supply = state.building_supply
    if houses == HOTEL - 1:
        if not supply.can_buy_hotel():
            raise BuildRuleError("No hotels available")
    elif not supply.can_buy_houses(1):
        raise BuildRuleError("No houses available")


def can_build_house(state: GameState, player_id: str, space_id: int) -> bool:
    try:
        check_can_build(state, player_id, space_id)
    except (BuildRuleError, InsufficientFundsError):
        return False
    return True


def build_house(state: GameState, player_id: str, space_id: int) -> int:
    """
    Add one building. A fifth building is a hotel that hands its four
    houses back to the bank.

    Returns:
        New building count (5 = hotel)
    """
    _require_owner(state, player_id, space_id)
    check_can_build(state, player_id, space_id)

    space = state.get_space(space_id)
    entry = state.get_property_state(space_id)
    state.get_player_by_id(player_id).cash -= space.house_cost

    if entry.houses == HOTEL - 1:
        state.building_supply.buy_hotel()
        entry.houses = HOTEL
        state.events.append(EventType.HOTEL_BUILT, {"playerId": player_id, "propertyId": space_id})
    else:
        state.building_supply.buy_house()
        entry.houses += 1
        state.events.append(
            EventType.HOUSE_BUILT,
            {"playerId": player_id, "propertyId": space_id, "houses": entry.houses},
        )
    return entry.houses


def build_hotel(state: GameState, player_id: str, space_id: int) -> int:
    """Upgrade four houses to a hotel."""
    if state.get_property_state(space_id).houses != HOTEL - 1:
        raise BuildRuleError("A hotel requires four houses on the property")
    return build_house(state, player_id, space_id)


def check_can_sell(state: GameState, player_id: str, space_id: int) -> None:
    _require_owner(state, player_id, space_id)
    space = state.get_space(space_id)
    houses = state.get_property_state(space_id).houses
    if houses <= 0:
        raise BuildRuleError(f"No buildings to sell on {space.name}")

    if space.color_group:
        after = [
            houses - 1 if peer.id == space_id else state.get_property_state(peer.id).houses
            for peer in _color_group(state, space)
        ]
        if max(after) - min(after) > 1:
            raise BuildRuleError("Cannot sell: would violate the even-sell rule")

    if houses == HOTEL and not state.building_supply.can_buy_houses(4):
        raise BuildRuleError("Cannot break up hotel: not enough houses in supply")


def sell_building(state: GameState, player_id: str, space_id: int, count: int = 1) -> int:
    """
    Sell buildings back to the bank at half the house cost each.
    Selling a hotel leaves four houses.

    Returns:
        Total refund
    """
    if count < 1:
        raise ValidationError("Must sell at least one building")

    space = state.get_space(space_id)
    player = state.get_player_by_id(player_id)
    refund = space.house_cost // 2
    total = 0
    for _ in range(count):
        check_can_sell(state, player_id, space_id)
        entry = state.get_property_state(space_id)
        if entry.houses == HOTEL:
            state.building_supply.sell_hotel()
            entry.houses = HOTEL - 1
        else:
            state.building_supply.sell_houses(1)
            entry.houses -= 1
        player.cash += refund
        total += refund
    return total


def mortgage_property(state: GameState, player_id: str, space_id: int) -> int:
    """Mortgage for the printed mortgage value. Returns cash received."""
    space = _require_owner(state, player_id, space_id)
    entry = state.get_property_state(space_id)
    if entry.mortgaged:
        raise OwnershipError(f"{space.name} is already mortgaged")
    if group_has_buildings(state, space):
        raise BuildRuleError("Cannot mortgage: buildings exist in color group")

    state.get_player_by_id(player_id).cash += space.mortgage_value
    state.property_states[space_id] = PropertyStateEntry(houses=0, mortgaged=True)
    state.events.append(
        EventType.PROPERTY_MORTGAGED,
        {"playerId": player_id, "propertyId": space_id, "amount": space.mortgage_value},
    )
    return space.mortgage_value


def unmortgage_cost(space: Space, interest_rate: float = 0.10) -> int:
    """Mortgage value plus interest, rounded up to a whole dollar."""
    interest = math.ceil(round(space.mortgage_value * interest_rate, 6))
    return space.mortgage_value + interest


def unmortgage_property(state: GameState, player_id: str, space_id: int) -> int:
    """Lift a mortgage. Returns the amount paid."""
    space = _require_owner(state, player_id, space_id)
    entry = state.get_property_state(space_id)
    if not entry.mortgaged:
        raise OwnershipError(f"{space.name} is not mortgaged")
    if group_has_buildings(state, space):
        raise BuildRuleError("Cannot unmortgage: buildings exist in color group")

    cost = unmortgage_cost(space, state.settings.mortgage_interest_rate)
    charge(state.get_player_by_id(player_id), cost, "unmortgage cost")
    state.property_states[space_id] = PropertyStateEntry()
    state.events.append(
        EventType.PROPERTY_UNMORTGAGED,
        {"playerId": player_id, "propertyId": space_id, "amount": cost},
    )
    return cost
