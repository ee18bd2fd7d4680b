"""
Bankruptcy settlement and win conditions.
"""

from __future__ import annotations

import logging
from typing import Optional

from monopoly_engine.events import EventType
from monopoly_engine.exceptions import InvalidStateError, ValidationError
from monopoly_engine.money import HOTEL, PropertyStateEntry
from monopoly_engine.state import GameState, GameStatus
from monopoly_engine.trade import cancel_trades_involving

logger = logging.getLogger(__name__)

BANK = "bank"


def _building_units(houses: int) -> int:
    # A hotel counts as five buildings
    return HOTEL if houses == HOTEL else max(houses, 0)


def calculate_liquidation_value(state: GameState, player_id: str) -> int:
    """Cash raisable by selling every building at half price and mortgaging everything left."""
    player = state.get_player_by_id(player_id)
    value = 0
    for space_id in player.properties:
        space = state.get_space(space_id)
        entry = state.get_property_state(space_id)
        value += (space.house_cost // 2) * _building_units(entry.houses)
        if not entry.mortgaged:
            value += space.mortgage_value
    return value


def can_player_afford(state: GameState, player_id: str, amount: int) -> bool:
    player = state.get_player_by_id(player_id)
    return player.cash + calculate_liquidation_value(state, player_id) >= amount


def _return_buildings(state: GameState, space_id: int, keep_mortgage: bool) -> None:
    entry = state.get_property_state(space_id)
    state.building_supply.return_buildings(entry.houses)
    state.property_states[space_id] = PropertyStateEntry(
        houses=0, mortgaged=entry.mortgaged if keep_mortgage else False
    )


def declare_bankruptcy(state: GameState, player_id: str, creditor_id: Optional[str] = None) -> None:
    """
    Settle a bankrupt player's estate.

    To a player: all cash, every property (buildings sold back to the
    bank, mortgages kept) and all jail cards pass to the creditor.
    To the bank (creditor None or "bank"): buildings go back to the bank and
    the properties become unowned.

    The game finishes once at most one player remains.
    """
    player = state.get_player_by_id(player_id)
    if player.is_bankrupt:
        raise InvalidStateError(f"Player {player_id} is already bankrupt")

    to_bank = creditor_id is None or creditor_id == BANK
    creditor = None
    if not to_bank:
        if creditor_id == player_id:
            raise ValidationError("A player cannot be their own creditor")
        creditor = state.get_player_by_id(creditor_id)
        if not creditor.is_in_game:
            raise InvalidStateError(f"Creditor {creditor_id} is no longer in the game")

    for space_id in list(player.properties):
        _return_buildings(state, space_id, keep_mortgage=not to_bank)
        if creditor is not None:
            creditor.properties.append(space_id)
        else:
            for other in state.players:
                if space_id in other.properties:
                    other.properties.remove(space_id)

    if creditor is not None:
        # A negative balance is the unpaid part of a debt already credited to the creditor
        creditor.cash += player.cash
        creditor.get_out_of_jail_free_cards += player.get_out_of_jail_free_cards

    player.properties = []
    player.cash = 0
    player.get_out_of_jail_free_cards = 0
    player.is_active = False
    player.is_bankrupt = True
    cancel_trades_involving(state, player_id)

    state.events.append(
        EventType.PLAYER_BANKRUPT,
        {"playerId": player_id, "creditorId": creditor.id if creditor else BANK},
    )
    logger.info("Player %s bankrupt to %s", player_id, creditor.id if creditor else BANK)
    check_win_condition(state)


def is_game_over(state: GameState) -> bool:
    return len(state.players_in_game()) <= 1


def check_win_condition(state: GameState) -> bool:
    """Finish the game if at most one player is left. Returns True if finished."""
    if not is_game_over(state):
        return False
    if state.status != GameStatus.FINISHED:
        state.status = GameStatus.FINISHED
        state.events.append(EventType.GAME_ENDED, {"winnerId": get_winner(state)})
    return True


def get_winner(state: GameState) -> Optional[str]:
    """The sole survivor of a finished game, else None."""
    if state.status != GameStatus.FINISHED:
        return None
    remaining = state.players_in_game()
    return remaining[0].id if len(remaining) == 1 else None


def calculate_net_worth(state: GameState, player_id: str) -> int:
    """Cash plus unmortgaged property cost plus buildings at full house cost."""
    player = state.get_player_by_id(player_id)
    net_worth = player.cash
    for space_id in player.properties:
        space = state.get_space(space_id)
        entry = state.get_property_state(space_id)
        if not entry.mortgaged:
            net_worth += space.cost
        net_worth += space.house_cost * _building_units(entry.houses)
    return net_worth


def determine_timed_game_winner(state: GameState) -> Optional[str]:
    """Richest remaining player by net worth; ties go to the earlier seat."""
    winner_id = None
    best = None
    for player in state.players_in_game():
        worth = calculate_net_worth(state, player.id)
        if best is None or worth > best:
            best = worth
            winner_id = player.id
    return winner_id
