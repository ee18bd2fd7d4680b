"""
Jail: entry, fine, Get Out of Jail Free cards and rolling for doubles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from monopoly_engine.dice import DiceResult, calculate_new_position, move_player_to
from monopoly_engine.events import EventType
from monopoly_engine.exceptions import InvalidStateError
from monopoly_engine.money import charge
from monopoly_engine.player import JailStatus

if TYPE_CHECKING:
    from monopoly_engine.state import GameState

logger = logging.getLogger(__name__)


@dataclass
class JailRollResult:
    freed: bool
    forced_exit: bool = False


def send_to_jail(state: GameState, player_id: str) -> None:
    """Move straight to jail. Never passes Go; resets the doubles streak."""
    player = state.get_player_by_id(player_id)
    player.position = state.settings.jail_position
    player.jail_status = JailStatus(in_jail=True, turns_in_jail=0)
    player.consecutive_doubles = 0
    state.events.append(EventType.PLAYER_JAILED, {"playerId": player_id})


def _release(state: GameState, player_id: str, method: str) -> None:
    player = state.get_player_by_id(player_id)
    player.jail_status = JailStatus()
    state.events.append(EventType.PLAYER_FREED, {"playerId": player_id, "method": method})


def _require_in_jail(state: GameState, player_id: str) -> None:
    if not state.get_player_by_id(player_id).in_jail:
        raise InvalidStateError("Player is not in jail")


def pay_jail_fine(state: GameState, player_id: str) -> None:
    _require_in_jail(state, player_id)
    player = state.get_player_by_id(player_id)
    charge(player, state.settings.jail_fine, "jail fine")
    _release(state, player_id, "fine")


def use_jail_card(state: GameState, player_id: str) -> None:
    _require_in_jail(state, player_id)
    player = state.get_player_by_id(player_id)
    if player.get_out_of_jail_free_cards <= 0:
        raise InvalidStateError("Player does not have a Get Out of Jail Free card")
    player.get_out_of_jail_free_cards -= 1
    _release(state, player_id, "card")


def roll_in_jail(state: GameState, player_id: str, dice: DiceResult) -> JailRollResult:
    """
    One attempt to leave jail by rolling doubles.

    Doubles free the player. The third failed attempt charges the fine
    (even into negative cash) and frees the player anyway. In both cases the
    player then moves by the roll total. Otherwise the attempt is counted.
    """
    _require_in_jail(state, player_id)
    player = state.get_player_by_id(player_id)
    turns = player.jail_status.turns_in_jail

    if dice.is_doubles:
        _release(state, player_id, "doubles")
        move_player_to(state, player_id, calculate_new_position(player.position, dice.total))
        return JailRollResult(freed=True)

    if turns >= state.settings.max_jail_turns - 1:
        player.cash -= state.settings.jail_fine
        logger.debug("Player %s forced out of jail after %d attempts", player_id, turns + 1)
        _release(state, player_id, "forced")
        move_player_to(state, player_id, calculate_new_position(player.position, dice.total))
        return JailRollResult(freed=True, forced_exit=True)

    player.jail_status = JailStatus(in_jail=True, turns_in_jail=turns + 1)
    return JailRollResult(freed=False)
