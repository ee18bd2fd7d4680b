"""
Dice rolling and board movement.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from monopoly_engine.config import BOARD_SIZE
from monopoly_engine.events import EventType

if TYPE_CHECKING:
    from monopoly_engine.state import GameState

Rng = Callable[[], float]

MAX_CONSECUTIVE_DOUBLES = 3


@dataclass
class DiceResult:
    die1: int
    die2: int
    total: int
    is_doubles: bool


@dataclass
class MovementResult:
    new_position: int
    passed_go: bool = False
    sent_to_jail: bool = False


def _roll_die(rng: Rng) -> int:
    return math.floor(rng() * 6) + 1


def roll_dice(rng: Optional[Rng] = None) -> DiceResult:
    """
    Roll two independent six-sided dice.

    Args:
        rng: Callable returning a float in [0, 1). Defaults to random.random.
    """
    rng = rng or random.random
    die1 = _roll_die(rng)
    die2 = _roll_die(rng)
    return DiceResult(die1=die1, die2=die2, total=die1 + die2, is_doubles=die1 == die2)


def calculate_new_position(position: int, total: int) -> int:
    return (position + total) % BOARD_SIZE


def did_pass_go(old_position: int, new_position: int) -> bool:
    """True iff a forward move wrapped past position 0."""
    return new_position < old_position and old_position != new_position


def collect_go_salary(state: GameState, player_id: str) -> None:
    """Pay the Go salary and record it."""
    player = state.get_player_by_id(player_id)
    player.cash += state.settings.go_salary
    state.events.append(
        EventType.PASSED_GO,
        {"playerId": player_id, "amount": state.settings.go_salary},
    )


def move_player_to(state: GameState, player_id: str, position: int, collect_go: bool = True) -> bool:
    """
    Place a player on an absolute position.

    Returns:
        True if the Go salary was paid on the way.
    """
    player = state.get_player_by_id(player_id)
    old_position = player.position
    player.position = position % BOARD_SIZE
    state.events.append(
        EventType.PLAYER_MOVED,
        {"playerId": player_id, "fromPosition": old_position, "toPosition": player.position},
    )
    passed = collect_go and did_pass_go(old_position, player.position)
    if passed:
        collect_go_salary(state, player_id)
    return passed


def apply_movement(state: GameState, player_id: str, dice: DiceResult) -> MovementResult:
    """
    Move a player by a dice roll, tracking consecutive doubles.

    A third consecutive doubles sends the player straight to jail without
    moving and without the Go salary.
    """
    from monopoly_engine.jail import send_to_jail

    player = state.get_player_by_id(player_id)
    if dice.is_doubles:
        player.consecutive_doubles += 1
    else:
        player.consecutive_doubles = 0

    if player.consecutive_doubles >= MAX_CONSECUTIVE_DOUBLES:
        send_to_jail(state, player_id)
        return MovementResult(new_position=player.position, sent_to_jail=True)

    new_position = calculate_new_position(player.position, dice.total)
    passed = move_player_to(state, player_id, new_position)
    return MovementResult(new_position=new_position, passed_go=passed)
