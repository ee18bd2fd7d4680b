"""
Tests specifically for jail mechanics.
"""

import pytest

from monopoly_engine.dice import DiceResult
from monopoly_engine.events import EventType
from monopoly_engine.exceptions import InsufficientFundsError, InvalidStateError
from monopoly_engine.jail import pay_jail_fine, roll_in_jail, send_to_jail, use_jail_card


def test_send_to_jail(basic_game):
    player = basic_game.players[0]
    player.position = 30
    player.consecutive_doubles = 2

    send_to_jail(basic_game, "p0")

    assert player.position == 10
    assert player.in_jail
    assert player.jail_status.turns_in_jail == 0
    assert player.consecutive_doubles == 0
    assert player.cash == 1500
    assert basic_game.events.of_type(EventType.PLAYER_JAILED)


def test_jail_pay_fine(basic_game):
    send_to_jail(basic_game, "p0")
    pay_jail_fine(basic_game, "p0")
    player = basic_game.players[0]
    assert not player.in_jail
    assert player.cash == 1450
    assert basic_game.events.of_type(EventType.PLAYER_FREED)[-1].payload["method"] == "fine"


def test_jail_fine_needs_cash(basic_game):
    send_to_jail(basic_game, "p0")
    basic_game.players[0].cash = 49
    with pytest.raises(InsufficientFundsError, match=r"jail fine of \$50"):
        pay_jail_fine(basic_game, "p0")
    assert basic_game.players[0].in_jail


def test_jail_actions_require_jail(basic_game):
    with pytest.raises(InvalidStateError):
        pay_jail_fine(basic_game, "p0")
    with pytest.raises(InvalidStateError):
        use_jail_card(basic_game, "p0")
    with pytest.raises(InvalidStateError):
        roll_in_jail(basic_game, "p0", DiceResult(1, 1, 2, True))


def test_jail_use_card(basic_game):
    player = basic_game.players[0]
    player.get_out_of_jail_free_cards = 1
    send_to_jail(basic_game, "p0")

    use_jail_card(basic_game, "p0")

    assert not player.in_jail
    assert player.get_out_of_jail_free_cards == 0
    assert player.cash == 1500


def test_jail_card_required(basic_game):
    send_to_jail(basic_game, "p0")
    with pytest.raises(InvalidStateError):
        use_jail_card(basic_game, "p0")


def test_doubles_free_and_move(basic_game):
    send_to_jail(basic_game, "p0")
    result = roll_in_jail(basic_game, "p0", DiceResult(3, 3, 6, True))
    player = basic_game.players[0]
    assert result.freed
    assert not result.forced_exit
    assert not player.in_jail
    assert player.position == 16


def test_failed_roll_counts_attempt(basic_game):
    send_to_jail(basic_game, "p0")
    result = roll_in_jail(basic_game, "p0", DiceResult(1, 2, 3, False))
    player = basic_game.players[0]
    assert not result.freed
    assert player.in_jail
    assert player.jail_status.turns_in_jail == 1
    assert player.position == 10


def test_jail_forced_payment_after_three_turns(basic_game):
    """The third failed roll charges the fine and moves the player anyway."""
    send_to_jail(basic_game, "p0")
    roll_in_jail(basic_game, "p0", DiceResult(1, 2, 3, False))
    roll_in_jail(basic_game, "p0", DiceResult(1, 2, 3, False))
    result = roll_in_jail(basic_game, "p0", DiceResult(2, 4, 6, False))

    player = basic_game.players[0]
    assert result.freed
    assert result.forced_exit
    assert not player.in_jail
    assert player.cash == 1450
    assert player.position == 16


def test_forced_exit_can_go_negative(basic_game):
    send_to_jail(basic_game, "p0")
    player = basic_game.players[0]
    player.jail_status.turns_in_jail = 2
    player.cash = 20
    roll_in_jail(basic_game, "p0", DiceResult(1, 2, 3, False))
    assert player.cash == -30
    assert not player.in_jail
