"""
Tests for bankruptcy settlement and the win condition.
"""

import pytest

from monopoly_engine.bankruptcy import (
    calculate_liquidation_value,
    calculate_net_worth,
    can_player_afford,
    check_win_condition,
    declare_bankruptcy,
    determine_timed_game_winner,
    get_winner,
    is_game_over,
)
from monopoly_engine.events import EventType
from monopoly_engine.exceptions import InvalidStateError, ValidationError
from monopoly_engine.money import transfer
from monopoly_engine.state import GameStatus

from helpers import give


def test_liquidation_value(basic_game):
    give(basic_game, "p0", 1, houses=3)
    give(basic_game, "p0", 39, mortgaged=True)
    give(basic_game, "p0", 5)
    # 3 houses at $25, Mediterranean $30, Reading $100, Boardwalk already mortgaged
    assert calculate_liquidation_value(basic_game, "p0") == 75 + 30 + 100
    basic_game.players[0].cash = 0
    assert can_player_afford(basic_game, "p0", 205)
    assert not can_player_afford(basic_game, "p0", 206)


def test_scenario_bankruptcy_to_player(three_player_game):
    """Buildings go back to the bank, properties to the creditor."""
    game = three_player_game
    give(game, "p0", 1, houses=3)
    give(game, "p0", 3, houses=5)
    game.building_supply.houses -= 3
    game.building_supply.hotels -= 1
    game.players[0].cash = 0
    game.players[0].get_out_of_jail_free_cards = 1

    declare_bankruptcy(game, "p0", "p1")

    bankrupt, creditor = game.players[0], game.players[1]
    assert sorted(creditor.properties) == [1, 3]
    assert game.building_supply.houses == 32
    assert game.building_supply.hotels == 12
    assert game.get_property_state(1).houses == 0
    assert game.get_property_state(3).houses == 0
    assert creditor.get_out_of_jail_free_cards == 1
    assert creditor.cash == 1500
    assert bankrupt.cash == 0
    assert bankrupt.properties == []
    assert bankrupt.get_out_of_jail_free_cards == 0
    assert bankrupt.is_bankrupt
    assert not bankrupt.is_active
    assert game.status == GameStatus.PLAYING
    assert game.events.of_type(EventType.PLAYER_BANKRUPT)[-1].payload == {"playerId": "p0", "creditorId": "p1"}


def test_bankruptcy_to_player_keeps_mortgage_and_cash(three_player_game):
    game = three_player_game
    give(game, "p0", 39, mortgaged=True)
    game.players[0].cash = 40
    declare_bankruptcy(game, "p0", "p1")
    assert game.get_owner_id(39) == "p1"
    assert game.get_property_state(39).mortgaged
    assert game.players[1].cash == 1540


def test_rent_shortfall_is_taken_back_from_creditor(three_player_game):
    """Rent already credited in full; the debtor's negative balance settles it."""
    game = three_player_game
    debtor, creditor = game.players[0], game.players[1]
    debtor.cash = 100
    transfer(debtor, creditor, 300)
    combined = debtor.cash + creditor.cash

    declare_bankruptcy(game, "p0", "p1")

    assert creditor.cash == 1600
    assert debtor.cash + creditor.cash == combined
    assert debtor.cash == 0


def test_bankruptcy_to_bank(three_player_game):
    game = three_player_game
    give(game, "p0", 6, houses=2)
    give(game, "p0", 37, mortgaged=True)
    game.building_supply.houses -= 2

    declare_bankruptcy(game, "p0")

    assert game.get_owner_id(6) is None
    assert game.get_owner_id(37) is None
    assert not game.get_property_state(37).mortgaged
    assert game.building_supply.houses == 32
    assert game.events.of_type(EventType.PLAYER_BANKRUPT)[-1].payload["creditorId"] == "bank"


def test_bankruptcy_guards(three_player_game):
    with pytest.raises(ValidationError):
        declare_bankruptcy(three_player_game, "p0", "p0")
    declare_bankruptcy(three_player_game, "p2")
    with pytest.raises(InvalidStateError):
        declare_bankruptcy(three_player_game, "p2")
    with pytest.raises(InvalidStateError):
        declare_bankruptcy(three_player_game, "p0", "p2")


def test_last_player_standing_wins(three_player_game):
    game = three_player_game
    declare_bankruptcy(game, "p0", "p1")
    assert not is_game_over(game)
    assert get_winner(game) is None

    declare_bankruptcy(game, "p2")

    assert is_game_over(game)
    assert game.status == GameStatus.FINISHED
    assert get_winner(game) == "p1"
    ended = game.events.of_type(EventType.GAME_ENDED)
    assert len(ended) == 1
    assert ended[0].payload == {"winnerId": "p1"}

    check_win_condition(game)
    assert len(game.events.of_type(EventType.GAME_ENDED)) == 1


def test_net_worth_and_timed_winner(three_player_game):
    game = three_player_game
    give(game, "p1", 1, houses=2)
    give(game, "p2", 39, mortgaged=True)
    assert calculate_net_worth(game, "p1") == 1500 + 60 + 100
    assert calculate_net_worth(game, "p2") == 1500
    assert determine_timed_game_winner(game) == "p1"


def test_timed_winner_tie_goes_to_earlier_seat(three_player_game):
    assert determine_timed_game_winner(three_player_game) == "p0"
