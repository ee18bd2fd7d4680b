"""
Tests for the trading system.
"""

import pytest

from monopoly_engine.bankruptcy import declare_bankruptcy
from monopoly_engine.events import EventType
from monopoly_engine.exceptions import (
    InsufficientFundsError,
    InvalidStateError,
    NotFoundError,
    OwnershipError,
    TradeRuleError,
    ValidationError,
)
from monopoly_engine.trade import (
    TradeOffer,
    TradeStatus,
    TradeTerms,
    accept_trade,
    counter_trade,
    create_trade_offer,
    get_trade,
    reject_trade,
)

from helpers import give


@pytest.fixture
def game_with_properties(basic_game):
    """p0 owns Mediterranean and Baltic, p1 owns Oriental and Vermont."""
    give(basic_game, "p0", 1, 3)
    give(basic_game, "p1", 6, 8)
    return basic_game


def test_scenario_property_plus_cash_for_property(game_with_properties):
    """p0 offers Baltic and $100 for Oriental."""
    game = game_with_properties
    trade = create_trade_offer(
        game, "p0", "p1", TradeTerms(offered_properties=[3], offered_cash=100, requested_properties=[6])
    )
    assert trade.id == "trade-1"
    assert trade.status == TradeStatus.PENDING

    accept_trade(game, trade.id, "p1")

    assert game.get_owner_id(3) == "p1"
    assert game.get_owner_id(6) == "p0"
    assert game.players[0].cash == 1400
    assert game.players[1].cash == 1600
    assert trade.status == TradeStatus.ACCEPTED
    assert game.events.of_type(EventType.TRADE_COMPLETED)[-1].payload["tradeId"] == "trade-1"


def test_trade_jail_cards_and_requested_cash(game_with_properties):
    game = game_with_properties
    game.players[1].get_out_of_jail_free_cards = 1
    trade = create_trade_offer(
        game, "p0", "p1", TradeTerms(offered_properties=[1], requested_cash=50, requested_cards=1)
    )
    accept_trade(game, trade.id, "p1")
    assert game.players[0].get_out_of_jail_free_cards == 1
    assert game.players[1].get_out_of_jail_free_cards == 0
    assert game.players[0].cash == 1550
    assert game.players[1].cash == 1450


def test_trade_ids_increment(game_with_properties):
    game = game_with_properties
    first = create_trade_offer(game, "p0", "p1", TradeTerms(offered_cash=10))
    second = create_trade_offer(game, "p0", "p1", TradeTerms(offered_cash=20))
    assert (first.id, second.id) == ("trade-1", "trade-2")
    assert get_trade(game, "trade-2") is second
    with pytest.raises(NotFoundError):
        get_trade(game, "trade-9")


def test_offer_validation(game_with_properties):
    game = game_with_properties
    with pytest.raises(OwnershipError):
        create_trade_offer(game, "p0", "p1", TradeTerms(offered_properties=[6]))
    with pytest.raises(OwnershipError):
        create_trade_offer(game, "p0", "p1", TradeTerms(requested_properties=[1]))
    with pytest.raises(InsufficientFundsError):
        create_trade_offer(game, "p0", "p1", TradeTerms(offered_cash=5000))
    with pytest.raises(TradeRuleError, match="Jail"):
        create_trade_offer(game, "p0", "p1", TradeTerms(offered_cards=1))
    with pytest.raises(ValidationError):
        create_trade_offer(game, "p0", "p0", TradeTerms(offered_cash=10))
    with pytest.raises(ValidationError):
        create_trade_offer(game, "p0", "p1", TradeTerms())
    with pytest.raises(ValidationError):
        create_trade_offer(game, "p0", "p1", TradeTerms(offered_cash=-5))


def test_cannot_trade_with_buildings_in_group(game_with_properties):
    game = game_with_properties
    give(game, "p1", 9)
    game.get_property_state(9).houses = 1
    with pytest.raises(TradeRuleError, match="buildings"):
        create_trade_offer(game, "p0", "p1", TradeTerms(requested_properties=[6]))


def test_cannot_trade_with_bankrupt_player(game_with_properties):
    game = game_with_properties
    game.players[1].is_bankrupt = True
    with pytest.raises(InvalidStateError):
        create_trade_offer(game, "p0", "p1", TradeTerms(offered_cash=10))


def test_only_recipient_can_respond(game_with_properties):
    game = game_with_properties
    trade = create_trade_offer(game, "p0", "p1", TradeTerms(offered_cash=10))
    with pytest.raises(TradeRuleError):
        accept_trade(game, trade.id, "p0")
    with pytest.raises(TradeRuleError):
        reject_trade(game, trade.id, "p0")


def test_reject_trade(game_with_properties):
    game = game_with_properties
    trade = create_trade_offer(game, "p0", "p1", TradeTerms(offered_properties=[1]))
    reject_trade(game, trade.id, "p1")
    assert trade.status == TradeStatus.REJECTED
    assert game.get_owner_id(1) == "p0"
    with pytest.raises(TradeRuleError, match="not pending"):
        accept_trade(game, trade.id, "p1")


def test_counter_trade_swaps_roles(game_with_properties):
    game = game_with_properties
    original = create_trade_offer(game, "p0", "p1", TradeTerms(offered_cash=50, requested_properties=[6]))

    counter = counter_trade(
        game, original.id, "p1", TradeTerms(offered_properties=[6], requested_cash=150)
    )

    assert original.status == TradeStatus.COUNTERED
    assert counter.id == "trade-2"
    assert (counter.proposer_id, counter.recipient_id) == ("p1", "p0")
    accept_trade(game, counter.id, "p0")
    assert game.get_owner_id(6) == "p0"
    assert game.players[0].cash == 1350


def test_invalid_counter_keeps_original_pending(game_with_properties):
    game = game_with_properties
    original = create_trade_offer(game, "p0", "p1", TradeTerms(offered_cash=50))
    with pytest.raises(OwnershipError):
        counter_trade(game, original.id, "p1", TradeTerms(offered_properties=[1]))
    assert original.status == TradeStatus.PENDING


def test_accept_revalidates_assets(game_with_properties):
    """A property sold since the offer was made fails the whole trade."""
    game = game_with_properties
    trade = create_trade_offer(game, "p0", "p1", TradeTerms(offered_properties=[1], requested_properties=[6]))
    game.players[1].properties.remove(6)

    with pytest.raises(OwnershipError):
        accept_trade(game, trade.id, "p1")
    assert game.get_owner_id(1) == "p0"
    assert trade.status == TradeStatus.PENDING


def test_accept_requires_recipient_cash(game_with_properties):
    game = game_with_properties
    trade = create_trade_offer(game, "p0", "p1", TradeTerms(offered_properties=[1], requested_cash=200))
    game.players[1].cash = 100
    with pytest.raises(InsufficientFundsError):
        accept_trade(game, trade.id, "p1")


def test_repeated_property_ids_rejected(game_with_properties):
    game = game_with_properties
    with pytest.raises(ValidationError, match="more than once"):
        create_trade_offer(game, "p0", "p1", TradeTerms(offered_properties=[3, 3]))
    with pytest.raises(ValidationError, match="more than once"):
        create_trade_offer(game, "p0", "p1", TradeTerms(requested_properties=[6, 6]))
    assert game.trades == {}


def test_accept_rejects_repeated_property_ids(game_with_properties):
    """An offer that slipped in with a repeated id fails cleanly on accept."""
    game = game_with_properties
    game.trades["trade-9"] = TradeOffer(
        id="trade-9", proposer_id="p0", recipient_id="p1", offered_properties=[3, 3]
    )

    with pytest.raises(ValidationError):
        accept_trade(game, "trade-9", "p1")
    assert game.players[0].properties == [1, 3]
    assert game.players[1].properties == [6, 8]


def test_bankruptcy_cancels_pending_trades(three_player_game):
    game = three_player_game
    give(game, "p1", 6)
    give(game, "p2", 9)
    sent = create_trade_offer(game, "p0", "p1", TradeTerms(requested_properties=[6]))
    received = create_trade_offer(game, "p2", "p0", TradeTerms(offered_properties=[9]))
    unrelated = create_trade_offer(game, "p1", "p2", TradeTerms(offered_cash=10))

    declare_bankruptcy(game, "p0", "p2")

    assert sent.status == TradeStatus.REJECTED
    assert received.status == TradeStatus.REJECTED
    assert unrelated.status == TradeStatus.PENDING
    with pytest.raises(TradeRuleError):
        accept_trade(game, sent.id, "p1")
    assert game.players[0].properties == []
    assert game.get_owner_id(6) == "p1"


def test_accept_fails_once_proposer_is_out(three_player_game):
    game = three_player_game
    give(game, "p1", 6)
    trade = create_trade_offer(game, "p0", "p1", TradeTerms(requested_properties=[6]))
    game.players[0].is_bankrupt = True

    with pytest.raises(InvalidStateError):
        accept_trade(game, trade.id, "p1")
    assert game.players[0].properties == []
    assert game.get_owner_id(6) == "p1"
