from monopoly_engine.auction import place_bid, start_auction
from monopoly_engine.snapshot import serialize_snapshot
from monopoly_engine.trade import TradeTerms, create_trade_offer
from monopoly_engine.turn import TurnState

from helpers import give


def test_basic_snapshot_structure(basic_game):
    snap = serialize_snapshot(basic_game)

    # Core keys exist
    assert snap["game_id"] == "game-2p"
    assert snap["status"] == "playing"
    assert snap["phase"] == "WaitingForRoll"
    assert snap["current_player_id"] == "p0"
    assert len(snap["players"]) == 2
    assert snap["bank"] == {"houses_available": 32, "hotels_available": 12}
    assert snap["auction"] is None
    assert snap["trades"] == []
    assert snap["last_dice"] is None
    assert snap["pending_buy"] is None
    assert "legal_actions" not in snap


def test_decks_expose_counts_only(basic_game):
    snap = serialize_snapshot(basic_game)
    assert snap["decks"] == {
        "chance": {"cards_remaining": 16},
        "community_chest": {"cards_remaining": 16},
    }


def test_player_properties(basic_game):
    give(basic_game, "p1", 39, houses=2)
    give(basic_game, "p1", 5, mortgaged=True)

    p1 = serialize_snapshot(basic_game)["players"][1]

    assert p1["player_id"] == "p1"
    assert p1["name"] == "Bob"
    assert p1["cash"] == 1500
    assert p1["is_bankrupt"] is False
    assert p1["properties"] == [
        {"position": 5, "name": "Reading Railroad", "houses": 0, "mortgaged": True},
        {"position": 39, "name": "Boardwalk", "houses": 2, "mortgaged": False, "color_group": "dark_blue"},
    ]


def test_auction_and_trades(three_player_game):
    game = three_player_game
    give(game, "p1", 6)
    game.turn_state = TurnState.AUCTION
    start_auction(game, 3)
    place_bid(game, "p2", 40)
    create_trade_offer(game, "p1", "p0", TradeTerms(offered_properties=[6], requested_cash=100))

    snap = serialize_snapshot(game)

    assert snap["auction"]["property_position"] == 3
    assert snap["auction"]["property_name"] == "Baltic Avenue"
    assert snap["auction"]["current_bid"] == 40
    assert snap["auction"]["high_bidder"] == "p2"
    assert snap["auction"]["is_complete"] is False
    assert len(snap["trades"]) == 1
    trade = snap["trades"][0]
    assert trade["proposer_id"] == "p1"
    assert trade["offered_properties"] == [6]
    assert trade["requested_cash"] == 100


def test_legal_actions_for_viewer(basic_game):
    assert serialize_snapshot(basic_game, viewer_id="p0")["legal_actions"] == ["RollDice", "DeclareBankruptcy"]
    assert serialize_snapshot(basic_game, viewer_id="p1")["legal_actions"] == []
