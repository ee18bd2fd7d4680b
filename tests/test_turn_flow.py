"""
Tests for the turn phase state machine.
"""

import pytest

from monopoly_engine.exceptions import InvalidStateError
from monopoly_engine.turn import TurnContext, TurnState, TurnStateMachine


def _machine(state, rolled_doubles=False):
    return TurnStateMachine(state, rolled_doubles)


def test_roll_cycle_to_player_action():
    machine = TurnStateMachine()
    assert machine.current_state == TurnState.WAITING_FOR_ROLL
    assert machine.transition("RollDice") == TurnState.ROLLING
    assert machine.transition("RollDice") == TurnState.RESOLVING
    assert machine.transition("RollDice") == TurnState.PLAYER_ACTION


def test_resolving_to_buy_decision_and_auction():
    machine = _machine(TurnState.RESOLVING)
    machine.transition("RollDice", TurnContext(landed_on_unowned_property=True))
    assert machine.current_state == TurnState.AWAITING_BUY_DECISION

    machine.transition("DeclineProperty")
    assert machine.current_state == TurnState.AUCTION
    machine.transition("AuctionBid")
    assert machine.current_state == TurnState.AUCTION
    machine.transition("AuctionPass", TurnContext(auction_complete=True))
    assert machine.current_state == TurnState.PLAYER_ACTION


def test_buy_goes_to_player_action():
    machine = _machine(TurnState.AWAITING_BUY_DECISION)
    assert machine.transition("BuyProperty") == TurnState.PLAYER_ACTION


def test_jail_actions_keep_waiting_for_roll():
    machine = TurnStateMachine()
    machine.transition("PayJailFine")
    machine.transition("UseJailCard")
    assert machine.current_state == TurnState.WAITING_FOR_ROLL
    assert machine.transition("RollForDoubles") == TurnState.ROLLING


def test_end_turn_with_doubles_rolls_again():
    """Scenario: EndTurn after doubles returns to WaitingForRoll and clears the flag."""
    machine = _machine(TurnState.PLAYER_ACTION, rolled_doubles=True)
    assert machine.transition("EndTurn") == TurnState.WAITING_FOR_ROLL
    assert machine.rolled_doubles is False


def test_end_turn_without_doubles():
    machine = _machine(TurnState.PLAYER_ACTION)
    assert machine.transition("EndTurn") == TurnState.END_TURN
    assert machine.transition("EndTurn") == TurnState.WAITING_FOR_ROLL


def test_management_actions_stay_in_player_action():
    machine = _machine(TurnState.PLAYER_ACTION)
    for action in ("BuildHouse", "BuildHotel", "SellBuilding", "MortgageProperty", "UnmortgageProperty", "ProposeTrade"):
        assert machine.transition(action) == TurnState.PLAYER_ACTION


@pytest.mark.parametrize(
    "state,action",
    [
        (TurnState.WAITING_FOR_ROLL, "EndTurn"),
        (TurnState.WAITING_FOR_ROLL, "BuildHouse"),
        (TurnState.AWAITING_BUY_DECISION, "EndTurn"),
        (TurnState.AUCTION, "BuyProperty"),
        (TurnState.PLAYER_ACTION, "RollDice"),
        (TurnState.TRADE_NEGOTIATION, "ProposeTrade"),
    ],
)
def test_invalid_transitions(state, action):
    machine = _machine(state)
    with pytest.raises(InvalidStateError) as exc_info:
        machine.transition(action)
    assert str(exc_info.value) == f"Invalid action '{action}' in state '{state.value}'"
    assert machine.current_state == state


def test_valid_actions_per_phase():
    assert TurnStateMachine().get_valid_actions() == ["RollDice", "PayJailFine", "UseJailCard", "RollForDoubles"]
    assert _machine(TurnState.ROLLING).get_valid_actions() == []
    assert _machine(TurnState.AUCTION).can_accept("AuctionPass")
    assert "EndTurn" in _machine(TurnState.PLAYER_ACTION).get_valid_actions()
    assert not _machine(TurnState.TRADE_NEGOTIATION).can_accept("ProposeTrade")
