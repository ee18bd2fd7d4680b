"""
Turn phase state machine.

Gates which actions the current turn phase accepts. Phases cycle once per
turn; the match itself ends through bankruptcy, not through this machine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from monopoly_engine.exceptions import InvalidStateError


class TurnState(Enum):
    WAITING_FOR_ROLL = "WaitingForRoll"
    ROLLING = "Rolling"
    RESOLVING = "Resolving"
    AWAITING_BUY_DECISION = "AwaitingBuyDecision"
    AUCTION = "Auction"
    PLAYER_ACTION = "PlayerAction"
    # Declared for compatibility with persisted states; no transition enters it.
    # Trades are proposed inline during PlayerAction.
    TRADE_NEGOTIATION = "TradeNegotiation"
    END_TURN = "EndTurn"


@dataclass
class TurnContext:
    """Facts the processor feeds into the non-action transitions."""

    landed_on_unowned_property: bool = False
    auction_complete: bool = False


MANAGEMENT_ACTIONS = (
    "BuildHouse",
    "BuildHotel",
    "SellBuilding",
    "MortgageProperty",
    "UnmortgageProperty",
    "ProposeTrade",
)

_VALID_ACTIONS = {
    TurnState.WAITING_FOR_ROLL: ["RollDice", "PayJailFine", "UseJailCard", "RollForDoubles"],
    TurnState.ROLLING: [],
    TurnState.RESOLVING: [],
    TurnState.AWAITING_BUY_DECISION: ["BuyProperty", "DeclineProperty"],
    TurnState.AUCTION: ["AuctionBid", "AuctionPass"],
    TurnState.PLAYER_ACTION: list(MANAGEMENT_ACTIONS) + ["EndTurn"],
    TurnState.TRADE_NEGOTIATION: [],
    TurnState.END_TURN: [],
}


class TurnStateMachine:
    """
    Eight-phase turn machine.

    The machine holds no game data beyond the current phase and whether the
    current player rolled doubles this turn; both are copied from and back to
    GameState around every action.
    """

    def __init__(self, current_state: TurnState = TurnState.WAITING_FOR_ROLL, rolled_doubles: bool = False):
        self.current_state = current_state
        self.rolled_doubles = rolled_doubles

    def _reject(self, action_type: str) -> None:
        raise InvalidStateError(
            f"Invalid action '{action_type}' in state '{self.current_state.value}'"
        )

    def transition(self, action_type: str, context: Optional[TurnContext] = None) -> TurnState:
        """
        Advance the machine for an action.

        Rolling, Resolving and EndTurn advance unconditionally; Resolving and
        Auction read the context to pick their exit.

        Raises:
            InvalidStateError: action not accepted in the current phase
        """
        context = context or TurnContext()
        state = self.current_state

        if state == TurnState.WAITING_FOR_ROLL:
            if action_type in ("RollDice", "RollForDoubles"):
                self.current_state = TurnState.ROLLING
            elif action_type not in ("PayJailFine", "UseJailCard"):
                self._reject(action_type)

        elif state == TurnState.ROLLING:
            self.current_state = TurnState.RESOLVING

        elif state == TurnState.RESOLVING:
            if context.landed_on_unowned_property:
                self.current_state = TurnState.AWAITING_BUY_DECISION
            else:
                self.current_state = TurnState.PLAYER_ACTION

        elif state == TurnState.AWAITING_BUY_DECISION:
            if action_type == "BuyProperty":
                self.current_state = TurnState.PLAYER_ACTION
            elif action_type == "DeclineProperty":
                self.current_state = TurnState.AUCTION
            else:
                self._reject(action_type)

        elif state == TurnState.AUCTION:
            if context.auction_complete:
                self.current_state = TurnState.PLAYER_ACTION
            elif action_type not in ("AuctionBid", "AuctionPass"):
                self._reject(action_type)

        elif state == TurnState.PLAYER_ACTION:
            if action_type == "EndTurn":
                if self.rolled_doubles:
                    self.rolled_doubles = False
                    self.current_state = TurnState.WAITING_FOR_ROLL
                else:
                    self.current_state = TurnState.END_TURN
            elif action_type not in MANAGEMENT_ACTIONS:
                self._reject(action_type)

        elif state == TurnState.END_TURN:
            self.current_state = TurnState.WAITING_FOR_ROLL

        else:
            self._reject(action_type)

        return self.current_state

    def get_valid_actions(self) -> List[str]:
        """Action types the current phase accepts."""
        return list(_VALID_ACTIONS[self.current_state])

    def can_accept(self, action_type: str) -> bool:
        return action_type in _VALID_ACTIONS[self.current_state]
