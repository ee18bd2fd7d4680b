"""
High-level rules API for controlling game flow.

process_action is the single entry point transports call: it loads the
game, checks whose turn it is, runs the action through the turn machine
and the domain modules, and persists the result only if everything
succeeded. get_legal_actions tells a client what it may send next.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from monopoly_engine.auction import place_bid, pass_bid, resolve_auction, start_auction
from monopoly_engine.bankruptcy import check_win_condition, declare_bankruptcy, get_winner
from monopoly_engine.cards import Rng, apply_card_effect, draw_card
from monopoly_engine.dice import DiceResult, apply_movement, roll_dice
from monopoly_engine.events import EventType, GameEvent
from monopoly_engine.exceptions import (
    InsufficientFundsError,
    InvalidStateError,
    InvalidTurnError,
    MonopolyError,
    NotFoundError,
    ValidationError,
)
from monopoly_engine.game import deserialize_game_state, serialize_game_state
from monopoly_engine.jail import pay_jail_fine, roll_in_jail, use_jail_card
from monopoly_engine.money import HOTEL
from monopoly_engine.properties import (
    build_hotel,
    build_house,
    buy_property,
    can_build_house,
    group_has_buildings,
    mortgage_property,
    sell_building,
    unmortgage_cost,
    unmortgage_property,
)
from monopoly_engine.resolution import (
    ResolutionType,
    SpaceResolution,
    apply_space_resolution,
    resolve_space,
)
from monopoly_engine.state import GameState, GameStatus, PendingBuyDecision, ResolutionSummary
from monopoly_engine.storage import GameStorage
from monopoly_engine.trade import (
    TradeStatus,
    TradeTerms,
    accept_trade,
    counter_trade,
    create_trade_offer,
    reject_trade,
)
from monopoly_engine.turn import TurnContext, TurnState, TurnStateMachine

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Types of actions a player can take."""

    ROLL_DICE = "RollDice"
    ROLL_FOR_DOUBLES = "RollForDoubles"
    BUY_PROPERTY = "BuyProperty"
    DECLINE_PROPERTY = "DeclineProperty"
    AUCTION_BID = "AuctionBid"
    AUCTION_PASS = "AuctionPass"
    BUILD_HOUSE = "BuildHouse"
    BUILD_HOTEL = "BuildHotel"
    SELL_BUILDING = "SellBuilding"
    MORTGAGE_PROPERTY = "MortgageProperty"
    UNMORTGAGE_PROPERTY = "UnmortgageProperty"
    PROPOSE_TRADE = "ProposeTrade"
    ACCEPT_TRADE = "AcceptTrade"
    REJECT_TRADE = "RejectTrade"
    COUNTER_TRADE = "CounterTrade"
    PAY_JAIL_FINE = "PayJailFine"
    USE_JAIL_CARD = "UseJailCard"
    DECLARE_BANKRUPTCY = "DeclareBankruptcy"
    END_TURN = "EndTurn"


# Only the current player may send these
TURN_ACTIONS = frozenset(
    {
        ActionType.ROLL_DICE,
        ActionType.ROLL_FOR_DOUBLES,
        ActionType.BUY_PROPERTY,
        ActionType.DECLINE_PROPERTY,
        ActionType.END_TURN,
        ActionType.PAY_JAIL_FINE,
        ActionType.USE_JAIL_CARD,
        ActionType.DECLARE_BANKRUPTCY,
    }
)


class Action:
    """Represents a game action that can be taken."""

    def __init__(self, action_type: ActionType, **params: Any):
        self.action_type = action_type
        self.params = params

    def require(self, name: str) -> Any:
        value = self.params.get(name)
        if value is None:
            raise ValidationError(f"{self.action_type.value} requires '{name}'")
        return value

    def __repr__(self) -> str:
        return f"Action({self.action_type.value}, {self.params})"


@dataclass
class ActionResult:
    ok: bool
    state: Optional[GameState] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    new_events: List[GameEvent] = field(default_factory=list)


Handler = Callable[[GameState, str, Action, TurnStateMachine, Optional[Rng]], None]


# === Landing and rolling ===


def _summarize(state: GameState, resolution: SpaceResolution) -> ResolutionSummary:
    summary = ResolutionSummary(type=resolution.type.value, space_name=resolution.space_name)
    if resolution.type == ResolutionType.RENT_PAYMENT:
        summary.amount = resolution.rent_amount
        summary.owner_id = resolution.owner_id
        summary.owner_name = state.get_player_by_id(resolution.owner_id).name
    elif resolution.type == ResolutionType.TAX:
        summary.amount = resolution.tax_amount
    elif resolution.type == ResolutionType.DRAW_CARD:
        summary.deck_name = resolution.deck_name
    return summary


def _offer_purchase(state: GameState, resolution: SpaceResolution) -> bool:
    state.pending_buy_decision = PendingBuyDecision(
        space_id=resolution.space_id, space_name=resolution.space_name, cost=resolution.cost
    )
    return True


def _resolve_landing(state: GameState, player_id: str, dice: DiceResult) -> bool:
    """
    Resolve the space the player ended on, following card draws.

    Returns:
        True if the player now owes a buy decision.
    """
    resolution = resolve_space(state, player_id, dice)
    state.last_resolution = _summarize(state, resolution)

    if resolution.type == ResolutionType.UNOWNED_PROPERTY:
        return _offer_purchase(state, resolution)

    apply_space_resolution(state, player_id, resolution)
    if resolution.type != ResolutionType.DRAW_CARD:
        return False

    card = draw_card(state, resolution.deck_name)
    state.last_card_drawn = card
    effect = apply_card_effect(state, player_id, card, dice)

    if effect.sent_to_jail:
        state.last_resolution = ResolutionSummary(type="goToJail", space_name="Jail")
        return False
    follow_up = effect.space_resolution
    if follow_up is None:
        return False
    if follow_up.type == ResolutionType.DRAW_CARD:
        # The card moved the player onto another card space
        return _resolve_landing(state, player_id, dice)
    state.last_resolution = _summarize(state, follow_up)
    if effect.needs_buy_decision:
        return _offer_purchase(state, follow_up)
    return False


def _finish_roll(machine: TurnStateMachine, action_type: str, landed_on_unowned: bool) -> None:
    machine.transition(action_type)  # Rolling -> Resolving
    machine.transition(action_type, TurnContext(landed_on_unowned_property=landed_on_unowned))


def _handle_roll(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    player = state.get_player_by_id(player_id)
    action_type = action.action_type.value
    if action.action_type == ActionType.ROLL_FOR_DOUBLES and not player.in_jail:
        raise InvalidStateError("Only a jailed player can roll for doubles")
    machine.transition(action_type)

    dice = roll_dice(rng)
    state.last_dice_result = dice
    state.last_card_drawn = None
    state.pending_buy_decision = None
    state.events.append(
        EventType.DICE_ROLLED,
        {"playerId": player_id, "die1": dice.die1, "die2": dice.die2, "total": dice.total},
    )

    if player.in_jail:
        # Leaving jail on doubles does not earn another roll
        machine.rolled_doubles = False
        outcome = roll_in_jail(state, player_id, dice)
        if not outcome.freed:
            state.last_resolution = ResolutionSummary(type="stayInJail", space_name="Jail")
            _finish_roll(machine, action_type, False)
            return
        landed_on_unowned = _resolve_landing(state, player_id, dice)
        if outcome.forced_exit and state.last_resolution.type == ResolutionType.NO_ACTION.value:
            state.last_resolution = ResolutionSummary(
                type="forcedJailExit", space_name="Jail", amount=state.settings.jail_fine
            )
        _finish_roll(machine, action_type, landed_on_unowned)
        return

    movement = apply_movement(state, player_id, dice)
    state.doubles_count = player.consecutive_doubles
    if movement.sent_to_jail:
        state.last_resolution = ResolutionSummary(type="threeDoublesToJail", space_name="Jail")
        machine.rolled_doubles = False
        _finish_roll(machine, action_type, False)
        return

    landed_on_unowned = _resolve_landing(state, player_id, dice)
    # A roll that ends in jail forfeits the extra roll
    machine.rolled_doubles = dice.is_doubles and not player.in_jail
    _finish_roll(machine, action_type, landed_on_unowned)


# === Buying and auctions ===


def _pending_property(state: GameState, action: Action) -> int:
    pending = state.pending_buy_decision
    property_id = action.params.get("property_id")
    if pending is None:
        if property_id is None:
            raise ValidationError(f"{action.action_type.value} requires 'property_id'")
        return property_id
    if property_id is not None and property_id != pending.space_id:
        raise ValidationError(f"Pending decision is for space {pending.space_id}, not {property_id}")
    return pending.space_id


def _handle_buy(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    buy_property(state, player_id, _pending_property(state, action))
    state.pending_buy_decision = None
    state.last_resolution = None


def _handle_decline(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    property_id = _pending_property(state, action)
    state.pending_buy_decision = None
    if state.settings.auction_enabled:
        start_auction(state, property_id)
    else:
        machine.transition(action.action_type.value, TurnContext(auction_complete=True))


def _close_auction_if_done(state: GameState, action: Action, machine: TurnStateMachine) -> None:
    if state.auction is not None and state.auction.is_complete():
        resolve_auction(state)
        machine.transition(action.action_type.value, TurnContext(auction_complete=True))


def _handle_bid(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    amount = action.require("amount")
    if state.auction is None:
        raise NotFoundError("No active auction")
    place_bid(state, player_id, amount)
    _close_auction_if_done(state, action, machine)


def _handle_pass(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    pass_bid(state, player_id)
    _close_auction_if_done(state, action, machine)


# === Property management ===


def _handle_build(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    property_id = action.require("property_id")
    if action.action_type == ActionType.BUILD_HOTEL:
        build_hotel(state, player_id, property_id)
    else:
        build_house(state, player_id, property_id)


def _handle_sell(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    sell_building(state, player_id, action.require("property_id"), action.params.get("count") or 1)


def _handle_mortgage(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    mortgage_property(state, player_id, action.require("property_id"))


def _handle_unmortgage(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    unmortgage_property(state, player_id, action.require("property_id"))


# === Trading ===


def _terms(action: Action) -> TradeTerms:
    terms = action.require("terms")
    if not isinstance(terms, TradeTerms):
        raise ValidationError("Trade terms must be a TradeTerms instance")
    return terms


def _handle_propose(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    create_trade_offer(state, player_id, action.require("recipient_id"), _terms(action))


def _handle_accept(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    accept_trade(state, action.require("trade_id"), player_id)


def _handle_reject(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    reject_trade(state, action.require("trade_id"), player_id)


def _handle_counter(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    counter_trade(state, action.require("trade_id"), player_id, _terms(action))


# === Jail ===


def _handle_jail_fine(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    pay_jail_fine(state, player_id)
    state.last_resolution = ResolutionSummary(
        type="paidJailFine", space_name="Jail", amount=state.settings.jail_fine
    )


def _handle_jail_card(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    machine.transition(action.action_type.value)
    use_jail_card(state, player_id)
    state.last_resolution = ResolutionSummary(type="usedJailCard", space_name="Jail")


# === Turn flow ===


def _clear_turn_hints(state: GameState) -> None:
    state.last_dice_result = None
    state.last_card_drawn = None
    state.last_resolution = None
    state.pending_buy_decision = None
    state.doubles_count = 0


def advance_to_next_player(state: GameState) -> None:
    """Seat the next active, non-bankrupt player and start their turn."""
    if len(state.players_in_game()) <= 1:
        return
    state.get_active_player().consecutive_doubles = 0
    next_index = (state.current_player_index + 1) % len(state.players)
    while not state.players[next_index].is_in_game:
        next_index = (next_index + 1) % len(state.players)
    state.current_player_index = next_index
    state.turn_number += 1
    state.events.append(
        EventType.TURN_STARTED,
        {"playerId": state.players[next_index].id, "turnNumber": state.turn_number},
    )


def _handle_end_turn(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    player = state.get_player_by_id(player_id)
    if player.cash < 0:
        raise InsufficientFundsError("Raise funds or declare bankruptcy before ending the turn")
    machine.transition(action.action_type.value)
    _clear_turn_hints(state)
    if machine.current_state == TurnState.END_TURN:
        advance_to_next_player(state)
        machine.transition(action.action_type.value)  # EndTurn -> WaitingForRoll


def _handle_bankruptcy(state: GameState, player_id: str, action: Action, machine: TurnStateMachine, rng: Optional[Rng]) -> None:
    declare_bankruptcy(state, player_id, action.params.get("creditor_id"))
    _clear_turn_hints(state)

    if state.auction is not None and player_id in state.auction.eligible_players:
        pass_bid(state, player_id)
        _close_auction_if_done(state, action, machine)

    current = state.get_active_player()
    if not current.is_in_game:
        if state.auction is not None:
            resolve_auction(state)
        advance_to_next_player(state)
        machine.current_state = TurnState.WAITING_FOR_ROLL
        machine.rolled_doubles = False


_HANDLERS: Dict[ActionType, Handler] = {
    ActionType.ROLL_DICE: _handle_roll,
    ActionType.ROLL_FOR_DOUBLES: _handle_roll,
    ActionType.BUY_PROPERTY: _handle_buy,
    ActionType.DECLINE_PROPERTY: _handle_decline,
    ActionType.AUCTION_BID: _handle_bid,
    ActionType.AUCTION_PASS: _handle_pass,
    ActionType.BUILD_HOUSE: _handle_build,
    ActionType.BUILD_HOTEL: _handle_build,
    ActionType.SELL_BUILDING: _handle_sell,
    ActionType.MORTGAGE_PROPERTY: _handle_mortgage,
    ActionType.UNMORTGAGE_PROPERTY: _handle_unmortgage,
    ActionType.PROPOSE_TRADE: _handle_propose,
    ActionType.ACCEPT_TRADE: _handle_accept,
    ActionType.REJECT_TRADE: _handle_reject,
    ActionType.COUNTER_TRADE: _handle_counter,
    ActionType.PAY_JAIL_FINE: _handle_jail_fine,
    ActionType.USE_JAIL_CARD: _handle_jail_card,
    ActionType.DECLARE_BANKRUPTCY: _handle_bankruptcy,
    ActionType.END_TURN: _handle_end_turn,
}


def apply_action(state: GameState, player_id: str, action: Action, rng: Optional[Rng] = None) -> None:
    """
    Validate and apply one action to a state in place.

    Raises a MonopolyError subclass on any rule violation. The state may be
    partly modified when that happens, so callers must discard it; process_action
    does so by never persisting a failed action.
    """
    if state.status != GameStatus.PLAYING:
        raise InvalidStateError("Game is not in progress")
    player = state.get_player_by_id(player_id)
    if not player.is_in_game:
        raise InvalidStateError(f"Player {player_id} is no longer in the game")
    if action.action_type in TURN_ACTIONS and state.get_active_player().id != player_id:
        raise InvalidTurnError("Not your turn")

    machine = TurnStateMachine(state.turn_state, state.rolled_doubles)
    _HANDLERS[action.action_type](state, player_id, action, machine, rng)
    state.turn_state = machine.current_state
    state.rolled_doubles = machine.rolled_doubles
    check_win_condition(state)


def process_action(
    storage: GameStorage,
    game_id: str,
    player_id: str,
    action: Action,
    rng: Optional[Rng] = None,
) -> ActionResult:
    """
    Load, apply and persist one action.

    Domain errors come back as ActionResult(ok=False) and nothing is saved.
    Callers must serialize calls per game id (see registry.GameRegistry).
    """
    raw = storage.load_game_state(game_id)
    if raw is None:
        return ActionResult(ok=False, error=f"Game {game_id} not found", error_code=NotFoundError.code)

    logger.debug("Game %s: %s from %s", game_id, action, player_id)
    try:
        state = deserialize_game_state(raw)
        loaded_events = len(state.events)
        apply_action(state, player_id, action, rng)
    except MonopolyError as e:
        logger.info(
            "Game %s: rejected %s from %s: %s (%s)",
            game_id,
            action.action_type.value,
            player_id,
            e,
            e.code,
        )
        return ActionResult(ok=False, error=str(e), error_code=e.code)
    except Exception:
        logger.exception("Game %s: unexpected failure processing %s", game_id, action)
        raise

    if state.status == GameStatus.FINISHED:
        logger.info("Game %s finished, winner: %s", game_id, get_winner(state))
    storage.save_game_state(game_id, serialize_game_state(state))
    return ActionResult(ok=True, state=state, new_events=state.events.get_all()[loaded_events:])


# === Legal actions ===


def _management_actions(state: GameState, player_id: str) -> List[ActionType]:
    player = state.get_player_by_id(player_id)
    actions: List[ActionType] = []
    owned = [state.get_space(sid) for sid in player.properties]

    buildable = [state.get_property_state(s.id).houses for s in owned if can_build_house(state, player_id, s.id)]
    if any(houses < HOTEL - 1 for houses in buildable):
        actions.append(ActionType.BUILD_HOUSE)
    if any(houses == HOTEL - 1 for houses in buildable):
        actions.append(ActionType.BUILD_HOTEL)
    if any(state.get_property_state(s.id).houses > 0 for s in owned):
        actions.append(ActionType.SELL_BUILDING)
    if any(not state.get_property_state(s.id).mortgaged and not group_has_buildings(state, s) for s in owned):
        actions.append(ActionType.MORTGAGE_PROPERTY)
    if any(
        state.get_property_state(s.id).mortgaged
        and player.cash >= unmortgage_cost(s, state.settings.mortgage_interest_rate)
        for s in owned
    ):
        actions.append(ActionType.UNMORTGAGE_PROPERTY)
    if len(state.players_in_game()) > 1:
        actions.append(ActionType.PROPOSE_TRADE)
    return actions


def get_legal_actions(state: GameState, player_id: str) -> List[ActionType]:
    """
    Action types this player may send right now.

    This is the main interface for clients to drive their controls.
    """
    if state.status != GameStatus.PLAYING:
        return []
    player = state.find_player(player_id)
    if player is None or not player.is_in_game:
        return []

    is_current = state.get_active_player().id == player_id
    actions: List[ActionType] = []
    phase = state.turn_state

    if phase == TurnState.AUCTION and state.auction is not None:
        if player_id in state.auction.remaining_bidders:
            if player.cash > state.auction.high_bid:
                actions.append(ActionType.AUCTION_BID)
            actions.append(ActionType.AUCTION_PASS)
    elif phase == TurnState.WAITING_FOR_ROLL and is_current:
        if player.in_jail:
            actions.append(ActionType.ROLL_FOR_DOUBLES)
            if player.cash >= state.settings.jail_fine:
                actions.append(ActionType.PAY_JAIL_FINE)
            if player.get_out_of_jail_free_cards > 0:
                actions.append(ActionType.USE_JAIL_CARD)
        else:
            actions.append(ActionType.ROLL_DICE)
    elif phase == TurnState.AWAITING_BUY_DECISION and is_current:
        pending = state.pending_buy_decision
        if pending is not None and player.cash >= pending.cost:
            actions.append(ActionType.BUY_PROPERTY)
        actions.append(ActionType.DECLINE_PROPERTY)
    elif phase == TurnState.PLAYER_ACTION:
        actions.extend(_management_actions(state, player_id))
        if is_current:
            actions.append(ActionType.END_TURN)

    if any(
        t.recipient_id == player_id and t.status == TradeStatus.PENDING for t in state.trades.values()
    ):
        actions.extend([ActionType.ACCEPT_TRADE, ActionType.REJECT_TRADE, ActionType.COUNTER_TRADE])
    if is_current:
        actions.append(ActionType.DECLARE_BANKRUPTCY)
    return actions
