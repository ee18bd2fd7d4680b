"""
Two-party trades of properties, cash and Get Out of Jail Free cards.

Trade flow:
1. Proposer creates an offer addressed to one recipient
2. Recipient accepts, rejects, or counters (which swaps the roles)
3. On accept, every asset moves in one step after both sides re-validate
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List

from monopoly_engine.events import EventType
from monopoly_engine.exceptions import (
    InsufficientFundsError,
    InvalidStateError,
    NotFoundError,
    OwnershipError,
    TradeRuleError,
    ValidationError,
)

if TYPE_CHECKING:
    from monopoly_engine.player import Player
    from monopoly_engine.state import GameState


class TradeStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COUNTERED = "countered"


@dataclass
class TradeTerms:
    """What the proposer gives and what they ask for in return."""

    offered_properties: List[int] = field(default_factory=list)
    offered_cash: int = 0
    offered_cards: int = 0
    requested_properties: List[int] = field(default_factory=list)
    requested_cash: int = 0
    requested_cards: int = 0

    def is_empty(self) -> bool:
        return not (
            self.offered_properties
            or self.offered_cash
            or self.offered_cards
            or self.requested_properties
            or self.requested_cash
            or self.requested_cards
        )


@dataclass
class TradeOffer:
    id: str
    proposer_id: str
    recipient_id: str
    offered_properties: List[int] = field(default_factory=list)
    offered_cash: int = 0
    offered_cards: int = 0
    requested_properties: List[int] = field(default_factory=list)
    requested_cash: int = 0
    requested_cards: int = 0
    status: TradeStatus = TradeStatus.PENDING

    def __repr__(self) -> str:
        return (
            f"TradeOffer({self.id}: {self.proposer_id} -> {self.recipient_id}, "
            f"status={self.status.value})"
        )


def _validate_no_buildings(state: GameState, space_id: int) -> None:
    space = state.get_space(space_id)
    if not space.color_group:
        return
    for peer in state.board:
        if peer.color_group == space.color_group and state.get_property_state(peer.id).houses > 0:
            raise TradeRuleError(f"Cannot trade: buildings exist in {space.color_group} color group")


def _validate_side(
    state: GameState, player: Player, properties: List[int], cash: int, cards: int, role: str
) -> None:
    if len(set(properties)) != len(properties):
        raise ValidationError(f"{role} lists the same property more than once")
    for space_id in properties:
        if space_id not in player.properties:
            raise OwnershipError(f"{role} does not own property {space_id}")
        _validate_no_buildings(state, space_id)
    if cash < 0 or cards < 0:
        raise ValidationError("Trade amounts cannot be negative")
    if cash > player.cash:
        raise InsufficientFundsError(f"{role} cannot afford offered cash")
    if cards > player.get_out_of_jail_free_cards:
        raise TradeRuleError(f"{role} does not have enough Get Out of Jail Free cards")


def _validate_terms(state: GameState, proposer: Player, recipient: Player, terms: TradeTerms) -> None:
    if proposer.id == recipient.id:
        raise ValidationError("Cannot trade with yourself")
    for player in (proposer, recipient):
        if not player.is_in_game:
            raise InvalidStateError(f"Player {player.id} is no longer in the game")
    if terms.is_empty():
        raise ValidationError("Trade must include at least one asset")
    _validate_side(
        state, proposer, terms.offered_properties, terms.offered_cash, terms.offered_cards, "Proposer"
    )
    _validate_side(
        state,
        recipient,
        terms.requested_properties,
        0,
        terms.requested_cards,
        "Recipient",
    )
    if terms.requested_cash < 0:
        raise ValidationError("Trade amounts cannot be negative")


def create_trade_offer(state: GameState, proposer_id: str, recipient_id: str, terms: TradeTerms) -> TradeOffer:
    """Validate and store a pending offer with id ``trade-<n>``."""
    proposer = state.get_player_by_id(proposer_id)
    recipient = state.get_player_by_id(recipient_id)
    _validate_terms(state, proposer, recipient, terms)

    trade = TradeOffer(
        id=f"trade-{state.next_trade_id}",
        proposer_id=proposer_id,
        recipient_id=recipient_id,
        offered_properties=list(terms.offered_properties),
        offered_cash=terms.offered_cash,
        offered_cards=terms.offered_cards,
        requested_properties=list(terms.requested_properties),
        requested_cash=terms.requested_cash,
        requested_cards=terms.requested_cards,
    )
    state.next_trade_id += 1
    state.trades[trade.id] = trade
    return trade


def get_trade(state: GameState, trade_id: str) -> TradeOffer:
    trade = state.trades.get(trade_id)
    if trade is None:
        raise NotFoundError(f"Trade {trade_id} not found")
    return trade


def _pending_for_recipient(state: GameState, trade_id: str, player_id: str) -> TradeOffer:
    trade = get_trade(state, trade_id)
    if trade.status != TradeStatus.PENDING:
        raise TradeRuleError(f"Trade {trade_id} is not pending")
    if trade.recipient_id != player_id:
        raise TradeRuleError(f"Only {trade.recipient_id} can respond to trade {trade_id}")
    return trade


def accept_trade(state: GameState, trade_id: str, player_id: str) -> TradeOffer:
    """
    Execute a pending trade.

    Both sides are validated again first, so assets that changed hands
    since the offer was made fail the whole trade instead of part of it.
    """
    trade = _pending_for_recipient(state, trade_id, player_id)
    proposer = state.get_player_by_id(trade.proposer_id)
    recipient = state.get_player_by_id(trade.recipient_id)
    terms = TradeTerms(
        trade.offered_properties,
        trade.offered_cash,
        trade.offered_cards,
        trade.requested_properties,
        trade.requested_cash,
        trade.requested_cards,
    )
    _validate_terms(state, proposer, recipient, terms)
    if trade.requested_cash > recipient.cash:
        raise InsufficientFundsError("Recipient cannot afford requested cash")

    for space_id in trade.offered_properties:
        proposer.properties.remove(space_id)
        recipient.properties.append(space_id)
    for space_id in trade.requested_properties:
        recipient.properties.remove(space_id)
        proposer.properties.append(space_id)

    proposer.cash += trade.requested_cash - trade.offered_cash
    recipient.cash += trade.offered_cash - trade.requested_cash
    proposer.get_out_of_jail_free_cards += trade.requested_cards - trade.offered_cards
    recipient.get_out_of_jail_free_cards += trade.offered_cards - trade.requested_cards

    trade.status = TradeStatus.ACCEPTED
    state.events.append(
        EventType.TRADE_COMPLETED,
        {
            "tradeId": trade.id,
            "proposerId": trade.proposer_id,
            "recipientId": trade.recipient_id,
            "offeredProperties": list(trade.offered_properties),
            "requestedProperties": list(trade.requested_properties),
            "offeredCash": trade.offered_cash,
            "requestedCash": trade.requested_cash,
        },
    )
    return trade


def reject_trade(state: GameState, trade_id: str, player_id: str) -> TradeOffer:
    trade = _pending_for_recipient(state, trade_id, player_id)
    trade.status = TradeStatus.REJECTED
    return trade


def cancel_trades_involving(state: GameState, player_id: str) -> List[TradeOffer]:
    """Reject every pending offer the player sent or received."""
    cancelled = []
    for trade in state.trades.values():
        if trade.status == TradeStatus.PENDING and player_id in (trade.proposer_id, trade.recipient_id):
            trade.status = TradeStatus.REJECTED
            cancelled.append(trade)
    return cancelled


def counter_trade(state: GameState, trade_id: str, player_id: str, terms: TradeTerms) -> TradeOffer:
    """Mark the original countered and send a new offer back the other way."""
    original = _pending_for_recipient(state, trade_id, player_id)
    counter = create_trade_offer(state, original.recipient_id, original.proposer_id, terms)
    original.status = TradeStatus.COUNTERED
    return counter
