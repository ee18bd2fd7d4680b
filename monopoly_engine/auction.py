"""
Open-outcry auction for a property the lander declined.

Every active, non-bankrupt player at the time the auction opens may bid,
including the player who declined. Bids must beat the current high bid
and be covered by cash. The auction closes when nobody is left, or when
the only player left is the high bidder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from monopoly_engine.events import EventType
from monopoly_engine.exceptions import (
    AuctionRuleError,
    InsufficientFundsError,
    InvalidStateError,
    NotFoundError,
    OwnershipError,
)
from monopoly_engine.money import PropertyStateEntry

if TYPE_CHECKING:
    from monopoly_engine.state import GameState


@dataclass
class AuctionState:
    property_id: int
    high_bid: int = 0
    high_bidder_id: Optional[str] = None
    eligible_players: List[str] = field(default_factory=list)
    passed_players: List[str] = field(default_factory=list)

    @property
    def remaining_bidders(self) -> List[str]:
        return [pid for pid in self.eligible_players if pid not in self.passed_players]

    def is_complete(self) -> bool:
        remaining = self.remaining_bidders
        if not remaining:
            return True
        return len(remaining) == 1 and remaining[0] == self.high_bidder_id


def _require_auction(state: GameState) -> AuctionState:
    if state.auction is None:
        raise NotFoundError("No active auction")
    return state.auction


def start_auction(state: GameState, property_id: int) -> AuctionState:
    """Open an auction; only one may run per game."""
    if state.auction is not None:
        raise InvalidStateError("An auction is already in progress")
    space = state.get_space(property_id)
    if not space.is_purchasable:
        raise OwnershipError(f"{space.name} cannot be auctioned")
    if state.get_owner_id(property_id) is not None:
        raise OwnershipError(f"{space.name} is already owned")

    eligible = [p.id for p in state.players_in_game()]
    state.auction = AuctionState(property_id=property_id, eligible_players=eligible)
    state.events.append(
        EventType.AUCTION_STARTED,
        {"propertyId": property_id, "propertyName": space.name, "players": eligible},
    )
    return state.auction


def place_bid(state: GameState, player_id: str, amount: int) -> AuctionState:
    auction = _require_auction(state)
    player = state.get_player_by_id(player_id)

    if player_id not in auction.eligible_players:
        raise AuctionRuleError(f"Player {player_id} is not eligible for this auction")
    if player_id in auction.passed_players:
        raise AuctionRuleError(f"Player {player_id} has already passed")
    if amount <= auction.high_bid:
        raise AuctionRuleError(
            f"Bid ${amount} must be greater than current high bid ${auction.high_bid}"
        )
    if amount > player.cash:
        raise InsufficientFundsError(f"Player {player_id} cannot afford ${amount} (has ${player.cash})")

    auction.high_bid = amount
    auction.high_bidder_id = player_id
    state.events.append(
        EventType.AUCTION_BID,
        {"playerId": player_id, "propertyId": auction.property_id, "amount": amount},
    )
    return auction


def pass_bid(state: GameState, player_id: str) -> AuctionState:
    """Drop out of the auction. Passing twice is harmless."""
    auction = _require_auction(state)
    if player_id not in auction.passed_players:
        auction.passed_players.append(player_id)
    return auction


def is_auction_complete(state: GameState) -> bool:
    return state.auction is None or state.auction.is_complete()


def resolve_auction(state: GameState) -> Optional[str]:
    """
    Close the auction and hand the property to the high bidder.

    Returns:
        Winner id, or None if nobody bid (the property stays unowned)
    """
    auction = _require_auction(state)
    winner_id = None
    if auction.high_bidder_id is not None and auction.high_bid > 0:
        winner = state.get_player_by_id(auction.high_bidder_id)
        winner.cash -= auction.high_bid
        winner.properties.append(auction.property_id)
        state.property_states[auction.property_id] = PropertyStateEntry()
        winner_id = winner.id

    state.events.append(
        EventType.AUCTION_ENDED,
        {"propertyId": auction.property_id, "winnerId": winner_id, "amount": auction.high_bid},
    )
    state.auction = None
    return winner_id
