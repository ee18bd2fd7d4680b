"""
Chance and Community Chest cards.

Decks are plain lists with the top card at index 0. A drawn card goes to
the bottom, except Get Out of Jail Free which leaves the deck until it is
returned.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional

from monopoly_engine.board import find_nearest_railroad, find_nearest_utility
from monopoly_engine.config import BOARD_SIZE
from monopoly_engine.dice import DiceResult, move_player_to
from monopoly_engine.events import EventType
from monopoly_engine.exceptions import NotFoundError, ValidationError
from monopoly_engine.jail import send_to_jail
from monopoly_engine.money import HOTEL
from monopoly_engine.resolution import (
    ResolutionType,
    SpaceResolution,
    apply_space_resolution,
    calculate_railroad_rent,
    pay_rent,
    resolve_space,
)
from monopoly_engine.spaces import SpaceType

if TYPE_CHECKING:
    from monopoly_engine.state import GameState

Rng = Callable[[], float]

CHANCE = "chance"
COMMUNITY_CHEST = "community_chest"
DECK_NAMES = (CHANCE, COMMUNITY_CHEST)


class CardEffect(Enum):
    """Types of card effects."""

    CASH = "cash"
    MOVE = "move"
    MOVE_BACK = "moveBack"
    JAIL = "jail"
    COLLECT_FROM_ALL = "collectFromAll"
    PAY_EACH_PLAYER = "payEachPlayer"
    REPAIRS = "repairs"
    ADVANCE_NEAREST_RAILROAD = "advanceNearestRailroad"
    ADVANCE_NEAREST_UTILITY = "advanceNearestUtility"
    GET_OUT_OF_JAIL_FREE = "goojf"


@dataclass
class Card:
    """Represents a Chance or Community Chest card."""

    id: str
    deck: str
    text: str
    effect: CardEffect
    amount: int = 0
    position: Optional[int] = None
    spaces: int = 0
    per_house: int = 0
    per_hotel: int = 0

    def __repr__(self) -> str:
        return f"Card('{self.id}': '{self.text}')"


@dataclass
class Decks:
    chance: List[Card] = field(default_factory=list)
    community_chest: List[Card] = field(default_factory=list)

    def get(self, deck_name: str) -> List[Card]:
        if deck_name == CHANCE:
            return self.chance
        if deck_name == COMMUNITY_CHEST:
            return self.community_chest
        raise ValidationError(f"Unknown deck: {deck_name}")


@dataclass
class CardEffectResult:
    moved_to_position: Optional[int] = None
    passed_go: bool = False
    sent_to_jail: bool = False
    needs_buy_decision: bool = False
    space_resolution: Optional[SpaceResolution] = None


def _chance(n: int, text: str, effect: CardEffect, **kwargs) -> Card:
    return Card(f"chance-{n}", CHANCE, text, effect, **kwargs)


def _chest(n: int, text: str, effect: CardEffect, **kwargs) -> Card:
    return Card(f"cc-{n}", COMMUNITY_CHEST, text, effect, **kwargs)


def create_chance_cards() -> List[Card]:
    """The 16 Chance cards in printed order."""
    return [
        _chance(1, "Advance to Boardwalk.", CardEffect.MOVE, position=39),
        _chance(2, "Advance to Go. Collect $200.", CardEffect.MOVE, position=0),
        _chance(3, "Advance to Illinois Avenue. If you pass Go, collect $200.", CardEffect.MOVE, position=24),
        _chance(4, "Advance to St. Charles Place. If you pass Go, collect $200.", CardEffect.MOVE, position=11),
        _chance(
            5,
            "Advance to the nearest Railroad. If owned, pay owner twice the rental.",
            CardEffect.ADVANCE_NEAREST_RAILROAD,
        ),
        _chance(
            6,
            "Advance to the nearest Railroad. If owned, pay owner twice the rental.",
            CardEffect.ADVANCE_NEAREST_RAILROAD,
        ),
        _chance(
            7,
            "Advance to the nearest Utility. If owned, pay owner ten times the dice roll.",
            CardEffect.ADVANCE_NEAREST_UTILITY,
        ),
        _chance(8, "Bank pays you dividend of $50.", CardEffect.CASH, amount=50),
        _chance(9, "Get Out of Jail Free.", CardEffect.GET_OUT_OF_JAIL_FREE),
        _chance(10, "Go Back 3 Spaces.", CardEffect.MOVE_BACK, spaces=3),
        _chance(11, "Go to Jail. Do not pass Go, do not collect $200.", CardEffect.JAIL),
        _chance(
            12,
            "Make general repairs on all your property. For each house pay $25, for each hotel pay $100.",
            CardEffect.REPAIRS,
            per_house=25,
            per_hotel=100,
        ),
        _chance(13, "Speeding fine $15.", CardEffect.CASH, amount=-15),
        _chance(14, "Take a trip to Reading Railroad. If you pass Go, collect $200.", CardEffect.MOVE, position=5),
        _chance(
            15,
            "You have been elected Chairman of the Board. Pay each player $50.",
            CardEffect.PAY_EACH_PLAYER,
            amount=50,
        ),
        _chance(16, "Your building loan matures. Collect $150.", CardEffect.CASH, amount=150),
    ]


def create_community_chest_cards() -> List[Card]:
    """The 16 Community Chest cards in printed order."""
    return [
        _chest(1, "Advance to Go. Collect $200.", CardEffect.MOVE, position=0),
        _chest(2, "Bank error in your favor. Collect $200.", CardEffect.CASH, amount=200),
        _chest(3, "Doctor's fee. Pay $50.", CardEffect.CASH, amount=-50),
        _chest(4, "From sale of stock you get $50.", CardEffect.CASH, amount=50),
        _chest(5, "Get Out of Jail Free.", CardEffect.GET_OUT_OF_JAIL_FREE),
        _chest(6, "Go to Jail. Do not pass Go, do not collect $200.", CardEffect.JAIL),
        _chest(7, "Holiday fund matures. Receive $100.", CardEffect.CASH, amount=100),
        _chest(8, "Income tax refund. Collect $20.", CardEffect.CASH, amount=20),
        _chest(9, "It is your birthday. Collect $10 from every player.", CardEffect.COLLECT_FROM_ALL, amount=10),
        _chest(10, "Life insurance matures. Collect $100.", CardEffect.CASH, amount=100),
        _chest(11, "Pay hospital fees of $100.", CardEffect.CASH, amount=-100),
        _chest(12, "Pay school fees of $50.", CardEffect.CASH, amount=-50),
        _chest(13, "Receive $25 consultancy fee.", CardEffect.CASH, amount=25),
        _chest(
            14,
            "You are assessed for street repairs. Pay $40 per house and $115 per hotel.",
            CardEffect.REPAIRS,
            per_house=40,
            per_hotel=115,
        ),
        _chest(15, "You have won second prize in a beauty contest. Collect $10.", CardEffect.CASH, amount=10),
        _chest(16, "You inherit $100.", CardEffect.CASH, amount=100),
    ]


def create_deck(cards: List[Card], rng: Optional[Rng] = None) -> List[Card]:
    """Return a Fisher-Yates shuffled copy of the cards."""
    rng = rng or random.random
    deck = list(cards)
    for i in range(len(deck) - 1, 0, -1):
        j = int(rng() * (i + 1))
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def draw_card(state: GameState, deck_name: str) -> Card:
    """
    Draw the top card for the current player.

    Raises:
        NotFoundError: the deck is empty
    """
    deck = state.decks.get(deck_name)
    if not deck:
        raise NotFoundError(f"{deck_name} deck is empty")

    card = deck.pop(0)
    player = state.get_active_player()
    if card.effect == CardEffect.GET_OUT_OF_JAIL_FREE:
        player.get_out_of_jail_free_cards += 1
    else:
        deck.append(card)

    state.events.append(
        EventType.CARD_DRAWN,
        {"playerId": player.id, "deck": deck_name, "cardId": card.id, "text": card.text},
    )
    return card


def return_card_to_deck(state: GameState, card: Card, deck_name: Optional[str] = None) -> None:
    """Put a card (normally a used Get Out of Jail Free) at the bottom of its deck."""
    state.decks.get(deck_name or card.deck).append(card)


def _resolve_after_move(
    state: GameState, player_id: str, dice: DiceResult, result: CardEffectResult
) -> CardEffectResult:
    resolution = resolve_space(state, player_id, dice)
    result.space_resolution = resolution
    if resolution.type == ResolutionType.UNOWNED_PROPERTY:
        result.needs_buy_decision = True
    else:
        apply_space_resolution(state, player_id, resolution)
        result.sent_to_jail = resolution.type == ResolutionType.GO_TO_JAIL
    return result


def _advance_to_nearest(
    state: GameState, player_id: str, target: int, dice: DiceResult
) -> CardEffectResult:
    passed = move_player_to(state, player_id, target)
    result = CardEffectResult(moved_to_position=target, passed_go=passed)
    space = state.get_space(target)
    owner_id = state.get_owner_id(target)

    if owner_id is None:
        result.needs_buy_decision = True
        result.space_resolution = SpaceResolution(
            ResolutionType.UNOWNED_PROPERTY, space.id, space.name, cost=space.cost
        )
        return result
    if owner_id == player_id or state.get_property_state(target).mortgaged:
        return result

    if space.space_type == SpaceType.RAILROAD:
        rent = calculate_railroad_rent(state.count_owned_of_type(owner_id, SpaceType.RAILROAD)) * 2
    else:
        rent = dice.total * 10
    pay_rent(state, player_id, owner_id, rent, target)
    result.space_resolution = SpaceResolution(
        ResolutionType.RENT_PAYMENT, space.id, space.name, rent_amount=rent, owner_id=owner_id
    )
    return result


def apply_card_effect(
    state: GameState, player_id: str, card: Card, dice: Optional[DiceResult] = None
) -> CardEffectResult:
    """
    Apply a drawn card to the player.

    Movement cards resolve the destination space: an unowned property asks
    for a buy decision, anything else is charged immediately. Without a
    dice roll, utility rent is computed from a zero total.
    """
    dice = dice or DiceResult(0, 0, 0, False)
    player = state.get_player_by_id(player_id)
    effect = card.effect

    if effect == CardEffect.CASH:
        player.cash += card.amount
        return CardEffectResult()

    if effect == CardEffect.MOVE:
        passed = move_player_to(state, player_id, card.position)
        result = CardEffectResult(moved_to_position=card.position, passed_go=passed)
        return _resolve_after_move(state, player_id, dice, result)

    if effect == CardEffect.MOVE_BACK:
        target = (player.position - card.spaces + BOARD_SIZE) % BOARD_SIZE
        move_player_to(state, player_id, target, collect_go=False)
        return _resolve_after_move(state, player_id, dice, CardEffectResult(moved_to_position=target))

    if effect == CardEffect.JAIL:
        send_to_jail(state, player_id)
        return CardEffectResult(moved_to_position=player.position, sent_to_jail=True)

    if effect in (CardEffect.COLLECT_FROM_ALL, CardEffect.PAY_EACH_PLAYER):
        sign = 1 if effect == CardEffect.COLLECT_FROM_ALL else -1
        for other in state.players:
            if other.id != player_id and other.is_in_game:
                other.cash -= sign * card.amount
                player.cash += sign * card.amount
        return CardEffectResult()

    if effect == CardEffect.REPAIRS:
        total = 0
        for space_id in player.properties:
            houses = state.get_property_state(space_id).houses
            total += card.per_hotel if houses == HOTEL else houses * card.per_house
        player.cash -= total
        return CardEffectResult()

    if effect == CardEffect.ADVANCE_NEAREST_RAILROAD:
        return _advance_to_nearest(state, player_id, find_nearest_railroad(player.position), dice)

    if effect == CardEffect.ADVANCE_NEAREST_UTILITY:
        return _advance_to_nearest(state, player_id, find_nearest_utility(player.position), dice)

    # Get Out of Jail Free was credited when drawn
    return CardEffectResult()
