"""
Game event log and in-process event fan-out.

The log is part of the persisted game state and is append-only. Consumers
(UI, audio cues) replay it; rule enforcement never reads it.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union


class EventType(Enum):
    """Types of game events."""

    GAME_STARTED = "GameStarted"
    TURN_STARTED = "TurnStarted"
    DICE_ROLLED = "DiceRolled"
    PLAYER_MOVED = "PlayerMoved"
    PASSED_GO = "PassedGo"

    PROPERTY_PURCHASED = "PropertyPurchased"
    AUCTION_STARTED = "AuctionStarted"
    AUCTION_BID = "AuctionBid"
    AUCTION_ENDED = "AuctionEnded"

    RENT_PAID = "RentPaid"
    TAX_PAID = "TaxPaid"
    CARD_DRAWN = "CardDrawn"

    HOUSE_BUILT = "HouseBuilt"
    HOTEL_BUILT = "HotelBuilt"
    PROPERTY_MORTGAGED = "PropertyMortgaged"
    PROPERTY_UNMORTGAGED = "PropertyUnmortgaged"

    PLAYER_JAILED = "PlayerJailed"
    PLAYER_FREED = "PlayerFreed"

    TRADE_COMPLETED = "TradeCompleted"
    PLAYER_BANKRUPT = "PlayerBankrupt"
    GAME_ENDED = "GameEnded"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class GameEvent:
    """A logged event in the game."""

    id: str
    game_id: str
    type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0

    def __repr__(self) -> str:
        return f"[{self.id}] {self.type.value}: {self.payload}"


@dataclass
class EventLog:
    """Append-only event sequence for one game."""

    game_id: str = ""
    events: List[GameEvent] = field(default_factory=list)

    def append(self, event_type: EventType, payload: Optional[Dict[str, Any]] = None) -> GameEvent:
        """Log a game event. Ids are ``evt-<n>`` in append order."""
        event = GameEvent(
            id=f"evt-{len(self.events) + 1}",
            game_id=self.game_id,
            type=event_type,
            payload=dict(payload or {}),
            timestamp=now_ms(),
        )
        self.events.append(event)
        return event

    def get_all(self) -> List[GameEvent]:
        return self.events.copy()

    def of_type(self, event_type: EventType) -> List[GameEvent]:
        return [e for e in self.events if e.type == event_type]

    def get_events_since(self, timestamp: int) -> List[GameEvent]:
        """Events strictly newer than the given epoch-ms timestamp."""
        return [e for e in self.events if e.timestamp > timestamp]

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)


EventHandler = Callable[[GameEvent], None]
WILDCARD = "*"


class EventEmitter:
    """
    Type-filtered publish/subscribe for game events.

    Handlers registered under "*" receive every event, after the
    type-specific handlers.
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    @staticmethod
    def _key(event_type: Union[EventType, str]) -> str:
        return event_type.value if isinstance(event_type, EventType) else event_type

    def on(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        self._handlers.setdefault(self._key(event_type), []).append(handler)

    def off(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        key = self._key(event_type)
        self._handlers[key] = [h for h in self._handlers.get(key, []) if h is not handler]

    def emit(self, event: GameEvent) -> None:
        for handler in list(self._handlers.get(event.type.value, [])):
            handler(event)
        for handler in list(self._handlers.get(WILDCARD, [])):
            handler(event)
