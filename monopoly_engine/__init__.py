"""
Deterministic rules engine for a property-trading board game.

Transports create games through GameRegistry (or game.create_game) and feed
player intents to rules.process_action; everything else is domain logic.
"""

from monopoly_engine.config import GameSettings
from monopoly_engine.events import EventEmitter, EventLog, EventType, GameEvent
from monopoly_engine.exceptions import MonopolyError
from monopoly_engine.game import create_game, deserialize_game_state, initialize_game, serialize_game_state
from monopoly_engine.player import Player, PlayerSetup
from monopoly_engine.registry import GameRegistry
from monopoly_engine.rules import Action, ActionResult, ActionType, get_legal_actions, process_action
from monopoly_engine.schemas import ActionRequest
from monopoly_engine.snapshot import serialize_snapshot
from monopoly_engine.state import GameState, GameStatus
from monopoly_engine.storage import GameStorage, MemoryStorage, SqlStorage, create_storage
from monopoly_engine.trade import TradeTerms
from monopoly_engine.turn import TurnState

__all__ = [
    "Action",
    "ActionRequest",
    "ActionResult",
    "ActionType",
    "EventEmitter",
    "EventLog",
    "EventType",
    "GameEvent",
    "GameRegistry",
    "GameSettings",
    "GameState",
    "GameStatus",
    "GameStorage",
    "MemoryStorage",
    "MonopolyError",
    "Player",
    "PlayerSetup",
    "SqlStorage",
    "TradeTerms",
    "TurnState",
    "create_game",
    "create_storage",
    "deserialize_game_state",
    "get_legal_actions",
    "initialize_game",
    "process_action",
    "serialize_game_state",
    "serialize_snapshot",
]
