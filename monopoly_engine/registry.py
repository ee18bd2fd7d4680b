from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Union

from monopoly_engine.cards import Rng
from monopoly_engine.config import GameSettings
from monopoly_engine.events import EventEmitter, GameEvent
from monopoly_engine.game import create_game, serialize_game_state
from monopoly_engine.player import PlayerSetup
from monopoly_engine.rules import Action, ActionResult, process_action
from monopoly_engine.state import GameState
from monopoly_engine.storage import GameStorage

logger = logging.getLogger(__name__)


class GameRegistry:
    """
    Single writer per game.

    Every action for a game id runs under that game's lock, so two actions
    for the same game never interleave their load/save. Different games
    proceed in parallel.
    """

    def __init__(self, storage: GameStorage, emitter: Optional[EventEmitter] = None):
        self.storage = storage
        self.emitter = emitter
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, game_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(game_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[game_id] = lock
            return lock

    def create_game(
        self,
        roster: List[PlayerSetup],
        settings: Optional[Union[GameSettings, Dict[str, Any]]] = None,
        game_id: Optional[str] = None,
        rng: Optional[Rng] = None,
    ) -> GameState:
        state = create_game(roster, settings=settings, game_id=game_id, rng=rng)
        with self._lock_for(state.game_id):
            self.storage.save_game_state(state.game_id, serialize_game_state(state))
        logger.info("Created game %s with %d players", state.game_id, len(state.players))
        self._publish(state.events.get_all())
        return state

    def submit(self, game_id: str, player_id: str, action: Action, rng: Optional[Rng] = None) -> ActionResult:
        """Run one action under the game's lock and publish what it appended."""
        with self._lock_for(game_id):
            result = process_action(self.storage, game_id, player_id, action, rng)
            self._publish(result.new_events)
        return result

    def delete_game(self, game_id: str) -> None:
        with self._lock_for(game_id):
            self.storage.delete_game_state(game_id)
        with self._locks_guard:
            self._locks.pop(game_id, None)

    def _publish(self, events: List[GameEvent]) -> None:
        if self.emitter is None:
            return
        for event in events:
            self.emitter.emit(event)
