"""
Tests for the per-game single-writer registry.
"""

import threading

from monopoly_engine.events import EventEmitter, EventType
from monopoly_engine.registry import GameRegistry
from monopoly_engine.rules import Action, ActionType
from monopoly_engine.storage import MemoryStorage

from helpers import dice_rng


def test_create_game_persists_and_publishes(two_players):
    emitter = EventEmitter()
    seen = []
    emitter.on("*", lambda e: seen.append(e.type))
    registry = GameRegistry(MemoryStorage(), emitter)

    state = registry.create_game(two_players, game_id="r1")

    assert registry.storage.load_game_state("r1") is not None
    assert state.game_id == "r1"
    assert seen == [EventType.GAME_STARTED, EventType.TURN_STARTED]


def test_submit_publishes_only_new_events(two_players):
    emitter = EventEmitter()
    seen = []
    registry = GameRegistry(MemoryStorage(), emitter)
    registry.create_game(two_players, game_id="r1")
    emitter.on("*", lambda e: seen.append(e.type))

    result = registry.submit("r1", "p0", Action(ActionType.ROLL_DICE), dice_rng((1, 2)))

    assert result.ok
    assert seen == [EventType.DICE_ROLLED, EventType.PLAYER_MOVED]


def test_failed_submit_publishes_nothing(two_players):
    emitter = EventEmitter()
    seen = []
    emitter.on("*", seen.append)
    registry = GameRegistry(MemoryStorage(), emitter)
    registry.create_game(two_players, game_id="r1")
    seen.clear()

    result = registry.submit("r1", "p1", Action(ActionType.ROLL_DICE))

    assert result.error_code == "InvalidTurn"
    assert seen == []


def test_concurrent_submits_are_serialized(two_players):
    """Only one of many racing rolls for the same turn can succeed."""
    registry = GameRegistry(MemoryStorage())
    registry.create_game(two_players, game_id="r1")
    results = []
    barrier = threading.Barrier(8)

    def roll():
        barrier.wait()
        results.append(registry.submit("r1", "p0", Action(ActionType.ROLL_DICE), dice_rng((1, 3))))

    threads = [threading.Thread(target=roll) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.ok) == 1
    assert all(r.error_code == "InvalidState" for r in results if not r.ok)


def test_games_are_independent(two_players):
    registry = GameRegistry(MemoryStorage())
    registry.create_game(two_players, game_id="a")
    registry.create_game(two_players, game_id="b")
    assert registry.submit("a", "p0", Action(ActionType.ROLL_DICE), dice_rng((1, 3))).ok
    assert registry.submit("b", "p0", Action(ActionType.ROLL_DICE), dice_rng((1, 3))).ok


def test_delete_game(two_players):
    registry = GameRegistry(MemoryStorage())
    registry.create_game(two_players, game_id="r1")
    registry.delete_game("r1")
    assert registry.storage.load_game_state("r1") is None
    assert registry.submit("r1", "p0", Action(ActionType.ROLL_DICE)).error_code == "NotFound"
