"""Shared test fixtures for the engine tests."""

import pytest

from monopoly_engine.game import create_game, serialize_game_state
from monopoly_engine.player import PlayerSetup
from monopoly_engine.storage import MemoryStorage


def _roster(n):
    names = ["Alice", "Bob", "Charlie", "Diana", "Eve", "Frank"]
    return [PlayerSetup(f"p{i}", names[i]) for i in range(n)]


@pytest.fixture
def two_players():
    """Two seated players, p0 and p1."""
    return _roster(2)


@pytest.fixture
def three_players():
    return _roster(3)


@pytest.fixture
def four_players():
    """Four seated players, p0 to p3."""
    return _roster(4)


@pytest.fixture
def basic_game(two_players):
    """Two-player game with a fixed id."""
    return create_game(two_players, game_id="game-2p")


@pytest.fixture
def three_player_game(three_players):
    return create_game(three_players, game_id="game-3p")


@pytest.fixture
def four_player_game(four_players):
    """Game with four players and a fixed id."""
    return create_game(four_players, game_id="game-4p")


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def stored_game(storage, basic_game):
    """The two-player game, saved to memory storage."""
    storage.save_game_state(basic_game.game_id, serialize_game_state(basic_game))
    return basic_game
