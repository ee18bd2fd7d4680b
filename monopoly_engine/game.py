"""
Game creation and the persisted text form of a game.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from monopoly_engine.cards import (
    Decks,
    Rng,
    create_chance_cards,
    create_community_chest_cards,
    create_deck,
)
from monopoly_engine.config import MIN_PLAYERS, GameSettings
from monopoly_engine.events import EventLog, EventType
from monopoly_engine.exceptions import ValidationError
from monopoly_engine.money import BuildingSupply
from monopoly_engine.player import DEFAULT_TOKENS, Player, PlayerSetup
from monopoly_engine.state import GameState, GameStatus

logger = logging.getLogger(__name__)

_state_adapter = TypeAdapter(GameState)


def _validate_roster(roster: List[PlayerSetup], settings: GameSettings) -> None:
    max_players = min(settings.max_players, len(DEFAULT_TOKENS))
    if len(roster) < MIN_PLAYERS or len(roster) > max_players:
        raise ValidationError(
            f"Invalid number of players: {len(roster)}. Must be {MIN_PLAYERS}-{max_players}."
        )
    ids = [p.id for p in roster]
    if len(set(ids)) != len(ids):
        raise ValidationError("Player ids must be unique")


def create_game(
    roster: List[PlayerSetup],
    settings: Optional[Union[GameSettings, Dict[str, Any]]] = None,
    game_id: Optional[str] = None,
    rng: Optional[Rng] = None,
) -> GameState:
    """
    Create a new game ready for the first roll.

    Args:
        roster: 2-6 seated players, in turn order
        settings: GameSettings or a partial override mapping
        game_id: Defaults to a random 12-character id
        rng: Shuffles both decks; defaults to random.random

    Returns:
        GameState in WaitingForRoll for the first player
    """
    if not isinstance(settings, GameSettings):
        try:
            settings = GameSettings.with_overrides(settings)
        except (TypeError, ValueError) as e:
            raise ValidationError(str(e)) from e
    _validate_roster(roster, settings)

    game_id = game_id or uuid.uuid4().hex[:12]
    players = [
        Player(
            id=setup.id,
            name=setup.name,
            token=setup.token or DEFAULT_TOKENS[i % len(DEFAULT_TOKENS)],
            cash=settings.starting_cash,
        )
        for i, setup in enumerate(roster)
    ]

    state = GameState(
        game_id=game_id,
        players=players,
        settings=settings,
        status=GameStatus.PLAYING,
        decks=Decks(
            chance=create_deck(create_chance_cards(), rng),
            community_chest=create_deck(create_community_chest_cards(), rng),
        ),
        building_supply=BuildingSupply(houses=settings.house_limit, hotels=settings.hotel_limit),
        events=EventLog(game_id=game_id),
    )
    state.events.append(
        EventType.GAME_STARTED,
        {
            "players": [p.id for p in players],
            "startingCash": settings.starting_cash,
        },
    )
    state.events.append(EventType.TURN_STARTED, {"playerId": players[0].id, "turnNumber": 1})
    logger.debug("Initialized game %s with %d players", game_id, len(players))
    return state


initialize_game = create_game


def serialize_game_state(state: GameState) -> str:
    """Serialize the whole aggregate, side state included, to JSON text."""
    return _state_adapter.dump_json(state).decode("utf-8")


def deserialize_game_state(text: Union[str, bytes]) -> GameState:
    """
    Rebuild a GameState from serialize_game_state output.

    Raises:
        ValidationError: the text is not a valid game state
    """
    try:
        return _state_adapter.validate_json(text)
    except PydanticValidationError as e:
        raise ValidationError(f"Corrupt game state: {e.error_count()} errors") from e
