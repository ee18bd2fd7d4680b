"""
The GameState aggregate.

Everything the engine needs between two actions lives on this object and
is persisted with it: players, board, decks, property and building state,
the open auction, trades, the turn phase and the event log.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from monopoly_engine.auction import AuctionState
from monopoly_engine.board import create_standard_board, get_space_by_id
from monopoly_engine.cards import Card, Decks
from monopoly_engine.config import GameSettings
from monopoly_engine.dice import DiceResult
from monopoly_engine.events import EventLog
from monopoly_engine.exceptions import NotFoundError
from monopoly_engine.money import BuildingSupply, PropertyStateEntry
from monopoly_engine.player import Player
from monopoly_engine.spaces import Space, SpaceType
from monopoly_engine.trade import TradeOffer
from monopoly_engine.turn import TurnState


class GameStatus(Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass
class PendingBuyDecision:
    space_id: int
    space_name: str
    cost: int


@dataclass
class ResolutionSummary:
    """What happened on the last landing, for the UI."""

    type: str
    space_name: str
    amount: Optional[int] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    deck_name: Optional[str] = None


@dataclass
class GameState:
    """
    Represents the complete state of a Monopoly game.
    Mutated only through the action processor.
    """

    game_id: str
    players: List[Player]
    settings: GameSettings = field(default_factory=GameSettings)
    status: GameStatus = GameStatus.PLAYING
    current_player_index: int = 0
    turn_number: int = 1
    board: List[Space] = field(default_factory=create_standard_board)
    decks: Decks = field(default_factory=Decks)

    turn_state: TurnState = TurnState.WAITING_FOR_ROLL
    rolled_doubles: bool = False

    property_states: Dict[int, PropertyStateEntry] = field(default_factory=dict)
    building_supply: BuildingSupply = field(default_factory=BuildingSupply)
    auction: Optional[AuctionState] = None
    trades: Dict[str, TradeOffer] = field(default_factory=dict)
    next_trade_id: int = 1

    events: EventLog = field(default_factory=EventLog)

    # Transient UI hints, cleared at end of turn
    last_dice_result: Optional[DiceResult] = None
    pending_buy_decision: Optional[PendingBuyDecision] = None
    last_resolution: Optional[ResolutionSummary] = None
    last_card_drawn: Optional[Card] = None
    doubles_count: int = 0

    def get_active_player(self) -> Player:
        """The player whose turn it is."""
        return self.players[self.current_player_index]

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_player_by_id(self, player_id: str) -> Player:
        player = self.find_player(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found")
        return player

    def get_space(self, space_id: int) -> Space:
        return get_space_by_id(self.board, space_id)

    def players_in_game(self) -> List[Player]:
        """Active, non-bankrupt players in seat order."""
        return [p for p in self.players if p.is_in_game]

    def get_owner_id(self, space_id: int) -> Optional[str]:
        for player in self.players:
            if space_id in player.properties:
                return player.id
        return None

    def get_properties_owned_by(self, player_id: str) -> List[Space]:
        player = self.get_player_by_id(player_id)
        return [self.get_space(space_id) for space_id in player.properties]

    def get_property_state(self, space_id: int) -> PropertyStateEntry:
        """Mutable state of a property, created on first access."""
        entry = self.property_states.get(space_id)
        if entry is None:
            entry = PropertyStateEntry()
            self.property_states[space_id] = entry
        return entry

    def count_owned_of_type(self, player_id: str, space_type: SpaceType) -> int:
        player = self.get_player_by_id(player_id)
        return sum(1 for sid in player.properties if self.get_space(sid).space_type == space_type)

    def has_monopoly(self, player_id: str, color_group: Optional[str]) -> bool:
        """True if the player owns every street of the color group."""
        group = [s.id for s in self.board if s.space_type == SpaceType.PROPERTY and s.color_group == color_group]
        if not color_group or not group:
            return False
        player = self.get_player_by_id(player_id)
        return all(sid in player.properties for sid in group)

    def __repr__(self) -> str:
        return (
            f"GameState(game_id='{self.game_id}', status={self.status.value}, "
            f"turn={self.turn_number}, phase={self.turn_state.value})"
        )
