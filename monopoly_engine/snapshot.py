"""
Public snapshot serialization of GameState.

Produces a sanitized, UI-friendly view of the current game without
exposing hidden information (e.g., deck order).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from monopoly_engine.rules import get_legal_actions
from monopoly_engine.spaces import SpaceType
from monopoly_engine.state import GameState
from monopoly_engine.trade import TradeStatus


def _player_entry(game: GameState, player_id: str) -> Dict[str, Any]:
    player = game.get_player_by_id(player_id)
    props: List[Dict[str, Any]] = []
    for space_id in sorted(player.properties):
        space = game.get_space(space_id)
        ownership = game.get_property_state(space_id)
        entry: Dict[str, Any] = {
            "position": space_id,
            "name": space.name,
            "houses": ownership.houses,
            "mortgaged": ownership.mortgaged,
        }
        if space.space_type == SpaceType.PROPERTY:
            entry["color_group"] = space.color_group
        props.append(entry)

    return {
        "player_id": player.id,
        "name": player.name,
        "token": player.token,
        "cash": player.cash,
        "position": player.position,
        "in_jail": player.in_jail,
        "jail_turns": player.jail_status.turns_in_jail,
        "jail_cards": player.get_out_of_jail_free_cards,
        "is_active": player.is_active,
        "is_bankrupt": player.is_bankrupt,
        "properties": props,
    }


def serialize_snapshot(game: GameState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """Serialize a GameState into a public, stable JSON dict.

    The snapshot includes:
    - status, turn_number, phase and current_player_id
    - players with public info (cash, position, jail, properties with status)
    - bank supply counts
    - active auction (if any) and pending trades
    - deck counts only
    - legal actions, when a viewer is given
    """
    players = [_player_entry(game, p.id) for p in game.players]

    auction = None
    if game.auction is not None:
        a = game.auction
        auction = {
            "property_position": a.property_id,
            "property_name": game.get_space(a.property_id).name,
            "current_bid": a.high_bid,
            "high_bidder": a.high_bidder_id,
            "active_bidders": a.remaining_bidders,
            "is_complete": a.is_complete(),
        }

    trades = [
        {
            "trade_id": t.id,
            "proposer_id": t.proposer_id,
            "recipient_id": t.recipient_id,
            "offered_properties": list(t.offered_properties),
            "offered_cash": t.offered_cash,
            "offered_cards": t.offered_cards,
            "requested_properties": list(t.requested_properties),
            "requested_cash": t.requested_cash,
            "requested_cards": t.requested_cards,
        }
        for t in game.trades.values()
        if t.status == TradeStatus.PENDING
    ]

    last_dice = None
    if game.last_dice_result is not None:
        d = game.last_dice_result
        last_dice = {"die1": d.die1, "die2": d.die2, "total": d.total, "is_doubles": d.is_doubles}

    snapshot: Dict[str, Any] = {
        "game_id": game.game_id,
        "status": game.status.value,
        "turn_number": game.turn_number,
        "phase": game.turn_state.value,
        "current_player_id": game.get_active_player().id,
        "players": players,
        "bank": {
            "houses_available": game.building_supply.houses,
            "hotels_available": game.building_supply.hotels,
        },
        "auction": auction,
        "trades": trades,
        "decks": {
            "chance": {"cards_remaining": len(game.decks.chance)},
            "community_chest": {"cards_remaining": len(game.decks.community_chest)},
        },
        "last_dice": last_dice,
        "last_card": game.last_card_drawn.text if game.last_card_drawn else None,
        "pending_buy": (
            {
                "position": game.pending_buy_decision.space_id,
                "name": game.pending_buy_decision.space_name,
                "cost": game.pending_buy_decision.cost,
            }
            if game.pending_buy_decision
            else None
        ),
    }
    if viewer_id is not None:
        snapshot["legal_actions"] = [a.value for a in get_legal_actions(game, viewer_id)]

    return snapshot
