"""Deterministic helpers shared by the test modules."""

from monopoly_engine.money import PropertyStateEntry


def dice_rng(*rolls):
    """
    RNG that makes roll_dice produce the given (die1, die2) pairs in order.

    roll_dice computes floor(rng() * 6) + 1 per die.
    """
    values = []
    for die1, die2 in rolls:
        values.append((die1 - 1) / 6 + 0.01)
        values.append((die2 - 1) / 6 + 0.01)
    it = iter(values)
    return lambda: next(it)


def give(state, player_id, *space_ids, houses=0, mortgaged=False):
    """Hand properties straight to a player."""
    player = state.get_player_by_id(player_id)
    for space_id in space_ids:
        player.properties.append(space_id)
        state.property_states[space_id] = PropertyStateEntry(houses=houses, mortgaged=mortgaged)


def houses_in_play(state):
    return sum(e.houses for e in state.property_states.values() if 0 < e.houses < 5)


def hotels_in_play(state):
    return sum(1 for e in state.property_states.values() if e.houses == 5)
