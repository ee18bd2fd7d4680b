"""
The standard 40-space board and lookups over it.
"""

from typing import Dict, List, Optional

from monopoly_engine.config import BOARD_SIZE
from monopoly_engine.exceptions import NotFoundError
from monopoly_engine.spaces import (
    Space,
    SpaceType,
    chance,
    community_chest,
    corner,
    railroad,
    street,
    tax,
    utility,
)

RAILROAD_POSITIONS = [5, 15, 25, 35]
UTILITY_POSITIONS = [12, 28]


def create_standard_board() -> List[Space]:
    """Create the standard 40-space board."""
    return [
        # Bottom row (0-10)
        corner("Go", 0),
        street("Mediterranean Avenue", 1, 60, "brown", [2, 10, 30, 90, 160, 250], 50),
        community_chest(2),
        street("Baltic Avenue", 3, 60, "brown", [4, 20, 60, 180, 320, 450], 50),
        tax("Income Tax", 4, 200),
        railroad("Reading Railroad", 5),
        street("Oriental Avenue", 6, 100, "light_blue", [6, 30, 90, 270, 400, 550], 50),
        chance(7),
        street("Vermont Avenue", 8, 100, "light_blue", [6, 30, 90, 270, 400, 550], 50),
        street("Connecticut Avenue", 9, 120, "light_blue", [8, 40, 100, 300, 450, 600], 50),
        corner("Jail / Just Visiting", 10),
        # Left side (11-20)
        street("St. Charles Place", 11, 140, "pink", [10, 50, 150, 450, 625, 750], 100),
        utility("Electric Company", 12),
        street("States Avenue", 13, 140, "pink", [10, 50, 150, 450, 625, 750], 100),
        street("Virginia Avenue", 14, 160, "pink", [12, 60, 180, 500, 700, 900], 100),
        railroad("Pennsylvania Railroad", 15),
        street("St. James Place", 16, 180, "orange", [14, 70, 200, 550, 750, 950], 100),
        community_chest(17),
        street("Tennessee Avenue", 18, 180, "orange", [14, 70, 200, 550, 750, 950], 100),
        street("New York Avenue", 19, 200, "orange", [16, 80, 220, 600, 800, 1000], 100),
        corner("Free Parking", 20),
        # Top row (21-30)
        street("Kentucky Avenue", 21, 220, "red", [18, 90, 250, 700, 875, 1050], 150),
        chance(22),
        street("Indiana Avenue", 23, 220, "red", [18, 90, 250, 700, 875, 1050], 150),
        street("Illinois Avenue", 24, 240, "red", [20, 100, 300, 750, 925, 1100], 150),
        railroad("B&O Railroad", 25),
        street("Atlantic Avenue", 26, 260, "yellow", [22, 110, 330, 800, 975, 1150], 150),
        street("Ventnor Avenue", 27, 260, "yellow", [22, 110, 330, 800, 975, 1150], 150),
        utility("Water Works", 28),
        street("Marvin Gardens", 29, 280, "yellow", [24, 120, 360, 850, 1025, 1200], 150),
        corner("Go To Jail", 30),
        # Right side (31-39)
        street("Pacific Avenue", 31, 300, "green", [26, 130, 390, 900, 1100, 1275], 200),
        street("North Carolina Avenue", 32, 300, "green", [26, 130, 390, 900, 1100, 1275], 200),
        community_chest(33),
        street("Pennsylvania Avenue", 34, 320, "green", [28, 150, 450, 1000, 1200, 1400], 200),
        railroad("Short Line Railroad", 35),
        chance(36),
        street("Park Place", 37, 350, "dark_blue", [35, 175, 500, 1100, 1300, 1500], 200),
        tax("Luxury Tax", 38, 100),
        street("Boardwalk", 39, 400, "dark_blue", [50, 200, 600, 1400, 1700, 2000], 200),
    ]


STANDARD_BOARD: List[Space] = create_standard_board()


def build_color_groups(board: List[Space]) -> Dict[str, List[int]]:
    """Build a mapping of color groups to property ids."""
    groups: Dict[str, List[int]] = {}
    for space in board:
        if space.space_type == SpaceType.PROPERTY and space.color_group:
            groups.setdefault(space.color_group, []).append(space.id)
    return groups


COLOR_GROUPS: Dict[str, List[int]] = build_color_groups(STANDARD_BOARD)


def get_space_by_id(board: List[Space], space_id: int) -> Space:
    """Look up a space by id. Raises NotFoundError for unknown ids."""
    for space in board:
        if space.id == space_id:
            return space
    raise NotFoundError(f"Space {space_id} not found")


def find_space_by_id(board: List[Space], space_id: int) -> Optional[Space]:
    for space in board:
        if space.id == space_id:
            return space
    return None


def get_color_group(board: List[Space], color: Optional[str]) -> List[Space]:
    """All streets sharing a color group, in board order."""
    if not color:
        return []
    return [s for s in board if s.space_type == SpaceType.PROPERTY and s.color_group == color]


def _next_clockwise(position: int, targets: List[int]) -> int:
    for target in targets:
        if target > position:
            return target
    return targets[0]


def find_nearest_railroad(position: int) -> int:
    """First railroad strictly ahead of position, wrapping past Go."""
    return _next_clockwise(position % BOARD_SIZE, RAILROAD_POSITIONS)


def find_nearest_utility(position: int) -> int:
    """First utility strictly ahead of position, wrapping past Go."""
    return _next_clockwise(position % BOARD_SIZE, UTILITY_POSITIONS)
