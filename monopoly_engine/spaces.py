"""
Board space definitions and types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class SpaceType(Enum):
    """Types of spaces on the board."""

    PROPERTY = "property"
    RAILROAD = "railroad"
    UTILITY = "utility"
    TAX = "tax"
    CHANCE = "chance"
    COMMUNITY_CHEST = "community_chest"
    CORNER = "corner"


PURCHASABLE_TYPES = (SpaceType.PROPERTY, SpaceType.RAILROAD, SpaceType.UTILITY)


@dataclass
class Space:
    """
    A single board cell. Static reference data.

    Streets carry six rent tiers: base rent, one to four houses, then hotel.
    Railroads and utilities only use cost and mortgage_value; their rent
    depends on how many of that type the owner holds.
    """

    id: int
    name: str
    position: int
    space_type: SpaceType
    color_group: Optional[str] = None
    cost: int = 0
    rent_tiers: List[int] = field(default_factory=list)
    mortgage_value: int = 0
    house_cost: int = 0
    tax_amount: int = 0

    @property
    def is_purchasable(self) -> bool:
        return self.space_type in PURCHASABLE_TYPES

    def __repr__(self) -> str:
        return f"Space(name='{self.name}', position={self.position})"


def street(
    name: str,
    position: int,
    cost: int,
    color_group: str,
    rents: List[int],
    house_cost: int,
) -> Space:
    """Build a street space; mortgage value is half the price."""
    return Space(
        id=position,
        name=name,
        position=position,
        space_type=SpaceType.PROPERTY,
        color_group=color_group,
        cost=cost,
        rent_tiers=list(rents),
        mortgage_value=cost // 2,
        house_cost=house_cost,
    )


def railroad(name: str, position: int) -> Space:
    return Space(position, name, position, SpaceType.RAILROAD, cost=200, mortgage_value=100)


def utility(name: str, position: int) -> Space:
    return Space(position, name, position, SpaceType.UTILITY, cost=150, mortgage_value=75)


def tax(name: str, position: int, amount: int) -> Space:
    return Space(position, name, position, SpaceType.TAX, tax_amount=amount)


def chance(position: int) -> Space:
    return Space(position, "Chance", position, SpaceType.CHANCE)


def community_chest(position: int) -> Space:
    return Space(position, "Community Chest", position, SpaceType.COMMUNITY_CHEST)


def corner(name: str, position: int) -> Space:
    return Space(position, name, position, SpaceType.CORNER)
