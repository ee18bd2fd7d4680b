"""
Custom exception hierarchy for the Monopoly engine.

Every domain function fails fast by raising one of these. The action
processor is the only layer that catches them and turns them into a
structured ActionResult; each class carries a stable ``code`` for that.
"""


class MonopolyError(Exception):
    """Base exception for all game-related errors."""

    code = "MonopolyError"


class NotFoundError(MonopolyError):
    """Player, space, trade, auction or card does not exist."""

    code = "NotFound"


class InvalidTurnError(MonopolyError):
    """A turn-exclusive action was sent by someone other than the current player."""

    code = "InvalidTurn"


class InvalidStateError(MonopolyError):
    """Action is not legal in the current turn phase or game status."""

    code = "InvalidState"


class InsufficientFundsError(MonopolyError):
    """Player cannot pay for the requested operation."""

    code = "InsufficientFunds"


class OwnershipError(MonopolyError):
    """Already owned, not owned, already mortgaged or not mortgaged."""

    code = "OwnershipViolation"


class AuctionRuleError(MonopolyError):
    """Bid too low, bidder already passed or not eligible."""

    code = "AuctionRuleViolation"


class TradeRuleError(MonopolyError):
    """Buildings in the traded group, missing jail cards, wrong responder."""

    code = "TradeRuleViolation"


class BuildRuleError(MonopolyError):
    """No monopoly, uneven build or sell, or no supply left."""

    code = "BuildRuleViolation"


class ValidationError(MonopolyError):
    """Input validation failed."""

    code = "ValidationError"
