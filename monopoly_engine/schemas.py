"""
Wire schemas for inbound action payloads.

Transports hand the engine JSON like {"type": "BuildHouse", "property_id": 1};
ActionRequest validates it and turns it into an engine Action.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from monopoly_engine.exceptions import ValidationError
from monopoly_engine.rules import Action, ActionType
from monopoly_engine.trade import TradeTerms


class TradeTermsModel(BaseModel):
    offered_properties: List[int] = Field(default_factory=list)
    offered_cash: int = Field(default=0, ge=0)
    offered_cards: int = Field(default=0, ge=0)
    requested_properties: List[int] = Field(default_factory=list)
    requested_cash: int = Field(default=0, ge=0)
    requested_cards: int = Field(default=0, ge=0)

    @field_validator("offered_properties", "requested_properties")
    @classmethod
    def no_repeated_properties(cls, v: List[int]) -> List[int]:
        if len(set(v)) != len(v):
            raise ValueError("property ids must be unique")
        return v

    def to_terms(self) -> TradeTerms:
        return TradeTerms(**self.model_dump())


_REQUIRED_FIELDS: Dict[ActionType, tuple] = {
    ActionType.AUCTION_BID: ("amount",),
    ActionType.BUILD_HOUSE: ("property_id",),
    ActionType.BUILD_HOTEL: ("property_id",),
    ActionType.SELL_BUILDING: ("property_id",),
    ActionType.MORTGAGE_PROPERTY: ("property_id",),
    ActionType.UNMORTGAGE_PROPERTY: ("property_id",),
    ActionType.PROPOSE_TRADE: ("recipient_id", "terms"),
    ActionType.ACCEPT_TRADE: ("trade_id",),
    ActionType.REJECT_TRADE: ("trade_id",),
    ActionType.COUNTER_TRADE: ("trade_id", "terms"),
}


class ActionRequest(BaseModel):
    """One player intent as sent by a client."""

    model_config = ConfigDict(extra="forbid")

    type: ActionType
    property_id: Optional[int] = Field(default=None, ge=0, le=39)
    amount: Optional[int] = Field(default=None, gt=0)
    count: Optional[int] = Field(default=None, ge=1, le=5)
    recipient_id: Optional[str] = None
    trade_id: Optional[str] = None
    creditor_id: Optional[str] = None
    terms: Optional[TradeTermsModel] = None

    @model_validator(mode="after")
    def check_required_fields(self) -> "ActionRequest":
        missing = [name for name in _REQUIRED_FIELDS.get(self.type, ()) if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.type.value} requires {', '.join(missing)}")
        return self

    @classmethod
    def parse(cls, payload: Union[Mapping[str, Any], str, bytes]) -> "ActionRequest":
        """Validate a dict or JSON payload, raising the engine's ValidationError."""
        try:
            if isinstance(payload, (str, bytes)):
                return cls.model_validate_json(payload)
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"]) or "payload"
            raise ValidationError(f"Invalid action ({location}): {first['msg']}") from e

    def to_action(self) -> Action:
        params = self.model_dump(exclude={"type", "terms"}, exclude_none=True)
        if self.terms is not None:
            params["terms"] = self.terms.to_terms()
        return Action(self.type, **params)
