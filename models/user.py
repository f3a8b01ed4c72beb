"""
Identity, Plan and User models.

Stored documents and JSON responses use camelCase keys; attributes are
snake_case with aliases.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from utils.shared_utils import ensure_utc


class PlanType(str, Enum):
    FREE = "free"
    TRIAL = "trial"
    PRO = "pro"
    PLUS = "plus"


PLAN_STATUS_ACTIVE = "active"


class Identity(BaseModel):
    """Caller identity derived from a verified bearer token."""
    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)


class Plan(BaseModel):
    """Subscription plan. subscription_end of None means the plan never expires."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: PlanType
    status: str = PLAN_STATUS_ACTIVE
    subscription_start: datetime = Field(..., alias="subscriptionStart")
    subscription_end: Optional[datetime] = Field(default=None, alias="subscriptionEnd")
    external_billing_id: Optional[str] = Field(default=None, alias="externalBillingId")
    last_updated: datetime = Field(..., alias="lastUpdated")

    @field_validator("subscription_start", "subscription_end", "last_updated")
    @classmethod
    def _normalize_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class User(BaseModel):
    """User record; uid is the document id and matches Identity.uid."""
    model_config = ConfigDict(populate_by_name=True)

    uid: str = Field(..., min_length=1)
    email: str
    display_name: Optional[str] = Field(default=None, alias="displayName")
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    plan: Plan
    created_at: datetime = Field(..., alias="createdAt")
    last_login: datetime = Field(..., alias="lastLogin")

    @field_validator("created_at", "last_login")
    @classmethod
    def _normalize_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "User":
        return cls.model_validate(data)


# Request models

class GenerateTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: Optional[str] = None
    email: Optional[str] = None
    # Accepted for client compatibility; not embedded in the token
    display_name: Optional[str] = Field(default=None, alias="displayName")
    photo_url: Optional[str] = Field(default=None, alias="photoURL")


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Any value is accepted here; the plan service rejects unknown types
    plan_type: Any = Field(default=PlanType.TRIAL.value, alias="planType")


class PlanUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_type: Optional[Any] = Field(default=None, alias="planType")
    subscription_end: Optional[datetime] = Field(default=None, alias="subscriptionEnd")
    external_billing_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("externalBillingId", "stripeCustomerId", "external_billing_id"),
    )


class ProfileUpdateRequest(BaseModel):
    """Only fields present in the request body are written."""
    model_config = ConfigDict(populate_by_name=True)

    display_name: Optional[str] = Field(default=None, alias="displayName")
    photo_url: Optional[str] = Field(default=None, alias="photoURL")

    def to_updates(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, by_alias=True)
