"""
Plan Service - plan construction, plan changes and expiry queries

Every plan change builds a brand-new Plan: status resets to active, the
subscription restarts now, and any end date or billing id not resupplied by
the caller is dropped. Any valid type may be requested from any state.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from backend.utils.responses import INVALID_PLAN_TYPE, error_result
from crud.user import UserRepository
from models.user import PLAN_STATUS_ACTIVE, Identity, Plan, PlanType, User
from utils.shared_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

TRIAL_DAYS = 7
PLAN_TYPES = frozenset(plan_type.value for plan_type in PlanType)

_ONE_DAY_SECONDS = timedelta(days=1).total_seconds()


def parse_plan_type(value: Any) -> Optional[PlanType]:
    """Return the PlanType for a requested value, or None if it is not a known type."""
    if isinstance(value, PlanType):
        return value
    if isinstance(value, str) and value in PLAN_TYPES:
        return PlanType(value)
    return None


def new_trial_plan(now: Optional[datetime] = None) -> Plan:
    """Trial plan that expires TRIAL_DAYS after now."""
    now = ensure_utc(now) or utcnow()
    return Plan(
        type=PlanType.TRIAL,
        status=PLAN_STATUS_ACTIVE,
        subscription_start=now,
        subscription_end=now + timedelta(days=TRIAL_DAYS),
        external_billing_id=None,
        last_updated=now,
    )


def new_plan(
    plan_type: PlanType,
    now: Optional[datetime] = None,
    subscription_end: Optional[datetime] = None,
    billing_id: Optional[str] = None,
) -> Plan:
    """
    Initial plan for a new account.
    Only the trial sets its own expiry; other types use subscription_end as given.
    """
    now = ensure_utc(now) or utcnow()
    if plan_type == PlanType.TRIAL and subscription_end is None:
        plan = new_trial_plan(now)
        if billing_id is None:
            return plan
        return plan.model_copy(update={"external_billing_id": billing_id})

    return Plan(
        type=plan_type,
        status=PLAN_STATUS_ACTIVE,
        subscription_start=now,
        subscription_end=ensure_utc(subscription_end),
        external_billing_id=billing_id,
        last_updated=now,
    )


def change_plan(
    current_user: Optional[User],
    requested_type: Any,
    requested_end: Optional[datetime] = None,
    billing_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the replacement plan for a plan change.

    Args:
        current_user: The user whose plan is replaced (not modified here)
        requested_type: Requested plan type; must be one of free, trial, pro, plus
        requested_end: Explicit subscription end, or None for a non-expiring plan
        billing_id: Opaque external billing id to store on the plan
        now: Optional clock override

    Returns:
        {"data": Plan, "is_error": False} or an INVALID_PLAN_TYPE error result
    """
    plan_type = parse_plan_type(requested_type)
    if plan_type is None:
        logger.warning(f"Rejected plan change for {current_user.uid if current_user else 'unknown'}: invalid plan type {requested_type!r}")
        return error_result(INVALID_PLAN_TYPE, "Invalid plan type")

    now = ensure_utc(now) or utcnow()
    plan = Plan(
        type=plan_type,
        status=PLAN_STATUS_ACTIVE,
        subscription_start=now,
        subscription_end=ensure_utc(requested_end),
        external_billing_id=billing_id,
        last_updated=now,
    )
    return {"data": plan, "is_error": False}


def days_remaining(plan: Plan, now: Optional[datetime] = None) -> Optional[int]:
    """
    Whole days left on the plan, rounded up; None for a non-expiring plan.
    A plan ending in 30 minutes reports 1.
    """
    if plan.subscription_end is None:
        return None
    now = ensure_utc(now) or utcnow()
    seconds_left = (plan.subscription_end - now).total_seconds()
    return max(0, math.ceil(seconds_left / _ONE_DAY_SECONDS))


def is_expired(plan: Plan, now: Optional[datetime] = None) -> bool:
    """True once now is strictly past subscription_end."""
    if plan.subscription_end is None:
        return False
    now = ensure_utc(now) or utcnow()
    return now > plan.subscription_end


def plan_stats(user: User, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Summary returned by the stats endpoint."""
    now = ensure_utc(now) or utcnow()
    return {
        "planType": user.plan.type.value,
        "planStatus": user.plan.status,
        "daysRemaining": days_remaining(user.plan, now),
        "isExpired": is_expired(user.plan, now),
        "memberSince": user.created_at.isoformat(),
    }


class PlanService:
    """
    Service class for account creation and plan changes.
    Validates requests before anything reaches the user repository.
    """

    def __init__(self, user_repo: UserRepository):
        """
        Initialize the plan service with a user repository.

        Args:
            user_repo: UserRepository instance for user document operations
        """
        self.user_repo = user_repo

    async def create_account(
        self,
        identity: Identity,
        plan_type: Any = PlanType.TRIAL.value,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Create the user record for an identity with its initial plan.

        Returns:
            {"data": User, "is_error": False}, INVALID_PLAN_TYPE or ALREADY_EXISTS
        """
        requested = parse_plan_type(plan_type)
        if requested is None:
            logger.warning(f"Rejected account creation for {identity.email}: invalid plan type {plan_type!r}")
            return error_result(INVALID_PLAN_TYPE, "Invalid plan type")

        now = ensure_utc(now) or utcnow()
        user = User(
            uid=identity.uid,
            email=identity.email,
            display_name=None,
            photo_url=None,
            plan=new_plan(requested, now),
            created_at=now,
            last_login=now,
        )

        result = await self.user_repo.create_user(identity.uid, user)
        if not result.get("is_error"):
            logger.info(f"User {identity.email} created with {requested.value} plan")
        return result

    async def update_plan(
        self,
        identity: Identity,
        requested_type: Any,
        requested_end: Optional[datetime] = None,
        billing_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Replace the identity's plan wholesale.

        The type is checked before the store is touched; a missing user
        surfaces as NOT_FOUND from the single update.

        Returns:
            {"data": Plan, "is_error": False}, INVALID_PLAN_TYPE or NOT_FOUND
        """
        now = ensure_utc(now) or utcnow()
        changed = change_plan(None, requested_type, requested_end, billing_id, now)
        if changed.get("is_error"):
            logger.warning(f"Rejected plan change for {identity.email}")
            return changed

        plan: Plan = changed["data"]
        result = await self.user_repo.update_user(identity.uid, {"plan": plan.to_document()}, now=now)
        if result.get("is_error"):
            return result

        logger.info(f"Plan for {identity.email} updated to {plan.type.value}")
        return {"data": result["data"].plan, "is_error": False}
