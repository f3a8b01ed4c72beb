"""
User Router - profile, account creation, plan changes and plan stats
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from auth import get_current_identity, get_user_repository
from backend.utils.responses import error_from_result, success_response
from crud.user import UserRepository
from models.user import CreateUserRequest, Identity, PlanUpdateRequest, ProfileUpdateRequest
from services.plan_service import PlanService, plan_stats
from utils.shared_utils import log_endpoint_event

logger = logging.getLogger(__name__)

user_router = APIRouter(prefix="/api/user", tags=["user"])


@user_router.get("/profile")
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Return the caller's user record and refresh lastLogin"""
    logger.info(f"Getting profile for: {identity.email}")

    result = await user_repo.update_user(identity.uid, {})
    if result.get("is_error"):
        return error_from_result(result)

    return success_response(result["data"].to_document())


@user_router.post("/create")
async def create_user(
    request_body: Optional[CreateUserRequest] = Body(default=None),
    identity: Identity = Depends(get_current_identity),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Create the caller's user record (trial plan unless planType says otherwise)"""
    request_body = request_body or CreateUserRequest()
    logger.info(f"Creating user: {identity.email} with plan: {request_body.plan_type}")

    result = await PlanService(user_repo).create_account(identity, request_body.plan_type)
    if result.get("is_error"):
        log_endpoint_event("/api/user/create", identity.uid, result="error", details={"error": result["error"]})
        return error_from_result(result)

    return success_response(
        {"user": result["data"].to_document()},
        message="User created successfully",
        status=201,
    )


@user_router.put("/plan")
async def update_plan(
    request_body: Optional[PlanUpdateRequest] = Body(default=None),
    identity: Identity = Depends(get_current_identity),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Replace the caller's plan"""
    request_body = request_body or PlanUpdateRequest()
    logger.info(f"Updating plan for {identity.email} to {request_body.plan_type}")

    result = await PlanService(user_repo).update_plan(
        identity,
        request_body.plan_type,
        requested_end=request_body.subscription_end,
        billing_id=request_body.external_billing_id,
    )
    if result.get("is_error"):
        log_endpoint_event("/api/user/plan", identity.uid, result="error", details={"error": result["error"]})
        return error_from_result(result)

    return success_response({"plan": result["data"].to_document()}, message="Plan updated successfully")


@user_router.put("/profile")
async def update_profile(
    request_body: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Update displayName and/or photoURL; omitted fields are left untouched"""
    logger.info(f"Updating profile for {identity.email}")

    result = await user_repo.update_user(identity.uid, request_body.to_updates())
    if result.get("is_error"):
        return error_from_result(result)

    return success_response(message="Profile updated successfully")


@user_router.get("/stats")
async def get_stats(
    identity: Identity = Depends(get_current_identity),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Plan type, status, days remaining, expiry and member-since date"""
    result = await user_repo.get_user(identity.uid)
    if result.get("is_error"):
        return error_from_result(result)

    return success_response(plan_stats(result["data"]))
