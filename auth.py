"""
Authentication routes and dependencies
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request
from fastapi.security.utils import get_authorization_scheme_param

from auth_utils import create_jwt, verify_token
from backend.utils.responses import (
    ERROR_STATUS,
    INVALID_TOKEN,
    MISSING_FIELDS,
    MISSING_TOKEN,
    error_response,
    error_result,
    success_response,
)
from config import Settings
from crud.user import UserRepository
from models.user import GenerateTokenRequest, Identity

logger = logging.getLogger(__name__)

# Create auth router
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])

MISSING_TOKEN_MESSAGE = "Access token required"
# Expired and forged tokens share one message so callers cannot tell them apart
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


# Application-scoped dependencies (configured once in main.create_app)

def get_settings(request: Request) -> Settings:
    """Settings injected into the app at startup."""
    return request.app.state.settings


def get_user_repository(request: Request) -> UserRepository:
    """UserRepository over the app's document store."""
    return UserRepository(request.app.state.document_store)


def authenticate_header(
    authorization: Optional[str],
    secret_key: Optional[str],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Resolve an Authorization header to an Identity.

    Returns:
        {"data": Identity, "is_error": False}, MISSING_TOKEN when there is no
        usable "Bearer <token>" header, or INVALID_TOKEN when verification fails
    """
    scheme, token = get_authorization_scheme_param(authorization)
    if not authorization or scheme.lower() != "bearer" or not token:
        return error_result(MISSING_TOKEN, MISSING_TOKEN_MESSAGE)

    identity = verify_token(token, secret_key, now=now)
    if identity is None:
        return error_result(INVALID_TOKEN, INVALID_TOKEN_MESSAGE)

    return {"data": identity, "is_error": False}


# Dependency for protected routes
async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    settings: Settings = Depends(get_settings),
) -> Identity:
    """
    Dependency function to get the authenticated identity.

    - Missing or non-Bearer Authorization header: 401
    - Token that fails verification (expired, tampered, malformed): 403

    The identity is also stored on request.state.identity for downstream use.
    """
    result = authenticate_header(authorization, settings.jwt_secret_key)
    if result["is_error"]:
        code = result["error"]
        headers = {"WWW-Authenticate": "Bearer"} if code == MISSING_TOKEN else None
        raise HTTPException(status_code=ERROR_STATUS[code], detail=result["message"], headers=headers)

    identity: Identity = result["data"]
    request.state.identity = identity
    return identity


@auth_router.get("/verify")
async def verify(identity: Identity = Depends(get_current_identity)):
    """Confirm the bearer token is valid and echo its identity"""
    return success_response({"valid": True, "user": identity.model_dump()})


@auth_router.post("/logout")
async def logout(identity: Identity = Depends(get_current_identity)):
    """
    Acknowledge logout.
    Tokens are not revoked; they stay valid until they expire.
    """
    logger.info(f"User {identity.email} logged out")
    return success_response(message="Logged out successfully")


@auth_router.post("/generate-token")
async def generate_token(
    request_body: Optional[GenerateTokenRequest] = Body(default=None),
    settings: Settings = Depends(get_settings),
):
    """Issue a bearer token for a user already authenticated by the identity provider"""
    if request_body is None or not request_body.uid or not request_body.email:
        return error_response(MISSING_FIELDS, status=400, message="Missing required user data")

    token = create_jwt(
        request_body.uid,
        request_body.email,
        settings.jwt_secret_key,
        ttl=timedelta(days=settings.token_ttl_days),
    )
    logger.info(f"Generated token for extension auth: {request_body.email}")
    return success_response({"token": token})
