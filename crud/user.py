"""
UserRepository for user documents in the "users" collection
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from backend.utils.responses import ALREADY_EXISTS, NOT_FOUND, STORE_UNAVAILABLE, error_result
from crud.documents import DocumentStore
from models.user import User
from utils.shared_utils import utcnow

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class UserRepository:
    """
    Repository class for User documents.
    Encapsulates all document store access for the User model.

    Every method returns a normalized result:
    {"data": User, "is_error": False} or {"error": code, "message": str, "is_error": True}
    """

    def __init__(self, store: DocumentStore):
        """
        Initialize the repository with a document store.

        Args:
            store: DocumentStore shared by the whole process
        """
        self.store = store

    async def get_user(self, uid: str) -> Dict[str, Any]:
        """
        Retrieve a user by id.

        Args:
            uid: User id (matches Identity.uid)

        Returns:
            User result, or NOT_FOUND
        """
        try:
            document = await self.store.get(USERS_COLLECTION, uid)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read user {uid}: {e}", exc_info=True)
            return error_result(STORE_UNAVAILABLE, "Failed to get user")

        if document is None:
            return error_result(NOT_FOUND, "User not found")
        return self._to_result(uid, document)

    async def create_user(self, uid: str, user: User) -> Dict[str, Any]:
        """
        Create the user document if none exists for uid.

        Args:
            uid: Document id; must equal user.uid
            user: Initial user record

        Returns:
            The stored User, or ALREADY_EXISTS when another create won
        """
        if user.uid != uid:
            raise ValueError(f"User uid {user.uid!r} does not match document id {uid!r}")

        try:
            created = await self.store.create(USERS_COLLECTION, uid, user.to_document())
        except SQLAlchemyError as e:
            logger.error(f"Failed to create user {uid}: {e}", exc_info=True)
            return error_result(STORE_UNAVAILABLE, "Failed to create user")

        if not created:
            return error_result(ALREADY_EXISTS, "User already exists")
        return {"data": user, "is_error": False}

    async def update_user(self, uid: str, updates: Dict[str, Any], now=None) -> Dict[str, Any]:
        """
        Merge top-level fields into the user document.

        lastLogin is refreshed on every call, including an empty update.

        Args:
            uid: User id
            updates: Document fields to set, keyed by their stored (camelCase) names
            now: Optional clock override

        Returns:
            The merged User, or NOT_FOUND
        """
        fields = dict(updates)
        fields["lastLogin"] = (now or utcnow()).isoformat()

        try:
            document = await self.store.update(USERS_COLLECTION, uid, fields)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update user {uid}: {e}", exc_info=True)
            return error_result(STORE_UNAVAILABLE, "Failed to update user")

        if document is None:
            return error_result(NOT_FOUND, "User not found")
        return self._to_result(uid, document)

    @staticmethod
    def _to_result(uid: str, document: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return {"data": User.from_document(document), "is_error": False}
        except ValidationError as e:
            logger.error(f"Stored user document {uid} is malformed: {e}")
            return error_result(STORE_UNAVAILABLE, "Stored user record is malformed")
