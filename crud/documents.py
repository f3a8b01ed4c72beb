"""
DocumentStore: key-value-by-id access to opaque JSON documents
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from database_models import Document

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Collection/id addressed JSON documents on top of an async SQLAlchemy engine.

    Each call runs in its own session and transaction. SQLAlchemy errors other
    than the create conflict are propagated to the caller.
    """

    def __init__(self, session_factory: async_sessionmaker):
        """
        Args:
            session_factory: async_sessionmaker bound to the store's engine
        """
        self._sessions = session_factory

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return a copy of the document, or None if it does not exist."""
        async with self._sessions() as session:
            document = await session.get(Document, (collection, doc_id))
            if document is None:
                return None
            return dict(document.data)

    async def create(self, collection: str, doc_id: str, data: Dict[str, Any]) -> bool:
        """
        Insert a document only if none exists for (collection, doc_id).

        Returns False when another writer already owns the id. The primary key
        constraint decides the winner, so concurrent callers never overwrite
        each other.
        """
        try:
            async with self._sessions() as session:
                async with session.begin():
                    await session.execute(
                        insert(Document).values(collection=collection, doc_id=doc_id, data=data)
                    )
        except IntegrityError:
            logger.info(f"Document {collection}/{doc_id} already exists")
            return False
        return True

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or replace a document wholesale."""
        async with self._sessions() as session:
            async with session.begin():
                document = await session.get(Document, (collection, doc_id))
                if document is None:
                    session.add(Document(collection=collection, doc_id=doc_id, data=data))
                else:
                    document.data = dict(data)

    async def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Merge top-level fields into an existing document.

        Returns the merged document, or None if the document does not exist.
        Nested values are replaced, never merged.
        """
        async with self._sessions() as session:
            async with session.begin():
                document = await session.get(Document, (collection, doc_id))
                if document is None:
                    return None
                # Reassign so the JSON column is flagged dirty
                document.data = {**document.data, **fields}
                merged = dict(document.data)
        return merged
