from sqlalchemy import JSON, Column, DateTime, String

from database import Base
from utils.shared_utils import utcnow


class Document(Base):
    """
    Opaque JSON document keyed by (collection, doc_id).
    The composite primary key is what makes conditional creates atomic.
    """
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    doc_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
