"""SQLAlchemy ORM models for the per-user document store"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, UniqueConstraint, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def new_document_id() -> str:
    return uuid.uuid4().hex


class Document(Base):
    """
    Schemaless record owned by one user.

    collection is a path; nested collections embed the parent id, e.g.
    "loans/<loan_id>/schedules".
    """

    __tablename__ = "document"
    __table_args__ = (
        UniqueConstraint("user_id", "collection", "doc_id", name="uq_document_path"),
        Index("ix_document_user_collection", "user_id", "collection"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False)
    collection = Column(Text, nullable=False)
    doc_id = Column(String(32), nullable=False, default=new_document_id)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())
