from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, String, DateTime, JSON, Integer, ForeignKey, Text, CheckConstraint, Index
from sqlalchemy.orm import relationship
from fastapi_users_db_sqlalchemy.generics import GUID
from recap.core.db import Base
import uuid


def utcnow() -> datetime:
    """Naive UTC timestamp (columns are TIMESTAMP WITHOUT TIME ZONE)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """
    SQLAlchemy ORM model representing a user known to the service.

    Attributes:
        id (UUID): Stable identity, taken from the identity provider's subject.
        email (str): Unique email address.
        name (str): Display name.
        image_url (str): Avatar URL.
        provider (str): Auth provider tag ("email", "google", "oauth", ...).
        hashed_password (str): Password hash, only for email/password accounts.
        credits (int): Remaining generations; never negative.
        created_at (datetime): Timestamp of creation.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_users_credits_non_negative"),
    )

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    email = Column(String(320), unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    provider = Column(String(50), nullable=False, default="email")
    hashed_password = Column(String(1024), nullable=True)
    credits = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    summaries = relationship("SummaryModel", back_populates="user", cascade="all, delete-orphan")


class SummaryModel(Base):
    """
    SQLAlchemy ORM model representing a generated or saved video summary.

    Attributes:
        id (UUID): Unique identifier.
        user_id (UUID): Owner of the summary.
        video_url (str): URL of the summarized video.
        video_id (str): Video id, when the client provided or we could extract one.
        source_ref (str): Cache key shared by every summary of the same video.
        generated (bool): True when produced by the model here; only these rows
            are served from the cache. Saved summaries are client content.
        transcript (str): Raw transcript (may be empty).
        title (str): Summary title.
        key_points (list): Key points as a JSON array of strings.
        full_summary (str): Prose summary.
        created_at (datetime): Timestamp of creation.
    """
    __tablename__ = "summaries"
    __table_args__ = (
        Index("ix_summaries_user_id_created_at", "user_id", "created_at"),
    )

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_url = Column(String, nullable=False)
    video_id = Column(String, nullable=True)
    source_ref = Column(String, nullable=False, index=True)
    generated = Column(Boolean, nullable=False, default=False)
    transcript = Column(Text, nullable=False, default="")
    title = Column(String, nullable=False)
    key_points = Column(JSON, nullable=False, default=list)
    full_summary = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="summaries")
