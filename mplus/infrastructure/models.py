# mplus/infrastructure/models.py
"""
SQLAlchemy ORM models for the SQL storage backend.

Each guild's state is kept as one JSON document, the same shape the JSON
file backend writes under `guilds.<guild_id>`.
"""
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from mplus.infrastructure.db.session import Base


def now():
    return datetime.now(timezone.utc)


class GuildStateRecord(Base):
    __tablename__ = "guild_states"

    guild_id = Column(String(64), primary_key=True)
    document = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), default=now, onupdate=now)
