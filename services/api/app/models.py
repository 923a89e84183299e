"""
SQLAlchemy ORM models for TiDB.

Tables:
  users           — account rows (owned by the accounts service; read here)
  stellar_systems — content items that are ranked by likes
  planets         — nested sub-entities of a system (only counted here)
  likes           — user × system like edges

All timestamps are stored as naive UTC and stamped by the application.
The database clock is never used: NOW() follows the MySQL session time zone,
while ranking windows are cut in UTC.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, nullable=False
    )


class StellarSystem(Base):
    __tablename__ = "stellar_systems"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    galaxy_id: Mapped[str] = mapped_column(String(36), nullable=False)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow, nullable=False
    )

    planets = relationship("Planet", back_populates="system", lazy="noload")

    __table_args__ = (
        # Stable order for the random ranking's offset window
        Index("idx_systems_created", "created_at", "id"),
        Index("idx_systems_galaxy", "galaxy_id"),
    )


class Planet(Base):
    __tablename__ = "planets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    system_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("stellar_systems.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, nullable=False
    )

    system = relationship("StellarSystem", back_populates="planets", lazy="noload")

    __table_args__ = (Index("idx_planets_system", "system_id"),)


class Like(Base):
    __tablename__ = "likes"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), primary_key=True
    )
    system_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("stellar_systems.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, nullable=False
    )

    __table_args__ = (
        # Windowed counts scan likes by system within a created_at range
        Index("idx_likes_system_created", "system_id", "created_at"),
        Index("idx_likes_user_created", "user_id", "created_at"),
    )
