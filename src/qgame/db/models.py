"""ORM models for the game tables.

The schema itself is created by the Alembic migration; tests build it from
this metadata instead.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from qgame.db.base import Base


# ---------------------------------------------------------------------------
# Game users
# ---------------------------------------------------------------------------


class GameUser(Base):
    """Maps to the 'game_users' table."""

    __tablename__ = "game_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    tokens: Mapped[float] = mapped_column(Float, nullable=False, default=1000.0, server_default="1000")
    mining_power: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Chains (adjacency list: parent_id -> chains.id)
# ---------------------------------------------------------------------------


class ChainRow(Base):
    """Maps to the 'chains' table."""

    __tablename__ = "chains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    tier: Mapped[str] = mapped_column(String(16), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("chains.id"), nullable=True)
    tps: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    difficulty: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    active_miners: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_block_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    health: Mapped[float] = mapped_column(Float, nullable=False, default=100.0, server_default="100")


# ---------------------------------------------------------------------------
# Guardian game: stakes
# ---------------------------------------------------------------------------


class StakeRow(Base):
    """Maps to the 'stakes' table."""

    __tablename__ = "stakes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("game_users.id"), nullable=False, index=True)
    chain_id: Mapped[int] = mapped_column(Integer, ForeignKey("chains.id"), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Prediction game
# ---------------------------------------------------------------------------


class PredictionRow(Base):
    """Maps to the 'predictions' table."""

    __tablename__ = "predictions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("game_users.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    target_chain_id: Mapped[int] = mapped_column(Integer, ForeignKey("chains.id"), nullable=False)
    predicted_value: Mapped[float] = mapped_column(Float, nullable=False)
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    won: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )


# ---------------------------------------------------------------------------
# Identity-provider profiles
# ---------------------------------------------------------------------------


class AuthUserRow(Base):
    """Maps to the 'auth_users' table."""

    __tablename__ = "auth_users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
