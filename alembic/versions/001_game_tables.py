"""Game tables.

Creates game_users, chains, stakes, predictions and auth_users.

Revision ID: 001_game_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_game_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Game users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS game_users (
            id SERIAL PRIMARY KEY,
            auth_id TEXT UNIQUE NOT NULL,
            username TEXT NOT NULL,
            email TEXT,
            tokens DOUBLE PRECISION NOT NULL DEFAULT 1000,
            mining_power DOUBLE PRECISION NOT NULL DEFAULT 0,
            experience INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Chains (adjacency list) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS chains (
            id SERIAL PRIMARY KEY,
            name TEXT NOT NULL,
            tier VARCHAR(16) NOT NULL,
            parent_id INTEGER REFERENCES chains(id),
            tps DOUBLE PRECISION NOT NULL DEFAULT 0,
            difficulty DOUBLE PRECISION NOT NULL DEFAULT 0,
            active_miners INTEGER NOT NULL DEFAULT 0,
            last_block_time TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            health DOUBLE PRECISION NOT NULL DEFAULT 100
        )
    """)

    # --- Stakes ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS stakes (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES game_users(id),
            chain_id INTEGER NOT NULL REFERENCES chains(id),
            amount DOUBLE PRECISION NOT NULL,
            active BOOLEAN NOT NULL DEFAULT true,
            start_time TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_stakes_user_id
        ON stakes(user_id)
    """)

    # --- Predictions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS predictions (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES game_users(id),
            type VARCHAR(32) NOT NULL,
            target_chain_id INTEGER NOT NULL REFERENCES chains(id),
            predicted_value DOUBLE PRECISION NOT NULL,
            resolved BOOLEAN NOT NULL DEFAULT false,
            won BOOLEAN,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_predictions_created_at
        ON predictions(created_at DESC)
    """)

    # --- Identity-provider profiles ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS auth_users (
            id VARCHAR(255) PRIMARY KEY,
            email VARCHAR(320),
            first_name TEXT,
            last_name TEXT,
            profile_image_url TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS auth_users")
    op.execute("DROP TABLE IF EXISTS predictions")
    op.execute("DROP TABLE IF EXISTS stakes")
    op.execute("DROP TABLE IF EXISTS chains")
    op.execute("DROP TABLE IF EXISTS game_users")
