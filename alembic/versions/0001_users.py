"""users table: local and OAuth accounts, reputation, refresh token

Revision ID: 0001_users
Revises:
Create Date: 2025-09-01

"""

from alembic import op

revision = "0001_users"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
    CREATE EXTENSION IF NOT EXISTS "pgcrypto";
    CREATE EXTENSION IF NOT EXISTS "citext";

    CREATE TABLE IF NOT EXISTS users (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      name TEXT NOT NULL,
      email CITEXT NOT NULL UNIQUE,
      password_hash TEXT NULL,
      phone TEXT NULL,
      address TEXT NULL,
      avatar TEXT NULL,
      bio TEXT NULL,
      date_of_birth DATE NULL,
      wallet_address TEXT NULL,
      role TEXT NOT NULL DEFAULT 'user'
        CHECK (role IN ('user','admin','donor','organization')),
      status TEXT NOT NULL DEFAULT 'active'
        CHECK (status IN ('active','inactive','suspended')),
      is_verified BOOLEAN NOT NULL DEFAULT false,
      reputation INTEGER NOT NULL DEFAULT 50 CHECK (reputation BETWEEN 0 AND 100),
      total_donated BIGINT NOT NULL DEFAULT 0,
      total_campaigns_created INTEGER NOT NULL DEFAULT 0,
      successful_campaigns INTEGER NOT NULL DEFAULT 0,
      google_provider JSONB NULL,
      facebook_provider JSONB NULL,
      refresh_token_hash TEXT NULL,
      refresh_token_expires_at TIMESTAMPTZ NULL,
      last_login_at TIMESTAMPTZ NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );

    CREATE UNIQUE INDEX IF NOT EXISTS uq_users_refresh_token_hash
      ON users(refresh_token_hash) WHERE refresh_token_hash IS NOT NULL;
    CREATE INDEX IF NOT EXISTS idx_users_role_status ON users(role, status);
    """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users;")
