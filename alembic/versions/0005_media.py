"""media: uploaded files across storage providers

Revision ID: 0005_media
Revises: 0004_posts_interactions
Create Date: 2025-09-22

"""

from alembic import op

revision = "0005_media"
down_revision = "0004_posts_interactions"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
    CREATE TABLE IF NOT EXISTS media (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
      original_name TEXT NOT NULL,
      filename TEXT NOT NULL,
      mimetype TEXT NOT NULL,
      size BIGINT NOT NULL DEFAULT 0,
      type TEXT NOT NULL CHECK (type IN ('image','video','audio','document')),
      provider TEXT NOT NULL CHECK (provider IN ('s3','google_cloud')),
      url TEXT NULL,
      cloud_path TEXT NOT NULL,
      status TEXT NOT NULL DEFAULT 'uploading'
        CHECK (status IN ('uploading','processing','ready','failed','deleted')),
      thumbnail_url TEXT NULL,
      metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
      tags TEXT[] NOT NULL DEFAULT '{}',
      is_public BOOLEAN NOT NULL DEFAULT false,
      description TEXT NULL,
      alt_text TEXT NULL,
      download_count INTEGER NOT NULL DEFAULT 0,
      view_count INTEGER NOT NULL DEFAULT 0,
      uploaded_at TIMESTAMPTZ NULL,
      processed_at TIMESTAMPTZ NULL,
      deleted_at TIMESTAMPTZ NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_media_user ON media(user_id, created_at DESC);
    CREATE INDEX IF NOT EXISTS idx_media_public ON media(is_public) WHERE status <> 'deleted';
    """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS media;")
