"""progress_updates: milestone progress reports

Revision ID: 0003_progress_updates
Revises: 0002_campaigns_follows
Create Date: 2025-09-08

"""

from alembic import op

revision = "0003_progress_updates"
down_revision = "0002_campaigns_follows"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
    CREATE TABLE IF NOT EXISTS progress_updates (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      campaign_id UUID NOT NULL REFERENCES campaigns(id) ON DELETE CASCADE,
      campaign_title TEXT NOT NULL,
      milestone_index INTEGER NOT NULL CHECK (milestone_index >= 0),
      milestone_title TEXT NOT NULL,
      updated_by UUID NULL REFERENCES users(id) ON DELETE SET NULL,
      updated_by_name TEXT NOT NULL,
      description TEXT NOT NULL,
      progress_percentage INTEGER NOT NULL CHECK (progress_percentage BETWEEN 0 AND 100),
      images TEXT[] NOT NULL DEFAULT '{}',
      metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
      is_visible BOOLEAN NOT NULL DEFAULT true,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_progress_campaign_milestone
      ON progress_updates(campaign_id, milestone_index, created_at DESC);
    CREATE INDEX IF NOT EXISTS idx_progress_updated_by ON progress_updates(updated_by);
    """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS progress_updates;")
