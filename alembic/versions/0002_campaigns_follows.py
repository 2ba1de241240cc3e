"""campaigns with embedded milestones/review, campaign_follows

Revision ID: 0002_campaigns_follows
Revises: 0001_users
Create Date: 2025-09-01

"""

from alembic import op

revision = "0002_campaigns_follows"
down_revision = "0001_users"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
    CREATE TABLE IF NOT EXISTS campaigns (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      title TEXT NOT NULL,
      description TEXT NOT NULL,
      type TEXT NOT NULL DEFAULT 'normal' CHECK (type IN ('normal','emergency')),
      funding_type TEXT NOT NULL DEFAULT 'fixed' CHECK (funding_type IN ('fixed','flexible')),
      status TEXT NOT NULL DEFAULT 'pending_review'
        CHECK (status IN ('pending_review','approved','rejected','fundraising',
                          'implementation','completed','cancelled','active')),
      creator_id UUID NOT NULL REFERENCES users(id) ON DELETE RESTRICT,
      creator_name TEXT NOT NULL,
      target_amount BIGINT NOT NULL CHECK (target_amount > 0),
      current_amount BIGINT NOT NULL DEFAULT 0 CHECK (current_amount >= 0),
      donor_count INTEGER NOT NULL DEFAULT 0,
      review_fee BIGINT NOT NULL DEFAULT 0 CHECK (review_fee >= 0),
      category TEXT NULL,
      tags TEXT[] NOT NULL DEFAULT '{}',
      milestones JSONB NOT NULL DEFAULT '[]'::jsonb,
      review JSONB NULL,
      start_date TIMESTAMPTZ NULL,
      end_date TIMESTAMPTZ NULL,
      approved_at TIMESTAMPTZ NULL,
      completed_at TIMESTAMPTZ NULL,
      rejection_reason TEXT NULL,
      cover_image TEXT NULL,
      gallery TEXT[] NOT NULL DEFAULT '{}',
      is_featured BOOLEAN NOT NULL DEFAULT false,
      view_count INTEGER NOT NULL DEFAULT 0,
      share_count INTEGER NOT NULL DEFAULT 0,
      followers_count INTEGER NOT NULL DEFAULT 0 CHECK (followers_count >= 0),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );

    CREATE INDEX IF NOT EXISTS idx_campaigns_status ON campaigns(status);
    CREATE INDEX IF NOT EXISTS idx_campaigns_creator_status ON campaigns(creator_id, status);
    CREATE INDEX IF NOT EXISTS idx_campaigns_category ON campaigns(category);
    CREATE INDEX IF NOT EXISTS idx_campaigns_review_queue
      ON campaigns(review_fee DESC, created_at ASC) WHERE status = 'pending_review';
    CREATE INDEX IF NOT EXISTS idx_campaigns_tags ON campaigns USING GIN(tags);

    CREATE TABLE IF NOT EXISTS campaign_follows (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      campaign_id UUID NOT NULL REFERENCES campaigns(id) ON DELETE CASCADE,
      user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
      campaign_title TEXT NOT NULL,
      user_name TEXT NOT NULL,
      is_following BOOLEAN NOT NULL DEFAULT true,
      followed_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      unfollowed_at TIMESTAMPTZ NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      CONSTRAINT uq_campaign_follows UNIQUE (campaign_id, user_id)
    );
    CREATE INDEX IF NOT EXISTS idx_campaign_follows_user
      ON campaign_follows(user_id) WHERE is_following;
    """
    )


def downgrade() -> None:
    op.execute(
        """
    DROP TABLE IF EXISTS campaign_follows;
    DROP TABLE IF EXISTS campaigns;
    """
    )
