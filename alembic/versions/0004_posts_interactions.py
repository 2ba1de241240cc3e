"""posts feed and interactions: likes, comments, shares, views

Revision ID: 0004_posts_interactions
Revises: 0003_progress_updates
Create Date: 2025-09-15

"""

from alembic import op

revision = "0004_posts_interactions"
down_revision = "0003_progress_updates"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
    CREATE TABLE IF NOT EXISTS posts (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      creator_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
      creator JSONB NOT NULL,
      campaign_id UUID NULL REFERENCES campaigns(id) ON DELETE SET NULL,
      type TEXT NOT NULL DEFAULT 'text'
        CHECK (type IN ('text','image','video','link','mixed')),
      content JSONB NOT NULL DEFAULT '{}'::jsonb,
      visibility TEXT NOT NULL DEFAULT 'public'
        CHECK (visibility IN ('public','followers','private')),
      hashtags TEXT[] NOT NULL DEFAULT '{}',
      mentions TEXT[] NOT NULL DEFAULT '{}',
      location JSONB NULL,
      likes_count INTEGER NOT NULL DEFAULT 0 CHECK (likes_count >= 0),
      comments_count INTEGER NOT NULL DEFAULT 0 CHECK (comments_count >= 0),
      shares_count INTEGER NOT NULL DEFAULT 0 CHECK (shares_count >= 0),
      views_count INTEGER NOT NULL DEFAULT 0 CHECK (views_count >= 0),
      is_edited BOOLEAN NOT NULL DEFAULT false,
      edited_at TIMESTAMPTZ NULL,
      is_deleted BOOLEAN NOT NULL DEFAULT false,
      deleted_at TIMESTAMPTZ NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_posts_created ON posts(created_at DESC) WHERE NOT is_deleted;
    CREATE INDEX IF NOT EXISTS idx_posts_creator ON posts(creator_id, created_at DESC);
    CREATE INDEX IF NOT EXISTS idx_posts_campaign ON posts(campaign_id) WHERE campaign_id IS NOT NULL;
    CREATE INDEX IF NOT EXISTS idx_posts_hashtags ON posts USING GIN(hashtags);

    CREATE TABLE IF NOT EXISTS post_likes (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      post_id UUID NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
      user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
      liked_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      CONSTRAINT uq_post_likes UNIQUE (post_id, user_id)
    );
    CREATE INDEX IF NOT EXISTS idx_post_likes_user ON post_likes(user_id, liked_at DESC);

    CREATE TABLE IF NOT EXISTS post_comments (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      post_id UUID NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
      user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
      parent_comment_id UUID NULL REFERENCES post_comments(id) ON DELETE CASCADE,
      content TEXT NOT NULL,
      mentions TEXT[] NOT NULL DEFAULT '{}',
      likes_count INTEGER NOT NULL DEFAULT 0,
      replies_count INTEGER NOT NULL DEFAULT 0 CHECK (replies_count >= 0),
      is_edited BOOLEAN NOT NULL DEFAULT false,
      edited_at TIMESTAMPTZ NULL,
      is_deleted BOOLEAN NOT NULL DEFAULT false,
      deleted_at TIMESTAMPTZ NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_post_comments_post
      ON post_comments(post_id, created_at DESC) WHERE NOT is_deleted;
    CREATE INDEX IF NOT EXISTS idx_post_comments_parent ON post_comments(parent_comment_id);

    CREATE TABLE IF NOT EXISTS post_shares (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      post_id UUID NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
      user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
      share_type TEXT NOT NULL DEFAULT 'repost' CHECK (share_type IN ('repost','quote')),
      share_text TEXT NULL,
      visibility TEXT NOT NULL DEFAULT 'public'
        CHECK (visibility IN ('public','followers','private')),
      source TEXT NOT NULL DEFAULT 'web',
      shared_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      CONSTRAINT uq_post_shares UNIQUE (post_id, user_id)
    );
    CREATE INDEX IF NOT EXISTS idx_post_shares_user ON post_shares(user_id, shared_at DESC);

    CREATE TABLE IF NOT EXISTS post_views (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      post_id UUID NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
      user_id UUID NULL REFERENCES users(id) ON DELETE SET NULL,
      session_id TEXT NULL,
      ip_address TEXT NULL,
      user_agent TEXT NULL,
      referrer TEXT NULL,
      source TEXT NOT NULL DEFAULT 'web',
      duration INTEGER NOT NULL DEFAULT 0 CHECK (duration >= 0),
      viewed_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE UNIQUE INDEX IF NOT EXISTS uq_post_views_user
      ON post_views(post_id, user_id) WHERE user_id IS NOT NULL;
    CREATE UNIQUE INDEX IF NOT EXISTS uq_post_views_session
      ON post_views(post_id, session_id) WHERE user_id IS NULL AND session_id IS NOT NULL;
    CREATE INDEX IF NOT EXISTS idx_post_views_user ON post_views(user_id, viewed_at DESC);
    """
    )


def downgrade() -> None:
    op.execute(
        """
    DROP TABLE IF EXISTS post_views;
    DROP TABLE IF EXISTS post_shares;
    DROP TABLE IF EXISTS post_comments;
    DROP TABLE IF EXISTS post_likes;
    DROP TABLE IF EXISTS posts;
    """
    )
