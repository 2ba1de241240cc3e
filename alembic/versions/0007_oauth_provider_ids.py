"""unique lookup indexes on linked OAuth identities

Revision ID: 0007_oauth_provider_ids
Revises: 0006_financial_records
Create Date: 2025-10-06

"""

from alembic import op

revision = "0007_oauth_provider_ids"
down_revision = "0006_financial_records"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
    CREATE UNIQUE INDEX IF NOT EXISTS uq_users_google_sub
      ON users((google_provider->>'google_sub'));
    CREATE UNIQUE INDEX IF NOT EXISTS uq_users_facebook_id
      ON users((facebook_provider->>'facebook_id'));
    """
    )


def downgrade() -> None:
    op.execute(
        """
    DROP INDEX IF EXISTS uq_users_facebook_id;
    DROP INDEX IF EXISTS uq_users_google_sub;
    """
    )
