"""donations, disbursements and expense_reports

Revision ID: 0006_financial_records
Revises: 0005_media
Create Date: 2025-09-29

"""

from alembic import op

revision = "0006_financial_records"
down_revision = "0005_media"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
    CREATE TABLE IF NOT EXISTS donations (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      campaign_id UUID NOT NULL REFERENCES campaigns(id) ON DELETE RESTRICT,
      campaign_title TEXT NOT NULL,
      donor_id UUID NULL REFERENCES users(id) ON DELETE SET NULL,
      donor_name TEXT NULL,
      donor_email TEXT NULL,
      amount BIGINT NOT NULL CHECK (amount > 0),
      fee BIGINT NOT NULL DEFAULT 0,
      net_amount BIGINT NOT NULL DEFAULT 0,
      payment_method TEXT NOT NULL
        CHECK (payment_method IN ('bank_transfer','credit_card','digital_wallet','cash')),
      status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending','completed','failed','refunded')),
      transaction_details JSONB NULL,
      message TEXT NULL,
      is_anonymous BOOLEAN NOT NULL DEFAULT false,
      is_recurring BOOLEAN NOT NULL DEFAULT false,
      is_tax_deductible BOOLEAN NOT NULL DEFAULT false,
      receipt_url TEXT NULL,
      notes TEXT NULL,
      processed_at TIMESTAMPTZ NULL,
      refunded_at TIMESTAMPTZ NULL,
      refund_reason TEXT NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_donations_campaign ON donations(campaign_id, created_at DESC);
    CREATE INDEX IF NOT EXISTS idx_donations_donor ON donations(donor_id);

    CREATE TABLE IF NOT EXISTS disbursements (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      campaign_id UUID NOT NULL REFERENCES campaigns(id) ON DELETE RESTRICT,
      campaign_title TEXT NOT NULL,
      milestone_index INTEGER NOT NULL CHECK (milestone_index >= 0),
      milestone_title TEXT NOT NULL,
      requested_by UUID NULL REFERENCES users(id) ON DELETE SET NULL,
      requested_by_name TEXT NOT NULL,
      amount BIGINT NOT NULL CHECK (amount > 0),
      fee BIGINT NOT NULL DEFAULT 0,
      net_amount BIGINT NOT NULL DEFAULT 0,
      status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending','approved','disbursed','rejected')),
      purpose TEXT NOT NULL,
      disbursement_details JSONB NOT NULL DEFAULT '{}'::jsonb,
      expense_report_id UUID NULL,
      approved_by UUID NULL REFERENCES users(id) ON DELETE SET NULL,
      approved_by_name TEXT NULL,
      approved_at TIMESTAMPTZ NULL,
      disbursed_at TIMESTAMPTZ NULL,
      approval_comments TEXT NULL,
      rejection_reason TEXT NULL,
      supporting_documents TEXT[] NOT NULL DEFAULT '{}',
      is_urgent BOOLEAN NOT NULL DEFAULT false,
      priority_level INTEGER NULL,
      notes TEXT NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_disbursements_campaign
      ON disbursements(campaign_id, milestone_index);

    CREATE TABLE IF NOT EXISTS expense_reports (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      campaign_id UUID NOT NULL REFERENCES campaigns(id) ON DELETE RESTRICT,
      campaign_title TEXT NOT NULL,
      milestone_index INTEGER NOT NULL CHECK (milestone_index >= 0),
      milestone_title TEXT NOT NULL,
      reported_by UUID NULL REFERENCES users(id) ON DELETE SET NULL,
      reported_by_name TEXT NOT NULL,
      budget_allocated BIGINT NOT NULL DEFAULT 0,
      total_spent BIGINT NOT NULL DEFAULT 0,
      variance BIGINT NOT NULL DEFAULT 0,
      description TEXT NOT NULL,
      expense_items JSONB NOT NULL DEFAULT '[]'::jsonb,
      attachments JSONB NOT NULL DEFAULT '[]'::jsonb,
      achievements TEXT NOT NULL DEFAULT '',
      challenges TEXT NULL,
      lessons_learned TEXT NULL,
      status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending','under_review','approved','rejected','requires_revision')),
      reviewed_by UUID NULL REFERENCES users(id) ON DELETE SET NULL,
      reviewed_by_name TEXT NULL,
      reviewed_at TIMESTAMPTZ NULL,
      review_comments TEXT NULL,
      review_score INTEGER NULL CHECK (review_score BETWEEN 1 AND 5),
      is_public BOOLEAN NOT NULL DEFAULT false,
      submitted_at TIMESTAMPTZ NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_expense_reports_campaign
      ON expense_reports(campaign_id, milestone_index);

    ALTER TABLE disbursements
      ADD CONSTRAINT fk_disbursements_expense_report
      FOREIGN KEY (expense_report_id) REFERENCES expense_reports(id) ON DELETE SET NULL;
    """
    )


def downgrade() -> None:
    op.execute(
        """
    DROP TABLE IF EXISTS disbursements;
    DROP TABLE IF EXISTS expense_reports;
    DROP TABLE IF EXISTS donations;
    """
    )
