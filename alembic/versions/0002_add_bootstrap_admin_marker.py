"""Add bootstrap_admin marker row

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18 09:30:00.000000

"""

from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, Sequence[str], None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # At most one row can ever exist. Whoever inserts it first is the
    # bootstrap Admin; later inserts hit the primary key and do nothing.
    op.execute("""
        CREATE TABLE IF NOT EXISTS bootstrap_admin (
            singleton BOOLEAN PRIMARY KEY DEFAULT TRUE CHECK (singleton),
            user_id UUID REFERENCES users(id) ON DELETE SET NULL,
            claimed_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        -- Existing databases already had their first user.
        INSERT INTO bootstrap_admin (user_id)
        SELECT id FROM users ORDER BY created_at LIMIT 1
        ON CONFLICT DO NOTHING;
    """)


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("DROP TABLE IF EXISTS bootstrap_admin;")
