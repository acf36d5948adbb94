"""004: create match_settlements table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No FK to matches: the ticket must outlive a deleted match row
    op.execute("""
        CREATE TABLE match_settlements (
            match_id        VARCHAR(64)     PRIMARY KEY,
            source          VARCHAR(20)     NOT NULL,
            settled_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_match_settlements_source CHECK (
                source IN ('COMPLETE_CALL', 'MATCH_REMOVED')
            )
        );
    """)
    op.execute("COMMENT ON TABLE match_settlements IS 'One ticket per settled match; whoever inserts it writes history';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS match_settlements CASCADE;")
