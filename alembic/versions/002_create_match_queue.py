"""002: create match_queue table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE match_queue (
            user_id         VARCHAR(128)    PRIMARY KEY,
            username        VARCHAR(64),
            avatar          VARCHAR(512),
            joined_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_match_queue_joined_at ON match_queue (joined_at, user_id);")
    op.execute("COMMENT ON TABLE match_queue IS 'Players waiting for an opponent; one row per user';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS match_queue CASCADE;")
