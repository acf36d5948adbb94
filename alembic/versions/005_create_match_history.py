"""005: create match_history table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE match_history (
            id                   BIGSERIAL       PRIMARY KEY,
            match_id             VARCHAR(64)     NOT NULL,
            player_id            VARCHAR(128)    NOT NULL,
            opponent_id          VARCHAR(128)    NOT NULL,
            opponent_username    VARCHAR(64),
            puzzle_id            VARCHAR(32)     NOT NULL,
            result               VARCHAR(8)      NOT NULL,
            player_progress      DOUBLE PRECISION NOT NULL DEFAULT 0,
            opponent_progress    DOUBLE PRECISION NOT NULL DEFAULT 0,
            player_finished_at   TIMESTAMPTZ,
            opponent_finished_at TIMESTAMPTZ,
            match_duration_ms    BIGINT          NOT NULL DEFAULT 0,
            completed_at         TIMESTAMPTZ     NOT NULL,
            created_at           TIMESTAMPTZ     NOT NULL,
            CONSTRAINT uq_match_history_match_player UNIQUE (match_id, player_id),
            CONSTRAINT ck_match_history_result       CHECK (result IN ('win', 'loss', 'draw')),
            CONSTRAINT ck_match_history_duration     CHECK (match_duration_ms >= 0),
            CONSTRAINT ck_match_history_progress     CHECK (
                player_progress >= 0 AND opponent_progress >= 0
            )
        );
    """)
    op.execute("CREATE INDEX idx_match_history_player ON match_history (player_id, completed_at DESC);")
    op.execute("COMMENT ON TABLE match_history IS 'Per-player outcome records, one per (match, player)';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS match_history CASCADE;")
