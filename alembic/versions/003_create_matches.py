"""003: create matches table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE matches (
            id              VARCHAR(64)     PRIMARY KEY,
            players         JSONB           NOT NULL,
            player_states   JSONB           NOT NULL DEFAULT '{}'::jsonb,
            puzzle_id       VARCHAR(32)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            start_at        TIMESTAMPTZ     NOT NULL,
            max_duration    INT             NOT NULL,
            winner          VARCHAR(128),
            is_draw         BOOLEAN         NOT NULL DEFAULT FALSE,
            completed_at    TIMESTAMPTZ,
            CONSTRAINT ck_matches_players_len   CHECK (jsonb_array_length(players) = 2),
            CONSTRAINT ck_matches_max_duration  CHECK (max_duration > 0),
            CONSTRAINT ck_matches_draw_no_winner CHECK (NOT (is_draw AND winner IS NOT NULL))
        );
    """)
    op.execute("CREATE INDEX idx_matches_players ON matches USING GIN (players);")
    op.execute("COMMENT ON TABLE matches IS 'Head-to-head puzzle matches; completed_at set once on settlement';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS matches CASCADE;")
