"""006: create devices table

Revision ID: 006
Revises: 005
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # NULL preference means enabled
    op.execute("""
        CREATE TABLE devices (
            push_token                  VARCHAR(4096)   PRIMARY KEY,
            user_id                     VARCHAR(128)    NOT NULL,
            background_alerts_enabled   BOOLEAN,
            foreground_alerts_enabled   BOOLEAN,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_devices_user ON devices (user_id);")
    op.execute("""
        CREATE TRIGGER trg_devices_updated_at
            BEFORE UPDATE ON devices
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE devices IS 'Push tokens and join-alert preferences per client device';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS devices CASCADE;")
