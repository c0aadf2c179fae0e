"""006: create driver_block_causes table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE driver_block_causes (
            driver_id       BIGINT          NOT NULL REFERENCES drivers (id),
            cause           VARCHAR(20)     NOT NULL,
            reason          VARCHAR(500)    NOT NULL,
            actor           VARCHAR(64)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            expires_at      TIMESTAMPTZ,
            PRIMARY KEY (driver_id, cause),
            CONSTRAINT ck_block_cause CHECK (cause IN ('debt', 'moderation')),
            CONSTRAINT ck_block_reason_not_blank CHECK (LENGTH(BTRIM(reason)) > 0)
        );
    """)
    op.execute("""
        COMMENT ON TABLE driver_block_causes IS
        'A driver is blocked while any row here has expires_at NULL or in the future';
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS driver_block_causes CASCADE;")
