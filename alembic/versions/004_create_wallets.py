"""004: create wallets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wallets (
            id              BIGSERIAL       PRIMARY KEY,
            driver_id       BIGINT          NOT NULL REFERENCES drivers (id),
            balance         BIGINT          NOT NULL DEFAULT 0,
            currency        CHAR(3)         NOT NULL DEFAULT 'XOF',
            version         BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_wallets_driver UNIQUE (driver_id)
        );
    """)
    op.execute("CREATE INDEX idx_wallets_debt ON wallets (balance) WHERE balance < 0;")
    op.execute("""
        CREATE TRIGGER trg_wallets_updated_at
            BEFORE UPDATE ON wallets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE wallets IS 'One per driver; balance is the running total of ledger_entries.amount, negative = debt';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wallets CASCADE;")
