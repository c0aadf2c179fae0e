"""005: create ledger_entries table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            wallet_id       BIGINT          NOT NULL REFERENCES wallets (id),
            entry_type      VARCHAR(30)     NOT NULL,
            amount          BIGINT          NOT NULL,
            balance_after   BIGINT          NOT NULL,
            reason          VARCHAR(500)    NOT NULL,
            actor           VARCHAR(64)     NOT NULL,
            reference_id    VARCHAR(64),
            idempotency_key VARCHAR(200),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type CHECK (
                entry_type IN ('ADJUSTMENT_CREDIT', 'ADJUSTMENT_DEBIT', 'RIDE_SETTLEMENT')
            ),
            CONSTRAINT ck_ledger_amount_nonzero CHECK (amount <> 0),
            CONSTRAINT ck_ledger_reason_not_blank CHECK (LENGTH(BTRIM(reason)) > 0)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_wallet_id ON ledger_entries (wallet_id, id DESC);")
    op.execute("""
        CREATE UNIQUE INDEX uq_ledger_idempotency
        ON ledger_entries (wallet_id, idempotency_key)
        WHERE idempotency_key IS NOT NULL;
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_append_only
            BEFORE UPDATE OR DELETE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE ledger_entries IS 'Wallet ledger — append-only, never updated or deleted; amounts in the smallest currency unit';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
