"""003: create drivers and passengers tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE drivers (
            id              BIGSERIAL       PRIMARY KEY,
            name            VARCHAR(200)    NOT NULL,
            phone           VARCHAR(32),
            email           VARCHAR(255),
            license_plate   VARCHAR(32),
            vehicle_make    VARCHAR(64),
            vehicle_model   VARCHAR(64),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_drivers_updated_at
            BEFORE UPDATE ON drivers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE passengers (
            id              BIGSERIAL       PRIMARY KEY,
            name            VARCHAR(200)    NOT NULL,
            phone           VARCHAR(32),
            email           VARCHAR(255),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_passengers_updated_at
            BEFORE UPDATE ON passengers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE drivers IS 'Driver directory, owned by the ride platform; read here for settlement and debts';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS passengers CASCADE;")
    op.execute("DROP TABLE IF EXISTS drivers CASCADE;")
