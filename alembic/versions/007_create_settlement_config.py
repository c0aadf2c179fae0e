"""007: create settlement_config table

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settlement_config (
            id              SMALLINT        PRIMARY KEY DEFAULT 1,
            version         BIGINT          NOT NULL DEFAULT 1,
            pricing         JSONB           NOT NULL,
            commission      JSONB           NOT NULL,
            updated_by      VARCHAR(64),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settlement_config_single_row CHECK (id = 1),
            CONSTRAINT ck_commission_sum CHECK (
                (commission->>'platform_pct')::int
                + (commission->>'driver_pct')::int
                + (commission->>'maintenance_pct')::int = 100
            )
        );
    """)
    # Console defaults
    op.execute("""
        INSERT INTO settlement_config (id, version, pricing, commission, updated_by)
        VALUES (
            1,
            1,
            '{
                "base_fare": 500,
                "per_km": 250,
                "min_fare": 1000,
                "stop_rate_per_min": 5,
                "pickup_grace_period_m": 5,
                "pickup_waiting_rate_per_min": 10,
                "peak_hours": {"enabled": false, "multiplier": 1.0, "start_time": "17:00", "end_time": "20:00"},
                "night": {"multiplier": 1.0, "start_time": "22:00", "end_time": "06:00"},
                "weather": {"enabled": false, "multiplier": 1.0}
            }'::jsonb,
            '{"platform_pct": 70, "driver_pct": 20, "maintenance_pct": 10}'::jsonb,
            'system'
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settlement_config CASCADE;")
