"""008: create moderation tables

Revision ID: 008
Revises: 007
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE moderation_cases (
            id              BIGSERIAL       PRIMARY KEY,
            case_type       VARCHAR(100)    NOT NULL,
            subject_type    VARCHAR(20)     NOT NULL,
            subject_id      BIGINT          NOT NULL,
            reporter_name   VARCHAR(200)    NOT NULL,
            reason          VARCHAR(1000)   NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'pending',
            resolved_by     VARCHAR(64),
            resolved_at     TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_case_subject_type CHECK (subject_type IN ('driver', 'passenger')),
            CONSTRAINT ck_case_status CHECK (status IN ('pending', 'resolved'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_cases_pending
        ON moderation_cases (subject_type, subject_id)
        WHERE status = 'pending';
    """)
    op.execute("""
        CREATE TABLE moderation_status (
            subject_type    VARCHAR(20)     NOT NULL,
            subject_id      BIGINT          NOT NULL,
            state           VARCHAR(20)     NOT NULL DEFAULT 'active',
            suspended_until TIMESTAMPTZ,
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (subject_type, subject_id),
            CONSTRAINT ck_status_subject_type CHECK (subject_type IN ('driver', 'passenger')),
            CONSTRAINT ck_status_state CHECK (state IN ('active', 'suspended', 'banned'))
        );
    """)
    op.execute("""
        CREATE TABLE moderation_logs (
            id              BIGSERIAL       PRIMARY KEY,
            moderator       VARCHAR(64)     NOT NULL,
            action          VARCHAR(20)     NOT NULL,
            subject_type    VARCHAR(20)     NOT NULL,
            subject_id      BIGINT          NOT NULL,
            target_name     VARCHAR(200)    NOT NULL,
            reason          VARCHAR(1000)   NOT NULL DEFAULT '',
            duration_days   INTEGER,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_log_action CHECK (action IN ('warned', 'suspended', 'banned', 'reinstated'))
        );
    """)
    op.execute("CREATE INDEX idx_moderation_logs_time ON moderation_logs (created_at DESC, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_moderation_logs_append_only
            BEFORE UPDATE OR DELETE ON moderation_logs
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS moderation_logs CASCADE;")
    op.execute("DROP TABLE IF EXISTS moderation_status CASCADE;")
    op.execute("DROP TABLE IF EXISTS moderation_cases CASCADE;")
