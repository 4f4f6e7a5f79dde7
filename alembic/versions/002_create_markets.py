"""002: create markets table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE markets (
            id                  VARCHAR(64)     PRIMARY KEY,
            question            VARCHAR(256)    NOT NULL,
            creator             VARCHAR(128)    NOT NULL,
            resolution_time     TIMESTAMPTZ     NOT NULL,
            yes_pool            NUMERIC(20,0)   NOT NULL DEFAULT 0,
            no_pool             NUMERIC(20,0)   NOT NULL DEFAULT 0,
            total_liquidity     NUMERIC(20,0)   NOT NULL DEFAULT 0,
            fee_collected       NUMERIC(20,0)   NOT NULL DEFAULT 0,
            total_paid_out      NUMERIC(20,0)   NOT NULL DEFAULT 0,
            resolved            BOOLEAN         NOT NULL DEFAULT FALSE,
            outcome             VARCHAR(3),
            resolved_at         TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_amounts_gte_0 CHECK (
                yes_pool >= 0 AND no_pool >= 0 AND total_liquidity >= 0
                AND fee_collected >= 0 AND total_paid_out >= 0
            ),
            CONSTRAINT ck_markets_paid_lte_reservoir CHECK (total_paid_out <= yes_pool + no_pool),
            CONSTRAINT ck_markets_outcome CHECK (outcome IS NULL OR outcome IN ('YES', 'NO')),
            CONSTRAINT ck_markets_resolution CHECK (
                (resolved AND outcome IS NOT NULL AND resolved_at IS NOT NULL)
                OR (NOT resolved AND outcome IS NULL AND resolved_at IS NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_resolved_created ON markets (resolved, created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_markets_creator ON markets (creator);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Binary markets: question, YES/NO pools, fee treasury, resolution';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
