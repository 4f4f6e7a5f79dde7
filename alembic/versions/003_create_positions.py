"""003: create positions table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            market_id           VARCHAR(64)     NOT NULL REFERENCES markets(id),
            predictor           VARCHAR(128)    NOT NULL,
            prediction_type     VARCHAR(3)      NOT NULL,
            amount_deposited    NUMERIC(20,0)   NOT NULL,
            tokens_received     NUMERIC(20,0)   NOT NULL,
            fee_paid            NUMERIC(20,0)   NOT NULL DEFAULT 0,
            claimed             BOOLEAN         NOT NULL DEFAULT FALSE,
            claimed_at          TIMESTAMPTZ,
            reward_paid         NUMERIC(20,0)   NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_positions PRIMARY KEY (market_id, predictor),
            CONSTRAINT ck_positions_side CHECK (prediction_type IN ('YES', 'NO')),
            CONSTRAINT ck_positions_amounts CHECK (
                amount_deposited > 0 AND tokens_received > 0
                AND fee_paid >= 0 AND fee_paid <= amount_deposited AND reward_paid >= 0
            ),
            CONSTRAINT ck_positions_claim CHECK (
                (claimed AND claimed_at IS NOT NULL)
                OR (NOT claimed AND claimed_at IS NULL AND reward_paid = 0)
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_positions_updated_at
            BEFORE UPDATE ON positions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE positions IS 'One deposit per (market, predictor); claimed flips once';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
