"""004: create escrow_vaults and escrow_ledger tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE escrow_vaults (
            market_id       VARCHAR(64)     PRIMARY KEY REFERENCES markets(id),
            balance         NUMERIC(21,0)   NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_escrow_vaults_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_escrow_vaults_updated_at
            BEFORE UPDATE ON escrow_vaults
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE escrow_ledger (
            id                  BIGSERIAL       PRIMARY KEY,
            market_id           VARCHAR(64)     NOT NULL REFERENCES escrow_vaults(market_id),
            account_id          VARCHAR(128)    NOT NULL,
            entry_type          VARCHAR(20)     NOT NULL,
            amount              NUMERIC(21,0)   NOT NULL,
            vault_balance_after NUMERIC(21,0)   NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_escrow_ledger_entry_type CHECK (
                entry_type IN ('SEED_IN', 'DEPOSIT_IN', 'REWARD_OUT', 'FEE_OUT')
            ),
            CONSTRAINT ck_escrow_ledger_sign CHECK (
                (entry_type IN ('SEED_IN', 'DEPOSIT_IN') AND amount > 0)
                OR (entry_type IN ('REWARD_OUT', 'FEE_OUT') AND amount < 0)
            )
        );
    """)
    op.execute("CREATE INDEX idx_escrow_ledger_market ON escrow_ledger (market_id, id);")
    op.execute("CREATE INDEX idx_escrow_ledger_account ON escrow_ledger (account_id, id);")
    op.execute("COMMENT ON TABLE escrow_ledger IS 'Append-only collateral movements; never UPDATE or DELETE';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS escrow_ledger CASCADE;")
    op.execute("DROP TABLE IF EXISTS escrow_vaults CASCADE;")
