"""005: create market_events table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_events (
            id              VARCHAR(32)     PRIMARY KEY,
            market_id       VARCHAR(64)     NOT NULL,
            event_type      VARCHAR(30)     NOT NULL,
            actor           VARCHAR(128)    NOT NULL,
            payload         JSONB           NOT NULL,
            occurred_at     TIMESTAMPTZ     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_market_event_type CHECK (
                event_type IN (
                    'MarketCreated',
                    'PredictionPlaced',
                    'MarketResolved',
                    'RewardClaimed',
                    'FeesWithdrawn'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_market_events_market_time ON market_events (market_id, occurred_at);")
    op.execute("COMMENT ON TABLE market_events IS 'Append-only audit log of market mutations';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_events CASCADE;")
