"""EscrowLedger — custody collaborator backed by escrow_vaults + escrow_ledger.

One vault row per market holds the escrowed collateral balance. Every movement
appends an escrow_ledger row with the vault balance after the movement
(append-only, never updated or deleted).

Balance updates are atomic UPDATE ... RETURNING. A release returning 0 rows
means the vault would be overdrawn: a conservation breach, never a user error.

Transaction ownership: the CALLER commits or rolls back.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import EscrowEntryType
from src.pm_common.errors import InternalError

logger = logging.getLogger(__name__)

_OPEN_VAULT_SQL = text("""
    INSERT INTO escrow_vaults (market_id, balance)
    VALUES (:market_id, 0)
    ON CONFLICT (market_id) DO NOTHING
""")

_CREDIT_VAULT_SQL = text("""
    UPDATE escrow_vaults
    SET balance = balance + :amount,
        updated_at = NOW()
    WHERE market_id = :market_id
    RETURNING balance
""")

_DEBIT_VAULT_SQL = text("""
    UPDATE escrow_vaults
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE market_id = :market_id AND balance >= :amount
    RETURNING balance
""")

_GET_VAULT_SQL = text("SELECT balance FROM escrow_vaults WHERE market_id = :market_id")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO escrow_ledger
        (market_id, account_id, entry_type, amount, vault_balance_after)
    VALUES (:market_id, :account_id, :entry_type, :amount, :vault_balance_after)
""")


class EscrowLedger:
    async def open_vault(self, db: AsyncSession, market_id: str) -> None:
        await db.execute(_OPEN_VAULT_SQL, {"market_id": market_id})

    async def lock_collateral(
        self,
        db: AsyncSession,
        market_id: str,
        account_id: str,
        amount: int,
        entry_type: EscrowEntryType,
    ) -> int:
        """Move `amount` from account_id into the market vault. Returns balance after."""
        row = (
            await db.execute(_CREDIT_VAULT_SQL, {"market_id": market_id, "amount": amount})
        ).fetchone()
        if row is None:
            raise InternalError(f"Escrow vault missing for market {market_id}")
        balance_after = int(row.balance)
        await self._write_ledger(db, market_id, account_id, entry_type, amount, balance_after)
        return balance_after

    async def release_collateral(
        self,
        db: AsyncSession,
        market_id: str,
        account_id: str,
        amount: int,
        entry_type: EscrowEntryType,
    ) -> int:
        """Move `amount` out of the market vault to account_id. Returns balance after."""
        row = (
            await db.execute(_DEBIT_VAULT_SQL, {"market_id": market_id, "amount": amount})
        ).fetchone()
        if row is None:
            logger.error(
                "Escrow overdraw refused: market=%s account=%s amount=%d type=%s",
                market_id, account_id, amount, entry_type.value,
            )
            raise InternalError(f"Escrow vault underfunded for market {market_id}")
        balance_after = int(row.balance)
        await self._write_ledger(db, market_id, account_id, entry_type, -amount, balance_after)
        return balance_after

    async def get_vault_balance(self, db: AsyncSession, market_id: str) -> int:
        row = (await db.execute(_GET_VAULT_SQL, {"market_id": market_id})).fetchone()
        return int(row.balance) if row else 0

    async def _write_ledger(
        self,
        db: AsyncSession,
        market_id: str,
        account_id: str,
        entry_type: EscrowEntryType,
        signed_amount: int,
        balance_after: int,
    ) -> None:
        await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "market_id": market_id,
                "account_id": account_id,
                "entry_type": entry_type.value,
                "amount": signed_amount,
                "vault_balance_after": balance_after,
            },
        )
