"""Cash transaction repository for database operations."""
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select, func

from core.time_utils import day_bounds
from database.models import CashTransaction, TransactionType
from database.repositories.base import BaseRepository


class CashTransactionRepository(BaseRepository[CashTransaction]):
    """Repository for the append-only cash register."""

    model_class = CashTransaction
    order_by = (CashTransaction.created_at, CashTransaction.id)

    async def create(
        self,
        id: str,
        type: TransactionType,
        amount: int,
        created_at: datetime,
        category: Optional[str] = None,
        description: Optional[str] = None,
        appointment_id: Optional[str] = None,
    ) -> CashTransaction:
        """Append a transaction."""
        transaction = CashTransaction(
            id=id,
            type=TransactionType(type).value,
            amount=amount,
            category=category,
            description=description,
            appointment_id=appointment_id,
            created_at=created_at,
        )
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    async def get_for_date(self, day: date) -> List[CashTransaction]:
        """Transactions recorded on a calendar day."""
        day_start, day_end = day_bounds(day)
        result = await self.session.execute(
            select(CashTransaction)
            .where(CashTransaction.created_at >= day_start, CashTransaction.created_at < day_end)
            .order_by(*self.order_by)
        )
        return list(result.scalars().all())

    async def sum_for_date(self, day: date, type: TransactionType) -> int:
        """Sum of amounts of one type on a calendar day."""
        day_start, day_end = day_bounds(day)
        result = await self.session.execute(
            select(func.coalesce(func.sum(CashTransaction.amount), 0)).where(
                CashTransaction.type == TransactionType(type).value,
                CashTransaction.created_at >= day_start,
                CashTransaction.created_at < day_end,
            )
        )
        return int(result.scalar() or 0)
