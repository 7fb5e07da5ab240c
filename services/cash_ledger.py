"""Cash register: append-only income/expense records and daily totals."""
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.dto import CreateTransactionDTO
from database.models import CashTransaction, TransactionType
from database.repositories import CashTransactionRepository
from database.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass
class DailyCashSummary:
    """Cash totals for one calendar day."""
    date: date
    income: int
    expense: int

    @property
    def net(self) -> int:
        return self.income - self.expense


class CashLedger:
    """Append-only cash ledger keyed by calendar day."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def add_transaction(self, data: CreateTransactionDTO) -> CashTransaction:
        """Append a transaction stamped with the current time."""
        async with self.store.session() as session:
            transaction = await self.record(session, data)
        logger.info(f"Cash {transaction.type}: {transaction.amount}")
        return transaction

    async def record(self, session: AsyncSession, data: CreateTransactionDTO) -> CashTransaction:
        """Append inside an existing transaction (used when completing appointments)."""
        return await CashTransactionRepository(session).create(
            id=self.store.new_id(),
            created_at=self.store.now(),
            **data.model_dump(),
        )

    async def get_daily_revenue(self, day: date) -> int:
        """Sum of income transactions on a calendar day. Expenses are not subtracted."""
        async with self.store.session() as session:
            return await CashTransactionRepository(session).sum_for_date(day, TransactionType.INCOME)

    async def get_daily_summary(self, day: date) -> DailyCashSummary:
        async with self.store.session() as session:
            repo = CashTransactionRepository(session)
            income = await repo.sum_for_date(day, TransactionType.INCOME)
            expense = await repo.sum_for_date(day, TransactionType.EXPENSE)
        return DailyCashSummary(date=day, income=income, expense=expense)

    async def get_transactions(self, day: Optional[date] = None) -> List[CashTransaction]:
        """All transactions in recording order, optionally for one day."""
        async with self.store.session() as session:
            repo = CashTransactionRepository(session)
            return await (repo.get_for_date(day) if day else repo.get_all())
