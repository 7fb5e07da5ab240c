"""Tests for CashLedger."""
from datetime import date

import pytest

from core.dto import CreateTransactionDTO
from database.models import TransactionType


@pytest.mark.asyncio
async def test_daily_revenue_counts_income_only(ledger, clock):
    today = clock.current.date()
    await ledger.add_transaction(CreateTransactionDTO(type="income", amount=500, category="services"))
    await ledger.add_transaction(CreateTransactionDTO(type="income", amount=250))
    await ledger.add_transaction(CreateTransactionDTO(type="expense", amount=300, category="materials"))

    assert await ledger.get_daily_revenue(today) == 750


@pytest.mark.asyncio
async def test_daily_summary(ledger, clock):
    today = clock.current.date()
    await ledger.add_transaction(CreateTransactionDTO(type=TransactionType.INCOME, amount=1200))
    await ledger.add_transaction(CreateTransactionDTO(type=TransactionType.EXPENSE, amount=200))

    summary = await ledger.get_daily_summary(today)

    assert (summary.income, summary.expense, summary.net) == (1200, 200, 1000)


@pytest.mark.asyncio
async def test_transactions_grouped_by_calendar_day(ledger, clock):
    first_day = clock.current.date()
    await ledger.add_transaction(CreateTransactionDTO(type="income", amount=100))
    clock.advance(days=1)
    await ledger.add_transaction(CreateTransactionDTO(type="income", amount=200))

    assert await ledger.get_daily_revenue(first_day) == 100
    assert await ledger.get_daily_revenue(clock.current.date()) == 200
    assert [t.amount for t in await ledger.get_transactions(first_day)] == [100]
    assert [t.amount for t in await ledger.get_transactions()] == [100, 200]


@pytest.mark.asyncio
async def test_empty_day(ledger):
    assert await ledger.get_daily_revenue(date(2030, 1, 1)) == 0
    assert await ledger.get_transactions(date(2030, 1, 1)) == []
