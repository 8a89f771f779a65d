"""
Spending summaries over a list of ledger rows.

Pure functions: callers fetch the transactions (already scoped to one user and
date range) and get back per-category and per-day totals in exact decimals.
"""
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List

from finance_tracker.db.core import TransactionDB, TransactionKind
from finance_tracker.models.transaction import CategoryTotal, DailyTotal, UNCATEGORIZED, clean_category
from finance_tracker.services.budget_progress import to_money


def expense_by_category(transactions: Iterable[TransactionDB]) -> List[CategoryTotal]:
    """Total expenses per category, largest first; blank categories fall into "Uncategorized"."""
    totals: Dict[str, Decimal] = defaultdict(Decimal)

    for t in transactions:
        if t.kind != TransactionKind.EXPENSE:
            continue
        totals[clean_category(t.category) or UNCATEGORIZED] += Decimal(t.amount)

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [CategoryTotal(category=category, total=to_money(total)) for category, total in ordered]


def daily_totals(transactions: Iterable[TransactionDB]) -> List[DailyTotal]:
    """Income, expense and net per calendar day, oldest day first."""
    income: Dict = defaultdict(Decimal)
    expense: Dict = defaultdict(Decimal)

    for t in transactions:
        if t.kind == TransactionKind.INCOME:
            income[t.transaction_date] += Decimal(t.amount)
        else:
            expense[t.transaction_date] += Decimal(t.amount)

    days = sorted(set(income) | set(expense))
    return [
        DailyTotal(
            day=day,
            income=to_money(income[day]),
            expense=to_money(expense[day]),
            net=to_money(income[day] - expense[day]),
        )
        for day in days
    ]
