import uuid
from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.crud.crud_budget import upsert_db_budget
from finance_tracker.crud.crud_transaction import create_db_transaction
from finance_tracker.db.core import TransactionDB, TransactionKind
from finance_tracker.models.budget import BudgetUpsert
from finance_tracker.models.transaction import TransactionCreate
from finance_tracker.services.budget_progress import compute_budget_progress, to_money


def add_expense(db, user_id, amount, category, day, kind="Expense"):
    return create_db_transaction(db, user_id, TransactionCreate(
        amount=Decimal(amount), kind=kind, category=category, date=day,
    ))


def add_budget(db, user_id, month, category, amount):
    return upsert_db_budget(db, user_id, BudgetUpsert(month=month, category=category, amount=Decimal(amount)))


@pytest.fixture
def user_id(make_user):
    return make_user("alice")


def test_spent_and_remaining_for_matching_expenses(db, user_id):
    add_budget(db, user_id, "2026-01", "food", "300.00")
    add_expense(db, user_id, "50.00", "food", date(2026, 1, 5))
    add_expense(db, user_id, "30.00", "food", date(2026, 1, 20))
    add_expense(db, user_id, "10.00", "transport", date(2026, 1, 10))

    progress = compute_budget_progress(db, user_id, date(2026, 1, 1))

    assert len(progress) == 1
    food = progress[0]
    assert food.category == "food"
    assert food.month == date(2026, 1, 1)
    assert food.budget_amount == Decimal("300.00")
    assert food.spent == Decimal("80.00")
    assert food.remaining == Decimal("220.00")


def test_over_budget_goes_negative(db, user_id):
    add_budget(db, user_id, "2026-02", "Fun", "100.00")
    add_expense(db, user_id, "90.00", "Fun", date(2026, 2, 3))
    add_expense(db, user_id, "60.00", "Fun", date(2026, 2, 14))

    (fun,) = compute_budget_progress(db, user_id, date(2026, 2, 1))

    assert fun.spent == Decimal("150.00")
    assert fun.remaining == Decimal("-50.00")


def test_budget_without_expenses_reports_zero_spent(db, user_id):
    add_budget(db, user_id, "2026-03", "Rent", "1200.00")

    (rent,) = compute_budget_progress(db, user_id, date(2026, 3, 1))

    assert rent.spent == Decimal("0.00")
    assert rent.remaining == Decimal("1200.00")


def test_month_without_budgets_is_empty(db, user_id):
    add_expense(db, user_id, "20.00", "Food", date(2026, 4, 2))

    assert compute_budget_progress(db, user_id, date(2026, 4, 1)) == []


def test_income_does_not_count_as_spent(db, user_id):
    add_budget(db, user_id, "2026-01", "Food", "100.00")
    add_expense(db, user_id, "40.00", "Food", date(2026, 1, 2), kind="Income")

    (food,) = compute_budget_progress(db, user_id, date(2026, 1, 1))

    assert food.spent == Decimal("0.00")


def test_other_users_expenses_are_ignored(db, user_id, make_user):
    bob = make_user("bob")
    add_budget(db, user_id, "2026-01", "Food", "100.00")
    add_expense(db, bob, "70.00", "Food", date(2026, 1, 2))

    (food,) = compute_budget_progress(db, user_id, date(2026, 1, 1))

    assert food.spent == Decimal("0.00")


def test_results_ordered_by_category(db, user_id):
    for category in ("Travel", "Food", "Books"):
        add_budget(db, user_id, "2026-01", category, "10.00")

    progress = compute_budget_progress(db, user_id, date(2026, 1, 17))

    assert [p.category for p in progress] == ["Books", "Food", "Travel"]


@pytest.mark.parametrize("year,feb_last", [(2024, 29), (2025, 28)])
def test_february_and_march_are_separate_months(db, user_id, year, feb_last):
    add_budget(db, user_id, f"{year}-02", "Food", "100.00")
    add_budget(db, user_id, f"{year}-03", "Food", "100.00")
    add_expense(db, user_id, "10.00", "Food", date(year, 2, 28))
    add_expense(db, user_id, "20.00", "Food", date(year, 2, feb_last))
    add_expense(db, user_id, "40.00", "Food", date(year, 3, 1))

    (february,) = compute_budget_progress(db, user_id, date(year, 2, 1))
    (march,) = compute_budget_progress(db, user_id, date(year, 3, 1))

    assert february.spent == Decimal("30.00")
    assert march.spent == Decimal("40.00")


def test_december_rolls_into_next_year(db, user_id):
    add_budget(db, user_id, "2025-12", "Gifts", "500.00")
    add_expense(db, user_id, "100.00", "Gifts", date(2025, 12, 31))
    add_expense(db, user_id, "999.00", "Gifts", date(2026, 1, 1))

    (gifts,) = compute_budget_progress(db, user_id, date(2025, 12, 1))

    assert gifts.spent == Decimal("100.00")


def test_category_match_is_case_sensitive(db, user_id):
    add_budget(db, user_id, "2026-01", "Food", "100.00")
    add_expense(db, user_id, "25.00", "food", date(2026, 1, 9))

    (food,) = compute_budget_progress(db, user_id, date(2026, 1, 1))

    assert food.spent == Decimal("0.00")


def test_surrounding_whitespace_is_trimmed_on_write(db, user_id):
    add_budget(db, user_id, "2026-01", " Food ", "100.00")
    transaction = add_expense(db, user_id, "25.00", "Food ", date(2026, 1, 9))

    assert transaction.category == "Food"
    (food,) = compute_budget_progress(db, user_id, date(2026, 1, 1))

    assert food.category == "Food"
    assert food.spent == Decimal("25.00")


def test_untrimmed_stored_category_does_not_match(db, user_id):
    # Rows written around the ledger API keep their whitespace; reads never trim
    add_budget(db, user_id, "2026-01", "Food", "100.00")
    db.add(TransactionDB(
        id=uuid.uuid4(),
        user_id=user_id,
        transaction_date=date(2026, 1, 9),
        amount=Decimal("25.00"),
        kind=TransactionKind.EXPENSE,
        category="Food ",
    ))
    db.commit()

    (food,) = compute_budget_progress(db, user_id, date(2026, 1, 1))

    assert food.spent == Decimal("0.00")


def test_exact_decimal_sum(db, user_id):
    add_budget(db, user_id, "2026-01", "Coffee", "1.00")
    for _ in range(3):
        add_expense(db, user_id, "0.10", "Coffee", date(2026, 1, 3))

    (coffee,) = compute_budget_progress(db, user_id, date(2026, 1, 1))

    assert coffee.spent == Decimal("0.30")
    assert coffee.remaining == Decimal("0.70")


@pytest.mark.parametrize("value,expected", [
    (None, Decimal("0.00")),
    (0, Decimal("0.00")),
    (0.1 + 0.2, Decimal("0.30")),
    (Decimal("12.5"), Decimal("12.50")),
])
def test_to_money(value, expected):
    assert to_money(value) == expected


def test_large_amounts_sum_exactly(db, user_id):
    add_budget(db, user_id, "2026-01", "Big", "1.00")
    amounts = ["9999999999999.99", "0.01", "0.01"] * 300
    db.add_all([
        TransactionDB(
            id=uuid.uuid4(),
            user_id=user_id,
            transaction_date=date(2026, 1, 15),
            amount=Decimal(amount),
            kind=TransactionKind.EXPENSE,
            category="Big",
        )
        for amount in amounts
    ])
    db.commit()

    (big,) = compute_budget_progress(db, user_id, date(2026, 1, 1))

    assert big.spent == Decimal("3000000000000003.00")
    assert big.remaining == Decimal("1.00") - Decimal("3000000000000003.00")
