from datetime import date, datetime
from decimal import Decimal

import pytest

from finance_assistant.models.schemas import BudgetStatus, ExpenseContext, RecentTransaction
from finance_assistant.services.context import summarize
from finance_assistant.services.prompt import (
    NEAR_LIMIT, ON_TRACK, OVER_BUDGET,
    budget_status, compose_system_prompt, format_usd, month_over_month_change,
)

from conftest import make_budget, make_expense


@pytest.mark.parametrize(
    "amount, spent, expected",
    [
        ("100.00", "80.00", NEAR_LIMIT),
        ("100.00", "79.99", ON_TRACK),
        ("100.00", "100.00", NEAR_LIMIT),
        ("100.00", "100.01", OVER_BUDGET),
        ("100.00", "0", ON_TRACK),
        ("250.00", "200.00", NEAR_LIMIT),
    ],
)
def test_budget_status_labels(amount, spent, expected):
    assert budget_status(Decimal(amount), Decimal(spent)) == expected


def test_month_over_month_change_is_zero_without_last_month():
    assert month_over_month_change(Decimal("50.00"), Decimal("0")) == Decimal("0")


def test_month_over_month_change_rounds_to_one_decimal():
    assert month_over_month_change(Decimal("150.00"), Decimal("100.00")) == Decimal("50.0")
    assert month_over_month_change(Decimal("20.00"), Decimal("30.00")) == Decimal("-33.3")


def test_format_usd():
    assert format_usd(Decimal("1234.5")) == "$1,234.50"
    assert format_usd(Decimal("0.005")) == "$0.01"
    assert format_usd(0) == "$0.00"


def test_prompt_for_food_budget_at_eighty_percent():
    expenses = [
        make_expense("Groceries", "80.00", "Food", date(2024, 3, 2)),
        make_expense("Bus pass", "40.00", "Transport", date(2024, 3, 1)),
    ]
    ctx = summarize(expenses, [make_budget("Food", "100.00")], datetime(2024, 3, 20))

    prompt = compose_system_prompt(ctx)

    assert "- This Month's Spending: $120.00" in prompt
    assert "  - Food: $80.00" in prompt
    assert "  - Transport: $40.00" in prompt
    assert "  - Food: $80.00 / $100.00 (Near limit)" in prompt


def test_prompt_month_over_month_without_last_month_spending():
    ctx = summarize([make_expense("Lunch", "50.00", on=date(2024, 3, 5))], [], datetime(2024, 3, 20))

    prompt = compose_system_prompt(ctx)

    assert "- Month-over-Month Change: 0.0%" in prompt
    assert "Infinity" not in prompt and "NaN" not in prompt


def test_prompt_empty_states():
    prompt = compose_system_prompt(ExpenseContext())

    assert "  No expenses this month" in prompt
    assert "  No recent transactions" in prompt
    assert "  No budgets set" in prompt
    assert "- Total All-Time Expenses: $0.00" in prompt


def test_prompt_lists_at_most_five_recent_transactions():
    recent = [
        RecentTransaction(title=f"tx{i}", amount=Decimal("1.00"), category="Other", date=date(2024, 3, 10 - i))
        for i in range(8)
    ]
    prompt = compose_system_prompt(ExpenseContext(recent_transactions=recent))

    assert "  - tx0: $1.00 (Other, 2024-03-10)" in prompt
    assert "tx4" in prompt
    assert "tx5" not in prompt


def test_prompt_flags_over_budget_and_keeps_guidelines():
    ctx = ExpenseContext(
        budgets=[BudgetStatus(category="Shopping", amount=Decimal("50.00"), spent=Decimal("75.25"))]
    )

    prompt = compose_system_prompt(ctx)

    assert "  - Shopping: $75.25 / $50.00 (OVER BUDGET)" in prompt
    assert "If they ask about something not in their data, let them know" in prompt
    assert "Be friendly, concise, and helpful" in prompt
