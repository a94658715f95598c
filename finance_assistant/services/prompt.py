from decimal import Decimal, ROUND_HALF_UP

from finance_assistant.models.schemas import ExpenseContext

CENTS = Decimal("0.01")
TENTHS = Decimal("0.1")
NEAR_LIMIT_SHARE = Decimal("0.2")
RECENT_IN_PROMPT = 5

OVER_BUDGET = "OVER BUDGET"
NEAR_LIMIT = "Near limit"
ON_TRACK = "On track"


def format_usd(amount) -> str:
    """Format amount as dollars, e.g. ``$1,234.50``"""
    value = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"${value:,.2f}"


def month_over_month_change(this_month: Decimal, last_month: Decimal) -> Decimal:
    """Percent change vs last month; 0 when there was no spending last month."""
    if last_month == 0:
        return Decimal("0.0")
    change = (this_month - last_month) / last_month * 100
    return change.quantize(TENTHS, rounding=ROUND_HALF_UP)


def budget_status(amount: Decimal, spent: Decimal) -> str:
    remaining = amount - spent
    if remaining < 0:
        return OVER_BUDGET
    if remaining <= amount * NEAR_LIMIT_SHARE:
        return NEAR_LIMIT
    return ON_TRACK


def compose_system_prompt(context: ExpenseContext) -> str:
    category_list = "\n".join(
        f"  - {cat}: {format_usd(amount)}"
        for cat, amount in context.category_breakdown.items()
    )

    recent_list = "\n".join(
        f"  - {t.title}: {format_usd(t.amount)} ({t.category}, {t.date.isoformat()})"
        for t in context.recent_transactions[:RECENT_IN_PROMPT]
    )

    budget_list = "\n".join(
        f"  - {b.category}: {format_usd(b.spent)} / {format_usd(b.amount)} "
        f"({budget_status(b.amount, b.spent)})"
        for b in context.budgets
    )

    change = month_over_month_change(context.this_month_total, context.last_month_total)

    return f"""You are a helpful financial assistant for an expense tracking app. You help users understand their spending habits, provide budgeting advice, and answer questions about their finances.

Here is the user's current financial data:

**Overall Summary:**
- Total All-Time Expenses: {format_usd(context.total_expenses)}
- This Month's Spending: {format_usd(context.this_month_total)}
- Last Month's Spending: {format_usd(context.last_month_total)}
- Month-over-Month Change: {change}%

**Spending by Category (This Month):**
{category_list or "  No expenses this month"}

**Recent Transactions:**
{recent_list or "  No recent transactions"}

**Budget Status (This Month):**
{budget_list or "  No budgets set"}

Guidelines:
- Be friendly, concise, and helpful
- Provide specific insights based on their actual data
- Give actionable advice when asked
- Use dollar amounts from their data
- If they ask about something not in their data, let them know
- Format responses with markdown for better readability
- Keep responses focused and not too long"""
