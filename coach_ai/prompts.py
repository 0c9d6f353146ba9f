"""Prompt templates for the Coach AI financial advisor."""

from __future__ import annotations

from textwrap import dedent
from typing import Mapping, Sequence, Tuple

from .context import FinancialContext, GoalProgress

PERSONA = dedent(
    """
    You are Coach AI, an expert financial advisor with deep knowledge of personal
    finance, investing, budgeting, and wealth building. You are helping a user with
    their specific financial situation.
    """
).strip()

RESPONSE_INSTRUCTIONS: Tuple[str, ...] = (
    "Analyze their financial situation using the data above.",
    "Give specific recommendations with dollar amounts where relevant.",
    "Answer the user's question directly before adding extra context.",
    "List 2-3 concrete action steps they can take immediately.",
    "Reference their goals and budget allocations when they relate to the question.",
    "Keep the tone conversational, encouraging, and professional.",
    "Keep the response between 250 and 300 words.",
    "Personalize the advice with their real numbers rather than generic examples.",
)


def format_amount(value: float) -> str:
    """Thousands-separated number; whole values drop the decimals."""

    rounded = round(float(value or 0), 2)
    if rounded == int(rounded):
        return f"{int(rounded):,}"
    return f"{rounded:,.2f}"


def format_currency(value: float) -> str:
    amount = round(float(value or 0), 2)
    sign = "-" if amount < 0 else ""
    return f"{sign}${format_amount(abs(amount))}"


def format_percent(value: float) -> str:
    return f"{round(float(value or 0), 1) + 0.0:g}%"


def _amount_lines(amounts: Mapping[str, float], empty: str) -> str:
    if not amounts:
        return empty
    return "\n".join(
        f"• {category}: {format_currency(amount)}" for category, amount in amounts.items()
    )


def _goal_lines(goals: Sequence[GoalProgress]) -> str:
    if not goals:
        return "No active goals"
    return "\n".join(
        f"• {goal.title}: {goal.progress:.1f}% complete "
        f"({format_currency(goal.remaining)} remaining)"
        for goal in goals
    )


def compose_prompt(user_message: str, context: FinancialContext) -> str:
    """Render the full advisor prompt for *user_message*."""

    profile = "\n".join(
        (
            f"• Monthly Income: {format_currency(context.monthly_income)}",
            f"• Monthly Budget: {format_currency(context.monthly_budget)}",
            f"• Total Income (all time): {format_currency(context.total_income)}",
            f"• Total Expenses (all time): {format_currency(context.total_expenses)}",
            f"• Net Worth: {format_currency(context.net_worth)}",
            f"• Savings Rate: {format_percent(context.savings_rate)}",
            f"• Transaction History: {context.transaction_count} transactions",
            f"• Financial Goals: {context.goal_count} active goals",
            f"• Budget Categories: {context.budget_categories} categories set up",
            "• Profile Setup: "
            + ("Complete" if context.setup_completed else "Incomplete"),
        )
    )
    instructions = "\n".join(
        f"{index}. {line}" for index, line in enumerate(RESPONSE_INSTRUCTIONS, start=1)
    )
    sections = [
        PERSONA,
        f"CURRENT FINANCIAL PROFILE:\n{profile}",
        "SPENDING BREAKDOWN:\n"
        + _amount_lines(context.category_spending, "No spending data available"),
        f"GOALS PROGRESS:\n{_goal_lines(context.goal_progress)}",
        "BUDGET ALLOCATIONS:\n"
        + _amount_lines(context.budget_allocations, "No budget categories set"),
        f'USER QUESTION: "{user_message}"',
        f"Please respond as follows:\n{instructions}",
    ]
    return "\n\n".join(sections)


__all__ = [
    "PERSONA",
    "RESPONSE_INSTRUCTIONS",
    "compose_prompt",
    "format_amount",
    "format_currency",
    "format_percent",
]
