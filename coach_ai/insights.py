"""At-a-glance insights and starter questions shown next to the advisor."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from .context import FinancialContext, GoalProgress

SUGGESTED_QUESTIONS: Tuple[str, ...] = (
    "How can I reduce my monthly expenses based on my spending?",
    "What's the best emergency fund strategy for my income?",
    "Should I invest or pay off debt first with my current situation?",
    "How can I improve my savings rate?",
    "What investment options are best for my risk profile?",
    "How much should I allocate to each budget category?",
    "What are some passive income strategies I can start?",
    "How can I optimize my budget for better financial health?",
)

TARGET_SAVINGS_RATE = 20.0
LOW_SAVINGS_RATE = 10.0
BUDGET_ALERT_SHARE = 90.0
BUDGET_WATCH_SHARE = 75.0
CATEGORY_ALERT_SHARE = 80.0
GOAL_AT_RISK_DAYS = 30
GOAL_AT_RISK_PROGRESS = 80.0

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


@dataclass(frozen=True)
class Insight:
    kind: str
    title: str
    message: str
    priority: str = "low"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def quick_insights(context: FinancialContext) -> List[Insight]:
    """Short status cards: savings rate, budget setup and data readiness."""

    rate = context.savings_rate
    if rate < TARGET_SAVINGS_RATE:
        cards = [
            Insight(
                "warning",
                "Savings Rate Alert",
                f"Your savings rate is {rate:.1f}%. Aim for 20%+",
                "high",
            )
        ]
    else:
        cards = [
            Insight("success", "Great Savings Rate", f"Excellent {rate:.1f}% savings rate!")
        ]

    if not (context.budget_categories or context.budget_allocations):
        cards.append(
            Insight(
                "caution",
                "Budget Setup",
                "Set up budget categories to track spending better",
                "medium",
            )
        )

    if context.transaction_count > 10:
        cards.append(
            Insight(
                "info",
                "AI Analysis Ready",
                f"{context.transaction_count} transactions available for AI insights",
            )
        )
    return cards


def _deadline(goal: GoalProgress) -> Optional[date]:
    if not goal.deadline:
        return None
    try:
        return date.fromisoformat(goal.deadline[:10])
    except ValueError:
        return None


def _budget_insights(context: FinancialContext) -> List[Insight]:
    if context.monthly_budget <= 0:
        return []
    used = context.total_expenses / context.monthly_budget * 100
    if used > BUDGET_ALERT_SHARE:
        return [
            Insight(
                "warning",
                "Budget Alert",
                f"You've used {used:.1f}% of your monthly budget. "
                "Consider reducing expenses.",
                "high",
            )
        ]
    if used > BUDGET_WATCH_SHARE:
        return [
            Insight(
                "caution",
                "Budget Watch",
                f"You're at {used:.1f}% of your monthly budget. "
                "Keep an eye on spending.",
                "medium",
            )
        ]
    return []


def _category_insights(context: FinancialContext) -> List[Insight]:
    found = []
    for category, budget in context.budget_allocations.items():
        if budget <= 0:
            continue
        spent = context.category_spending.get(category, 0.0)
        if spent > budget:
            found.append(
                Insight(
                    "warning",
                    f"{category} Over Budget",
                    f"You've exceeded your {category} budget by ${spent - budget:,.2f}.",
                    "high",
                )
            )
        elif spent / budget * 100 > CATEGORY_ALERT_SHARE:
            found.append(
                Insight(
                    "caution",
                    f"{category} Budget Alert",
                    f"You've used {spent / budget * 100:.1f}% of your {category} budget.",
                    "medium",
                )
            )
    return found


def _savings_insights(context: FinancialContext) -> List[Insight]:
    income = context.monthly_income
    if income <= 0:
        return []
    rate = (income - context.total_expenses) / income * 100
    if rate > TARGET_SAVINGS_RATE:
        return [
            Insight(
                "success",
                "Great Savings Rate",
                f"You're saving {rate:.1f}% of your income. "
                "Excellent financial discipline!",
            )
        ]
    if rate < LOW_SAVINGS_RATE:
        return [
            Insight(
                "warning",
                "Low Savings Rate",
                f"Your savings rate is {rate:.1f}%. "
                "Try to save at least 20% of your income.",
                "high",
            )
        ]
    return []


def _goal_insights(context: FinancialContext, today: date) -> List[Insight]:
    found = []
    for goal in context.goal_progress:
        if goal.progress >= 100:
            found.append(
                Insight(
                    "success",
                    "Goal Achieved!",
                    f"Congratulations! You've reached your goal: {goal.title}",
                )
            )
            continue
        deadline = _deadline(goal)
        if deadline is None:
            continue
        days_left = (deadline - today).days
        if days_left < GOAL_AT_RISK_DAYS and goal.progress < GOAL_AT_RISK_PROGRESS:
            found.append(
                Insight(
                    "warning",
                    "Goal Behind Schedule",
                    f'Your goal "{goal.title}" is {goal.progress:.1f}% complete '
                    f"with {days_left} days left.",
                    "medium",
                )
            )
    return found


def ai_insights(context: FinancialContext, today: Optional[date] = None) -> List[Insight]:
    """Budget, category, savings and goal insights, most urgent first.

    Overall budget use compares ``total_expenses`` with ``monthly_budget``.
    Category checks only cover categories that have a positive allocation.
    Goals without a parseable ISO ``deadline`` are only checked for completion.
    The sort is stable, so insights of equal priority keep their section order.
    """

    today = today or date.today()
    found = (
        _budget_insights(context)
        + _category_insights(context)
        + _savings_insights(context)
        + _goal_insights(context, today)
    )
    return sorted(found, key=lambda item: _PRIORITY_ORDER.get(item.priority, math.inf))


__all__ = [
    "Insight",
    "SUGGESTED_QUESTIONS",
    "ai_insights",
    "quick_insights",
]
