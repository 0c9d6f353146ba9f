"""Canned advice used when no remote provider is available."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from .context import FinancialContext
from .prompts import format_currency, format_percent

RECOMMENDED_SAVINGS_SHARE = 0.20
EMERGENCY_FUND_MONTHS = 6


@dataclass(frozen=True)
class Figures:
    """Quantities derived once per fallback call."""

    monthly_expenses: float
    emergency_fund_target: float
    recommended_savings: float
    current_savings: float

    @classmethod
    def from_context(cls, context: FinancialContext) -> "Figures":
        # Transactions are assumed to be spread evenly, about 30 per month.
        months = max(context.transaction_count / 30, 1)
        monthly_expenses = context.total_expenses / months
        return cls(
            monthly_expenses=monthly_expenses,
            emergency_fund_target=monthly_expenses * EMERGENCY_FUND_MONTHS,
            recommended_savings=context.monthly_income * RECOMMENDED_SAVINGS_SHARE,
            current_savings=context.monthly_income - monthly_expenses,
        )


def _expense(message: str, context: FinancialContext, figures: Figures) -> str:
    rate = format_percent(context.savings_rate)
    verdict = (
        "you're doing well, keep it up!"
        if context.savings_rate > 20
        else "aim to lift it above the recommended 20%."
    )
    return (
        f"Based on your total spending of {format_currency(context.total_expenses)} "
        f"(about {format_currency(figures.monthly_expenses)} per month), here are "
        "targeted ways to reduce expenses:\n\n"
        "**Top Opportunities:**\n"
        "• Review your largest spending categories first\n"
        "• Cancel unused subscriptions and recurring charges\n"
        "• Plan meals to cut food costs\n"
        "• Consider carpooling or public transit\n\n"
        f"**Your Savings Rate:** {rate}, {verdict}\n\n"
        "**Action Steps:**\n"
        "1. Track every expense for one week\n"
        "2. Set spending limits for your top categories\n"
        f"3. Automate {format_currency(figures.recommended_savings)}/month "
        "into savings on payday"
    )


def _emergency(message: str, context: FinancialContext, figures: Figures) -> str:
    pace = (
        "you can build this steadily"
        if context.savings_rate > 15
        else "focus on increasing your savings first"
    )
    return (
        "Emergency Fund Strategy for your situation:\n\n"
        f"**Target:** {format_currency(figures.emergency_fund_target)} "
        f"({EMERGENCY_FUND_MONTHS} months of expenses)\n"
        f"**Estimated Monthly Expenses:** {format_currency(figures.monthly_expenses)}\n"
        f"**Current Net Worth:** {format_currency(context.net_worth)}\n\n"
        "**Build Strategy:**\n"
        "1. Start with a $1,000 mini emergency fund\n"
        f"2. Save {format_currency(round(figures.emergency_fund_target / 12))}/month "
        "for one year\n"
        "3. Keep it in a high-yield savings account\n"
        "4. Automate transfers on payday\n\n"
        f"With your {format_percent(context.savings_rate)} savings rate, {pace}."
    )


def _investment(message: str, context: FinancialContext, figures: Figures) -> str:
    first_step = (
        "Start with low-fee index funds"
        if context.savings_rate > 15
        else "Increase your savings rate to 15% first"
    )
    next_steps = (
        "You're ready to invest!"
        if context.savings_rate > 20
        else "Build your emergency fund first."
    )
    return (
        "Investment Strategy for your profile:\n\n"
        "**Your Situation:**\n"
        f"• Net Worth: {format_currency(context.net_worth)}\n"
        f"• Savings Rate: {format_percent(context.savings_rate)}\n"
        f"• {context.goal_count} financial goals\n\n"
        "**Recommendations:**\n"
        f"1. {first_step}\n"
        "2. Capture any employer retirement match\n"
        "3. Consider a Roth IRA for tax-free growth\n"
        "4. Use target-date funds for simplicity\n\n"
        f"**Next Steps:** {next_steps}"
    )


def _budget(message: str, context: FinancialContext, figures: Figures) -> str:
    room = (
        "leaves room for savings"
        if context.monthly_budget < context.monthly_income
        else "may need adjustment"
    )
    return (
        "Creating an effective budget:\n\n"
        "1. **Track expenses**: Use the 50/30/20 rule (needs/wants/savings)\n"
        "2. **Automate**: Set up automatic transfers for savings\n"
        "3. **Review monthly**: Adjust categories based on actual spending\n"
        "4. **Emergency buffer**: Include unexpected expenses\n\n"
        "**Your Numbers:**\n"
        f"• Estimated monthly expenses: {format_currency(figures.monthly_expenses)}\n"
        f"• Recommended savings (20% of income): "
        f"{format_currency(figures.recommended_savings)}\n"
        f"• Current monthly savings: {format_currency(figures.current_savings)}\n"
        f"• Emergency fund target: {format_currency(figures.emergency_fund_target)}\n\n"
        f"Your current budget of {format_currency(context.monthly_budget)} {room}."
    )


def _debt(message: str, context: FinancialContext, figures: Figures) -> str:
    outlook = (
        "you have good cash flow to tackle debt"
        if context.savings_rate > 10
        else "focus on increasing income or reducing expenses first"
    )
    return (
        "Debt management strategies:\n\n"
        "**High-interest debt (>6%):** Pay off first\n"
        "**Low-interest debt (<4%):** Consider investing instead\n"
        "**Strategy:** Use the debt avalanche (highest interest first) "
        "or snowball (smallest balance first)\n\n"
        f"With {format_currency(figures.current_savings)} left over each month, "
        f"{outlook}."
    )


def _snapshot(message: str, context: FinancialContext, figures: Figures) -> str:
    focus = (
        "• Increase your savings rate to 20%"
        if context.savings_rate < 20
        else "• Maintain your excellent savings habits"
    )
    goals = (
        "• Set specific financial goals"
        if context.goal_count == 0
        else "• Stay focused on your goals"
    )
    budgets = (
        "• Create budget categories"
        if context.budget_categories == 0
        else "• Review your budget performance"
    )
    closing = (
        "Your financial foundation looks solid!"
        if context.setup_completed
        else "Complete your profile setup for more personalized advice."
    )
    return (
        f'Financial Analysis for "{message}":\n\n'
        "**Your Current Position:**\n"
        f"• Monthly Income: {format_currency(context.monthly_income)}\n"
        f"• Savings Rate: {format_percent(context.savings_rate)}\n"
        f"• Net Worth: {format_currency(context.net_worth)}\n"
        f"• Active Goals: {context.goal_count}\n\n"
        "**Key Recommendations:**\n"
        f"{focus}\n{goals}\n{budgets}\n\n"
        f"{closing}\n\n"
        "Ask me specific questions about budgeting, investing, or debt management!"
    )


Template = Callable[[str, FinancialContext, Figures], str]

# Checked in order; the first matching keyword set wins.
ROUTES: Sequence[Tuple[str, Tuple[str, ...], Template]] = (
    ("expense", ("expense", "reduce", "save money"), _expense),
    ("emergency", ("emergency", "fund"), _emergency),
    ("investment", ("invest", "investment"), _investment),
    ("budget", ("budget", "budgeting"), _budget),
    ("debt", ("debt", "loan"), _debt),
)


def _match(user_message: str) -> Tuple[str, Template]:
    lowered = user_message.lower()
    for name, keywords, template in ROUTES:
        if any(keyword in lowered for keyword in keywords):
            return name, template
    return "snapshot", _snapshot


def route(user_message: str) -> str:
    """Return the name of the template that answers *user_message*."""

    return _match(user_message)[0]


def generate_fallback(user_message: str, context: FinancialContext) -> str:
    """Build advice locally from *context* without calling any provider."""

    _, template = _match(user_message)
    return template(user_message, context, Figures.from_context(context))


__all__ = ["Figures", "ROUTES", "generate_fallback", "route"]
