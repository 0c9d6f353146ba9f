"""Financial context snapshots handed to the advisor."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

# Field name -> keys accepted in caller mappings (browser payloads use camelCase).
_ALIASES: Dict[str, Tuple[str, ...]] = {
    "monthly_income": ("monthlyIncome", "monthly_income"),
    "monthly_budget": ("monthlyBudget", "monthly_budget"),
    "total_income": ("totalIncome", "total_income"),
    "total_expenses": ("totalExpenses", "total_expenses"),
    "net_worth": ("netWorth", "net_worth"),
    "savings_rate": ("savingsRate", "savings_rate"),
    "transaction_count": ("transactionCount", "transaction_count"),
    "goal_count": ("goalCount", "goal_count"),
    "budget_categories": ("budgetCategories", "budget_categories"),
    "setup_completed": ("setupCompleted", "setup_completed"),
    "category_spending": ("categorySpending", "category_spending"),
    "budget_allocations": ("budgetAllocations", "budget_allocations"),
    "goal_progress": ("goalProgress", "goal_progress"),
}

_CURRENCY_NOISE = re.compile(r"(?i)(rm|\$|,)")


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    for key in _ALIASES.get(name, (name,)):
        if key in data:
            return data[key]
    return None


def _number(value: Any) -> float:
    """Coerce *value* to a float; absent values count as zero."""

    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = _CURRENCY_NOISE.sub("", str(value)).strip()
        if not cleaned:
            return 0.0
        number = float(cleaned)
    if not math.isfinite(number):
        raise ValueError(f"amount must be a finite number, got {value!r}")
    return number


def _count(value: Any) -> int:
    return int(_number(value))


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "complete"}
    return bool(value)


def _amounts(value: Any) -> Mapping[str, float]:
    if not value:
        return MappingProxyType({})
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a mapping of category amounts, got {value!r}")
    return MappingProxyType(
        {str(key): _number(amount) for key, amount in value.items()}
    )


def _goals(value: Any) -> Tuple["GoalProgress", ...]:
    if not value:
        return ()
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise ValueError(f"expected a list of goals, got {value!r}")
    goals = []
    for goal in value:
        if isinstance(goal, GoalProgress):
            goals.append(goal)
        elif isinstance(goal, Mapping):
            goals.append(GoalProgress.from_mapping(goal))
        else:
            raise ValueError(f"expected each goal to be a mapping, got {goal!r}")
    return tuple(goals)


@dataclass(frozen=True)
class GoalProgress:
    title: str
    progress: float = 0.0
    remaining: float = 0.0
    deadline: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GoalProgress":
        return cls(
            title=str(data.get("title") or data.get("name") or "").strip(),
            progress=_number(data.get("progress")),
            remaining=_number(data.get("remaining")),
            deadline=str(data["deadline"]) if data.get("deadline") else None,
        )


@dataclass(frozen=True)
class FinancialContext:
    """Snapshot of a user's finances used to personalise advice.

    Every numeric field defaults to zero. Callers holding loosely typed data
    (JSON payloads, browser state) should go through :meth:`from_mapping`,
    which is the single place where missing values are turned into zeros.
    """

    monthly_income: float = 0.0
    monthly_budget: float = 0.0
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_worth: float = 0.0
    savings_rate: float = 0.0
    transaction_count: int = 0
    goal_count: int = 0
    budget_categories: int = 0
    setup_completed: bool = False
    category_spending: Mapping[str, float] = field(default_factory=dict, hash=False)
    budget_allocations: Mapping[str, float] = field(default_factory=dict, hash=False)
    goal_progress: Tuple[GoalProgress, ...] = ()

    def __post_init__(self) -> None:
        # Read-only views so a shared context cannot be changed under a caller.
        for name in ("category_spending", "budget_allocations"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))
        object.__setattr__(self, "goal_progress", tuple(self.goal_progress))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "FinancialContext":
        """Build a context from a mapping, substituting zero for missing values.

        Raises ``ValueError`` when a value is present but not a finite number,
        or when the spending, budget or goal entries have the wrong shape.
        """

        data = data or {}
        return cls(
            monthly_income=_number(_lookup(data, "monthly_income")),
            monthly_budget=_number(_lookup(data, "monthly_budget")),
            total_income=_number(_lookup(data, "total_income")),
            total_expenses=_number(_lookup(data, "total_expenses")),
            net_worth=_number(_lookup(data, "net_worth")),
            savings_rate=_number(_lookup(data, "savings_rate")),
            transaction_count=_count(_lookup(data, "transaction_count")),
            goal_count=_count(_lookup(data, "goal_count")),
            budget_categories=_count(_lookup(data, "budget_categories")),
            setup_completed=_flag(_lookup(data, "setup_completed")),
            category_spending=_amounts(_lookup(data, "category_spending")),
            budget_allocations=_amounts(_lookup(data, "budget_allocations")),
            goal_progress=_goals(_lookup(data, "goal_progress")),
        )

    @classmethod
    def coerce(cls, value: Any) -> "FinancialContext":
        if isinstance(value, FinancialContext):
            return value
        return cls.from_mapping(value)


@dataclass
class Transaction:
    date: str
    description: str
    amount: float
    category: Optional[str] = None
    kind: str = ""

    def __post_init__(self) -> None:
        if not self.kind:
            self.kind = "income" if self.amount >= 0 else "expense"

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Transaction":
        """Create a transaction from a mapping of values."""

        date = str(data.get("date") or data.get("Date") or "").strip()
        description = str(
            data.get("description") or data.get("Description") or ""
        ).strip()
        category = data.get("category") or data.get("Category")
        kind = str(data.get("type") or data.get("Type") or "").strip().lower()
        amount = _number(data.get("amount", data.get("Amount")))
        return cls(
            date=date,
            description=description,
            amount=amount,
            category=str(category).strip() if category else None,
            kind=kind,
        )


@dataclass
class Goal:
    title: str
    target_amount: float
    current_amount: float = 0.0
    deadline: Optional[str] = None

    @property
    def progress(self) -> float:
        if self.target_amount <= 0:
            return 0.0
        return self.current_amount / self.target_amount * 100

    @property
    def remaining(self) -> float:
        return self.target_amount - self.current_amount

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Goal":
        return cls(
            title=str(data.get("title") or data.get("name") or "").strip(),
            target_amount=_number(data.get("target_amount")),
            current_amount=_number(data.get("current_amount")),
            deadline=str(data["deadline"]) if data.get("deadline") else None,
        )


def build_context(
    transactions: Iterable[Transaction],
    *,
    goals: Sequence[Goal] = (),
    budgets: Optional[Mapping[str, float]] = None,
    profile: Optional[Mapping[str, Any]] = None,
) -> FinancialContext:
    """Aggregate raw records into a :class:`FinancialContext`."""

    rows = list(transactions)
    budgets = dict(budgets or {})
    profile = profile or {}

    total_income = sum(tx.amount for tx in rows if tx.kind == "income")
    total_expenses = sum(abs(tx.amount) for tx in rows if tx.kind == "expense")
    savings_rate = (
        round((total_income - total_expenses) / total_income * 100, 1)
        if total_income > 0
        else 0.0
    )

    category_spending: Dict[str, float] = {}
    for tx in rows:
        if tx.kind != "expense":
            continue
        category = tx.category or "Uncategorized"
        category_spending[category] = category_spending.get(category, 0.0) + abs(tx.amount)

    return FinancialContext(
        monthly_income=_number(profile.get("monthly_income")),
        monthly_budget=_number(profile.get("monthly_budget")),
        total_income=total_income,
        total_expenses=total_expenses,
        net_worth=total_income - total_expenses,
        savings_rate=savings_rate,
        transaction_count=len(rows),
        goal_count=len(goals),
        budget_categories=len(budgets),
        setup_completed=_flag(profile.get("setup_completed")),
        category_spending=category_spending,
        budget_allocations={name: _number(value) for name, value in budgets.items()},
        goal_progress=tuple(
            GoalProgress(
                title=goal.title,
                progress=goal.progress,
                remaining=goal.remaining,
                deadline=goal.deadline,
            )
            for goal in goals
        ),
    )


def load_transactions(csv_path: str | Path) -> List[Transaction]:
    """Load transactions from a CSV with date, description, amount columns.

    ``category`` and ``type`` columns are optional.
    """

    df = pd.read_csv(csv_path)
    required_columns = {"date", "description", "amount"}
    lower_columns = {col.lower() for col in df.columns}
    if required_columns - lower_columns:
        raise ValueError(
            "CSV must contain columns date, description, amount (case insensitive)."
        )

    normalised = df.rename(columns={orig: orig.lower() for orig in df.columns})
    amount_series = normalised["amount"].astype(str)
    amount_series = amount_series.str.replace(r"(?i)rm|\$", "", regex=True)
    amount_series = amount_series.str.replace(",", "", regex=False)
    normalised["amount"] = amount_series.str.strip().astype(float)
    for column in ("category", "type"):
        if column in normalised.columns:
            normalised[column] = normalised[column].fillna("").astype(str)

    rows: List[Transaction] = []
    for record in normalised.to_dict(orient="records"):
        rows.append(Transaction.from_mapping(record))
    return rows
