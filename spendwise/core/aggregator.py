"""Dashboard aggregation over already-fetched accounts and transactions.

Every function here is pure: inputs are never mutated and identical inputs
always produce identical outputs, so results are safe to memoize by input.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .data_models import Account, Category, Transaction

logger = logging.getLogger("spendwise.core.aggregator")

NO_DATA = "No data"

# Budget utilisation (percent) at which a category is flagged.
BUDGET_WARNING_THRESHOLD = 80.0
BUDGET_LIMIT_THRESHOLD = 100.0

# Month-over-month change (percent) still considered "stable".
TREND_STABILITY_BAND = 5.0


class BudgetStatus(str, Enum):
    OVER_BUDGET = "over-budget"
    WARNING = "warning"
    ON_TRACK = "on-track"
    NO_BUDGET = "no-budget"


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class CategoryShare:
    name: str
    amount: float
    percentage: float
    count: int
    color: Optional[str] = None


@dataclass(frozen=True)
class TransactionTotals:
    total_count: int
    total_expenses: float
    total_income: float
    net_amount: float
    pending_count: int
    uncategorized_count: int


@dataclass(frozen=True)
class SpendingTrend:
    total_spent: float
    previous_spent: float
    vs_last_period: float
    trend: Trend


@dataclass(frozen=True)
class CategoryBudget:
    category_id: int
    name: str
    color: str
    budget_limit: Optional[float]
    spent: float
    progress: Optional[float]
    status: BudgetStatus


@dataclass(frozen=True)
class DashboardSummary:
    month: str
    total_balance: float
    total_available: float
    total_positive_balance: float
    total_debt: float
    account_count: int
    monthly_spend: float
    monthly_income: float
    savings_rate: float
    category_breakdown: Tuple[CategoryShare, ...]
    top_category: str
    trend: SpendingTrend
    transactions: TransactionTotals
    budgets: Tuple[CategoryBudget, ...] = field(default_factory=tuple)


CENT = Decimal("0.01")


def _money(value: float) -> float:
    return round(value, 2)


def _money_sum(values: Iterable[float]) -> float:
    """Sum amounts exactly in decimal cents."""
    total = sum((Decimal(str(value)) for value in values), Decimal("0"))
    return float(total.quantize(CENT, rounding=ROUND_HALF_UP))


def _same_month(day: date, month: date) -> bool:
    return day.year == month.year and day.month == month.month


def _previous_month(month: date) -> date:
    if month.month == 1:
        return date(month.year - 1, 12, 1)
    return date(month.year, month.month - 1, 1)


# Account figures


def total_balance(accounts: Iterable[Account]) -> float:
    return _money_sum(account.balance_current for account in accounts)


def total_available(accounts: Iterable[Account]) -> float:
    return _money_sum(account.balance_available or 0.0 for account in accounts)


def total_positive_balance(accounts: Iterable[Account]) -> float:
    """Sum of accounts holding money (assets)."""
    return _money_sum(account.balance_current for account in accounts if account.balance_current > 0)


def total_debt(accounts: Iterable[Account]) -> float:
    """Magnitude of negative balances, e.g. credit cards (liabilities)."""
    return _money_sum(-account.balance_current for account in accounts if account.balance_current < 0)


# Transaction figures


def total_expenses(transactions: Iterable[Transaction]) -> float:
    return _money_sum(tx.magnitude for tx in transactions if tx.is_expense)


def total_income(transactions: Iterable[Transaction]) -> float:
    return _money_sum(tx.magnitude for tx in transactions if tx.is_income)


def monthly_spend(transactions: Iterable[Transaction], month: date) -> float:
    """Total outflow of expense transactions dated within ``month``'s calendar month."""
    return _money_sum(
        tx.magnitude for tx in transactions if tx.is_expense and _same_month(tx.date, month)
    )


def monthly_income(transactions: Iterable[Transaction], month: date) -> float:
    return _money_sum(
        tx.magnitude for tx in transactions if tx.is_income and _same_month(tx.date, month)
    )


def summarize_transactions(transactions: Sequence[Transaction]) -> TransactionTotals:
    """Client-side equivalent of the server's transaction summary block."""
    expenses = total_expenses(transactions)
    income = total_income(transactions)
    return TransactionTotals(
        total_count=len(transactions),
        total_expenses=expenses,
        total_income=income,
        net_amount=_money_sum((income, -expenses)),
        pending_count=sum(1 for tx in transactions if tx.pending),
        uncategorized_count=sum(1 for tx in transactions if tx.primary_category is None),
    )


def category_breakdown(transactions: Iterable[Transaction]) -> List[CategoryShare]:
    """
    Group expense transactions by primary category name.

    Expenses without a category are left out of the groups but still count
    towards the grand total, so percentages add up to 100 only when every
    expense is categorized. Groups are ordered by amount, largest first;
    equal amounts keep the order in which their category was first seen.
    """
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    colors: Dict[str, Optional[str]] = {}
    grand_total = 0.0

    for tx in transactions:
        if not tx.is_expense:
            continue
        grand_total += tx.magnitude
        category = tx.primary_category
        if category is None:
            continue
        if category.name not in totals:
            totals[category.name] = 0.0
            counts[category.name] = 0
            colors[category.name] = category.color
        totals[category.name] += tx.magnitude
        counts[category.name] += 1

    if grand_total <= 0:
        return []

    shares = [
        CategoryShare(
            name=name,
            amount=_money(amount),
            percentage=amount / grand_total * 100,
            count=counts[name],
            color=colors[name],
        )
        for name, amount in totals.items()
    ]
    return sorted(shares, key=lambda share: share.amount, reverse=True)


def top_category(breakdown: Sequence[CategoryShare]) -> Optional[CategoryShare]:
    return breakdown[0] if breakdown else None


def top_category_name(breakdown: Sequence[CategoryShare]) -> str:
    top = top_category(breakdown)
    return top.name if top else NO_DATA


def monthly_totals(transactions: Iterable[Transaction]) -> List[Tuple[str, float]]:
    """Expense totals per ``YYYY-MM`` month in chronological order."""
    sums: Dict[str, float] = {}
    for tx in transactions:
        if not tx.is_expense:
            continue
        key = tx.date.strftime("%Y-%m")
        sums[key] = sums.get(key, 0.0) + tx.magnitude
    return [(key, _money(sums[key])) for key in sorted(sums)]


# Ratios


def savings_rate(income: float, expenses: float) -> float:
    """Share of income kept, in percent. Zero income yields 0 by definition."""
    if not income:
        return 0.0
    return (income - expenses) / income * 100


def budget_progress(spent: float, budget_limit: Optional[float]) -> Optional[float]:
    """Percent of the budget used, capped at 100; ``None`` without a budget."""
    if not budget_limit:
        return None
    return min(spent / budget_limit * 100, BUDGET_LIMIT_THRESHOLD)


def budget_status(spent: float, budget_limit: Optional[float]) -> BudgetStatus:
    if not budget_limit:
        return BudgetStatus.NO_BUDGET
    used = spent / budget_limit * 100
    if used >= BUDGET_LIMIT_THRESHOLD:
        return BudgetStatus.OVER_BUDGET
    if used >= BUDGET_WARNING_THRESHOLD:
        return BudgetStatus.WARNING
    return BudgetStatus.ON_TRACK


def spending_trend(transactions: Sequence[Transaction], month: date) -> SpendingTrend:
    current = monthly_spend(transactions, month)
    previous = monthly_spend(transactions, _previous_month(month))
    if previous:
        change = (current - previous) / previous * 100
    else:
        change = 100.0 if current else 0.0

    if change > TREND_STABILITY_BAND:
        trend = Trend.INCREASING
    elif change < -TREND_STABILITY_BAND:
        trend = Trend.DECREASING
    else:
        trend = Trend.STABLE
    return SpendingTrend(
        total_spent=current,
        previous_spent=previous,
        vs_last_period=round(change, 1),
        trend=trend,
    )


def category_budgets(
    categories: Iterable[Category],
    transactions: Sequence[Transaction],
    month: date,
) -> List[CategoryBudget]:
    """Budget utilisation for the month, for every category that has a budget."""
    spent_by_category: Dict[int, float] = {}
    for tx in transactions:
        if tx.is_expense and tx.primary_category and _same_month(tx.date, month):
            category_id = tx.primary_category.id
            spent_by_category[category_id] = spent_by_category.get(category_id, 0.0) + tx.magnitude

    budgets: List[CategoryBudget] = []
    for category in categories:
        if not category.budget_limit:
            continue
        spent = _money(spent_by_category.get(category.id, 0.0))
        budgets.append(
            CategoryBudget(
                category_id=category.id,
                name=category.full_name or category.name,
                color=category.color,
                budget_limit=category.budget_limit,
                spent=spent,
                progress=budget_progress(spent, category.budget_limit),
                status=budget_status(spent, category.budget_limit),
            )
        )
    return budgets


def build_dashboard(
    accounts: Sequence[Account],
    transactions: Sequence[Transaction],
    month: date,
    categories: Sequence[Category] = (),
) -> DashboardSummary:
    """Bundle every dashboard figure for ``month`` into one summary."""
    spend = monthly_spend(transactions, month)
    income = monthly_income(transactions, month)
    month_transactions = [tx for tx in transactions if _same_month(tx.date, month)]
    breakdown = category_breakdown(month_transactions)

    logger.debug(
        "Aggregating dashboard for %s: %d accounts, %d transactions",
        month.strftime("%Y-%m"),
        len(accounts),
        len(transactions),
    )
    return DashboardSummary(
        month=month.strftime("%Y-%m"),
        total_balance=total_balance(accounts),
        total_available=total_available(accounts),
        total_positive_balance=total_positive_balance(accounts),
        total_debt=total_debt(accounts),
        account_count=len(accounts),
        monthly_spend=spend,
        monthly_income=income,
        savings_rate=round(savings_rate(income, spend), 1),
        category_breakdown=tuple(breakdown),
        top_category=top_category_name(breakdown),
        trend=spending_trend(transactions, month),
        transactions=summarize_transactions(month_transactions),
        budgets=tuple(category_budgets(categories, transactions, month)),
    )
