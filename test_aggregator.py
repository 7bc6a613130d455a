import random
from datetime import date
from decimal import Decimal

from conftest import make_account, make_transaction
from spendwise.core import aggregator
from spendwise.core.aggregator import BudgetStatus, Trend
from spendwise.core.data_models import Category

MARCH = date(2024, 3, 1)


def test_total_balance_handles_empty_and_mixed_accounts():
    assert aggregator.total_balance([]) == 0
    accounts = [make_account(id=1, balance_current=100), make_account(id=2, balance_current=-40)]
    assert aggregator.total_balance(accounts) == 60


def test_positive_balance_and_debt_partition_total():
    """Assets minus liabilities always equals the net balance."""
    accounts = [make_account(id=1, balance_current=1200.50), make_account(id=2, balance_current=-300.00)]

    assert aggregator.total_balance(accounts) == 900.50
    assert aggregator.total_positive_balance(accounts) == 1200.50
    assert aggregator.total_debt(accounts) == 300.00
    assert (
        aggregator.total_positive_balance(accounts) - aggregator.total_debt(accounts)
        == aggregator.total_balance(accounts)
    )


def test_balance_partition_holds_for_generated_cent_amounts():
    rng = random.Random(20240301)
    samples = [[2609.62, -277.55, -1203.85, -2900.45]]
    for _ in range(500):
        samples.append([rng.randint(-500000, 500000) / 100 for _ in range(rng.randint(1, 8))])

    for balances in samples:
        accounts = [
            make_account(id=index, balance_current=value) for index, value in enumerate(balances, start=1)
        ]
        total = aggregator.total_balance(accounts)
        positive = aggregator.total_positive_balance(accounts)
        debt = aggregator.total_debt(accounts)

        assert Decimal(str(positive)) - Decimal(str(debt)) == Decimal(str(total)), balances
        assert round(positive - debt, 2) == total, balances
        assert Decimal(str(total)) == sum((Decimal(str(value)) for value in balances), Decimal("0"))


def test_monthly_spend_of_many_small_expenses_is_exact():
    transactions = [make_transaction(id=index, amount=-0.1, is_expense=True) for index in range(1, 31)]

    assert aggregator.monthly_spend(transactions, MARCH) == 3.0
    assert aggregator.total_expenses(transactions) == 3.0


def test_total_available_falls_back_to_current_balance():
    accounts = [
        make_account(id=1, balance_current=500, balance_available=450),
        make_account(id=2, balance_current=200, balance_available=None),
    ]
    assert aggregator.total_available(accounts) == 650


def test_category_breakdown_groups_and_orders_expenses():
    transactions = [
        make_transaction(id=1, amount=-50, category="Food"),
        make_transaction(id=2, amount=-30, category="Food"),
        make_transaction(id=3, amount=-20, category="Transport"),
    ]

    breakdown = aggregator.category_breakdown(transactions)

    assert [(share.name, share.amount) for share in breakdown] == [("Food", 80), ("Transport", 20)]
    assert [round(share.percentage, 6) for share in breakdown] == [80, 20]
    assert breakdown[0].count == 2
    assert aggregator.top_category_name(breakdown) == "Food"


def test_category_breakdown_ignores_income_and_sorts_descending():
    transactions = [
        make_transaction(id=1, amount=-5, category="Coffee"),
        make_transaction(id=2, amount=-90, category="Rent"),
        make_transaction(id=3, amount=2500, category="Salary"),
        make_transaction(id=4, amount=-40, category="Groceries"),
    ]

    breakdown = aggregator.category_breakdown(transactions)

    assert [share.name for share in breakdown] == ["Rent", "Groceries", "Coffee"]
    for current, following in zip(breakdown, breakdown[1:]):
        assert current.amount >= following.amount
    assert round(sum(share.percentage for share in breakdown), 6) == 100


def test_uncategorized_expenses_are_left_out_of_groups_but_count_in_total():
    transactions = [
        make_transaction(id=1, amount=-75, category="Food"),
        make_transaction(id=2, amount=-25),
    ]

    breakdown = aggregator.category_breakdown(transactions)

    assert [share.name for share in breakdown] == ["Food"]
    assert breakdown[0].percentage == 75
    assert sum(share.percentage for share in breakdown) < 100


def test_breakdown_ties_keep_first_seen_order():
    transactions = [
        make_transaction(id=1, amount=-10, category="Books"),
        make_transaction(id=2, amount=-10, category="Games"),
    ]
    assert [share.name for share in aggregator.category_breakdown(transactions)] == ["Books", "Games"]


def test_empty_breakdown_reports_no_data():
    assert aggregator.category_breakdown([]) == []
    assert aggregator.top_category([]) is None
    assert aggregator.top_category_name([]) == "No data"


def test_savings_rate_with_zero_income_is_zero():
    assert aggregator.savings_rate(0, 0) == 0
    assert aggregator.savings_rate(0, 1234.5) == 0
    assert aggregator.savings_rate(2000, 1500) == 25


def test_budget_progress_and_status_thresholds():
    assert aggregator.budget_progress(150, 100) == 100
    assert aggregator.budget_status(150, 100) is BudgetStatus.OVER_BUDGET
    assert aggregator.budget_progress(50, 100) == 50
    assert aggregator.budget_status(50, 100) is BudgetStatus.ON_TRACK
    assert aggregator.budget_status(85, 100) is BudgetStatus.WARNING
    assert aggregator.budget_status(100, 100) is BudgetStatus.OVER_BUDGET
    assert aggregator.budget_progress(10, None) is None
    assert aggregator.budget_status(10, 0) is BudgetStatus.NO_BUDGET


def test_monthly_spend_only_counts_the_selected_month():
    transactions = [
        make_transaction(id=1, amount=-100, date="2024-03-02"),
        make_transaction(id=2, amount=-40, date="2024-03-31T23:00:00"),
        make_transaction(id=3, amount=-70, date="2024-02-29"),
        make_transaction(id=4, amount=1000, date="2024-03-15"),
    ]

    assert aggregator.monthly_spend(transactions, MARCH) == 140
    assert aggregator.monthly_income(transactions, MARCH) == 1000
    assert aggregator.monthly_totals(transactions) == [("2024-02", 70), ("2024-03", 140)]


def test_server_flags_drive_expense_classification():
    """A positive amount flagged as an expense by the server still counts as spending."""
    refund_like = make_transaction(id=1, amount=30, is_expense=True, is_income=False)
    assert aggregator.total_expenses([refund_like]) == 30
    assert aggregator.total_income([refund_like]) == 0


def test_summarize_transactions():
    transactions = [
        make_transaction(id=1, amount=-20, category="Food", pending=True),
        make_transaction(id=2, amount=-5),
        make_transaction(id=3, amount=100),
    ]

    totals = aggregator.summarize_transactions(transactions)

    assert totals.total_count == 3
    assert totals.total_expenses == 25
    assert totals.total_income == 100
    assert totals.net_amount == 75
    assert totals.pending_count == 1
    assert totals.uncategorized_count == 2


def test_spending_trend_compares_with_previous_month():
    transactions = [
        make_transaction(id=1, amount=-200, date="2024-02-10"),
        make_transaction(id=2, amount=-300, date="2024-03-10"),
    ]

    trend = aggregator.spending_trend(transactions, MARCH)

    assert trend.total_spent == 300
    assert trend.previous_spent == 200
    assert trend.vs_last_period == 50
    assert trend.trend is Trend.INCREASING


def test_spending_trend_within_band_is_stable():
    transactions = [
        make_transaction(id=1, amount=-100, date="2024-02-10"),
        make_transaction(id=2, amount=-103, date="2024-03-10"),
    ]
    assert aggregator.spending_trend(transactions, MARCH).trend is Trend.STABLE


def test_build_dashboard_bundles_month_figures():
    accounts = [make_account(id=1, balance_current=1200.50), make_account(id=2, balance_current=-300)]
    transactions = [
        make_transaction(id=1, amount=-50, category="Food", date="2024-03-03"),
        make_transaction(id=2, amount=-30, category="Food", date="2024-03-04"),
        make_transaction(id=3, amount=-20, category="Transport", date="2024-03-05"),
        make_transaction(id=4, amount=400, date="2024-03-01"),
        make_transaction(id=5, amount=-999, category="Rent", date="2024-02-01"),
    ]
    food_id = transactions[0].primary_category.id
    categories = [
        Category(id=food_id, name="Food", budget_limit=100),
        Category(id=999999, name="Travel"),
    ]

    summary = aggregator.build_dashboard(accounts, transactions, MARCH, categories)

    assert summary.month == "2024-03"
    assert summary.total_balance == 900.50
    assert summary.monthly_spend == 100
    assert summary.monthly_income == 400
    assert summary.savings_rate == 75
    assert summary.top_category == "Food"
    assert [share.name for share in summary.category_breakdown] == ["Food", "Transport"]
    assert summary.trend.previous_spent == 999
    assert summary.trend.trend is Trend.DECREASING
    assert len(summary.budgets) == 1
    assert summary.budgets[0].spent == 80
    assert summary.budgets[0].status is BudgetStatus.WARNING
