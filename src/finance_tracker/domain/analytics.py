from collections.abc import Iterable

from finance_tracker.models import CategoryTotal, DailyTotal, StoredTransaction, Summary

DEFAULT_CHART_COLOR = "#8884d8"


def summarize(transactions: Iterable[StoredTransaction]) -> Summary:
    total_income = 0.0
    total_expenses = 0.0
    for transaction in transactions:
        if transaction.type == "income":
            total_income += transaction.amount
        else:
            total_expenses += transaction.amount

    savings = round(total_income - total_expenses, 2)
    return Summary(
        total_income=round(total_income, 2),
        total_expenses=round(total_expenses, 2),
        savings=savings,
        is_saving=savings >= 0,
    )


def expenses_by_category(transactions: Iterable[StoredTransaction]) -> list[CategoryTotal]:
    """Expense totals per category name, in order of first appearance."""
    totals: dict[str, CategoryTotal] = {}
    for transaction in transactions:
        if transaction.type != "expense":
            continue
        name = transaction.category_name or "Other"
        entry = totals.get(name)
        if entry is None:
            totals[name] = CategoryTotal(
                name=name,
                value=transaction.amount,
                color=transaction.category_color or DEFAULT_CHART_COLOR,
            )
        else:
            entry.value = round(entry.value + transaction.amount, 2)
    return list(totals.values())


def spending_over_time(transactions: Iterable[StoredTransaction], days: int = 7) -> list[DailyTotal]:
    """
    Income and expense totals per calendar date, oldest first.

    Only the most recent `days` dates that have activity are kept.
    """
    daily: dict = {}
    for transaction in transactions:
        entry = daily.setdefault(transaction.date, DailyTotal(date=transaction.date))
        if transaction.type == "income":
            entry.income = round(entry.income + transaction.amount, 2)
        else:
            entry.expenses = round(entry.expenses + transaction.amount, 2)

    ordered = sorted(daily.values(), key=lambda entry: entry.date)
    if days <= 0:
        return []
    return ordered[-days:]
