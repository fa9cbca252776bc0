from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Literal

from finance_tracker.models import StoredTransaction

TypeFilter = Literal["all", "income", "expense"]


def parse_date(value: str | date | None) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return date.today()
    return date.today()


def _coerce_amount(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _extract_category(row: dict[str, Any]) -> dict[str, Any]:
    # PostgREST embeds the joined row under the table name.
    embedded = row.get("categories")
    if isinstance(embedded, list):
        embedded = embedded[0] if embedded else None
    return embedded if isinstance(embedded, dict) else {}


def build_stored_transaction(row: dict[str, Any]) -> StoredTransaction:
    category = _extract_category(row)
    category_id = row.get("category_id")
    confidence = row.get("ai_confidence")
    return StoredTransaction(
        id=str(row.get("id", "")),
        amount=_coerce_amount(row.get("amount")),
        description=row.get("description") or "",
        type="income" if row.get("type") == "income" else "expense",
        date=parse_date(row.get("date")),
        category_id=str(category_id) if category_id is not None else None,
        category_name=category.get("name") or "Other",
        category_color=category.get("color"),
        category_icon=category.get("icon"),
        ai_parsed=bool(row.get("ai_parsed", False)),
        ai_confidence=_coerce_amount(confidence) if confidence is not None else None,
    )


def build_stored_transactions(rows: Iterable[dict[str, Any]]) -> list[StoredTransaction]:
    return [build_stored_transaction(row) for row in rows]


def filter_transactions(
    transactions: Iterable[StoredTransaction],
    search: str = "",
    type_filter: TypeFilter = "all",
) -> list[StoredTransaction]:
    """Case-insensitive search over description and category name, plus a type filter."""
    needle = search.strip().lower()
    filtered = []
    for transaction in transactions:
        if type_filter != "all" and transaction.type != type_filter:
            continue
        if needle and needle not in transaction.description.lower() \
                and needle not in transaction.category_name.lower():
            continue
        filtered.append(transaction)
    return filtered
