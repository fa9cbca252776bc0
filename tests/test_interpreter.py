from datetime import date, datetime

import pytest

from finance_tracker.domain.interpreter import (
    CATEGORY_RULES,
    DATE_RULES,
    OTHER_PLACEHOLDER,
    extract_amount,
    interpret,
    match_category_rule,
)
from finance_tracker.models import Category

# A Monday.
REFERENCE = date(2024, 6, 10)


@pytest.fixture
def reference_categories() -> list[Category]:
    return [
        Category(id="cat-food", name="Food & Dining", color="#F97316", icon="🍽️"),
        Category(id="cat-income", name="Income", color="#22C55E", icon="💰"),
        Category(id="cat-other", name="Other", color="#6B7280", icon="📄"),
    ]


def test_coffee_at_starbucks() -> None:
    res = interpret("Coffee at Starbucks $6.50", [], REFERENCE)

    assert res.amount == 6.50
    assert res.type == "expense"
    assert res.category.name == "Food & Dining"
    assert res.confidence == 0.9
    assert res.description == "Coffee at Starbucks"
    assert res.date == REFERENCE


def test_salary_is_income() -> None:
    res = interpret("Got paid $3500 salary", [], REFERENCE)

    assert res.amount == 3500
    assert res.type == "income"
    assert res.category.name == "Income"
    assert res.confidence == 0.95


def test_income_skips_category_table() -> None:
    # "freelance" marks income even though "laptop" is an electronics keyword.
    res = interpret("Freelance laptop repair $200", [], REFERENCE)

    assert res.type == "income"
    assert res.category.name == "Income"
    assert res.confidence == 0.95


def test_netflix_subscription() -> None:
    res = interpret("Netflix subscription $15.99", [], REFERENCE)

    assert res.amount == 15.99
    assert res.type == "expense"
    assert res.category.name == "Entertainment"
    assert res.confidence == pytest.approx(0.9)


def test_samsung_watch_is_electronics() -> None:
    res = interpret("Bought Samsung watch $250", [], REFERENCE)

    assert res.amount == 250
    assert res.category.name == "Electronics"


def test_no_amount_defaults() -> None:
    res = interpret("Went for a walk", [], REFERENCE)

    assert res.amount == 0
    assert res.type == "expense"
    assert res.category.name == "Other"
    assert res.category == OTHER_PLACEHOLDER
    assert res.confidence == 0.8
    assert res.description == "Went for a walk"
    assert res.date == REFERENCE


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_input_yields_default_record(text: str) -> None:
    res = interpret(text, [], REFERENCE)

    assert res.amount == 0
    assert res.description == ""
    assert res.type == "expense"
    assert res.category.name == "Other"
    assert res.confidence == 0.8
    assert res.date == REFERENCE


@pytest.mark.parametrize(
    "text",
    ["$", "$$$ and , $", "🙂🙂", "1/1/1/1", "-5 dollars", "and , and", "$0.", "99999999999999999999"],
)
def test_odd_inputs_stay_in_bounds(text: str) -> None:
    res = interpret(text, [], REFERENCE)

    assert res.amount >= 0
    assert 0.0 <= res.confidence <= 1.0
    assert isinstance(res.date, date)


def test_description_falls_back_to_full_text_when_amount_leads() -> None:
    res = interpret("$12 lunch", [], REFERENCE)

    assert res.amount == 12
    assert res.description == "$12 lunch"


def test_idempotent() -> None:
    first = interpret("Uber to airport $32.10 last week", [], REFERENCE)
    second = interpret("Uber to airport $32.10 last week", [], REFERENCE)

    assert first == second


def test_reference_category_wins_over_placeholder(reference_categories: list[Category]) -> None:
    snapshot = list(reference_categories)

    res = interpret("Latte $4.75", reference_categories, REFERENCE)

    assert res.category.id == "cat-food"
    assert reference_categories == snapshot


def test_placeholder_for_unknown_category(reference_categories: list[Category]) -> None:
    res = interpret("Groceries at Costco $120", reference_categories, REFERENCE)

    assert res.category.name == "Groceries"
    assert res.category.id == "temp-groceries"
    assert res.category.icon == "🛒"
    assert res.category.color == "#3B82F6"
    assert all(category.name != "Groceries" for category in reference_categories)


def test_income_resolves_from_reference_set(reference_categories: list[Category]) -> None:
    res = interpret("Bonus $500", reference_categories, REFERENCE)

    assert res.category.id == "cat-income"


def test_other_resolves_from_reference_set(reference_categories: list[Category]) -> None:
    res = interpret("Went for a walk", reference_categories, REFERENCE)

    assert res.category.id == "cat-other"


def test_two_clause_keeps_first_clause_only() -> None:
    # Known limitation: the second purchase is dropped.
    res = interpret("Tickets $30, snacks $12", [], REFERENCE)

    assert res.amount == 30
    assert res.description == "Tickets"
    assert res.confidence == 0.9
    assert res.category.name == "Other"


def test_two_clause_with_category_caps_confidence() -> None:
    res = interpret("Coffee $5 and bagel $3", [], REFERENCE)

    assert res.amount == 5
    assert res.description == "Coffee"
    assert res.confidence == 1.0


def test_extract_amount_single_token() -> None:
    assert extract_amount("Taxi - $18.40") == (18.40, "Taxi", 0.8)


def test_yesterday() -> None:
    res = interpret("Dinner yesterday $40", [], REFERENCE)

    assert res.date == date(2024, 6, 9)
    assert res.category.name == "Food & Dining"


def test_last_week() -> None:
    res = interpret("Parking last week $9", [], REFERENCE)

    assert res.date == date(2024, 6, 3)


def test_yesterday_beats_last_week() -> None:
    res = interpret("yesterday, not last week, $5", [], REFERENCE)

    assert res.date == date(2024, 6, 9)


@pytest.mark.parametrize(
    ("reference", "expected"),
    [
        (date(2024, 6, 10), date(2024, 6, 7)),   # Monday
        (date(2024, 6, 11), date(2024, 6, 7)),   # Tuesday
        (date(2024, 6, 12), date(2024, 6, 7)),   # Wednesday
        (date(2024, 6, 13), date(2024, 6, 7)),   # Thursday
        (date(2024, 6, 14), date(2024, 6, 7)),   # Friday: a week back, never today
        (date(2024, 6, 15), date(2024, 6, 14)),  # Saturday
        (date(2024, 6, 16), date(2024, 6, 14)),  # Sunday
    ],
)
def test_last_friday_for_every_weekday(reference: date, expected: date) -> None:
    res = interpret("Pizza last Friday $20", [], reference)

    assert res.date == expected
    assert res.date.weekday() == 4


@pytest.mark.parametrize(
    ("reference", "expected"),
    [
        (date(2024, 6, 10), date(2024, 6, 3)),   # Monday: a week back, never today
        (date(2024, 6, 11), date(2024, 6, 10)),  # Tuesday
        (date(2024, 6, 12), date(2024, 6, 10)),  # Wednesday
        (date(2024, 6, 13), date(2024, 6, 10)),  # Thursday
        (date(2024, 6, 14), date(2024, 6, 10)),  # Friday
        (date(2024, 6, 15), date(2024, 6, 10)),  # Saturday
        (date(2024, 6, 16), date(2024, 6, 10)),  # Sunday
    ],
)
def test_last_monday_for_every_weekday(reference: date, expected: date) -> None:
    res = interpret("Gym last   monday $30", [], reference)

    assert res.date == expected
    assert res.date.weekday() == 0


def test_month_day_uses_reference_year() -> None:
    res = interpret("$45.20 groceries on 3/15", [], REFERENCE)

    assert res.date == date(2024, 3, 15)
    assert res.amount == 45.20


def test_invalid_month_day_keeps_reference_date() -> None:
    res = interpret("Rent $1200 due 13/45", [], REFERENCE)

    assert res.date == REFERENCE
    assert res.category.name == "Bills"


def test_first_category_group_wins() -> None:
    # "coffee" and "amazon" both appear; the coffee group is listed first.
    rule = match_category_rule("Amazon coffee beans")

    assert rule is not None
    assert rule.category == "Food & Dining"
    assert rule.icon == "☕"


def test_rule_tables_are_ordered_data() -> None:
    assert len(DATE_RULES) == 5
    names = [rule.category for rule in CATEGORY_RULES]
    assert names.index("Electronics") < names.index("Shopping")
    assert names[-1] == "Fitness"


@pytest.mark.parametrize("text", ["Car $" + "9" * 400, "Boat $" + "9" * 400 + " and oars $" + "9" * 400])
def test_overlong_digit_run_is_not_an_amount(text: str) -> None:
    res = interpret(text, [], REFERENCE)

    assert res.amount == 0.0
    assert res.description == text
    assert res.confidence == 0.8


def test_yesterday_at_earliest_date_keeps_reference() -> None:
    res = interpret("Dinner yesterday $4", [], date.min)

    assert res.date == date.min
    assert res.amount == 4


@pytest.mark.parametrize("text", ["Pizza last friday $9", "Gym last monday $9", "Parking last week $9"])
def test_relative_dates_near_earliest_date(text: str) -> None:
    assert interpret(text, [], date.min).date == date.min


def test_datetime_reference_is_truncated_to_date() -> None:
    res = interpret("Coffee yesterday $4", [], datetime(2024, 6, 10, 12, 30))

    assert res.date == date(2024, 6, 9)
