"""
Rule-based interpretation of free-text transaction descriptions.

Every pass reads the raw text and contributes one field to the result:
amount and description, date, income/expense type, then category. Nothing
here raises for string input; missing signals fall back to defaults so the
caller always has a record to show for confirmation.
"""
import calendar
import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from finance_tracker.logger import get_logger
from finance_tracker.models import DEFAULT_CATEGORY_COLOR, Category, ParsedTransaction, TransactionType

logger = get_logger(__name__)

BASE_CONFIDENCE = 0.8
TWO_CLAUSE_CONFIDENCE = 0.9
INCOME_CONFIDENCE = 0.95
CATEGORY_MATCH_BONUS = 0.1

OTHER_CATEGORY = "Other"
INCOME_CATEGORY = "Income"
INCOME_ICON = "💰"

OTHER_PLACEHOLDER = Category(id="temp-other", name=OTHER_CATEGORY, color="#6B7280", icon="📄")

# Only the first clause is used; the second amount is dropped.
_TWO_CLAUSE_PATTERN = re.compile(
    r"(.+?)\s*\$(\d+\.?\d*)\s*(?:and|,)\s*(.+?)\s*\$(\d+\.?\d*)",
    re.IGNORECASE,
)
_AMOUNT_PATTERN = re.compile(r"\$?(\d+\.?\d*)")
_DESCRIPTION_TRAILERS = " \t-:,"


@dataclass(frozen=True)
class DateRule:
    pattern: re.Pattern[str]
    resolve: Callable[[re.Match[str], date], date | None]


@dataclass(frozen=True)
class CategoryRule:
    keywords: tuple[str, ...]
    category: str
    icon: str

    def matches(self, lowered: str) -> bool:
        return any(keyword in lowered for keyword in self.keywords)


def _shift_back(today: date, days: int) -> date | None:
    try:
        return today - timedelta(days=days)
    except OverflowError:
        return None


def _days_back(days: int) -> Callable[[re.Match[str], date], date | None]:
    def resolve(match: re.Match[str], today: date) -> date | None:
        return _shift_back(today, days)
    return resolve


def _last_weekday(weekday: int) -> Callable[[re.Match[str], date], date | None]:
    def resolve(match: re.Match[str], today: date) -> date | None:
        # "last monday" on a Monday means a week ago, never today.
        offset = (today.weekday() - weekday) % 7 or 7
        return _shift_back(today, offset)
    return resolve


def _month_day(match: re.Match[str], today: date) -> date | None:
    try:
        return date(today.year, int(match.group(1)), int(match.group(2)))
    except ValueError:
        return None


DATE_RULES: tuple[DateRule, ...] = (
    DateRule(re.compile(r"yesterday", re.IGNORECASE), _days_back(1)),
    DateRule(re.compile(r"last\s+friday", re.IGNORECASE), _last_weekday(calendar.FRIDAY)),
    DateRule(re.compile(r"last\s+monday", re.IGNORECASE), _last_weekday(calendar.MONDAY)),
    DateRule(re.compile(r"last\s+week", re.IGNORECASE), _days_back(7)),
    DateRule(re.compile(r"(\d{1,2})/(\d{1,2})"), _month_day),
)

INCOME_KEYWORDS: tuple[str, ...] = (
    "salary",
    "paid",
    "income",
    "bonus",
    "refund",
    "cashback",
    "dividend",
    "freelance",
    "paycheck",
)

# Order matters: the first group with a keyword in the text wins.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(("coffee", "starbucks", "cafe", "espresso", "latte"), "Food & Dining", "☕"),
    CategoryRule(
        ("food", "restaurant", "dinner", "lunch", "breakfast", "pizza", "burger", "chinese", "italian", "mexican"),
        "Food & Dining",
        "🍽️",
    ),
    CategoryRule(("grocery", "whole foods", "supermarket", "trader joes", "walmart", "costco"), "Groceries", "🛒"),
    CategoryRule(("gas", "gasoline", "fuel", "shell", "chevron", "exxon"), "Transportation", "⛽"),
    CategoryRule(("uber", "lyft", "taxi", "bus", "train", "metro", "parking"), "Transportation", "🚗"),
    CategoryRule(("watch", "phone", "laptop", "samsung", "apple", "electronics"), "Electronics", "📱"),
    CategoryRule(("amazon", "purchase", "shopping", "buy", "bought"), "Shopping", "🛍️"),
    CategoryRule(("netflix", "spotify", "subscription", "hulu", "disney", "prime"), "Entertainment", "🎬"),
    CategoryRule(("rent", "mortgage", "utilities", "electric", "water", "internet"), "Bills", "🏠"),
    CategoryRule(("doctor", "hospital", "pharmacy", "medicine", "health"), "Healthcare", "🏥"),
    CategoryRule(("gym", "fitness", "yoga", "sports"), "Fitness", "💪"),
)


def _clean_description(candidate: str, fallback: str) -> str:
    cleaned = candidate.strip().rstrip(_DESCRIPTION_TRAILERS).strip()
    return cleaned or fallback


def _parse_amount(raw: str) -> float | None:
    value = float(raw)
    return value if math.isfinite(value) else None


def extract_amount(text: str) -> tuple[float, str, float]:
    """Return (amount, description, confidence) from the amount pass."""
    trimmed = text.strip()

    two_clause = _TWO_CLAUSE_PATTERN.search(text)
    if two_clause:
        amount = _parse_amount(two_clause.group(2))
        if amount is None:
            return 0.0, trimmed, BASE_CONFIDENCE
        return amount, _clean_description(two_clause.group(1), trimmed), TWO_CLAUSE_CONFIDENCE

    amount_match = _AMOUNT_PATTERN.search(text)
    if amount_match:
        amount = _parse_amount(amount_match.group(1))
        if amount is None:
            # Digit runs too long for a float are not amounts.
            return 0.0, trimmed, BASE_CONFIDENCE
        return amount, _clean_description(text[:amount_match.start()], trimmed), BASE_CONFIDENCE

    return 0.0, trimmed, BASE_CONFIDENCE


def extract_date(text: str, reference_date: date) -> date:
    for rule in DATE_RULES:
        match = rule.pattern.search(text)
        if not match:
            continue
        resolved = rule.resolve(match, reference_date)
        if resolved is not None:
            return resolved
    return reference_date


def is_income(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in INCOME_KEYWORDS)


def match_category_rule(text: str) -> CategoryRule | None:
    lowered = text.lower()
    return next((rule for rule in CATEGORY_RULES if rule.matches(lowered)), None)


def placeholder_category(name: str, icon: str) -> Category:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return Category(id=f"temp-{slug}", name=name, color=DEFAULT_CATEGORY_COLOR, icon=icon)


def find_category(categories: Sequence[Category], name: str) -> Category | None:
    return next((category for category in categories if category.name == name), None)


def resolve_category(categories: Sequence[Category], name: str, icon: str) -> Category:
    """Look the name up in the reference set, synthesizing a placeholder if absent."""
    return find_category(categories, name) or placeholder_category(name, icon)


def interpret(
    text: str,
    categories: Sequence[Category] = (),
    reference_date: date | None = None,
) -> ParsedTransaction:
    """
    Parse a free-text transaction into a best-effort ParsedTransaction.

    Placeholders synthesized for unknown category names are returned to the
    caller only; the supplied categories are never modified.
    """
    raw = text or ""
    today = reference_date or date.today()
    if isinstance(today, datetime):
        today = today.date()

    amount, description, confidence = extract_amount(raw)
    transaction_date = extract_date(raw, today)

    transaction_type: TransactionType = "expense"
    category: Category | None = None

    if is_income(raw):
        transaction_type = "income"
        confidence = INCOME_CONFIDENCE
        category = resolve_category(categories, INCOME_CATEGORY, INCOME_ICON)
    else:
        rule = match_category_rule(raw)
        if rule:
            confidence = min(confidence + CATEGORY_MATCH_BONUS, 1.0)
            category = resolve_category(categories, rule.category, rule.icon)

    if category is None:
        category = find_category(categories, OTHER_CATEGORY) or OTHER_PLACEHOLDER

    logger.debug(
        "[PARSE] '%s' -> %s %.2f '%s' on %s (confidence: %.2f)",
        raw[:50],
        transaction_type,
        amount,
        category.name,
        transaction_date.isoformat(),
        confidence,
    )

    return ParsedTransaction(
        amount=amount,
        description=description,
        type=transaction_type,
        category=category,
        confidence=round(confidence, 2),
        date=transaction_date,
    )
