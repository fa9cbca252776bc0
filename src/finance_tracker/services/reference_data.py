from typing import Any

from pydantic import ValidationError

from finance_tracker.integration.supabase import SupabaseClient
from finance_tracker.logger import get_logger
from finance_tracker.models import Category

logger = get_logger(__name__)


def build_category(row: dict[str, Any]) -> Category | None:
    values = {key: value for key, value in row.items() if value is not None}
    if "id" in values:
        values["id"] = str(values["id"])
    try:
        return Category.model_validate(values)
    except ValidationError:
        logger.warning("[CATEGORIES] Skipping malformed category row: %s", row)
        return None


async def fetch_categories(store: SupabaseClient) -> list[Category]:
    raw_cats = await store.get_categories()
    categories = [category for category in map(build_category, raw_cats or []) if category]
    logger.debug(
        "[CATEGORIES] Loaded %d reference categories: %s",
        len(categories),
        ", ".join(category.name for category in categories) if categories else "(none)",
    )
    return categories
