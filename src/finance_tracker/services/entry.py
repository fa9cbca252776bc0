import asyncio
from datetime import date
from typing import Any

from finance_tracker.domain.interpreter import interpret
from finance_tracker.domain.transactions import build_stored_transaction
from finance_tracker.integration.supabase import SupabaseClient
from finance_tracker.logger import get_logger
from finance_tracker.models import ParsedTransaction, StoredTransaction
from finance_tracker.services.reference_data import fetch_categories

logger = get_logger(__name__)


def build_insert_payload(parsed: ParsedTransaction, user_id: str) -> dict[str, Any]:
    """Row inserted for a confirmed parse; `ai_parsed` marks it as machine-parsed."""
    return {
        "user_id": user_id,
        "amount": parsed.amount,
        "description": parsed.description,
        "type": parsed.type,
        "category_id": parsed.category_id,
        "date": parsed.date.isoformat(),
        "ai_parsed": True,
        "ai_confidence": parsed.confidence,
    }


class TransactionEntryService:
    def __init__(self, store: SupabaseClient) -> None:
        self.store = store

    async def parse(self, text: str, reference_date: date | None = None) -> ParsedTransaction:
        categories = await fetch_categories(self.store)
        return await asyncio.to_thread(
            interpret,
            text,
            categories,
            reference_date,
        )

    async def confirm(self, parsed: ParsedTransaction, user_id: str) -> StoredTransaction | None:
        payload = build_insert_payload(parsed, user_id)
        row = await self.store.insert_transaction(payload)
        if row is None:
            logger.warning(
                "[CONFIRM] Store rejected transaction '%s' for user %s.",
                parsed.description[:50],
                user_id,
            )
            return None

        logger.info(
            "[CONFIRM] Saved %s %.2f '%s' (confidence: %.2f)",
            parsed.type,
            parsed.amount,
            parsed.category.name,
            parsed.confidence,
        )
        # The insert response may omit the embedded category.
        if not row.get("categories"):
            row["categories"] = {
                "name": parsed.category.name,
                "color": parsed.category.color,
                "icon": parsed.category.icon,
            }
        return build_stored_transaction(row)
