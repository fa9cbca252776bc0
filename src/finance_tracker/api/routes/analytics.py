from typing import Annotated

from fastapi import APIRouter, Depends, Query

from finance_tracker.api.dependencies import get_store_optional
from finance_tracker.core import settings
from finance_tracker.domain.analytics import expenses_by_category, spending_over_time, summarize
from finance_tracker.domain.transactions import build_stored_transactions
from finance_tracker.integration.supabase import SupabaseClient
from finance_tracker.models import CategoryTotal, DailyTotal, StoredTransaction, Summary

router = APIRouter(prefix="/api/analytics")


async def _load_transactions(store: SupabaseClient | None, user_id: str) -> list[StoredTransaction]:
    if not store:
        return []
    rows = await store.list_transactions(user_id, limit=settings.TRANSACTIONS_PAGE_SIZE)
    return build_stored_transactions(rows)


@router.get("/summary", response_model=Summary)
async def get_summary(
    store: Annotated[SupabaseClient | None, Depends(get_store_optional)],
    user_id: str,
) -> Summary:
    return summarize(await _load_transactions(store, user_id))


@router.get("/categories", response_model=list[CategoryTotal])
async def get_spending_by_category(
    store: Annotated[SupabaseClient | None, Depends(get_store_optional)],
    user_id: str,
) -> list[CategoryTotal]:
    return expenses_by_category(await _load_transactions(store, user_id))


@router.get("/trends", response_model=list[DailyTotal])
async def get_trends(
    store: Annotated[SupabaseClient | None, Depends(get_store_optional)],
    user_id: str,
    days: Annotated[int | None, Query(ge=1)] = None,
) -> list[DailyTotal]:
    return spending_over_time(
        await _load_transactions(store, user_id),
        days=days or settings.TRENDS_DAYS,
    )
