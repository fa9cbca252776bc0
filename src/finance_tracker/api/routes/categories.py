from typing import Annotated

from fastapi import APIRouter, Depends

from finance_tracker.api.dependencies import get_store_optional
from finance_tracker.integration.supabase import SupabaseClient
from finance_tracker.models import Category
from finance_tracker.services.reference_data import fetch_categories

router = APIRouter()


@router.get("/api/categories", response_model=list[Category])
async def get_categories(
    store: Annotated[SupabaseClient | None, Depends(get_store_optional)],
) -> list[Category]:
    if not store:
        return []
    return await fetch_categories(store)
