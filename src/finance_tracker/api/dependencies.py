from fastapi import HTTPException, Request

from finance_tracker.integration.supabase import SupabaseClient
from finance_tracker.services.entry import TransactionEntryService


def get_store(request: Request) -> SupabaseClient:
    store = getattr(request.app.state, "store", None)
    if not store:
        raise HTTPException(status_code=500, detail="Store not configured")
    return store


def get_store_optional(request: Request) -> SupabaseClient | None:
    return getattr(request.app.state, "store", None)


def get_entry_service(request: Request) -> TransactionEntryService:
    service = getattr(request.app.state, "entry_service", None)
    if not service:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return service
