from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from finance_tracker.api.dependencies import get_entry_service, get_store, get_store_optional
from finance_tracker.api.schemas import (
    ConfirmRequest,
    ParseRequest,
    TransactionListResponse,
    UpdateTransactionRequest,
)
from finance_tracker.core import settings
from finance_tracker.domain.transactions import TypeFilter, build_stored_transactions, filter_transactions
from finance_tracker.integration.supabase import SupabaseClient
from finance_tracker.logger import get_logger
from finance_tracker.models import ParsedTransaction, StoredTransaction
from finance_tracker.services.entry import TransactionEntryService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/api/transactions/parse", response_model=ParsedTransaction)
async def parse_transaction(
    req: ParseRequest,
    service: Annotated[TransactionEntryService, Depends(get_entry_service)],
) -> ParsedTransaction:
    return await service.parse(req.text, reference_date=req.reference_date)


@router.post("/api/transactions", response_model=StoredTransaction)
async def create_transaction(
    req: ConfirmRequest,
    service: Annotated[TransactionEntryService, Depends(get_entry_service)],
) -> StoredTransaction:
    stored = await service.confirm(req.transaction, req.user_id)
    if stored is None:
        raise HTTPException(status_code=502, detail="Failed to save transaction")
    return stored


@router.get("/api/transactions", response_model=TransactionListResponse)
async def list_transactions(
    store: Annotated[SupabaseClient | None, Depends(get_store_optional)],
    user_id: str,
    search: str = "",
    type_filter: Annotated[TypeFilter, Query(alias="type")] = "all",
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> TransactionListResponse:
    if not store:
        return TransactionListResponse(transactions=[])

    rows = await store.list_transactions(user_id, limit=limit or settings.TRANSACTIONS_PAGE_SIZE)
    transactions = filter_transactions(
        build_stored_transactions(rows),
        search=search,
        type_filter=type_filter,
    )
    return TransactionListResponse(transactions=transactions)


@router.put("/api/transactions/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    req: UpdateTransactionRequest,
    store: Annotated[SupabaseClient, Depends(get_store)],
) -> dict[str, str]:
    success = await store.update_transaction(transaction_id, req.amount, req.description)
    if not success:
        raise HTTPException(status_code=502, detail="Failed to update transaction")
    logger.info("[STORE] Transaction %s updated.", transaction_id)
    return {"status": "updated", "id": transaction_id}


@router.delete("/api/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    store: Annotated[SupabaseClient, Depends(get_store)],
) -> dict[str, str]:
    success = await store.delete_transaction(transaction_id)
    if not success:
        raise HTTPException(status_code=502, detail="Failed to delete transaction")
    logger.info("[STORE] Transaction %s deleted.", transaction_id)
    return {"status": "deleted", "id": transaction_id}
