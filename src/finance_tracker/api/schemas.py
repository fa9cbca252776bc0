from datetime import date

from pydantic import BaseModel, Field, field_validator

from finance_tracker.models import ParsedTransaction, StoredTransaction


class ParseRequest(BaseModel):
    text: str
    reference_date: date | None = None


class ConfirmRequest(BaseModel):
    user_id: str = Field(min_length=1)
    transaction: ParsedTransaction

    @field_validator("transaction")
    @classmethod
    def _require_description(cls, value: ParsedTransaction) -> ParsedTransaction:
        if not value.description.strip():
            raise ValueError("description must not be empty")
        return value


class UpdateTransactionRequest(BaseModel):
    amount: float = Field(ge=0.0)
    description: str = Field(min_length=1)


class TransactionListResponse(BaseModel):
    transactions: list[StoredTransaction]
