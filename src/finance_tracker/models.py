import datetime
from typing import Literal

from pydantic import BaseModel, Field

TransactionType = Literal["income", "expense"]

DEFAULT_CATEGORY_COLOR = "#3B82F6"


class Category(BaseModel):
    id: str
    name: str
    color: str = DEFAULT_CATEGORY_COLOR
    icon: str = ""


class ParsedTransaction(BaseModel):
    amount: float = Field(default=0.0, ge=0.0, allow_inf_nan=False)
    description: str
    type: TransactionType = "expense"
    category: Category
    confidence: float = Field(ge=0.0, le=1.0) # heuristic, not a probability
    date: datetime.date

    @property
    def category_id(self) -> str:
        return self.category.id


class StoredTransaction(BaseModel):
    id: str
    amount: float
    description: str
    type: TransactionType
    date: datetime.date
    category_id: str | None = None
    category_name: str = "Other"
    category_color: str | None = None
    category_icon: str | None = None
    ai_parsed: bool = False
    ai_confidence: float | None = None


class Summary(BaseModel):
    total_income: float
    total_expenses: float
    savings: float
    is_saving: bool


class CategoryTotal(BaseModel):
    name: str
    value: float
    color: str


class DailyTotal(BaseModel):
    date: datetime.date
    income: float = 0.0
    expenses: float = 0.0
