"""Finance domain schemas"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

TransactionType = Literal["income", "expense"]
TransactionStatus = Literal["paid", "pending", "cancelled"]


class TransactionCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    amount: float = Field(..., gt=0)
    type: TransactionType
    status: TransactionStatus = "pending"
    category: Optional[str] = Field(None, max_length=100)
    date: datetime.date


class TransactionUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[float] = Field(None, gt=0)
    status: Optional[TransactionStatus] = None
    category: Optional[str] = Field(None, max_length=100)
    date: Optional[datetime.date] = None


class TransactionResponse(BaseModel):
    id: int
    description: str
    amount: float
    type: str
    status: str
    category: Optional[str]
    date: datetime.date


class MonthlyTotals(BaseModel):
    month: str  # YYYY-MM
    income: float
    expense: float


class RevenueDistribution(BaseModel):
    """Share of income in percent"""

    private: int
    insurance: int


class FinanceSummary(BaseModel):
    month: str
    revenue: float
    expenses: float
    balance: float
    pending: float
    distribution: RevenueDistribution
    revenueGrowth: Optional[float]
    monthly: list[MonthlyTotals]
