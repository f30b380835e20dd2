"""Pharmacy domain schemas"""

from typing import Optional

from pydantic import BaseModel, Field


class MedicationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    dosage: Optional[str] = Field(None, max_length=100)
    price: float = Field(0, ge=0)
    stock: int = Field(0, ge=0)
    category: str = Field("Geral", min_length=1, max_length=100)


class MedicationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    dosage: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)


class StockAdjustment(BaseModel):
    """Positive delta restocks, negative delta dispenses"""

    delta: int


class MedicationResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    dosage: Optional[str]
    price: float
    stock: int
    category: str
    lowStock: bool
