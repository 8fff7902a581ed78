from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional

class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    duration_minutes: int = Field(..., gt=0)

class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None

class ServiceOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    duration_minutes: int
    is_active: bool = True
