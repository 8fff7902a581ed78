from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

class BookingStatus(str, Enum):
    pending     = "PENDING"
    confirmed   = "CONFIRMED"
    in_progress = "IN_PROGRESS"
    completed   = "COMPLETED"
    cancelled   = "CANCELLED"

class BookingCreate(BaseModel):
    customer_id: str
    pet_id: str
    staff_id: Optional[str] = None
    # Se validan en el ledger para devolver InvalidInput (400) y no un 422 genérico
    booking_date: str = Field(..., description="YYYY-MM-DD")
    booking_time: str = Field(..., description="HH:MM:SS")
    service_ids: List[str] = Field(default_factory=list)

class BookingDetailOut(BaseModel):
    id: str
    booking_id: str
    service_id: str
    service_name: Optional[str] = None
    duration_minutes: Optional[int] = None
    price: Decimal

class BookingOut(BaseModel):
    id: str
    customer_id: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    pet_id: str
    pet_name: Optional[str] = None
    pet_species: Optional[str] = None
    staff_id: Optional[str] = None
    staff_name: Optional[str] = None
    booking_date: str
    booking_time: str
    status: BookingStatus
    cancel_reason: Optional[str] = None
    total_price: Decimal
    created_at: datetime
    services: List[BookingDetailOut] = []

class StatusPatch(BaseModel):
    # str y no BookingStatus: un nombre desconocido es InvalidInput (400)
    status: str

class CancelIn(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
