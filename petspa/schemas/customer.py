from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
import re

from .pet import PetOut

def validate_phone(phone: str) -> str:
    """Valida formato de teléfono (permite +, números, espacios, guiones)"""
    cleaned = re.sub(r'[\s\-]', '', phone)
    if not re.match(r'^\+?\d{6,15}$', cleaned):
        raise ValueError("Invalid phone number format")
    return phone

class CustomerCreate(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    phone_number: str = Field(..., max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=200)

    @field_validator('phone_number')
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        return validate_phone(v)

class CustomerUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=200)

    @field_validator('phone_number')
    @classmethod
    def validate_phone_number(cls, v: str | None) -> str | None:
        if v:
            return validate_phone(v)
        return v

class CustomerOut(BaseModel):
    id: str
    full_name: str
    phone_number: str
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None
    pets: List[PetOut] = []
    total_bookings: int = 0
