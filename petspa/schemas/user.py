from pydantic import BaseModel, EmailStr, Field
from enum import Enum
from typing import Optional

class Role(str, Enum):
    admin = "ADMIN"
    staff = "STAFF"

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    full_name: str = Field(..., min_length=2, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=20)
    # str: un rol desconocido es InvalidInput (400)
    role: str = Role.staff.value

class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=20)
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[str] = None

# Perfil público: nunca incluye la credencial
class UserOut(BaseModel):
    id: str
    email: EmailStr
    full_name: str
    phone_number: Optional[str] = None
    role: Role
    is_active: bool = True
    created_at: Optional[str] = None
