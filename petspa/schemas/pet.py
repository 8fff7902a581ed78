from pydantic import BaseModel, Field
from typing import Optional

class PetCreate(BaseModel):
    owner_id: str
    name: str = Field(..., min_length=1, max_length=80)
    species: Optional[str] = Field(None, max_length=50)
    breed: Optional[str] = Field(None, max_length=80)
    age: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

class PetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=80)
    species: Optional[str] = Field(None, max_length=50)
    breed: Optional[str] = Field(None, max_length=80)
    age: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

class PetOut(BaseModel):
    id: str
    owner_id: str
    owner_name: Optional[str] = None
    name: str
    species: Optional[str] = None
    breed: Optional[str] = None
    age: Optional[int] = None
    weight: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
