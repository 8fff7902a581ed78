from fastapi import APIRouter, Depends, status
from typing import Any, Dict, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
import logging

from ..db import get_db
from ..dependencies import get_catalog
from ..errors import Conflict
from ..security import get_current_user
from ..schemas.pet import PetCreate, PetUpdate, PetOut
from ..services.catalog import CatalogStore
from ..utils import to_id

logger = logging.getLogger(__name__)

router = APIRouter()

def pet_out(doc: dict, owner: Optional[Dict[str, Any]] = None) -> dict:
    out = to_id(doc)
    out["owner_name"] = (owner or {}).get("full_name")
    return out

@router.get("/customer/{customer_id}", response_model=list[PetOut])
async def pets_by_customer(
    customer_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    owner = await catalog.get_customer(customer_id)
    docs = await db.pets.find({"owner_id": str(owner["_id"])}).sort("name", 1).to_list(200)
    return [pet_out(d, owner) for d in docs]

@router.get("/{pet_id}", response_model=PetOut)
async def get_pet(
    pet_id: str,
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    pet = await catalog.get_pet(pet_id)
    owners = await catalog.customers_by_id([pet["owner_id"]])
    return pet_out(pet, owners.get(pet["owner_id"]))

@router.post("", response_model=PetOut, status_code=status.HTTP_201_CREATED)
async def create_pet(
    payload: PetCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    owner = await catalog.get_customer(payload.owner_id)
    doc = payload.model_dump()
    doc["owner_id"] = str(owner["_id"])
    doc["created_at"] = datetime.utcnow()
    res = await db.pets.insert_one(doc)
    doc["_id"] = res.inserted_id
    logger.info("Pet %s created for customer %s", res.inserted_id, doc["owner_id"])
    return pet_out(doc, owner)

@router.patch("/{pet_id}", response_model=PetOut)
async def update_pet(
    pet_id: str,
    payload: PetUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    pet = await catalog.get_pet(pet_id)
    updates = payload.model_dump(exclude_unset=True)
    if updates:
        await db.pets.update_one({"_id": pet["_id"]}, {"$set": updates})
        pet = await catalog.get_pet(pet_id)
    owners = await catalog.customers_by_id([pet["owner_id"]])
    return pet_out(pet, owners.get(pet["owner_id"]))

@router.delete("/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pet(
    pet_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    pet = await catalog.get_pet(pet_id)
    # Una mascota con reservas no se borra: las reservas la referencian
    if await db.bookings.count_documents({"pet_id": str(pet["_id"])}, limit=1):
        raise Conflict(f"Pet {pet_id} has bookings and cannot be deleted")
    await db.pets.delete_one({"_id": pet["_id"]})
    return None
