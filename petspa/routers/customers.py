# petspa/routers/customers.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime
import logging
import re

from ..db import get_db
from ..dependencies import get_catalog
from ..errors import Conflict, NotFound
from ..schemas.customer import CustomerCreate, CustomerUpdate, CustomerOut
from ..security import get_current_user
from ..services.catalog import CatalogStore
from ..utils import to_id
from .pets import pet_out

logger = logging.getLogger(__name__)

router = APIRouter()

async def customer_out(db: AsyncIOMotorDatabase, doc: Dict[str, Any]) -> Dict[str, Any]:
    out = to_id(doc)
    pets = await db.pets.find({"owner_id": out["id"]}).sort("name", 1).to_list(200)
    out["pets"] = [pet_out(p, owner=doc) for p in pets]
    out["total_bookings"] = await db.bookings.count_documents({"customer_id": out["id"]})
    return out

async def _phone_taken(db: AsyncIOMotorDatabase, phone: str, exclude=None) -> bool:
    q: Dict[str, Any] = {"phone_number": phone}
    if exclude is not None:
        q["_id"] = {"$ne": exclude}
    return await db.customers.count_documents(q, limit=1) > 0

# GET /customers?phone=...&name=...
@router.get("", response_model=List[CustomerOut])
async def list_customers(
    phone: Optional[str] = Query(None, description="búsqueda parcial por teléfono"),
    name: Optional[str] = Query(None, description="búsqueda por nombre (sin mayúsculas)"),
    db: AsyncIOMotorDatabase = Depends(get_db),
    current=Depends(get_current_user),
):
    q: Dict[str, Any] = {}
    if phone:
        q["phone_number"] = {"$regex": re.escape(phone)}
    if name:
        q["full_name"] = {"$regex": re.escape(name), "$options": "i"}
    docs = await db.customers.find(q).sort("full_name", 1).to_list(500)
    return [await customer_out(db, d) for d in docs]

# Búsqueda exacta por teléfono (clave única)
@router.get("/by-phone/{phone}", response_model=CustomerOut)
async def find_by_phone(
    phone: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current=Depends(get_current_user),
):
    doc = await db.customers.find_one({"phone_number": phone})
    if not doc:
        raise NotFound(f"Customer not found: {phone}")
    return await customer_out(db, doc)

@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer(
    customer_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    return await customer_out(db, await catalog.get_customer(customer_id))

@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
async def create_customer(
    payload: CustomerCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current=Depends(get_current_user),
):
    if await _phone_taken(db, payload.phone_number):
        raise Conflict(f"Phone number already exists: {payload.phone_number}")
    doc = payload.model_dump()
    doc["created_at"] = datetime.utcnow()
    try:
        res = await db.customers.insert_one(doc)
    except DuplicateKeyError:
        raise Conflict(f"Phone number already exists: {payload.phone_number}")
    doc["_id"] = res.inserted_id
    logger.info("Customer %s created", res.inserted_id)
    return await customer_out(db, doc)

@router.patch("/{customer_id}", response_model=CustomerOut)
async def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    doc = await catalog.get_customer(customer_id)
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        return await customer_out(db, doc)
    phone = updates.get("phone_number")
    if phone and phone != doc.get("phone_number") and await _phone_taken(db, phone, exclude=doc["_id"]):
        raise Conflict(f"Phone number already exists: {phone}")
    await db.customers.update_one({"_id": doc["_id"]}, {"$set": updates})
    return await customer_out(db, await catalog.get_customer(customer_id))

@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    doc = await catalog.get_customer(customer_id)
    # Cascada: el cliente es dueño exclusivo de sus reservas y mascotas
    owner_id = str(doc["_id"])
    bookings = await db.bookings.delete_many({"customer_id": owner_id})
    pets = await db.pets.delete_many({"owner_id": owner_id})
    await db.customers.delete_one({"_id": doc["_id"]})
    logger.info(
        "Customer %s deleted (%d pets, %d bookings)",
        customer_id, pets.deleted_count, bookings.deleted_count,
    )
