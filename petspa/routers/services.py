# petspa/routers/services.py
from fastapi import APIRouter, Depends, status
from typing import List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
import logging

from ..db import get_db
from ..dependencies import get_catalog
from ..schemas.service import ServiceCreate, ServiceUpdate, ServiceOut
from ..security import get_current_user, require_admin
from ..services.catalog import CatalogStore
from ..utils import to_decimal128, to_id

logger = logging.getLogger(__name__)

router = APIRouter()

def service_out(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = to_id(doc)
    out["is_active"] = bool(out.get("is_active", True))
    return out

# GET /services?active_only=true
@router.get("", response_model=List[ServiceOut])
async def list_services(
    active_only: bool = False,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current=Depends(get_current_user),
):
    # Los servicios inactivos siguen existiendo para las reservas antiguas
    q: Dict[str, Any] = {"is_active": True} if active_only else {}
    docs = await db.services.find(q).sort("name", 1).to_list(500)
    return [service_out(d) for d in docs]

@router.get("/{service_id}", response_model=ServiceOut)
async def get_service(
    service_id: str,
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    return service_out(await catalog.get_service(service_id))

@router.post("", response_model=ServiceOut, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin=Depends(require_admin),
):
    doc = payload.model_dump()
    doc["price"] = to_decimal128(payload.price)
    doc["is_active"] = True
    res = await db.services.insert_one(doc)
    doc["_id"] = res.inserted_id
    logger.info("Service %s created (%s)", payload.name, payload.price)
    return service_out(doc)

# PATCH /services/{service_id}  (nombre/precio/duración/activo)
@router.patch("/{service_id}", response_model=ServiceOut)
async def update_service(
    service_id: str,
    payload: ServiceUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    admin=Depends(require_admin),
):
    s = await catalog.get_service(service_id)
    updates = payload.model_dump(exclude_unset=True)
    if "price" in updates:
        # Las reservas ya creadas conservan el precio de su línea
        updates["price"] = to_decimal128(updates["price"])
    if not updates:
        return service_out(s)
    await db.services.update_one({"_id": s["_id"]}, {"$set": updates})
    return service_out(await catalog.get_service(service_id))

# Baja lógica
@router.delete("/{service_id}", response_model=ServiceOut)
async def deactivate_service(
    service_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    admin=Depends(require_admin),
):
    s = await catalog.get_service(service_id)
    await db.services.update_one({"_id": s["_id"]}, {"$set": {"is_active": False}})
    logger.info("Service %s deactivated", service_id)
    return service_out(await catalog.get_service(service_id))
