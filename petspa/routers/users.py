# petspa/routers/users.py
from fastapi import APIRouter, Depends, status
from typing import List, Any, Dict
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime
import logging

from ..db import get_db
from ..dependencies import get_catalog
from ..errors import Conflict, InvalidInput
from ..schemas.user import Role, UserCreate, UserUpdate, UserOut
from ..security import get_current_user, hash_password, require_admin
from ..services.catalog import CatalogStore, staff_profile

logger = logging.getLogger(__name__)

router = APIRouter()

# --------- helpers ----------
def _parse_role(value: Any) -> str:
    try:
        return Role(str(value).strip().upper()).value
    except ValueError:
        raise InvalidInput(f"Invalid role: {value!r}")

async def _set_active(db: AsyncIOMotorDatabase, catalog: CatalogStore, user_id: str, active: bool) -> Dict[str, Any]:
    u = await catalog.get_staff(user_id)
    await db.users.update_one({"_id": u["_id"]}, {"$set": {"is_active": active}})
    logger.info("User %s %s", user_id, "reactivated" if active else "deactivated")
    return staff_profile(await catalog.get_staff(user_id))

# -------------------- Usuarios --------------------

@router.get("", response_model=List[UserOut])
async def list_users(
    active_only: bool = False,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current=Depends(get_current_user),
):
    q: Dict[str, Any] = {"is_active": True} if active_only else {}
    docs = await db.users.find(q).sort("full_name", 1).to_list(500)
    return [staff_profile(d) for d in docs]

# Empleados activos con rol STAFF
@router.get("/staff", response_model=List[UserOut])
async def list_staff(
    db: AsyncIOMotorDatabase = Depends(get_db),
    current=Depends(get_current_user),
):
    docs = await db.users.find({"role": Role.staff.value, "is_active": True}).sort("full_name", 1).to_list(500)
    return [staff_profile(d) for d in docs]

@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    return staff_profile(await catalog.get_staff(user_id))

@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserOut)
async def create_user(
    payload: UserCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin=Depends(require_admin),
):
    role = _parse_role(payload.role)
    if await db.users.find_one({"email": payload.email}):
        raise Conflict(f"Email already exists: {payload.email}")

    doc = payload.model_dump()
    doc["password_hash"] = hash_password(doc.pop("password"))
    doc["role"] = role
    doc["is_active"] = True
    doc["created_at"] = datetime.utcnow()
    try:
        res = await db.users.insert_one(doc)
    except DuplicateKeyError:
        raise Conflict(f"Email already exists: {payload.email}")
    doc["_id"] = res.inserted_id
    logger.info("User %s created with role %s", payload.email, role)
    return staff_profile(doc)

@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    admin=Depends(require_admin),
):
    u = await catalog.get_staff(user_id)
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "role" in updates:
        updates["role"] = _parse_role(updates["role"])
    if "password" in updates:
        updates["password_hash"] = hash_password(updates.pop("password"))
    if updates:
        await db.users.update_one({"_id": u["_id"]}, {"$set": updates})
    return staff_profile(await catalog.get_staff(user_id))

@router.post("/{user_id}/deactivate", response_model=UserOut)
async def deactivate_user(
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    admin=Depends(require_admin),
):
    return await _set_active(db, catalog, user_id, False)

@router.post("/{user_id}/reactivate", response_model=UserOut)
async def reactivate_user(
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    admin=Depends(require_admin),
):
    return await _set_active(db, catalog, user_id, True)
