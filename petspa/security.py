from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from motor.motor_asyncio import AsyncIOMotorDatabase

from .config import get_settings
from .db import get_db
from .schemas.user import Role
from .services.catalog import staff_profile
from .utils import maybe_object_id

settings = get_settings()
ALGO = "HS256"
pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def hash_password(plain: str) -> str:
    return pwd.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd.verify(plain, hashed)


def create_access_token(user_id: str, expires_hours: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(hours=expires_hours or settings.jwt_expires_hours)
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)


async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGO])
        sub = payload.get("sub")
        if not sub:
            raise HTTPException(status_code=401, detail="Invalid token")
        return str(sub)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")


async def get_current_user(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    oid = maybe_object_id(user_id)
    doc = await db.users.find_one({"_id": oid}) if oid else None
    # Un empleado desactivado pierde el acceso aunque su token siga vigente
    if not doc or not doc.get("is_active", True):
        raise HTTPException(status_code=401, detail="User not found")
    return staff_profile(doc)


async def require_admin(current=Depends(get_current_user)):
    if current.get("role") != Role.admin.value:
        raise HTTPException(status_code=403, detail="Admin only")
    return current
