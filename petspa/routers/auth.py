from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, EmailStr, Field
from motor.motor_asyncio import AsyncIOMotorDatabase
from ..db import get_db
from ..schemas.user import UserOut
from ..security import verify_password, create_access_token, get_current_user
from ..middleware.rate_limit import apply_rate_limit
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class Login(BaseModel):
    email: EmailStr = Field(..., description="Email del usuario")
    password: str = Field(..., min_length=1, description="Contraseña")

@router.post("/login")
async def login(request: Request, payload: Login, db: AsyncIOMotorDatabase = Depends(get_db)):
    # Rate limiting: máximo 10 intentos de login por minuto por IP
    apply_rate_limit(request, "10/minute")

    # Solo usuarios activos pueden entrar
    user = await db.users.find_one({"email": payload.email, "is_active": True})
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        logger.warning("Failed login for %s", payload.email)
        raise HTTPException(401, "Invalid credentials")
    token = create_access_token(str(user["_id"]))
    return {"access_token": token, "token_type": "bearer"}

@router.get("/me", response_model=UserOut)
async def me(current=Depends(get_current_user)):
    return current
