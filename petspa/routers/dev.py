# petspa/routers/dev.py
# Endpoint de desarrollo para crear datos de prueba
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from decimal import Decimal
from ..db import get_db
from ..security import hash_password
from ..utils import to_decimal128

router = APIRouter()

USERS = [
    {"email": "admin@petspa.com", "full_name": "Admin PetSpa", "phone_number": "+34600000001", "role": "ADMIN"},
    {"email": "laura@petspa.com", "full_name": "Laura Martín", "phone_number": "+34600000002", "role": "STAFF"},
    {"email": "carlos@petspa.com", "full_name": "Carlos Ruiz", "phone_number": "+34600000003", "role": "STAFF"},
]

SHIFT_TYPES = [
    {"name": "Morning", "start_time": "08:00:00", "end_time": "12:00:00"},
    {"name": "Afternoon", "start_time": "13:00:00", "end_time": "17:00:00"},
    {"name": "Evening", "start_time": "17:00:00", "end_time": "21:00:00"},
]

SERVICES = [
    {"name": "Bath & Dry", "description": "Baño completo con secado", "price": Decimal("30.00"), "duration_minutes": 45},
    {"name": "Haircut", "description": "Corte de pelo según raza", "price": Decimal("45.00"), "duration_minutes": 60},
    {"name": "Nail Trim", "description": "Corte de uñas", "price": Decimal("12.50"), "duration_minutes": 15},
]

@router.post("/seed-data")
async def seed_data(db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Crea datos de prueba: admin, empleados, turnos, servicios y un
    calendario de lunes a viernes. Solo para desarrollo.
    Contraseña de todos los usuarios: abc12345
    """
    user_ids = {}
    for u in USERS:
        # Verificar si ya existe
        existing = await db.users.find_one({"email": u["email"]})
        if existing:
            user_ids[u["email"]] = str(existing["_id"])
            continue
        doc = dict(u, password_hash=hash_password("abc12345"), is_active=True, created_at=datetime.utcnow())
        res = await db.users.insert_one(doc)
        user_ids[u["email"]] = str(res.inserted_id)

    shift_ids = {}
    for st in SHIFT_TYPES:
        existing = await db.shift_types.find_one({"name": st["name"]})
        if existing:
            shift_ids[st["name"]] = str(existing["_id"])
            continue
        res = await db.shift_types.insert_one(dict(st))
        shift_ids[st["name"]] = str(res.inserted_id)

    for s in SERVICES:
        if not await db.services.find_one({"name": s["name"]}):
            await db.services.insert_one(dict(s, price=to_decimal128(s["price"]), is_active=True))

    # Laura de mañana y Carlos de tarde, de lunes (1) a viernes (5)
    plan = [
        (user_ids["laura@petspa.com"], shift_ids["Morning"]),
        (user_ids["carlos@petspa.com"], shift_ids["Afternoon"]),
    ]
    created_rows = 0
    for staff_id, shift_type_id in plan:
        for day in range(1, 6):
            key = {"staff_id": staff_id, "day_of_week": day, "shift_type_id": shift_type_id}
            if not await db.staff_schedule.find_one(key):
                await db.staff_schedule.insert_one(key)
                created_rows += 1

    return {
        "message": "Datos de prueba creados",
        "user_ids": user_ids,
        "shift_type_ids": shift_ids,
        "schedule_rows_created": created_rows,
    }
