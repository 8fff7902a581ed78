from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from .config import get_settings

_settings = get_settings()
_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db.users.create_index("email", unique=True)
    await db.customers.create_index("phone_number", unique=True)
    await db.pets.create_index([("owner_id", 1)])
    # Un mismo turno no puede asignarse dos veces al mismo empleado el mismo día
    await db.staff_schedule.create_index(
        [("staff_id", 1), ("day_of_week", 1), ("shift_type_id", 1)],
        unique=True,
        name="unique_schedule",
    )
    await db.staff_schedule.create_index([("day_of_week", 1)])
    await db.bookings.create_index([("booking_date", 1), ("booking_time", 1)])
    await db.bookings.create_index([("staff_id", 1), ("booking_date", 1)])
    await db.bookings.create_index([("customer_id", 1)])


async def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        _client = AsyncIOMotorClient(_settings.mongodb_uri)
        _db = _client[_settings.db_name]
        await ensure_indexes(_db)
    return _db
