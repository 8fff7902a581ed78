# petspa/dependencies.py
# Construcción explícita de los colaboradores del motor para cada petición.
from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from .config import get_settings
from .db import get_db
from .services.availability import AvailabilityQuery
from .services.booking_ledger import BookingLedger
from .services.catalog import CatalogStore
from .services.shift_calendar import ShiftCalendar


def get_catalog(db: AsyncIOMotorDatabase = Depends(get_db)) -> CatalogStore:
    return CatalogStore(db)


def get_calendar(
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
) -> ShiftCalendar:
    return ShiftCalendar(db, catalog)


def get_availability(
    calendar: ShiftCalendar = Depends(get_calendar),
    catalog: CatalogStore = Depends(get_catalog),
) -> AvailabilityQuery:
    return AvailabilityQuery(calendar, catalog)


def get_ledger(
    db: AsyncIOMotorDatabase = Depends(get_db),
    catalog: CatalogStore = Depends(get_catalog),
    availability: AvailabilityQuery = Depends(get_availability),
) -> BookingLedger:
    return BookingLedger(db, catalog, availability, get_settings())
