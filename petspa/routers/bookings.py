# petspa/routers/bookings.py
from fastapi import APIRouter, Depends, Query, Request, status
from typing import List

from ..dependencies import get_catalog, get_ledger
from ..errors import NotFound
from ..schemas.booking import BookingCreate, BookingOut, StatusPatch, CancelIn
from ..security import get_current_user
from ..services.booking_ledger import BookingLedger
from ..services.catalog import CatalogStore
from ..middleware.rate_limit import apply_rate_limit

router = APIRouter()

# ---------- Consultas ----------

@router.get("", response_model=List[BookingOut])
async def list_bookings_by_date(
    date: str = Query(..., description="YYYY-MM-DD"),
    ledger: BookingLedger = Depends(get_ledger),
    current=Depends(get_current_user),
):
    return await ledger.bookings_by_date(date)

@router.get("/staff/{staff_id}", response_model=List[BookingOut])
async def list_staff_bookings(
    staff_id: str,
    date: str = Query(..., description="YYYY-MM-DD"),
    ledger: BookingLedger = Depends(get_ledger),
    current=Depends(get_current_user),
):
    return await ledger.bookings_by_staff_and_date(staff_id, date)

@router.get("/customer/{customer_id}", response_model=List[BookingOut])
async def list_customer_bookings(
    customer_id: str,
    ledger: BookingLedger = Depends(get_ledger),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    if not await catalog.customer_exists(customer_id):
        raise NotFound(f"Customer not found: {customer_id}")
    return await ledger.bookings_by_customer(customer_id)

@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: str,
    ledger: BookingLedger = Depends(get_ledger),
    current=Depends(get_current_user),
):
    return await ledger.get_booking(booking_id)

# ---------- Mutaciones ----------

@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: Request,
    payload: BookingCreate,
    ledger: BookingLedger = Depends(get_ledger),
    current=Depends(get_current_user),
):
    # Rate limiting: máximo 30 reservas por minuto por IP
    apply_rate_limit(request, "30/minute")
    return await ledger.create_booking(
        customer_id=payload.customer_id,
        pet_id=payload.pet_id,
        staff_id=payload.staff_id,
        booking_date=payload.booking_date,
        booking_time=payload.booking_time,
        service_ids=payload.service_ids,
    )

@router.patch("/{booking_id}/status", response_model=BookingOut)
async def patch_status(
    body: StatusPatch,
    booking_id: str,
    ledger: BookingLedger = Depends(get_ledger),
    current=Depends(get_current_user),
):
    return await ledger.update_status(booking_id, body.status)

@router.post("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    body: CancelIn,
    booking_id: str,
    ledger: BookingLedger = Depends(get_ledger),
    current=Depends(get_current_user),
):
    return await ledger.cancel_booking(booking_id, body.reason)
