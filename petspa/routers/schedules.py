# petspa/routers/schedules.py
from fastapi import APIRouter, Depends, Query, status
from typing import List

from ..dependencies import get_availability, get_calendar, get_catalog
from ..errors import NotFound
from ..schemas.schedule import ShiftTypeCreate, ShiftTypeOut, ScheduleAssign, StaffScheduleOut
from ..schemas.user import UserOut
from ..security import get_current_user, require_admin
from ..services.availability import AvailabilityQuery
from ..services.catalog import CatalogStore
from ..services.shift_calendar import ShiftCalendar

router = APIRouter()

# ---------- Tipos de turno ----------

@router.get("/shift-types", response_model=List[ShiftTypeOut])
async def list_shift_types(
    calendar: ShiftCalendar = Depends(get_calendar),
    current=Depends(get_current_user),
):
    return await calendar.list_shift_types()

@router.post("/shift-types", response_model=ShiftTypeOut, status_code=status.HTTP_201_CREATED)
async def create_shift_type(
    payload: ShiftTypeCreate,
    calendar: ShiftCalendar = Depends(get_calendar),
    admin=Depends(require_admin),
):
    return await calendar.create_shift_type(payload.name, payload.start_time, payload.end_time)

# ---------- Disponibilidad ----------

@router.get("/available", response_model=List[UserOut])
async def available_staff(
    date: str = Query(..., description="YYYY-MM-DD"),
    time: str = Query(..., description="HH:MM:SS"),
    availability: AvailabilityQuery = Depends(get_availability),
    current=Depends(get_current_user),
):
    return await availability.available_staff(date, time)

# ---------- Calendario ----------

@router.get("/staff/{staff_id}", response_model=List[StaffScheduleOut])
async def staff_schedule(
    staff_id: str,
    calendar: ShiftCalendar = Depends(get_calendar),
    catalog: CatalogStore = Depends(get_catalog),
    current=Depends(get_current_user),
):
    if not await catalog.staff_exists(staff_id):
        raise NotFound(f"Staff not found: {staff_id}")
    return await calendar.schedule_for_staff(staff_id)

@router.get("/day/{day_of_week}", response_model=List[StaffScheduleOut])
async def staff_by_day(
    day_of_week: str,
    calendar: ShiftCalendar = Depends(get_calendar),
    current=Depends(get_current_user),
):
    return await calendar.staff_by_day(day_of_week)

@router.post("", response_model=StaffScheduleOut, status_code=status.HTTP_201_CREATED)
async def assign_shift(
    payload: ScheduleAssign,
    calendar: ShiftCalendar = Depends(get_calendar),
    admin=Depends(require_admin),
):
    return await calendar.assign_shift(payload.staff_id, payload.shift_type_id, payload.day_of_week)

@router.delete("/staff/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_staff_schedule(
    staff_id: str,
    calendar: ShiftCalendar = Depends(get_calendar),
    admin=Depends(require_admin),
):
    await calendar.clear_staff_schedule(staff_id)

@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_schedule(
    schedule_id: str,
    calendar: ShiftCalendar = Depends(get_calendar),
    admin=Depends(require_admin),
):
    await calendar.remove_schedule(schedule_id)
