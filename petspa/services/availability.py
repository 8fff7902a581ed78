"""
Availability Query: qué empleados pueden trabajar en una fecha y hora.

1. fecha -> día de la semana ISO (1 = lunes)
2. filas del calendario de ese día cuyo turno cubre la hora [inicio, fin)
3. empleados distintos y activos, como perfil público
"""
from datetime import date, time
from typing import Any, Dict, List

from ..utils import normalize_id, parse_date, parse_time
from .catalog import CatalogStore, staff_profile
from .shift_calendar import ShiftCalendar


class AvailabilityQuery:
    def __init__(self, calendar: ShiftCalendar, catalog: CatalogStore):
        self.calendar = calendar
        self.catalog = catalog

    async def available_staff(self, on: date | str, at: time | str) -> List[Dict[str, Any]]:
        day = parse_date(on).isoweekday()
        at = parse_time(at)
        staff_ids = await self.calendar.covering_staff_ids(day, at)
        if not staff_ids:
            return []
        staff = await self.catalog.active_staff_by_id(staff_ids)
        return sorted((staff_profile(s) for s in staff), key=lambda s: s.get("full_name") or "")

    async def is_available(self, staff_id: str, on: date | str, at: time | str) -> bool:
        available = await self.available_staff(on, at)
        return any(s["id"] == normalize_id(staff_id) for s in available)
