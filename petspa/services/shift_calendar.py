"""
Calendario de turnos semanal.

Cada fila de staff_schedule es un triple (staff_id, shift_type_id, day_of_week)
que se repite todas las semanas. day_of_week sigue ISO-8601 (1 = lunes).
Un tipo de turno es una ventana horaria semiabierta [start_time, end_time).
"""
from datetime import time
from typing import Any, Dict, List
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..errors import Conflict, InvalidInput, NotFound
from ..utils import (
    DAY_NAMES, format_time, maybe_object_id, normalize_id, parse_day_of_week, parse_time,
)
from .catalog import CatalogStore

logger = logging.getLogger(__name__)

Doc = Dict[str, Any]


def shift_covers(start: time, end: time, at: time) -> bool:
    # Fin exclusivo: a las 12:00 un turno 09:00-12:00 ya no cubre
    return start <= at < end


def _shift_type_out(doc: Doc) -> Doc:
    return {
        "id": str(doc["_id"]),
        "name": doc.get("name", ""),
        "start_time": doc.get("start_time"),
        "end_time": doc.get("end_time"),
    }


class ShiftCalendar:
    def __init__(self, db: AsyncIOMotorDatabase, catalog: CatalogStore):
        self.db = db
        self.catalog = catalog

    # ---------- tipos de turno ----------
    async def list_shift_types(self) -> List[Doc]:
        docs = await self.db.shift_types.find().sort("start_time", 1).to_list(100)
        return [_shift_type_out(d) for d in docs]

    async def create_shift_type(self, name: str, start_time: Any, end_time: Any) -> Doc:
        start = parse_time(start_time, "start_time")
        end = parse_time(end_time, "end_time")
        if end <= start:
            raise InvalidInput("end_time must be after start_time")
        doc = {"name": name, "start_time": format_time(start), "end_time": format_time(end)}
        res = await self.db.shift_types.insert_one(doc)
        doc["_id"] = res.inserted_id
        logger.info("Shift type %s created (%s-%s)", name, doc["start_time"], doc["end_time"])
        return _shift_type_out(doc)

    # ---------- consultas ----------
    async def _project(self, rows: List[Doc]) -> List[Doc]:
        staff = await self.catalog.staff_by_id(r["staff_id"] for r in rows)
        shifts = await self.catalog.shift_types_by_id(r["shift_type_id"] for r in rows)
        out = []
        for r in rows:
            s = staff.get(r["staff_id"], {})
            st = shifts.get(r["shift_type_id"], {})
            out.append({
                "id": str(r["_id"]),
                "staff_id": r["staff_id"],
                "staff_name": s.get("full_name"),
                "shift_type_id": r["shift_type_id"],
                "shift_name": st.get("name"),
                "start_time": st.get("start_time"),
                "end_time": st.get("end_time"),
                "day_of_week": r["day_of_week"],
                "day_name": DAY_NAMES[r["day_of_week"]],
            })
        return out

    async def schedule_for_staff(self, staff_id: str) -> List[Doc]:
        rows = await self.db.staff_schedule.find({"staff_id": normalize_id(staff_id)}).sort("day_of_week", 1).to_list(100)
        return await self._project(rows)

    async def staff_by_day(self, day_of_week: Any) -> List[Doc]:
        """Entradas de empleados activos que trabajan ese día de la semana."""
        day = parse_day_of_week(day_of_week)
        rows = await self.db.staff_schedule.find({"day_of_week": day}).to_list(1000)
        active = await self.catalog.active_staff_by_id(r["staff_id"] for r in rows)
        active_ids = {str(s["_id"]) for s in active}
        return await self._project([r for r in rows if r["staff_id"] in active_ids])

    async def covering_staff_ids(self, day_of_week: int, at: time) -> List[str]:
        """
        Ids (sin repetir, en orden de aparición) de los empleados con algún
        turno ese día que cubra la hora `at`. No filtra por is_active.
        """
        rows = await self.db.staff_schedule.find({"day_of_week": day_of_week}).to_list(1000)
        if not rows:
            return []
        shifts = await self.catalog.shift_types_by_id(r["shift_type_id"] for r in rows)
        out: List[str] = []
        for r in rows:
            st = shifts.get(r["shift_type_id"])
            if not st:
                continue
            start = time.fromisoformat(st["start_time"])
            end = time.fromisoformat(st["end_time"])
            if shift_covers(start, end, at) and r["staff_id"] not in out:
                out.append(r["staff_id"])
        return out

    # ---------- mutaciones ----------
    async def assign_shift(self, staff_id: str, shift_type_id: str, day_of_week: Any) -> Doc:
        day = parse_day_of_week(day_of_week)
        staff = await self.catalog.get_staff(staff_id)
        shift = await self.catalog.get_shift_type(shift_type_id)

        # La clave se arma con los ids guardados, no con lo que escribió el cliente
        key = {"staff_id": str(staff["_id"]), "day_of_week": day, "shift_type_id": str(shift["_id"])}
        if await self.db.staff_schedule.count_documents(key, limit=1):
            logger.warning("Duplicate shift assignment rejected: %s", key)
            raise Conflict("Schedule already exists for this staff, day, and shift")

        doc = dict(key)
        try:
            res = await self.db.staff_schedule.insert_one(doc)
        except DuplicateKeyError:
            # Otra petición insertó el mismo triple entre el check y el insert
            raise Conflict("Schedule already exists for this staff, day, and shift")
        doc["_id"] = res.inserted_id
        logger.info("Shift %s assigned to staff %s on day %s", key["shift_type_id"], key["staff_id"], day)
        return (await self._project([doc]))[0]

    async def remove_schedule(self, schedule_id: str) -> None:
        oid = maybe_object_id(schedule_id)
        res = await self.db.staff_schedule.delete_one({"_id": oid}) if oid else None
        if res is None or res.deleted_count == 0:
            raise NotFound(f"Schedule not found: {schedule_id}")
        logger.info("Schedule %s removed", schedule_id)

    async def clear_staff_schedule(self, staff_id: str) -> int:
        res = await self.db.staff_schedule.delete_many({"staff_id": normalize_id(staff_id)})
        logger.info("Cleared %d schedule rows for staff %s", res.deleted_count, staff_id)
        return res.deleted_count
