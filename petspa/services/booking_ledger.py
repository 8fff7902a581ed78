"""
Booking Ledger: alta, cambios de estado y consultas de reservas.

Una reserva se guarda como un único documento con sus líneas (details)
embebidas, de modo que reserva + líneas se escriben en un solo insert_one:
o se guarda todo o no se guarda nada.

Invariantes:
- el precio de cada línea es el precio del servicio en el momento de reservar
  y no se recalcula nunca;
- total_price == suma de los precios de las líneas;
- el estado inicial es siempre PENDING;
- cancel_reason solo lo rellena cancel_booking.
"""
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
import logging

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config import Settings, get_settings
from ..errors import InvalidInput, NotFound, ValidationFailure
from ..schemas.booking import BookingStatus
from ..utils import (
    format_time, maybe_object_id, normalize_id, parse_date, parse_time, to_decimal128, to_money,
)
from .availability import AvailabilityQuery
from .catalog import CatalogStore

logger = logging.getLogger(__name__)

Doc = Dict[str, Any]

# Solo se aplica con STRICT_STATUS_TRANSITIONS activado
ALLOWED: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.in_progress, BookingStatus.cancelled},
    BookingStatus.in_progress: {BookingStatus.completed, BookingStatus.cancelled},
    BookingStatus.completed: set(),
    BookingStatus.cancelled: set(),
}


def parse_status(value: Any) -> BookingStatus:
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(str(value).strip().upper())
    except ValueError:
        raise InvalidInput(f"Invalid booking status: {value!r}")


def booking_total(details: Iterable[Doc]) -> Decimal:
    return to_money(sum((to_money(d["price"]) for d in details), Decimal("0")))


class BookingLedger:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        catalog: CatalogStore,
        availability: Optional[AvailabilityQuery] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.availability = availability
        self.settings = settings or get_settings()

    # ---------- proyección ----------
    async def _project_many(self, docs: List[Doc]) -> List[Doc]:
        """
        Proyección desnormalizada: nombres de cliente, mascota, empleado y
        servicio resueltos en lote, para mostrar sin más consultas.
        """
        customers = await self.catalog.customers_by_id(d["customer_id"] for d in docs)
        pets = await self.catalog.pets_by_id(d["pet_id"] for d in docs)
        staff = await self.catalog.staff_by_id(d["staff_id"] for d in docs if d.get("staff_id"))
        services = await self.catalog.services_by_id(
            line["service_id"] for d in docs for line in d.get("details", [])
        )

        out = []
        for d in docs:
            c = customers.get(d["customer_id"], {})
            p = pets.get(d["pet_id"], {})
            s = staff.get(d.get("staff_id") or "", {})
            booking_id = str(d["_id"])
            lines = []
            for line in d.get("details", []):
                svc = services.get(line["service_id"], {})
                lines.append({
                    "id": line["id"],
                    "booking_id": booking_id,
                    "service_id": line["service_id"],
                    "service_name": svc.get("name"),
                    "duration_minutes": svc.get("duration_minutes"),
                    "price": to_money(line["price"]),
                })
            out.append({
                "id": booking_id,
                "customer_id": d["customer_id"],
                "customer_name": c.get("full_name"),
                "customer_phone": c.get("phone_number"),
                "pet_id": d["pet_id"],
                "pet_name": p.get("name"),
                "pet_species": p.get("species"),
                "staff_id": d.get("staff_id"),
                "staff_name": s.get("full_name"),
                "booking_date": d["booking_date"],
                "booking_time": d["booking_time"],
                "status": d["status"],
                "cancel_reason": d.get("cancel_reason"),
                "total_price": to_money(d["total_price"]),
                "created_at": d["created_at"],
                "services": lines,
            })
        return out

    async def _project(self, doc: Doc) -> Doc:
        return (await self._project_many([doc]))[0]

    async def _load(self, booking_id: str) -> Doc:
        oid = maybe_object_id(booking_id)
        doc = await self.db.bookings.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFound(f"Booking not found: {booking_id}")
        return doc

    # ---------- consultas ----------
    async def get_booking(self, booking_id: str) -> Doc:
        return await self._project(await self._load(booking_id))

    async def _find(self, query: Doc) -> List[Doc]:
        docs = await self.db.bookings.find(query).sort(
            [("booking_date", 1), ("booking_time", 1)]
        ).to_list(1000)
        return await self._project_many(docs)

    async def bookings_by_date(self, on: date | str) -> List[Doc]:
        return await self._find({"booking_date": parse_date(on).isoformat()})

    async def bookings_by_staff_and_date(self, staff_id: str, on: date | str) -> List[Doc]:
        return await self._find({"staff_id": normalize_id(staff_id), "booking_date": parse_date(on).isoformat()})

    async def bookings_by_customer(self, customer_id: str) -> List[Doc]:
        return await self._find({"customer_id": normalize_id(customer_id)})

    # ---------- mutaciones ----------
    async def create_booking(
        self,
        customer_id: str,
        pet_id: str,
        staff_id: Optional[str],
        booking_date: date | str,
        booking_time: time | str,
        service_ids: Iterable[str] = (),
    ) -> Doc:
        on = parse_date(booking_date, "booking_date")
        at = parse_time(booking_time, "booking_time")

        # Todas las validaciones antes de escribir nada
        customer = await self.catalog.get_customer(customer_id)
        pet = await self.catalog.get_pet(pet_id)
        staff = await self.catalog.get_staff(staff_id) if staff_id else None

        # Se guardan los ids tal como están en el catálogo, no como llegaron
        customer_id = str(customer["_id"])
        pet_id = str(pet["_id"])
        staff_id = str(staff["_id"]) if staff else None

        if self.settings.enforce_pet_ownership and pet.get("owner_id") != customer_id:
            raise ValidationFailure(f"Pet {pet_id} does not belong to customer {customer_id}")
        if staff_id and self.settings.enforce_staff_availability:
            if self.availability is None or not await self.availability.is_available(staff_id, on, at):
                raise ValidationFailure(f"Staff {staff_id} is not on shift at {on} {format_time(at)}")

        details = []
        for service_id in service_ids:
            service = await self.catalog.get_service(service_id)
            details.append({
                "id": str(ObjectId()),
                "service_id": str(service["_id"]),
                "price": to_decimal128(service["price"]),
            })

        doc = {
            "customer_id": customer_id,
            "pet_id": pet_id,
            "staff_id": staff_id,
            "booking_date": on.isoformat(),
            "booking_time": format_time(at),
            "status": BookingStatus.pending.value,
            "cancel_reason": None,
            "total_price": to_decimal128(booking_total(details)),
            "created_at": datetime.utcnow(),
            "details": details,
        }
        res = await self.db.bookings.insert_one(doc)
        created = await self.db.bookings.find_one({"_id": res.inserted_id})
        logger.info(
            "Booking %s created for customer %s (%d services, total %s)",
            res.inserted_id, customer_id, len(details), booking_total(details),
        )
        return await self._project(created)

    async def update_status(self, booking_id: str, status: Any) -> Doc:
        doc = await self._load(booking_id)
        new = parse_status(status)
        old = parse_status(doc["status"])

        if self.settings.strict_status_transitions:
            if new == old:
                return await self._project(doc)
            if new not in ALLOWED[old]:
                raise ValidationFailure(f"Transition not allowed: {old.value} -> {new.value}")

        updates: Doc = {"status": new.value}
        if new != BookingStatus.cancelled:
            updates["cancel_reason"] = None
        await self.db.bookings.update_one({"_id": doc["_id"]}, {"$set": updates})
        logger.info("Booking %s status %s -> %s", booking_id, old.value, new.value)
        return await self._project(await self._load(booking_id))

    async def cancel_booking(self, booking_id: str, reason: Optional[str]) -> Doc:
        doc = await self._load(booking_id)
        updates = {"status": BookingStatus.cancelled.value, "cancel_reason": reason}
        await self.db.bookings.update_one({"_id": doc["_id"]}, {"$set": updates})
        logger.info("Booking %s cancelled (%s)", booking_id, reason or "no reason")
        return await self._project(await self._load(booking_id))
