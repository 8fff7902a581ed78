"""
Catalog Store: búsquedas por id de clientes, mascotas, servicios, empleados
y tipos de turno.

Todas las funciones get_* lanzan NotFound si el id no existe o no es un
ObjectId válido; las exists_* devuelven bool. Devuelve los documentos crudos
de Mongo (con _id), la proyección la hace cada consumidor.
"""
from typing import Any, Dict, Iterable, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import NotFound
from ..utils import maybe_object_id, object_ids, to_id

Doc = Dict[str, Any]


class CatalogStore:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def _get(self, collection: str, value: Any, label: str) -> Doc:
        oid = maybe_object_id(value)
        doc = await self.db[collection].find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFound(f"{label} not found: {value}")
        return doc

    async def _exists(self, collection: str, value: Any) -> bool:
        oid = maybe_object_id(value)
        if oid is None:
            return False
        return await self.db[collection].count_documents({"_id": oid}, limit=1) > 0

    async def _many(self, collection: str, values: Iterable[Any]) -> Dict[str, Doc]:
        oids = object_ids(values)
        if not oids:
            return {}
        docs = await self.db[collection].find({"_id": {"$in": oids}}).to_list(len(oids))
        return {str(d["_id"]): d for d in docs}

    # ---------- lookups ----------
    async def get_customer(self, customer_id: Any) -> Doc:
        return await self._get("customers", customer_id, "Customer")

    async def get_pet(self, pet_id: Any) -> Doc:
        return await self._get("pets", pet_id, "Pet")

    async def get_service(self, service_id: Any) -> Doc:
        return await self._get("services", service_id, "Service")

    async def get_staff(self, staff_id: Any) -> Doc:
        return await self._get("users", staff_id, "Staff")

    async def get_shift_type(self, shift_type_id: Any) -> Doc:
        return await self._get("shift_types", shift_type_id, "Shift type")

    async def customer_exists(self, customer_id: Any) -> bool:
        return await self._exists("customers", customer_id)

    async def staff_exists(self, staff_id: Any) -> bool:
        return await self._exists("users", staff_id)

    # ---------- lecturas en lote (para proyecciones) ----------
    async def customers_by_id(self, ids: Iterable[Any]) -> Dict[str, Doc]:
        return await self._many("customers", ids)

    async def pets_by_id(self, ids: Iterable[Any]) -> Dict[str, Doc]:
        return await self._many("pets", ids)

    async def services_by_id(self, ids: Iterable[Any]) -> Dict[str, Doc]:
        return await self._many("services", ids)

    async def staff_by_id(self, ids: Iterable[Any]) -> Dict[str, Doc]:
        return await self._many("users", ids)

    async def shift_types_by_id(self, ids: Iterable[Any]) -> Dict[str, Doc]:
        return await self._many("shift_types", ids)

    async def active_staff_by_id(self, ids: Iterable[Any]) -> List[Doc]:
        oids = object_ids(ids)
        if not oids:
            return []
        return await self.db.users.find(
            {"_id": {"$in": oids}, "is_active": True}
        ).to_list(len(oids))


def staff_profile(doc: Doc) -> Doc:
    """Perfil público de un empleado: sin password_hash."""
    out = to_id(doc)
    out.pop("password_hash", None)
    out.setdefault("role", "STAFF")
    out["is_active"] = bool(out.get("is_active", True))
    return out
