# petspa/utils.py
from typing import Any, Dict, Iterable, Optional
from bson import ObjectId
from bson.decimal128 import Decimal128
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from .errors import InvalidInput

CENTS = Decimal("0.01")

# ISO-8601: 1 = lunes ... 7 = domingo
DAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}


def _convert(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, dict):
        return to_id(value)
    if isinstance(value, list):
        return [_convert(item) for item in value]
    return value


def to_id(doc: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Convierte _id -> id (str), los ObjectIds a strings, los datetime a ISO
    y los Decimal128 a Decimal.
    Si doc es None, devuelve {}.
    """
    if doc is None:
        return {}
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    for key, value in d.items():
        d[key] = _convert(value)
    return d


# ==================== Utilidades de Base de Datos ====================

def maybe_object_id(value: Any) -> Optional[ObjectId]:
    """String u ObjectId -> ObjectId, o None: un id mal formado no existe."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def normalize_id(value: Any) -> Any:
    """Forma canónica (hex en minúsculas) de un id válido; si no lo es, se deja igual."""
    oid = maybe_object_id(value)
    return str(oid) if oid is not None else value


def object_ids(values: Iterable[Any]) -> list[ObjectId]:
    out = []
    for v in values:
        oid = maybe_object_id(v)
        if oid is not None and oid not in out:
            out.append(oid)
    return out


# ==================== Fechas y horas ====================

def parse_date(value: date | str, field_name: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidInput(f"Invalid {field_name}: {value!r}. Use YYYY-MM-DD.")


def parse_time(value: time | str, field_name: str = "time") -> time:
    """
    Hora local del negocio, sin zona horaria y con precisión de segundos.
    Los turnos se guardan sin offset, así que una hora con offset no se
    puede comparar con ellos.
    """
    if isinstance(value, time):
        parsed = value
    else:
        try:
            parsed = time.fromisoformat(str(value).strip())
        except ValueError:
            raise InvalidInput(f"Invalid {field_name}: {value!r}. Use HH:MM:SS.")
    if parsed.tzinfo is not None:
        raise InvalidInput(f"Invalid {field_name}: {value!r}. Use a local time without UTC offset.")
    if parsed.microsecond:
        raise InvalidInput(f"Invalid {field_name}: {value!r}. Use whole seconds.")
    return parsed


def format_time(value: time) -> str:
    return value.isoformat(timespec="seconds")


def parse_day_of_week(value: Any) -> int:
    try:
        day = int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid day_of_week: {value!r}")
    if day not in DAY_NAMES:
        raise InvalidInput(f"Invalid day_of_week: {day}. Use 1 (Monday) to 7 (Sunday).")
    return day


# ==================== Dinero ====================

def to_money(value: Any) -> Decimal:
    """Decimal con dos decimales; nunca pasa por float."""
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise InvalidInput(f"Invalid amount: {value!r}")
    return amount.quantize(CENTS)


def to_decimal128(value: Any) -> Decimal128:
    return Decimal128(to_money(value))
