"""
Tests del Booking Ledger: precios congelados, totales, estados y atomicidad
"""
from decimal import Decimal

import pytest
from bson import ObjectId

from petspa.config import Settings
from petspa.errors import InvalidInput, NotFound, ValidationFailure
from petspa.services.booking_ledger import BookingLedger, booking_total
from petspa.utils import to_decimal128


@pytest.fixture
async def booking_setup(make_customer, make_pet, make_service):
    customer_id = await make_customer()
    pet_id = await make_pet(customer_id)
    s1 = await make_service("Bath", "30.00", duration_minutes=15)
    s2 = await make_service("Nail Trim", "20.00", duration_minutes=10)
    return {"customer_id": customer_id, "pet_id": pet_id, "s1": s1, "s2": s2}


@pytest.mark.asyncio
async def test_create_booking_scenario(ledger, booking_setup):
    b = await ledger.create_booking(
        booking_setup["customer_id"], booking_setup["pet_id"], None,
        "2024-06-10", "10:00", [booking_setup["s1"], booking_setup["s2"]],
    )
    assert b["status"] == "PENDING"
    assert b["total_price"] == Decimal("50.00")
    assert len(b["services"]) == 2
    assert b["staff_id"] is None and b["staff_name"] is None
    assert b["booking_date"] == "2024-06-10"
    assert b["booking_time"] == "10:00:00"
    assert b["cancel_reason"] is None
    # Proyección desnormalizada
    assert b["customer_name"] == "Marta Gil"
    assert b["pet_name"] == "Toby"
    assert [line["service_name"] for line in b["services"]] == ["Bath", "Nail Trim"]
    assert [line["duration_minutes"] for line in b["services"]] == [15, 10]
    assert all(line["booking_id"] == b["id"] for line in b["services"])


@pytest.mark.asyncio
async def test_total_equals_sum_of_lines(ledger, booking_setup):
    ids = [booking_setup["s1"], booking_setup["s2"], booking_setup["s1"]]
    b = await ledger.create_booking(
        booking_setup["customer_id"], booking_setup["pet_id"], None, "2024-06-10", "10:00:00", ids,
    )
    assert b["total_price"] == sum(line["price"] for line in b["services"])
    assert b["total_price"] == Decimal("80.00")


@pytest.mark.asyncio
async def test_booking_without_services_is_free(ledger, booking_setup):
    b = await ledger.create_booking(
        booking_setup["customer_id"], booking_setup["pet_id"], None, "2024-06-10", "10:00", [],
    )
    assert b["total_price"] == Decimal("0.00")
    assert b["services"] == []


@pytest.mark.asyncio
async def test_line_price_is_snapshotted(ledger, test_db, make_customer, make_pet, make_service):
    customer_id = await make_customer()
    pet_id = await make_pet(customer_id)
    service_id = await make_service("Haircut", "50.00")
    b = await ledger.create_booking(customer_id, pet_id, None, "2024-06-10", "10:00", [service_id])

    await test_db.services.update_one(
        {"_id": ObjectId(service_id)}, {"$set": {"price": to_decimal128(Decimal("80.00"))}}
    )

    again = await ledger.get_booking(b["id"])
    assert again["services"][0]["price"] == Decimal("50.00")
    assert again["total_price"] == Decimal("50.00")


@pytest.mark.asyncio
async def test_inactive_service_still_resolves_in_old_bookings(ledger, test_db, booking_setup):
    b = await ledger.create_booking(
        booking_setup["customer_id"], booking_setup["pet_id"], None,
        "2024-06-10", "10:00", [booking_setup["s1"]],
    )
    await test_db.services.update_one({"_id": ObjectId(booking_setup["s1"])}, {"$set": {"is_active": False}})
    again = await ledger.get_booking(b["id"])
    assert again["services"][0]["service_name"] == "Bath"


@pytest.mark.asyncio
async def test_unknown_pet_leaves_nothing_persisted(ledger, test_db, booking_setup):
    with pytest.raises(NotFound):
        await ledger.create_booking(
            booking_setup["customer_id"], str(ObjectId()), None,
            "2024-06-10", "10:00", [booking_setup["s1"]],
        )
    assert await test_db.bookings.count_documents({}) == 0


@pytest.mark.asyncio
async def test_unknown_service_leaves_nothing_persisted(ledger, test_db, booking_setup):
    with pytest.raises(NotFound):
        await ledger.create_booking(
            booking_setup["customer_id"], booking_setup["pet_id"], None,
            "2024-06-10", "10:00", [booking_setup["s1"], str(ObjectId())],
        )
    assert await test_db.bookings.count_documents({}) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["customer", "staff"])
async def test_unknown_references_are_not_found(ledger, booking_setup, field):
    args = dict(
        customer_id=booking_setup["customer_id"],
        pet_id=booking_setup["pet_id"],
        staff_id=None,
        booking_date="2024-06-10",
        booking_time="10:00",
        service_ids=[],
    )
    args[f"{field}_id"] = "not-an-id" if field == "customer" else str(ObjectId())
    with pytest.raises(NotFound):
        await ledger.create_booking(**args)


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_date,bad_time", [
    ("2024-13-01", "10:00"), ("10/06/2024", "10:00"), ("2024-06-10", "25:00"), ("2024-06-10", "ten"),
    ("2024-06-10", "10:00:00+02:00"), ("2024-06-10", "10:00:00.250"),
])
async def test_malformed_date_or_time_is_invalid_input(ledger, test_db, booking_setup, bad_date, bad_time):
    with pytest.raises(InvalidInput):
        await ledger.create_booking(
            booking_setup["customer_id"], booking_setup["pet_id"], None, bad_date, bad_time, [],
        )
    assert await test_db.bookings.count_documents({}) == 0


@pytest.mark.asyncio
async def test_staff_can_be_booked_outside_shift_by_default(ledger, booking_setup, make_staff):
    staff_id = await make_staff()
    b = await ledger.create_booking(
        booking_setup["customer_id"], booking_setup["pet_id"], staff_id, "2024-06-16", "23:00", [],
    )
    assert b["staff_id"] == staff_id
    assert b["staff_name"] == "Laura Martín"


@pytest.mark.asyncio
async def test_foreign_pet_accepted_by_default(ledger, make_customer, make_pet):
    c1 = await make_customer()
    c2 = await make_customer(full_name="Otro", phone_number="+34622222222")
    pet_of_c2 = await make_pet(c2)
    b = await ledger.create_booking(c1, pet_of_c2, None, "2024-06-10", "10:00", [])
    assert b["customer_id"] == c1 and b["pet_id"] == pet_of_c2


@pytest.mark.asyncio
async def test_pet_ownership_enforced_when_enabled(test_db, catalog, availability, make_customer, make_pet):
    strict = BookingLedger(test_db, catalog, availability, Settings(enforce_pet_ownership=True))
    c1 = await make_customer()
    c2 = await make_customer(full_name="Otro", phone_number="+34622222222")
    pet_of_c2 = await make_pet(c2)
    with pytest.raises(ValidationFailure):
        await strict.create_booking(c1, pet_of_c2, None, "2024-06-10", "10:00", [])
    assert await test_db.bookings.count_documents({}) == 0


@pytest.mark.asyncio
async def test_staff_availability_enforced_when_enabled(
    test_db, catalog, calendar, availability, booking_setup, make_staff, make_shift_type,
):
    strict = BookingLedger(test_db, catalog, availability, Settings(enforce_staff_availability=True))
    staff_id = await make_staff()
    morning = await make_shift_type("Morning", "09:00:00", "12:00:00")
    await calendar.assign_shift(staff_id, morning, 1)

    ok = await strict.create_booking(
        booking_setup["customer_id"], booking_setup["pet_id"], staff_id, "2024-06-10", "10:00", [],
    )
    assert ok["staff_id"] == staff_id
    with pytest.raises(ValidationFailure):
        await strict.create_booking(
            booking_setup["customer_id"], booking_setup["pet_id"], staff_id, "2024-06-10", "12:00", [],
        )


# ---------- estados ----------

@pytest.fixture
async def booking(ledger, booking_setup):
    return await ledger.create_booking(
        booking_setup["customer_id"], booking_setup["pet_id"], None,
        "2024-06-10", "10:00", [booking_setup["s1"]],
    )


@pytest.mark.asyncio
async def test_forward_status_path(ledger, booking):
    for status in ["CONFIRMED", "IN_PROGRESS", "COMPLETED"]:
        b = await ledger.update_status(booking["id"], status)
        assert b["status"] == status
    assert b["total_price"] == booking["total_price"]
    assert b["created_at"] == booking["created_at"]


@pytest.mark.asyncio
async def test_status_overwrite_is_unconditional_by_default(ledger, booking):
    await ledger.update_status(booking["id"], "COMPLETED")
    b = await ledger.update_status(booking["id"], "PENDING")
    assert b["status"] == "PENDING"


@pytest.mark.asyncio
async def test_status_name_is_case_insensitive(ledger, booking):
    b = await ledger.update_status(booking["id"], "confirmed")
    assert b["status"] == "CONFIRMED"


@pytest.mark.asyncio
async def test_unknown_status_is_invalid_input(ledger, test_db, booking):
    with pytest.raises(InvalidInput):
        await ledger.update_status(booking["id"], "DONE")
    stored = await test_db.bookings.find_one({"_id": ObjectId(booking["id"])})
    assert stored["status"] == "PENDING"


@pytest.mark.asyncio
async def test_update_status_unknown_booking(ledger):
    with pytest.raises(NotFound):
        await ledger.update_status(str(ObjectId()), "CONFIRMED")


@pytest.mark.asyncio
async def test_cancel_paths(ledger, booking):
    b = await ledger.update_status(booking["id"], "CANCELLED")
    assert b["status"] == "CANCELLED"
    assert b["cancel_reason"] is None

    b = await ledger.cancel_booking(booking["id"], "Dog is sick")
    assert b["status"] == "CANCELLED"
    assert b["cancel_reason"] == "Dog is sick"

    again = await ledger.get_booking(booking["id"])
    assert again["cancel_reason"] == "Dog is sick"


@pytest.mark.asyncio
async def test_reason_cleared_when_leaving_cancelled(ledger, booking):
    await ledger.cancel_booking(booking["id"], "Changed mind")
    b = await ledger.update_status(booking["id"], "CONFIRMED")
    assert b["cancel_reason"] is None


@pytest.mark.asyncio
async def test_cancel_unknown_booking(ledger):
    with pytest.raises(NotFound):
        await ledger.cancel_booking("nope", "reason")


@pytest.mark.asyncio
async def test_strict_transitions(test_db, catalog, availability, booking):
    strict = BookingLedger(test_db, catalog, availability, Settings(strict_status_transitions=True))
    with pytest.raises(ValidationFailure):
        await strict.update_status(booking["id"], "COMPLETED")
    # Mismo estado: no-op
    b = await strict.update_status(booking["id"], "PENDING")
    assert b["status"] == "PENDING"
    await strict.update_status(booking["id"], "CONFIRMED")
    await strict.update_status(booking["id"], "IN_PROGRESS")
    await strict.update_status(booking["id"], "COMPLETED")
    with pytest.raises(ValidationFailure):
        await strict.update_status(booking["id"], "CANCELLED")


# ---------- consultas ----------

@pytest.mark.asyncio
async def test_queries_by_date_staff_and_customer(ledger, booking_setup, make_staff, make_customer, make_pet):
    staff_id = await make_staff()
    c, p = booking_setup["customer_id"], booking_setup["pet_id"]
    late = await ledger.create_booking(c, p, staff_id, "2024-06-10", "15:00", [])
    early = await ledger.create_booking(c, p, None, "2024-06-10", "09:30", [])
    await ledger.create_booking(c, p, staff_id, "2024-06-11", "09:00", [])
    other_c = await make_customer(full_name="Otro", phone_number="+34633333333")
    other_p = await make_pet(other_c)
    await ledger.create_booking(other_c, other_p, None, "2024-06-10", "11:00", [])

    by_date = await ledger.bookings_by_date("2024-06-10")
    assert [b["booking_time"] for b in by_date] == ["09:30:00", "11:00:00", "15:00:00"]
    assert by_date[0]["id"] == early["id"]

    by_staff = await ledger.bookings_by_staff_and_date(staff_id, "2024-06-10")
    assert [b["id"] for b in by_staff] == [late["id"]]

    by_customer = await ledger.bookings_by_customer(c)
    assert len(by_customer) == 3
    assert [b["booking_date"] for b in by_customer] == ["2024-06-10", "2024-06-10", "2024-06-11"]

    assert await ledger.bookings_by_date("2024-07-01") == []


@pytest.mark.asyncio
async def test_query_with_malformed_date(ledger):
    with pytest.raises(InvalidInput):
        await ledger.bookings_by_date("yesterday")


def test_booking_total_uses_fixed_point():
    lines = [{"price": to_decimal128(Decimal("0.10"))} for _ in range(3)]
    assert booking_total(lines) == Decimal("0.30")
    assert booking_total([]) == Decimal("0.00")


@pytest.mark.asyncio
async def test_ids_are_stored_in_canonical_form(ledger, booking_setup, make_staff):
    staff_id = await make_staff()
    c, p = booking_setup["customer_id"], booking_setup["pet_id"]
    created = await ledger.create_booking(c.upper(), p.upper(), staff_id.upper(), "2024-06-10", "10:00", [])
    assert (created["customer_id"], created["pet_id"], created["staff_id"]) == (c, p, staff_id)

    assert [b["id"] for b in await ledger.bookings_by_customer(c)] == [created["id"]]
    assert [b["id"] for b in await ledger.bookings_by_customer(c.upper())] == [created["id"]]
    by_staff = await ledger.bookings_by_staff_and_date(staff_id.upper(), "2024-06-10")
    assert [b["id"] for b in by_staff] == [created["id"]]
