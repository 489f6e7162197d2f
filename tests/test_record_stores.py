"""Record store behavior shared by the memory and SQL backends."""
import asyncio
from datetime import date, timedelta

import pytest

from app.shared.exceptions import ConflictError, NotFoundError, StaleRecordError
from app.system_models.appointment_model.appointment_schemas import Appointment, AppointmentPatch
from tests.utils.fakes import SLOT_DATE, make_appointment


@pytest.mark.asyncio
async def test_insert_and_get_round_trip(store):
    saved = await store.insert_appointment(make_appointment("apt-1"))

    fetched = await store.get_appointment("apt-1")

    assert saved.id == "apt-1"
    assert fetched is not None
    assert fetched.status == "pending"
    assert fetched.service_type.duration_minutes == 15
    assert fetched.patient_attended is None


@pytest.mark.asyncio
async def test_get_unknown_id_returns_none(store):
    assert await store.get_appointment("apt-missing") is None


@pytest.mark.asyncio
async def test_insert_into_held_slot_raises_conflict(store):
    await store.insert_appointment(make_appointment("apt-1"))

    with pytest.raises(ConflictError):
        await store.insert_appointment(make_appointment("apt-2"))

    assert await store.get_appointment("apt-2") is None


@pytest.mark.asyncio
async def test_cancelled_slot_can_be_rebooked(store):
    await store.insert_appointment(make_appointment("apt-1"))
    await store.set_appointment_status("apt-1", "cancelled")

    assert await store.is_slot_taken(SLOT_DATE, "13:00") is False
    await store.insert_appointment(make_appointment("apt-2"))

    assert await store.is_slot_taken(SLOT_DATE, "13:00") is True


@pytest.mark.asyncio
async def test_listing_is_ordered_by_date_then_time(store):
    await store.insert_appointment(make_appointment("apt-c", date(2025, 3, 11), "09:00"))
    await store.insert_appointment(make_appointment("apt-b", date(2025, 3, 10), "15:00"))
    await store.insert_appointment(make_appointment("apt-a", date(2025, 3, 10), "09:00"))
    await store.set_appointment_status("apt-b", "cancelled")

    all_ids = [a.id for a in await store.list_appointments()]
    active_ids = [a.id for a in await store.list_active_appointments()]

    assert all_ids == ["apt-a", "apt-b", "apt-c"]
    assert active_ids == ["apt-a", "apt-c"]


@pytest.mark.asyncio
async def test_disjoint_partial_updates_accumulate(store):
    await store.insert_appointment(make_appointment("apt-1"))

    await store.update_appointment("apt-1", AppointmentPatch(doctor_notes="Mobility improved"))
    updated = await store.update_appointment("apt-1", AppointmentPatch(status="confirmed"))

    assert updated.doctor_notes == "Mobility improved"
    assert updated.status == "confirmed"
    assert updated.patient_name == "Test Patient"


@pytest.mark.asyncio
async def test_update_unknown_id_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await store.update_appointment("apt-missing", AppointmentPatch(doctor_notes="x"))


@pytest.mark.asyncio
async def test_reviving_cancelled_record_into_held_slot_conflicts(store):
    await store.insert_appointment(make_appointment("apt-1"))
    await store.set_appointment_status("apt-1", "cancelled")
    await store.insert_appointment(make_appointment("apt-2"))

    with pytest.raises(ConflictError):
        await store.set_appointment_status("apt-1", "pending")

    assert (await store.get_appointment("apt-1")).status == "cancelled"


@pytest.mark.asyncio
async def test_concurrent_bookings_have_one_winner(store):
    attempts = [make_appointment(f"apt-{i}") for i in range(5)]

    results = await asyncio.gather(
        *(store.insert_appointment(a) for a in attempts),
        return_exceptions=True,
    )

    winners = [r for r in results if isinstance(r, Appointment)]
    losers = [r for r in results if isinstance(r, ConflictError)]
    assert len(winners) == 1
    assert len(losers) == 4
    assert len(await store.list_active_appointments()) == 1


@pytest.mark.asyncio
async def test_admin_accounts(store):
    created = await store.create_admin("admin", "admin@clinic.local", "hash", "admin", "Administrator")

    assert created.id is not None
    assert not hasattr(created, "password_hash")
    assert await store.count_admins() == 1

    with pytest.raises(ConflictError):
        await store.create_admin("admin", "other@clinic.local", "hash", "viewer", "Dup")

    assert await store.set_admin_active(created.id, False) is True
    assert (await store.get_admin_by_username("admin")).is_active is False
    assert await store.set_admin_active(9999, False) is False


@pytest.mark.asyncio
async def test_touch_last_login(store):
    created = await store.create_admin("viewer", "viewer@clinic.local", "hash", "viewer", "Viewer")
    assert created.last_login is None

    await store.touch_last_login(created.id)

    assert (await store.get_admin_by_id(created.id)).last_login is not None


@pytest.mark.asyncio
async def test_status_write_is_guarded_by_expected_status(store):
    await store.insert_appointment(make_appointment("apt-1"))
    await store.set_appointment_status("apt-1", "cancelled", expected_status="pending")

    with pytest.raises(StaleRecordError):
        await store.set_appointment_status("apt-1", "completed", expected_status="pending")

    assert (await store.get_appointment("apt-1")).status == "cancelled"


@pytest.mark.asyncio
async def test_expected_status_on_unknown_id_is_not_found(store):
    with pytest.raises(NotFoundError):
        await store.set_appointment_status("apt-missing", "cancelled", expected_status="pending")


@pytest.mark.asyncio
async def test_timestamps_read_back_as_utc(store):
    await store.insert_appointment(make_appointment("apt-1"))
    updated = await store.update_appointment("apt-1", AppointmentPatch(doctor_notes="x"))
    admin = await store.create_admin("viewer", "viewer@clinic.local", "hash", "viewer", "Viewer")
    await store.touch_last_login(admin.id)
    account = await store.get_admin_by_id(admin.id)

    for value in (updated.created_at, updated.updated_at, account.created_at, account.last_login):
        assert value.utcoffset() == timedelta(0)
