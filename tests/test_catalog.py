"""Schedule generation and the service catalog."""
from datetime import date, datetime, timedelta, timezone

from app.helpers.time import clinic_today
from app.system_services.catalog import (
    SERVICE_TYPES,
    SLOT_TIMES,
    booked_slots,
    generate_schedule,
)
from tests.utils.fakes import make_appointment

# A Friday
TODAY = date(2025, 3, 7)


def test_schedule_covers_two_weeks_from_tomorrow():
    schedule = generate_schedule(TODAY)

    assert len(schedule) == 14
    assert schedule[0].date == TODAY + timedelta(days=1)
    assert schedule[-1].date == TODAY + timedelta(days=14)


def test_weekends_are_closed():
    schedule = generate_schedule(TODAY)
    saturday, sunday, monday = schedule[0], schedule[1], schedule[2]

    assert saturday.day_of_week == "Sat" and saturday.available is False
    assert sunday.available is False
    assert not any(slot.available for slot in sunday.time_slots)
    assert monday.available is True
    assert [slot.time for slot in monday.time_slots] == SLOT_TIMES


def test_booked_slots_are_masked():
    monday = date(2025, 3, 10)

    schedule = generate_schedule(TODAY, {(monday, "13:00")})

    day = next(d for d in schedule if d.date == monday)
    slots = {slot.time: slot.available for slot in day.time_slots}
    assert slots["13:00"] is False
    assert all(available for time, available in slots.items() if time != "13:00")
    assert day.time_slots[0].id == "2025-03-10-09:00"


def test_cancelled_appointments_do_not_hold_slots():
    held = make_appointment("apt-1")
    cancelled = make_appointment("apt-2", slot_time="15:00").model_copy(update={"status": "cancelled"})

    assert booked_slots([held, cancelled]) == {(held.date, "13:00")}


def test_schedule_serializes_camel_case():
    payload = generate_schedule(TODAY)[2].model_dump(by_alias=True, mode="json")

    assert payload["date"] == "2025-03-10"
    assert payload["dayNumber"] == 10
    assert payload["timeSlots"][0]["time"] == "09:00"


def test_service_catalog():
    durations = {service.id: service.duration_minutes for service in SERVICE_TYPES}

    assert durations == {"diagnosis": 15, "treatment": 120}


def test_clinic_date_follows_clinic_timezone():
    # 20:30 UTC on Sunday is already Monday in Almaty (UTC+5)
    late_evening_utc = datetime(2025, 3, 9, 20, 30, tzinfo=timezone.utc)

    assert clinic_today("UTC", late_evening_utc) == date(2025, 3, 9)
    assert clinic_today("Asia/Almaty", late_evening_utc) == date(2025, 3, 10)
    assert generate_schedule(clinic_today("Asia/Almaty", late_evening_utc))[0].date == date(2025, 3, 11)
