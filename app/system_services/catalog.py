# app/system_services/catalog.py
"""
Doctor profile, service catalog and the bookable schedule.
"""
import datetime as dt
from typing import Iterable, List, Set, Tuple

from pydantic import BaseModel

from app.shared.schemas import CamelModel
from app.system_models.appointment_model.appointment_schemas import Appointment, ServiceType

SCHEDULE_DAYS = 14
SLOT_TIMES = ["09:00", "11:00", "13:00", "15:00", "17:00", "19:00"]
DAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class Doctor(CamelModel):
    id: str
    name: str
    specialization: str
    description: str
    photo: str
    experience: int
    education: List[str]
    rating: float
    reviews_count: int


class TimeSlot(CamelModel):
    id: str
    time: str
    available: bool


class ScheduleDay(CamelModel):
    date: dt.date
    day_of_week: str
    day_number: int
    available: bool
    time_slots: List[TimeSlot]


class DoctorCatalogResponse(BaseModel):
    doctor: Doctor
    services: List[ServiceType]


class ScheduleResponse(BaseModel):
    schedule: List[ScheduleDay]


SERVICE_TYPES = [
    ServiceType(
        id="diagnosis",
        name="Diagnostics",
        description="Functional assessment of movement and posture",
        duration_minutes=15,
        price=5000,
        icon="🔍",
    ),
    ServiceType(
        id="treatment",
        name="Kinesiotherapy",
        description="Therapeutic exercise and movement correction",
        duration_minutes=120,
        price=20000,
        icon="🏃",
    ),
]

DOCTOR_INFO = Doctor(
    id="doc-1",
    name="Dr. Yelzhas Sailaubek",
    specialization="Kinesiologist",
    description=(
        "Specialist in restoring motor function and correcting posture through "
        "guided movement and personal rehabilitation programs."
    ),
    photo="/doctor.jpeg",
    experience=12,
    education=[
        "Kazakh Academy of Sport and Tourism",
        "Specialization in kinesiology and biomechanics",
        "Certificate in functional testing",
        "Continuing education in rehabilitation",
    ],
    rating=4.9,
    reviews_count=183,
)


def booked_slots(appointments: Iterable[Appointment]) -> Set[Tuple[dt.date, str]]:
    return {(a.date, a.time) for a in appointments if a.status != "cancelled"}


def generate_schedule(
    today: dt.date,
    booked: Set[Tuple[dt.date, str]] = frozenset(),
    days: int = SCHEDULE_DAYS,
) -> List[ScheduleDay]:
    """
    Days from tomorrow onward. Weekends are closed; booked slots are marked
    unavailable.
    """
    schedule = []
    for offset in range(1, days + 1):
        current = today + dt.timedelta(days=offset)
        is_open = current.weekday() < 5
        iso = current.isoformat()
        schedule.append(
            ScheduleDay(
                date=current,
                day_of_week=DAY_ABBREVIATIONS[current.weekday()],
                day_number=current.day,
                available=is_open,
                time_slots=[
                    TimeSlot(
                        id=f"{iso}-{slot_time}",
                        time=slot_time,
                        available=is_open and (current, slot_time) not in booked,
                    )
                    for slot_time in SLOT_TIMES
                ],
            )
        )
    return schedule
