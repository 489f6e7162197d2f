# app/system_models/appointment_model/appointment_schemas.py
import datetime as dt
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.shared.schemas import CamelModel

# Allowed values as constants
APPOINTMENT_STATUS = Literal["pending", "confirmed", "completed", "cancelled"]

# Allowed status changes; re-setting the current status is always a no-op
STATUS_TRANSITIONS = {
    "pending": {"confirmed", "completed", "cancelled"},
    "confirmed": {"pending", "completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ServiceType(CamelModel):
    id: str
    name: str
    description: str = ""
    duration_minutes: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices("durationMinutes", "duration", "duration_minutes"),
        serialization_alias="durationMinutes",
    )
    price: int = Field(..., ge=0)
    icon: str = ""


# ✅ Request schema for public booking
class AppointmentCreate(CamelModel):
    patient_name: str
    patient_phone: str
    patient_email: Optional[str] = None
    date: dt.date
    time: str = Field(..., pattern=TIME_PATTERN)
    service_type: ServiceType
    problem_description: Optional[str] = None

    @field_validator("patient_name", "patient_phone")
    def required_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("patient_email", "problem_description")
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


# ✅ Partial update from the admin panel
class AppointmentUpdate(CamelModel):
    id: str = Field(..., min_length=1)
    patient_attended: Optional[bool] = None
    doctor_notes: Optional[str] = None
    status: Optional[APPOINTMENT_STATUS] = None


class AppointmentPatch(BaseModel):
    """Fields a store applies; unset fields are left untouched."""

    patient_attended: Optional[bool] = None
    doctor_notes: Optional[str] = None
    status: Optional[APPOINTMENT_STATUS] = None
    completed_at: Optional[dt.datetime] = None


# ✅ Stored / returned appointment
class Appointment(CamelModel):
    id: str
    patient_name: str
    patient_phone: str
    patient_email: Optional[str] = None
    date: dt.date
    time: str
    service_type: ServiceType
    problem_description: Optional[str] = None
    status: APPOINTMENT_STATUS = "pending"
    patient_attended: Optional[bool] = None
    doctor_notes: Optional[str] = None
    completed_at: Optional[dt.datetime] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class AppointmentResponse(CamelModel):
    message: str
    appointment: Appointment


class AppointmentList(CamelModel):
    appointments: List[Appointment]
