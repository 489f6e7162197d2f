# app/system_services/booking_services.py
import logging
import secrets
import time
from typing import List

from app.database.record_store import AppointmentStore
from app.helpers.time import utcnow
from app.notifications.dispatcher import NotificationDispatcher
from app.shared.exceptions import ConflictError, NotFoundError, StaleRecordError, ValidationError
from app.system_models.appointment_model.appointment_schemas import (
    STATUS_TRANSITIONS,
    Appointment,
    AppointmentCreate,
    AppointmentPatch,
    AppointmentUpdate,
)

logger = logging.getLogger(__name__)


def generate_appointment_id() -> str:
    """Time + random composite, e.g. apt-1741600000000-k3j9x0a2b."""
    return f"apt-{int(time.time() * 1000)}-{secrets.token_hex(5)}"


# ============================================================
# ✅ Create booking
# ============================================================
async def create_booking(
    data: AppointmentCreate,
    store: AppointmentStore,
    dispatcher: NotificationDispatcher,
) -> Appointment:
    """
    Early conflict check for a friendly error; the store re-checks the slot
    atomically on insert, so a concurrent loser still gets ConflictError.
    """
    if await store.is_slot_taken(data.date, data.time):
        raise ConflictError()

    appointment = Appointment(
        id=generate_appointment_id(),
        patient_name=data.patient_name,
        patient_phone=data.patient_phone,
        patient_email=data.patient_email,
        date=data.date,
        time=data.time,
        service_type=data.service_type.model_copy(deep=True),
        problem_description=data.problem_description,
        status="pending",
        created_at=utcnow(),
    )
    saved = await store.insert_appointment(appointment)
    logger.info(f"✅ Booked {saved.id} for {saved.date} {saved.time} ({saved.service_type.id})")

    dispatcher.dispatch("created", saved)
    return saved


# ============================================================
# ✅ Read
# ============================================================
async def list_appointments(store: AppointmentStore) -> List[Appointment]:
    return await store.list_appointments()


async def get_appointment_or_404(store: AppointmentStore, appointment_id: str) -> Appointment:
    appointment = await store.get_appointment(appointment_id)
    if appointment is None:
        raise NotFoundError("Appointment not found")
    return appointment


# ============================================================
# ✅ Status transitions
# ============================================================
def validate_status_transition(current: str, new: str) -> None:
    if current == new:
        return
    if new not in STATUS_TRANSITIONS[current]:
        raise ValidationError(f"Cannot change status from '{current}' to '{new}'")


# ============================================================
# ✅ Staff update (attendance, notes, status)
# ============================================================
async def update_appointment(data: AppointmentUpdate, store: AppointmentStore) -> Appointment:
    current = await get_appointment_or_404(store, data.id)
    sent = data.model_fields_set

    changes = {}
    if "patient_attended" in sent and data.patient_attended is not None:
        changes["patient_attended"] = data.patient_attended
        changes["completed_at"] = utcnow()
    if "doctor_notes" in sent:
        changes["doctor_notes"] = data.doctor_notes
    if "status" in sent and data.status is not None:
        validate_status_transition(current.status, data.status)
        changes["status"] = data.status

    # Guard on the status the transition was validated against
    expected = current.status if "status" in changes else None
    updated = await store.update_appointment(data.id, AppointmentPatch(**changes), expected_status=expected)
    logger.info(f"Appointment {data.id} updated: {sorted(changes)}")
    return updated


# ============================================================
# ✅ Soft-cancel
# ============================================================
async def cancel_appointment(
    appointment_id: str,
    store: AppointmentStore,
    dispatcher: NotificationDispatcher,
) -> Appointment:
    current = await get_appointment_or_404(store, appointment_id)
    if current.status == "cancelled":
        return current

    validate_status_transition(current.status, "cancelled")
    try:
        cancelled = await store.set_appointment_status(appointment_id, "cancelled", expected_status=current.status)
    except StaleRecordError:
        latest = await get_appointment_or_404(store, appointment_id)
        if latest.status == "cancelled":
            return latest
        raise
    logger.info(f"❌ Appointment {appointment_id} cancelled ({cancelled.date} {cancelled.time} is free)")

    dispatcher.dispatch("cancelled", cancelled)
    return cancelled
