# app/system_services/system_routes.py
from fastapi import APIRouter, Depends, Query, status

from app.database.connection import get_store
from app.database.record_store import RecordStore
from app.helpers.time import clinic_today
from app.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from app.shared.schemas import MessageResponse
from app.system_models.appointment_model.appointment_schemas import (
    Appointment,
    AppointmentCreate,
    AppointmentList,
    AppointmentResponse,
    AppointmentUpdate,
)
from app.system_services.booking_services import (
    cancel_appointment,
    create_booking,
    get_appointment_or_404,
    list_appointments,
    update_appointment,
)
from app.system_services.catalog import (
    DOCTOR_INFO,
    SERVICE_TYPES,
    DoctorCatalogResponse,
    ScheduleResponse,
    booked_slots,
    generate_schedule,
)
from app.users.auth_dependencies import require_role
from app.users.auth_services import create_initial_admins
from app.users.user_models.schemas import TokenIdentity
from config.appconfig import settings

router = APIRouter()


# ============================================================
# ✅ PUBLIC BOOKING
# ============================================================
@router.post("/appointments", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment_endpoint(
    appointment: AppointmentCreate,
    store: RecordStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AppointmentResponse:
    """Book a free slot. 409 if the slot is already held."""
    saved = await create_booking(appointment, store, dispatcher)
    return AppointmentResponse(message="Appointment created successfully", appointment=saved)


# ============================================================
# ✅ ADMIN: LIST / GET (viewer+)
# ============================================================
@router.get("/appointments", response_model=AppointmentList)
async def list_appointments_endpoint(
    identity: TokenIdentity = Depends(require_role("viewer")),
    store: RecordStore = Depends(get_store),
) -> AppointmentList:
    return AppointmentList(appointments=await list_appointments(store))


@router.get("/appointments/{appointment_id}", response_model=Appointment)
async def get_appointment_endpoint(
    appointment_id: str,
    identity: TokenIdentity = Depends(require_role("viewer")),
    store: RecordStore = Depends(get_store),
) -> Appointment:
    return await get_appointment_or_404(store, appointment_id)


# ============================================================
# ✅ ADMIN: UPDATE / CANCEL (admin+)
# ============================================================
@router.patch("/appointments", response_model=AppointmentResponse)
async def update_appointment_endpoint(
    data: AppointmentUpdate,
    identity: TokenIdentity = Depends(require_role("admin")),
    store: RecordStore = Depends(get_store),
) -> AppointmentResponse:
    """Partial update of attendance, doctor notes and status."""
    updated = await update_appointment(data, store)
    return AppointmentResponse(message="Appointment updated", appointment=updated)


@router.delete("/appointments", response_model=AppointmentResponse)
async def cancel_appointment_endpoint(
    appointment_id: str = Query(..., alias="id", min_length=1),
    identity: TokenIdentity = Depends(require_role("admin")),
    store: RecordStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AppointmentResponse:
    """Soft-cancel: the record stays, its slot becomes bookable again."""
    cancelled = await cancel_appointment(appointment_id, store, dispatcher)
    return AppointmentResponse(message="Appointment cancelled", appointment=cancelled)


# ============================================================
# ✅ CATALOG & SCHEDULE
# ============================================================
@router.get("/doctor", response_model=DoctorCatalogResponse)
async def get_doctor_endpoint() -> DoctorCatalogResponse:
    return DoctorCatalogResponse(doctor=DOCTOR_INFO, services=SERVICE_TYPES)


@router.get("/schedule", response_model=ScheduleResponse)
async def get_schedule_endpoint(store: RecordStore = Depends(get_store)) -> ScheduleResponse:
    """Next 14 days with weekend and booked-slot masking."""
    active = await store.list_active_appointments()
    schedule = generate_schedule(clinic_today(settings.CLINIC_TIMEZONE), booked_slots(active))
    return ScheduleResponse(schedule=schedule)


# ============================================================
# ✅ INITIALIZE STORAGE
# ============================================================
@router.post("/init", response_model=MessageResponse)
async def init_database_endpoint(store: RecordStore = Depends(get_store)) -> MessageResponse:
    """Idempotent: creates missing tables and seeds admins into an empty store."""
    await store.initialize()
    await create_initial_admins(store)
    return MessageResponse(message="Database initialized")
