# app/database/memory_store.py
import asyncio
from datetime import date
from typing import Dict, List, Optional

from app.database.record_store import RecordStore
from app.helpers.time import utcnow
from app.shared.exceptions import ConflictError, NotFoundError, StaleRecordError
from app.system_models.appointment_model.appointment_schemas import (
    APPOINTMENT_STATUS,
    Appointment,
    AppointmentPatch,
)
from app.users.user_models.schemas import ROLES, AdminUser, AdminUserInDB


class MemoryRecordStore(RecordStore):
    """
    In-process record store.
    A single asyncio.Lock serializes every write so check-then-insert on a
    slot has exactly one winner.
    """

    backend_name = "memory"

    def __init__(self):
        self._appointments: Dict[str, Appointment] = {}
        self._admins: Dict[int, AdminUserInDB] = {}
        self._next_admin_id = 1
        self._lock = asyncio.Lock()

    # ============================================================
    # ✅ Appointments
    # ============================================================
    def _slot_holder(self, slot_date: date, slot_time: str, exclude_id: Optional[str] = None) -> Optional[Appointment]:
        for appointment in self._appointments.values():
            if appointment.id == exclude_id:
                continue
            if appointment.date == slot_date and appointment.time == slot_time and appointment.status != "cancelled":
                return appointment
        return None

    @staticmethod
    def _ordered(appointments) -> List[Appointment]:
        return sorted(appointments, key=lambda a: (a.date, a.time))

    async def insert_appointment(self, appointment: Appointment) -> Appointment:
        async with self._lock:
            if appointment.id in self._appointments:
                raise ConflictError(f"Appointment {appointment.id} already exists")
            if appointment.status != "cancelled" and self._slot_holder(appointment.date, appointment.time):
                raise ConflictError()
            stored = appointment.model_copy(update={"updated_at": utcnow()}, deep=True)
            self._appointments[stored.id] = stored
            return stored.model_copy(deep=True)

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        appointment = self._appointments.get(appointment_id)
        return appointment.model_copy(deep=True) if appointment else None

    async def list_appointments(self) -> List[Appointment]:
        return [a.model_copy(deep=True) for a in self._ordered(self._appointments.values())]

    async def list_active_appointments(self) -> List[Appointment]:
        active = (a for a in self._appointments.values() if a.status != "cancelled")
        return [a.model_copy(deep=True) for a in self._ordered(active)]

    async def is_slot_taken(self, slot_date: date, slot_time: str) -> bool:
        return self._slot_holder(slot_date, slot_time) is not None

    async def update_appointment(
        self,
        appointment_id: str,
        patch: AppointmentPatch,
        expected_status: Optional[APPOINTMENT_STATUS] = None,
    ) -> Appointment:
        changes = patch.model_dump(exclude_unset=True)
        async with self._lock:
            current = self._appointments.get(appointment_id)
            if current is None:
                raise NotFoundError(f"Appointment {appointment_id} not found")
            if expected_status is not None and current.status != expected_status:
                raise StaleRecordError()
            if not changes:
                return current.model_copy(deep=True)

            new_status = changes.get("status", current.status)
            if (
                current.status == "cancelled"
                and new_status != "cancelled"
                and self._slot_holder(current.date, current.time, exclude_id=current.id)
            ):
                raise ConflictError()

            changes["updated_at"] = utcnow()
            updated = current.model_copy(update=changes, deep=True)
            self._appointments[appointment_id] = updated
            return updated.model_copy(deep=True)

    # ============================================================
    # ✅ Admin credentials
    # ============================================================
    async def create_admin(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: ROLES,
        full_name: str,
    ) -> AdminUser:
        async with self._lock:
            for admin in self._admins.values():
                if admin.username == username or admin.email == email:
                    raise ConflictError("Username or email already in use")
            now = utcnow()
            admin = AdminUserInDB(
                id=self._next_admin_id,
                username=username,
                email=email,
                password_hash=password_hash,
                role=role,
                full_name=full_name,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            self._admins[admin.id] = admin
            self._next_admin_id += 1
            return admin.to_public()

    async def get_admin_by_username(self, username: str) -> Optional[AdminUserInDB]:
        for admin in self._admins.values():
            if admin.username == username:
                return admin.model_copy()
        return None

    async def get_admin_by_id(self, user_id: int) -> Optional[AdminUserInDB]:
        admin = self._admins.get(user_id)
        return admin.model_copy() if admin else None

    async def list_admins(self) -> List[AdminUser]:
        ordered = sorted(self._admins.values(), key=lambda a: (a.created_at, a.id))
        return [admin.to_public() for admin in ordered]

    async def count_admins(self) -> int:
        return len(self._admins)

    async def touch_last_login(self, user_id: int) -> None:
        async with self._lock:
            admin = self._admins.get(user_id)
            if admin is not None:
                now = utcnow()
                self._admins[user_id] = admin.model_copy(update={"last_login": now, "updated_at": now})

    async def set_admin_active(self, user_id: int, is_active: bool) -> bool:
        async with self._lock:
            admin = self._admins.get(user_id)
            if admin is None:
                return False
            self._admins[user_id] = admin.model_copy(update={"is_active": is_active, "updated_at": utcnow()})
            return True
