# app/database/record_store.py
"""
Record Store Interface
One contract for appointments and admin credentials, implemented by:
- SQLRecordStore (sqlite file or hosted Postgres, via SQLAlchemy)
- MemoryRecordStore (in-process)

Business logic only talks to this interface.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from app.system_models.appointment_model.appointment_schemas import (
    APPOINTMENT_STATUS,
    Appointment,
    AppointmentPatch,
)
from app.users.user_models.schemas import ROLES, AdminUser, AdminUserInDB


class AppointmentStore(ABC):
    """Booking records keyed by an opaque id."""

    @abstractmethod
    async def insert_appointment(self, appointment: Appointment) -> Appointment:
        """Persist a new record. Raises ConflictError if its slot is held."""

    @abstractmethod
    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        ...

    @abstractmethod
    async def list_appointments(self) -> List[Appointment]:
        """All records ordered by (date, time)."""

    @abstractmethod
    async def list_active_appointments(self) -> List[Appointment]:
        """Non-cancelled records ordered by (date, time)."""

    @abstractmethod
    async def is_slot_taken(self, slot_date: date, slot_time: str) -> bool:
        ...

    @abstractmethod
    async def update_appointment(
        self,
        appointment_id: str,
        patch: AppointmentPatch,
        expected_status: Optional[APPOINTMENT_STATUS] = None,
    ) -> Appointment:
        """
        Apply only the fields set on the patch.
        With expected_status, the write only happens if the stored status still
        matches; the check and the write are one atomic step.
        Raises NotFoundError for an unknown id, StaleRecordError when the status
        moved on, and ConflictError when a status change would put a second
        live booking on the same slot.
        """

    async def set_appointment_status(
        self,
        appointment_id: str,
        status: APPOINTMENT_STATUS,
        expected_status: Optional[APPOINTMENT_STATUS] = None,
    ) -> Appointment:
        return await self.update_appointment(
            appointment_id, AppointmentPatch(status=status), expected_status=expected_status
        )


class CredentialStore(ABC):
    """Admin accounts. Password hashes never leave this boundary except as AdminUserInDB."""

    @abstractmethod
    async def create_admin(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: ROLES,
        full_name: str,
    ) -> AdminUser:
        ...

    @abstractmethod
    async def get_admin_by_username(self, username: str) -> Optional[AdminUserInDB]:
        ...

    @abstractmethod
    async def get_admin_by_id(self, user_id: int) -> Optional[AdminUserInDB]:
        ...

    @abstractmethod
    async def list_admins(self) -> List[AdminUser]:
        """All accounts ordered by creation time."""

    @abstractmethod
    async def count_admins(self) -> int:
        ...

    @abstractmethod
    async def touch_last_login(self, user_id: int) -> None:
        ...

    @abstractmethod
    async def set_admin_active(self, user_id: int, is_active: bool) -> bool:
        """Returns False when no account has this id."""


class RecordStore(AppointmentStore, CredentialStore):
    """Both stores behind one lifecycle."""

    backend_name = "abstract"

    async def initialize(self) -> None:
        """Create tables / structures. Must be idempotent."""

    async def close(self) -> None:
        """Release connections."""
