# app/database/sql_store.py
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.connection import Base, build_engine, build_sessionmaker
from app.database.record_store import RecordStore
from app.helpers.time import utcnow
from app.shared.exceptions import ConflictError, InternalError, NotFoundError, StaleRecordError
from app.system_models.appointment_model.appointment_model import AppointmentRow
from app.system_models.appointment_model.appointment_schemas import (
    APPOINTMENT_STATUS,
    Appointment,
    AppointmentPatch,
    ServiceType,
)
from app.users.user_models.schemas import ROLES, AdminUser, AdminUserInDB
from app.users.user_models.user_model import AdminUserRow

logger = logging.getLogger(__name__)


# ============================================================
# ✅ Row <-> schema mapping
# ============================================================
def row_to_appointment(row: AppointmentRow) -> Appointment:
    return Appointment(
        id=row.id,
        patient_name=row.patient_name,
        patient_phone=row.patient_phone,
        patient_email=row.patient_email,
        date=row.date,
        time=row.time,
        service_type=ServiceType(
            id=row.service_id,
            name=row.service_name,
            description=row.service_description,
            duration_minutes=row.service_duration,
            price=row.service_price,
            icon=row.service_icon,
        ),
        problem_description=row.problem_description,
        status=row.status,
        patient_attended=row.patient_attended,
        doctor_notes=row.doctor_notes,
        completed_at=row.completed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def appointment_to_row(appointment: Appointment) -> AppointmentRow:
    service = appointment.service_type
    return AppointmentRow(
        id=appointment.id,
        patient_name=appointment.patient_name,
        patient_phone=appointment.patient_phone,
        patient_email=appointment.patient_email,
        date=appointment.date,
        time=appointment.time,
        service_id=service.id,
        service_name=service.name,
        service_description=service.description,
        service_duration=service.duration_minutes,
        service_price=service.price,
        service_icon=service.icon,
        problem_description=appointment.problem_description,
        status=appointment.status,
        patient_attended=appointment.patient_attended,
        doctor_notes=appointment.doctor_notes,
        completed_at=appointment.completed_at,
        created_at=appointment.created_at,
    )


def row_to_admin(row: AdminUserRow) -> AdminUserInDB:
    return AdminUserInDB(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        role=row.role,
        full_name=row.full_name,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
        last_login=row.last_login,
    )


class SQLRecordStore(RecordStore):
    """
    SQLAlchemy-backed record store for the embedded sqlite file and for
    hosted Postgres. Slot uniqueness is enforced by the partial unique index
    uq_appointments_active_slot, so concurrent inserts have one winner.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.backend_name = "sqlite" if database_url.startswith("sqlite") else "postgres"
        self.engine = build_engine(database_url, echo=echo)
        self.session_factory = build_sessionmaker(self.engine)

    @asynccontextmanager
    async def session(self):
        """Session scope that maps driver failures to InternalError."""
        async with self.session_factory() as db:
            try:
                yield db
            except IntegrityError:
                await db.rollback()
                raise
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"❌ {self.backend_name} store failure: {e}", exc_info=True)
                raise InternalError("Record store failure") from e

    async def initialize(self) -> None:
        # Import models so they register on Base.metadata
        import app.model_registry  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"✅ {self.backend_name} schema ready")

    async def close(self) -> None:
        await self.engine.dispose()

    # ============================================================
    # ✅ Appointments
    # ============================================================
    async def insert_appointment(self, appointment: Appointment) -> Appointment:
        async with self.session() as db:
            row = appointment_to_row(appointment)
            db.add(row)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                logger.info(f"Slot {appointment.date} {appointment.time} rejected by unique index")
                raise ConflictError() from e
            await db.refresh(row)
            return row_to_appointment(row)

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        async with self.session() as db:
            row = await db.get(AppointmentRow, appointment_id)
            return row_to_appointment(row) if row else None

    async def _list(self, db: AsyncSession, *criteria) -> List[Appointment]:
        query = select(AppointmentRow).order_by(AppointmentRow.date, AppointmentRow.time)
        if criteria:
            query = query.where(*criteria)
        result = await db.execute(query)
        return [row_to_appointment(row) for row in result.scalars().all()]

    async def list_appointments(self) -> List[Appointment]:
        async with self.session() as db:
            return await self._list(db)

    async def list_active_appointments(self) -> List[Appointment]:
        async with self.session() as db:
            return await self._list(db, AppointmentRow.status != "cancelled")

    async def is_slot_taken(self, slot_date: date, slot_time: str) -> bool:
        async with self.session() as db:
            result = await db.execute(
                select(func.count())
                .select_from(AppointmentRow)
                .where(
                    and_(
                        AppointmentRow.date == slot_date,
                        AppointmentRow.time == slot_time,
                        AppointmentRow.status != "cancelled",
                    )
                )
            )
            return result.scalar_one() > 0

    async def update_appointment(
        self,
        appointment_id: str,
        patch: AppointmentPatch,
        expected_status: Optional[APPOINTMENT_STATUS] = None,
    ) -> Appointment:
        changes = patch.model_dump(exclude_unset=True)
        criteria = [AppointmentRow.id == appointment_id]
        if expected_status is not None:
            criteria.append(AppointmentRow.status == expected_status)

        async with self.session() as db:
            if changes:
                # Single conditional UPDATE: the status guard and the write cannot interleave
                try:
                    result = await db.execute(
                        update(AppointmentRow)
                        .where(*criteria)
                        .values(**changes, updated_at=utcnow())
                        .execution_options(synchronize_session=False)
                    )
                    await db.commit()
                except IntegrityError as e:
                    await db.rollback()
                    raise ConflictError() from e
                matched = result.rowcount > 0
            else:
                result = await db.execute(select(AppointmentRow.id).where(*criteria))
                matched = result.scalar_one_or_none() is not None

            row = await db.get(AppointmentRow, appointment_id, populate_existing=True)
            if row is None:
                raise NotFoundError(f"Appointment {appointment_id} not found")
            if not matched:
                logger.info(f"Appointment {appointment_id} is no longer '{expected_status}' (now '{row.status}')")
                raise StaleRecordError()
            return row_to_appointment(row)

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
        async with self.session() as db:
            row = AdminUserRow(
                username=username,
                email=email,
                password_hash=password_hash,
                role=role,
                full_name=full_name,
                is_active=True,
            )
            db.add(row)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                raise ConflictError("Username or email already in use") from e
            await db.refresh(row)
            return row_to_admin(row).to_public()

    async def get_admin_by_username(self, username: str) -> Optional[AdminUserInDB]:
        async with self.session() as db:
            result = await db.execute(select(AdminUserRow).where(AdminUserRow.username == username))
            row = result.scalars().first()
            return row_to_admin(row) if row else None

    async def get_admin_by_id(self, user_id: int) -> Optional[AdminUserInDB]:
        async with self.session() as db:
            row = await db.get(AdminUserRow, user_id)
            return row_to_admin(row) if row else None

    async def list_admins(self) -> List[AdminUser]:
        async with self.session() as db:
            result = await db.execute(select(AdminUserRow).order_by(AdminUserRow.created_at, AdminUserRow.id))
            return [row_to_admin(row).to_public() for row in result.scalars().all()]

    async def count_admins(self) -> int:
        async with self.session() as db:
            result = await db.execute(select(func.count()).select_from(AdminUserRow))
            return result.scalar_one()

    async def touch_last_login(self, user_id: int) -> None:
        now = utcnow()
        async with self.session() as db:
            await db.execute(
                update(AdminUserRow)
                .where(AdminUserRow.id == user_id)
                .values(last_login=now, updated_at=now)
            )
            await db.commit()

    async def set_admin_active(self, user_id: int, is_active: bool) -> bool:
        async with self.session() as db:
            result = await db.execute(
                update(AdminUserRow)
                .where(AdminUserRow.id == user_id)
                .values(is_active=is_active, updated_at=utcnow())
            )
            await db.commit()
            return result.rowcount > 0
