# app/system_models/appointment_model/appointment_model.py
from sqlalchemy import Boolean, CheckConstraint, Column, Date, Index, Integer, String, Text, text

from app.database.connection import Base, UTCDateTime
from app.helpers.time import utcnow

ACTIVE_SLOT_CLAUSE = text("status != 'cancelled'")


class AppointmentRow(Base):
    __tablename__ = "appointments"

    id = Column(String(64), primary_key=True)
    patient_name = Column(String, nullable=False)
    patient_phone = Column(String, nullable=False)
    patient_email = Column(String, nullable=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)

    # Service snapshot, copied at booking time
    service_id = Column(String, nullable=False)
    service_name = Column(String, nullable=False)
    service_description = Column(Text, nullable=False, default="")
    service_duration = Column(Integer, nullable=False)
    service_price = Column(Integer, nullable=False)
    service_icon = Column(String, nullable=False, default="")

    problem_description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending")
    patient_attended = Column(Boolean, nullable=True)
    doctor_notes = Column(Text, nullable=True)
    completed_at = Column(UTCDateTime(), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="check_appointment_status",
        ),
        # At most one live booking per slot; cancelled rows free the slot
        Index(
            "uq_appointments_active_slot",
            "date",
            "time",
            unique=True,
            sqlite_where=ACTIVE_SLOT_CLAUSE,
            postgresql_where=ACTIVE_SLOT_CLAUSE,
        ),
    )

    def __repr__(self):
        return f"<AppointmentRow(id='{self.id}', date={self.date}, time='{self.time}', status='{self.status}')>"
