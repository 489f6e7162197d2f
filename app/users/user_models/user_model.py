# app/users/user_models/user_model.py
from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String

from app.database.connection import Base, UTCDateTime
from app.helpers.time import utcnow


class AdminUserRow(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, default="admin", nullable=False)
    full_name = Column(String, nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)
    last_login = Column(UTCDateTime(), nullable=True)

    # Add check constraints for validation at database level
    __table_args__ = (
        CheckConstraint("role IN ('viewer', 'admin', 'super_admin')", name="check_role_values"),
    )

    def __repr__(self):
        return f"<AdminUserRow(id={self.id}, username='{self.username}', role='{self.role}')>"
