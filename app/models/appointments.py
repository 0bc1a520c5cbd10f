"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from app.models.base import metadata

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column(
        "id",
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    ),
    # Ownership / references (immutable once created)
    Column(
        "patient_id",
        UUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "doctor_id",
        UUID(as_uuid=True),
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # Start instant; duration is fixed at one hour
    Column("date_time", TIMESTAMP(timezone=True), nullable=False),
    Column("reason", Text, nullable=True),
    # Status management
    Column("status", Text, nullable=False, server_default=text("'PENDING'")),
    # Audit fields
    Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()")),
    Column("updated_at", TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()")),
    Column("cancelled_at", TIMESTAMP(timezone=True), nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('PENDING', 'CONFIRMED', 'CANCELLED')",
        name="appointments_status_check",
    ),
    Index("ix_appointments_doctor_id_date_time", "doctor_id", "date_time"),
    # One active booking per doctor and start instant
    Index(
        "uq_appointments_doctor_active_slot",
        "doctor_id",
        "date_time",
        unique=True,
        postgresql_where=text("status IN ('PENDING', 'CONFIRMED')"),
    ),
)
