"""Appointment persistence.

``AppointmentStore`` is the narrow interface the scheduling service depends
on; ``SQLAlchemyAppointmentStore`` implements it over one request-scoped
``AsyncSession``.
"""

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import Table, and_, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException
from app.models.appointments import appointments
from app.models.doctors import doctors
from app.models.notes import notes
from app.models.patients import patients
from app.models.users import users
from app.schemas.appointments import ACTIVE_STATUSES, AppointmentStatus

ACTIVE_SLOT_INDEX = "uq_appointments_doctor_active_slot"


class AppointmentStore(Protocol):
    """Persistence operations used by the scheduling core."""

    async def get_patient_by_user_id(self, user_id: UUID) -> dict[str, Any] | None: ...

    async def get_doctor_by_user_id(self, user_id: UUID) -> dict[str, Any] | None: ...

    async def get_doctor(self, doctor_id: UUID) -> dict[str, Any] | None: ...

    async def get_appointment(self, appointment_id: UUID) -> dict[str, Any] | None: ...

    async def find_active_at(
        self, doctor_id: UUID, date_time: datetime
    ) -> dict[str, Any] | None: ...

    async def find_active_in_range(
        self, doctor_id: UUID, start: datetime, end: datetime
    ) -> list[dict[str, Any]]: ...

    async def create_appointment(self, values: dict[str, Any]) -> dict[str, Any]: ...

    async def update_status(
        self,
        appointment_id: UUID,
        status: AppointmentStatus,
        note: str | None = None,
    ) -> dict[str, Any]: ...

    async def create_note(
        self, appointment_id: UUID, doctor_id: UUID, content: str
    ) -> dict[str, Any]: ...

    async def list_for_patient(self, patient_id: UUID) -> list[dict[str, Any]]: ...

    async def list_for_doctor(self, doctor_id: UUID) -> list[dict[str, Any]]: ...

    async def list_recent(self, limit: int) -> list[dict[str, Any]]: ...

    async def count_totals(self) -> dict[str, Any]: ...

    async def list_doctors(self) -> list[dict[str, Any]]: ...

    async def list_doctors_with_users(self) -> list[dict[str, Any]]: ...

    async def list_patients_with_users(self) -> list[dict[str, Any]]: ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Apply every write made inside the block atomically."""
        ...


class SQLAlchemyAppointmentStore:
    """Appointment store backed by PostgreSQL through SQLAlchemy Core."""

    def __init__(self, db: AsyncSession):
        """Initialize store with database session."""
        self.db = db
        self._transaction_depth = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """
        Group store writes into a single commit.

        Writes made inside the block are not committed individually; the
        outermost block commits on success and rolls back on any error.
        """
        self._transaction_depth += 1
        try:
            yield
        except Exception:
            self._transaction_depth -= 1
            if self._transaction_depth == 0:
                await self.db.rollback()
            raise
        self._transaction_depth -= 1
        if self._transaction_depth == 0:
            await self.db.commit()

    async def _commit(self) -> None:
        if self._transaction_depth == 0:
            await self.db.commit()

    async def get_patient_by_user_id(self, user_id: UUID) -> dict[str, Any] | None:
        """Get patient profile owned by a user."""
        result = await self.db.execute(select(patients).where(patients.c.user_id == user_id))
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_doctor_by_user_id(self, user_id: UUID) -> dict[str, Any] | None:
        """Get doctor profile owned by a user."""
        result = await self.db.execute(select(doctors).where(doctors.c.user_id == user_id))
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_doctor(self, doctor_id: UUID) -> dict[str, Any] | None:
        """Get doctor by ID."""
        result = await self.db.execute(select(doctors).where(doctors.c.id == doctor_id))
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_appointment(self, appointment_id: UUID) -> dict[str, Any] | None:
        """
        Get appointment by ID along with the owning patient's user ID.

        Args:
            appointment_id: Appointment ID

        Returns:
            Appointment row with ``patient_user_id`` or None
        """
        stmt = (
            select(appointments, patients.c.user_id.label("patient_user_id"))
            .join(patients, appointments.c.patient_id == patients.c.id)
            .where(appointments.c.id == appointment_id)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def find_active_at(self, doctor_id: UUID, date_time: datetime) -> dict[str, Any] | None:
        """Find an active appointment for a doctor starting exactly at an instant."""
        stmt = select(appointments).where(
            and_(
                appointments.c.doctor_id == doctor_id,
                appointments.c.date_time == date_time,
                appointments.c.status.in_([s.value for s in ACTIVE_STATUSES]),
            )
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def find_active_in_range(
        self,
        doctor_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[dict[str, Any]]:
        """Find active appointments for a doctor starting within [start, end]."""
        stmt = (
            select(appointments)
            .where(
                and_(
                    appointments.c.doctor_id == doctor_id,
                    appointments.c.date_time >= start,
                    appointments.c.date_time <= end,
                    appointments.c.status.in_([s.value for s in ACTIVE_STATUSES]),
                )
            )
            .order_by(appointments.c.date_time.asc())
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def create_appointment(self, values: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new appointment.

        Raises:
            ConflictException: If the active-slot unique index rejects the row
        """
        stmt = insert(appointments).values(**values).returning(appointments)
        try:
            result = await self.db.execute(stmt)
        except IntegrityError as e:
            if ACTIVE_SLOT_INDEX not in str(e.orig):
                raise
            if self._transaction_depth == 0:
                await self.db.rollback()
            raise ConflictException("Doctor already has an appointment at this time") from e

        row = result.mappings().one()
        await self._commit()
        return dict(row)

    async def update_status(
        self,
        appointment_id: UUID,
        status: AppointmentStatus,
        note: str | None = None,
    ) -> dict[str, Any]:
        """
        Set appointment status, optionally recording a note from its doctor.

        Args:
            appointment_id: Appointment ID
            status: New status
            note: Optional note content attributed to the appointment's doctor

        Returns:
            Updated appointment row
        """
        update_values: dict[str, Any] = {
            "status": status.value,
            "updated_at": func.now(),
        }
        if status == AppointmentStatus.CANCELLED:
            update_values["cancelled_at"] = func.now()

        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(**update_values)
            .returning(appointments)
        )
        result = await self.db.execute(stmt)
        row = dict(result.mappings().one())

        if note:
            await self.db.execute(
                insert(notes).values(
                    appointment_id=appointment_id,
                    doctor_id=row["doctor_id"],
                    content=note,
                )
            )

        await self._commit()
        return row

    async def create_note(
        self,
        appointment_id: UUID,
        doctor_id: UUID,
        content: str,
    ) -> dict[str, Any]:
        """Append a clinical note to an appointment."""
        stmt = (
            insert(notes)
            .values(appointment_id=appointment_id, doctor_id=doctor_id, content=content)
            .returning(notes)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().one()
        await self._commit()
        return dict(row)

    async def _attach_notes(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return rows

        stmt = (
            select(notes)
            .where(notes.c.appointment_id.in_([row["id"] for row in rows]))
            .order_by(notes.c.created_at.asc())
        )
        result = await self.db.execute(stmt)

        by_appointment: dict[UUID, list[dict[str, Any]]] = {}
        for note in result.mappings().all():
            by_appointment.setdefault(note["appointment_id"], []).append(dict(note))

        for row in rows:
            row["notes"] = by_appointment.get(row["id"], [])
        return rows

    async def list_for_patient(self, patient_id: UUID) -> list[dict[str, Any]]:
        """List a patient's appointments in chronological order, with notes."""
        stmt = (
            select(appointments)
            .where(appointments.c.patient_id == patient_id)
            .order_by(appointments.c.date_time.asc())
        )
        result = await self.db.execute(stmt)
        return await self._attach_notes([dict(row) for row in result.mappings().all()])

    async def list_for_doctor(self, doctor_id: UUID) -> list[dict[str, Any]]:
        """List a doctor's appointments in chronological order, with notes."""
        stmt = (
            select(appointments)
            .where(appointments.c.doctor_id == doctor_id)
            .order_by(appointments.c.date_time.asc())
        )
        result = await self.db.execute(stmt)
        return await self._attach_notes([dict(row) for row in result.mappings().all()])

    async def list_recent(self, limit: int) -> list[dict[str, Any]]:
        """List the latest appointments by start time."""
        stmt = select(appointments).order_by(appointments.c.date_time.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def count_totals(self) -> dict[str, Any]:
        """Count patients, doctors and appointments (total and per status)."""
        patient_count = await self.db.scalar(select(func.count()).select_from(patients))
        doctor_count = await self.db.scalar(select(func.count()).select_from(doctors))

        status_result = await self.db.execute(
            select(appointments.c.status, func.count()).group_by(appointments.c.status)
        )
        by_status = {status.value: 0 for status in AppointmentStatus}
        for status, count in status_result.all():
            by_status[status] = count

        return {
            "patients": patient_count or 0,
            "doctors": doctor_count or 0,
            "appointments": sum(by_status.values()),
            "appointments_by_status": by_status,
        }

    async def list_doctors(self) -> list[dict[str, Any]]:
        """List doctors ordered by last then first name."""
        stmt = select(
            doctors.c.id,
            doctors.c.first_name,
            doctors.c.last_name,
            doctors.c.specialization,
        ).order_by(doctors.c.last_name.asc(), doctors.c.first_name.asc())
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def _list_profiles_with_users(self, profiles: Table) -> list[dict[str, Any]]:
        stmt = (
            select(
                profiles,
                users.c.email,
                users.c.created_at.label("user_created_at"),
            )
            .join(users, profiles.c.user_id == users.c.id)
            .order_by(profiles.c.last_name.asc(), profiles.c.first_name.asc())
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def list_doctors_with_users(self) -> list[dict[str, Any]]:
        """List doctor profiles with their account email and creation date."""
        return await self._list_profiles_with_users(doctors)

    async def list_patients_with_users(self) -> list[dict[str, Any]]:
        """List patient profiles with their account email and creation date."""
        return await self._list_profiles_with_users(patients)
