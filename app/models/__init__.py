"""Database models."""

from app.models.appointments import appointments
from app.models.base import metadata
from app.models.doctors import doctors
from app.models.notes import notes
from app.models.patients import patients
from app.models.users import users

__all__ = [
    "appointments",
    "doctors",
    "metadata",
    "notes",
    "patients",
    "users",
]
