"""Enumerations shared by the schemas, and the SQLAlchemy storage table."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class RoleEnum(str, Enum):
    PROFESSOR = "professor"
    ADMIN = "admin"


class ResourceType(str, Enum):
    CHROMEBOOK = "chromebook"
    LAB_QUIMICA = "lab_quimica"
    LAB_FISICA = "lab_fisica"
    AUDIOVISUAL = "audiovisual"
    OUTRO = "outro"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


STATUS_ALIASES = {
    "pendente": BookingStatus.PENDING,
    "confirmado": BookingStatus.CONFIRMED,
    "cancelado": BookingStatus.CANCELLED,
}


class StorageEntry(Base):
    """One persisted JSON blob, addressed by its storage key."""

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
