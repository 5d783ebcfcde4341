"""Pydantic schemas for the directory records, request bodies and reports."""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models import STATUS_ALIASES, BookingStatus, ResourceType, RoleEnum

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"


def shift_time(start: str, minutes: int) -> str:
    """Return ``start`` moved forward by ``minutes``, clamped to the same day."""

    hours, mins = (int(part) for part in start.split(":"))
    total = min(hours * 60 + mins + minutes, 23 * 60 + 59)
    return f"{total // 60:02d}:{total % 60:02d}"


def _canonical_status(value: Any) -> Any:
    if isinstance(value, str):
        return STATUS_ALIASES.get(value.lower(), value.lower())
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Professor(CamelModel):
    id: str
    name: str
    email: str
    role: RoleEnum = RoleEnum.PROFESSOR
    department: Optional[str] = None


class Resource(CamelModel):
    id: str
    name: str
    type: ResourceType
    description: str = ""
    capacity: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    available: bool = True


class BookingBase(CamelModel):
    professor_id: str
    resource_id: str
    date: str = Field(..., pattern=DATE_PATTERN)
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    series: str = ""
    purpose: str = ""
    status: BookingStatus = BookingStatus.PENDING
    professor_name: Optional[str] = None
    resource_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_legacy_shape(cls, data: Any) -> Any:
        # Older records stored a start ``time`` plus a ``duration`` in minutes.
        if not isinstance(data, dict) or "time" not in data:
            return data
        if "startTime" in data or "start_time" in data:
            return data
        data = dict(data)
        start = data.pop("time")
        duration = int(data.pop("duration", 0) or 0)
        end = shift_time(start, duration)
        if end <= start:
            raise ValueError(f"legacy booking at {start} for {duration} minutes has no time window")
        data["startTime"] = start
        data["endTime"] = end
        return data

    @field_validator("status", mode="before")
    @classmethod
    def _status_aliases(cls, value: Any) -> Any:
        return _canonical_status(value)


class BookingCreate(BookingBase):
    pass


class Booking(BookingBase):
    id: str
    created_at: str


class BookingUpdate(CamelModel):
    professor_id: Optional[str] = None
    resource_id: Optional[str] = None
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    series: Optional[str] = None
    purpose: Optional[str] = None
    status: Optional[BookingStatus] = None
    professor_name: Optional[str] = None
    resource_name: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status_aliases(cls, value: Any) -> Any:
        return _canonical_status(value)


class BookingRequest(CamelModel):
    """Booking form as submitted by a professor. Completeness is checked by the workflow."""

    resource_id: str = ""
    date: str = ""
    start_time: str = ""
    end_time: str = ""
    series: str = ""
    purpose: str = ""


class RescheduleRequest(CamelModel):
    resource_id: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class AvailabilityRead(CamelModel):
    resource_id: str
    date: str
    start_time: str
    end_time: str
    available: bool


class Credentials(CamelModel):
    email: str


class Identity(CamelModel):
    id: str
    name: str
    email: str
    role: RoleEnum

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.ADMIN


class SessionRecord(CamelModel):
    id: str
    identity: Identity
    created_at: datetime


class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: Identity


class ReportFilters(CamelModel):
    professor: str = ""
    resource_type: str = "all"
    status: str = "all"
    date_from: str = ""
    date_to: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _status_aliases(cls, value: Any) -> Any:
        if value in (None, "", "all"):
            return "all"
        status = _canonical_status(value)
        return status.value if isinstance(status, BookingStatus) else status


class ReportRow(CamelModel):
    professor: str
    email: str
    resource: str
    resource_type: Optional[ResourceType] = None
    date: str
    start_time: str
    end_time: str
    purpose: str
    status: BookingStatus


class DashboardStats(CamelModel):
    total_bookings: int
    pending_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    total_resources: int
    available_resources: int
    total_chromebooks: int
    available_chromebooks: int


class ConflictDetail(CamelModel):
    detail: str
    conflicts: List[Booking] = Field(default_factory=list)
