# quickschedule/models.py

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Index, UniqueConstraint, text
from sqlalchemy.types import JSON
from sqlmodel import Column, Field, SQLModel


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class ProviderRecord(SQLModel, table=True):
    __tablename__ = "qs_providers"

    id: str = Field(default_factory=lambda: generate_id("prov"), primary_key=True)
    name: str
    email: Optional[str] = None
    active: bool = True
    # [{"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"}, ...]
    schedule: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    buffer_minutes: int = 0


class AppointmentTypeRecord(SQLModel, table=True):
    __tablename__ = "qs_appointment_types"

    id: str = Field(default_factory=lambda: generate_id("appt"), primary_key=True)
    name: str
    slug: Optional[str] = Field(default=None, index=True)
    duration: int
    active: bool = True
    max_per_day: Optional[int] = None
    buffer_before: int = 0
    buffer_after: int = 0
    provider_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON))


class BookingRecord(SQLModel, table=True):
    __tablename__ = "qs_bookings"
    __table_args__ = (
        UniqueConstraint("confirmation_number", name="uq_booking_confirmation"),
        # one active booking per provider start time; cancelled rows free the slot
        Index(
            "uq_booking_provider_slot",
            "provider_id",
            "date",
            "time",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    id: str = Field(default_factory=lambda: generate_id("bk"), primary_key=True)
    appointment_type_id: str = Field(foreign_key="qs_appointment_types.id")
    provider_id: str = Field(foreign_key="qs_providers.id", index=True)
    date: str = Field(index=True)  # YYYY-MM-DD
    time: str  # HH:MM
    duration: int
    end_time: Optional[str] = None
    patient_name: str
    patient_email: str = ""
    patient_phone: str = ""
    notes: Optional[str] = None
    status: str = "confirmed"
    confirmation_number: Optional[str] = None
    cancel_token: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BlockedTimeRecord(SQLModel, table=True):
    __tablename__ = "qs_blocked_times"

    id: str = Field(default_factory=lambda: generate_id("blk"), primary_key=True)
    provider_id: str = Field(foreign_key="qs_providers.id", index=True)
    reason: Optional[str] = None
    start_date: str = Field(index=True)
    end_date: str = Field(index=True)
    all_day: bool = True
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    recurring: str = "none"
