"""Shared fixtures: sample records, an in-memory BookingStore, a SQLite engine."""

from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from quickschedule import models  # noqa: F401
from quickschedule.config import SchedulingConfig
from quickschedule.errors import SlotConflictError
from quickschedule.schemas import (
    AppointmentType,
    BlockedTime,
    Booking,
    BookingInput,
    BookingStatus,
    PatientInfo,
    Provider,
    WorkingHoursEntry,
)

MONDAY = "2024-03-18"
TUESDAY = "2024-03-19"
WEDNESDAY = "2024-03-20"


def make_booking(time: str, duration: int = 30, status: str = "confirmed", **overrides) -> Booking:
    fields = {
        "id": f"bk_{time.replace(':', '')}_{status}",
        "appointment_type_id": "type_1",
        "provider_id": "prov_1",
        "date": MONDAY,
        "time": time,
        "duration": duration,
        "patient_name": "Jane Doe",
        "patient_email": "jane@example.com",
        "status": status,
    }
    fields.update(overrides)
    return Booking(**fields)


def make_block(all_day: bool = False, start_time=None, end_time=None, **overrides) -> BlockedTime:
    fields = {
        "provider_id": "prov_1",
        "start_date": MONDAY,
        "end_date": MONDAY,
        "all_day": all_day,
        "start_time": start_time,
        "end_time": end_time,
    }
    fields.update(overrides)
    return BlockedTime(**fields)


@pytest.fixture
def provider() -> Provider:
    """Works Monday and Wednesday, 09:00-17:00, no buffer."""
    return Provider(
        id="prov_1",
        name="Dr. Smith",
        schedule=[
            WorkingHoursEntry(day_of_week=1, start_time="09:00", end_time="17:00"),
            WorkingHoursEntry(day_of_week=3, start_time="09:00", end_time="17:00"),
        ],
        buffer_minutes=0,
    )


@pytest.fixture
def appointment_type() -> AppointmentType:
    return AppointmentType(id="type_1", name="Consultation", duration=30)


@pytest.fixture
def config() -> SchedulingConfig:
    return SchedulingConfig(slot_interval=30)


@pytest.fixture
def booking_input() -> BookingInput:
    return BookingInput(
        appointment_type_id="type_1",
        provider_id="prov_1",
        date=MONDAY,
        time="09:00",
        patient=PatientInfo(name="Jane Doe", email="jane@example.com", phone="555-0100"),
    )


class FakeStore:
    """In-memory BookingStore; rejects a second active booking at the same time."""

    def __init__(self, providers=(), appointment_types=(), bookings=(), blocked_times=()):
        self.providers = {p.id: p for p in providers}
        self.appointment_types = {t.id: t for t in appointment_types}
        self.bookings: List[Booking] = list(bookings)
        self.blocked_times: List[BlockedTime] = list(blocked_times)
        self.created: List[Dict[str, Any]] = []

    async def find_provider(self, provider_id: str) -> Optional[Provider]:
        return self.providers.get(provider_id)

    async def find_appointment_type(self, appointment_type_id: str) -> Optional[AppointmentType]:
        return self.appointment_types.get(appointment_type_id)

    async def find_bookings_for_date(self, provider_id: str, date: str) -> List[Booking]:
        return [b for b in self.bookings if b.provider_id == provider_id and b.date == date]

    async def find_blocked_times_for_date(self, provider_id: str, date: str) -> List[BlockedTime]:
        return [
            b for b in self.blocked_times
            if b.provider_id == provider_id and b.start_date <= date <= b.end_date
        ]

    async def count_bookings_for_date(self, provider_id: str, date: str) -> int:
        return len(await self.find_bookings_for_date(provider_id, date))

    async def create_booking_record(self, fields: Dict[str, Any]) -> Booking:
        for b in self.bookings:
            if (
                b.provider_id == fields["provider_id"]
                and b.date == fields["date"]
                and b.time == fields["time"]
                and b.status != BookingStatus.cancelled
            ):
                raise SlotConflictError("duplicate slot")
        self.created.append(fields)
        booking = Booking(id=f"bk_{len(self.bookings) + 1}", **fields)
        self.bookings.append(booking)
        return booking


@pytest.fixture
def store(provider, appointment_type) -> FakeStore:
    return FakeStore(providers=[provider], appointment_types=[appointment_type])


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session
