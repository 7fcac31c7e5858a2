# quickschedule/store.py

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from quickschedule.errors import SlotConflictError
from quickschedule.models import (
    AppointmentTypeRecord,
    BlockedTimeRecord,
    BookingRecord,
    ProviderRecord,
)
from quickschedule.schemas import (
    AppointmentType,
    BlockedTime,
    Booking,
    BookingStatus,
    Provider,
    WorkingHoursEntry,
)

logger = logging.getLogger(__name__)


def to_provider(record: ProviderRecord) -> Provider:
    return Provider(
        id=record.id,
        name=record.name,
        email=record.email,
        active=record.active,
        schedule=[WorkingHoursEntry(**entry) for entry in record.schedule or []],
        buffer_minutes=record.buffer_minutes,
    )


def to_appointment_type(record: AppointmentTypeRecord) -> AppointmentType:
    return AppointmentType(
        id=record.id,
        name=record.name,
        slug=record.slug,
        duration=record.duration,
        active=record.active,
        max_per_day=record.max_per_day,
        buffer_before=record.buffer_before,
        buffer_after=record.buffer_after,
        provider_ids=list(record.provider_ids or []),
    )


def to_booking(record: BookingRecord) -> Booking:
    return Booking(
        id=record.id,
        appointment_type_id=record.appointment_type_id,
        provider_id=record.provider_id,
        date=record.date,
        time=record.time,
        duration=record.duration,
        end_time=record.end_time,
        patient_name=record.patient_name,
        patient_email=record.patient_email,
        patient_phone=record.patient_phone,
        notes=record.notes,
        status=record.status,
        confirmation_number=record.confirmation_number,
        cancel_token=record.cancel_token,
        cancelled_at=record.cancelled_at.isoformat() if record.cancelled_at else None,
        cancel_reason=record.cancel_reason,
    )


def to_blocked_time(record: BlockedTimeRecord) -> BlockedTime:
    return BlockedTime(
        id=record.id,
        provider_id=record.provider_id,
        reason=record.reason,
        start_date=record.start_date,
        end_date=record.end_date,
        all_day=record.all_day,
        start_time=record.start_time,
        end_time=record.end_time,
        recurring=record.recurring,
    )


class SqlBookingStore:
    """
    BookingStore backed by a SQLModel session.

    Double-booking protection comes from the uq_booking_provider_slot index:
    a second active row for the same provider/date/time fails on commit and
    surfaces as SlotConflictError. Session work runs in the threadpool so the
    awaiting task yields the event loop; calls on one store are sequential.
    """

    def __init__(self, session: Session):
        self.session = session

    # -- lookups used by the admission protocol --

    async def find_provider(self, provider_id: str) -> Optional[Provider]:
        return await run_in_threadpool(self._find_provider, provider_id)

    async def find_appointment_type(self, appointment_type_id: str) -> Optional[AppointmentType]:
        return await run_in_threadpool(self._find_appointment_type, appointment_type_id)

    async def find_bookings_for_date(self, provider_id: str, date: str) -> List[Booking]:
        return await run_in_threadpool(self._find_bookings_for_date, provider_id, date)

    async def find_blocked_times_for_date(self, provider_id: str, date: str) -> List[BlockedTime]:
        return await run_in_threadpool(self._find_blocked_times_for_date, provider_id, date)

    async def count_bookings_for_date(self, provider_id: str, date: str) -> int:
        return await run_in_threadpool(self._count_bookings_for_date, provider_id, date)

    async def create_booking_record(self, fields: Dict[str, Any]) -> Booking:
        return await run_in_threadpool(self._create_booking_record, fields)

    # -- listing and cancellation used by the HTTP routes --

    async def list_providers(self) -> List[Provider]:
        return await run_in_threadpool(self._list_providers)

    async def list_appointment_types(self, provider_id: Optional[str] = None) -> List[AppointmentType]:
        return await run_in_threadpool(self._list_appointment_types, provider_id)

    async def find_booking(self, booking_id: str) -> Optional[Booking]:
        return await run_in_threadpool(self._find_booking, booking_id)

    async def cancel_booking(self, booking_id: str, reason: Optional[str] = None) -> Optional[Booking]:
        return await run_in_threadpool(self._cancel_booking, booking_id, reason)

    # -- blocking session work --

    def _find_provider(self, provider_id: str) -> Optional[Provider]:
        record = self.session.get(ProviderRecord, provider_id)
        return to_provider(record) if record is not None else None

    def _find_appointment_type(self, appointment_type_id: str) -> Optional[AppointmentType]:
        record = self.session.get(AppointmentTypeRecord, appointment_type_id)
        return to_appointment_type(record) if record is not None else None

    def _find_bookings_for_date(self, provider_id: str, date: str) -> List[Booking]:
        records = self.session.exec(
            select(BookingRecord)
            .where(BookingRecord.provider_id == provider_id)
            .where(BookingRecord.date == date)
            .order_by(BookingRecord.time)
        ).all()
        return [to_booking(r) for r in records]

    def _find_blocked_times_for_date(self, provider_id: str, date: str) -> List[BlockedTime]:
        # literal range only, recurrence is not expanded
        records = self.session.exec(
            select(BlockedTimeRecord)
            .where(BlockedTimeRecord.provider_id == provider_id)
            .where(BlockedTimeRecord.start_date <= date)
            .where(BlockedTimeRecord.end_date >= date)
        ).all()
        return [to_blocked_time(r) for r in records]

    def _count_bookings_for_date(self, provider_id: str, date: str) -> int:
        # cancelled rows included so sequence numbers are never handed out twice
        return self.session.exec(
            select(func.count())
            .select_from(BookingRecord)
            .where(BookingRecord.provider_id == provider_id)
            .where(BookingRecord.date == date)
        ).one()

    def _create_booking_record(self, fields: Dict[str, Any]) -> Booking:
        record = BookingRecord(**fields)
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.warning(
                "Uniqueness violation creating booking for provider %s on %s at %s",
                fields.get("provider_id"),
                fields.get("date"),
                fields.get("time"),
            )
            raise SlotConflictError("Booking conflicts with an existing booking")

        self.session.refresh(record)
        return to_booking(record)

    def _list_providers(self) -> List[Provider]:
        records = self.session.exec(
            select(ProviderRecord)
            .where(ProviderRecord.active == True)  # noqa: E712
            .order_by(ProviderRecord.name)
        ).all()
        return [to_provider(r) for r in records]

    def _list_appointment_types(self, provider_id: Optional[str] = None) -> List[AppointmentType]:
        records = self.session.exec(
            select(AppointmentTypeRecord)
            .where(AppointmentTypeRecord.active == True)  # noqa: E712
            .order_by(AppointmentTypeRecord.name)
        ).all()
        types = [to_appointment_type(r) for r in records]
        if provider_id:
            # an empty provider list means the type is offered by everyone
            types = [t for t in types if not t.provider_ids or provider_id in t.provider_ids]
        return types

    def _find_booking(self, booking_id: str) -> Optional[Booking]:
        record = self.session.get(BookingRecord, booking_id)
        return to_booking(record) if record is not None else None

    def _cancel_booking(self, booking_id: str, reason: Optional[str] = None) -> Optional[Booking]:
        record = self.session.get(BookingRecord, booking_id)
        if record is None:
            return None

        record.status = BookingStatus.cancelled.value
        record.cancelled_at = datetime.now(timezone.utc)
        record.cancel_reason = reason or ""
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return to_booking(record)
