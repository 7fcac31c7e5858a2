# quickschedule/booking.py

import inspect
import logging
from typing import Any, Dict, List, Optional, Protocol

from quickschedule.availability import get_available_slots
from quickschedule.config import SchedulingConfig
from quickschedule.errors import SlotConflictError
from quickschedule.schemas import (
    AppointmentType,
    BlockedTime,
    Booking,
    BookingError,
    BookingInput,
    BookingResult,
    BookingStatus,
    CustomValidationResult,
    Provider,
)
from quickschedule.timeutils import (
    format_time,
    generate_cancel_token,
    generate_confirmation_number,
    parse_time,
)
from quickschedule.validation import validate_booking_input

logger = logging.getLogger(__name__)


class BookingStore(Protocol):
    """
    Data-access collaborator used by process_booking.

    Contract: the store must make "one winner per contested slot" hold, either
    with a uniqueness constraint on (provider, date, time) for active bookings
    or by serializing count-then-create per provider and date. A create that
    loses that race raises SlotConflictError. Any other exception is treated
    as an infrastructure fault and propagates to the caller.
    """

    async def find_provider(self, provider_id: str) -> Optional[Provider]: ...

    async def find_appointment_type(self, appointment_type_id: str) -> Optional[AppointmentType]: ...

    async def find_bookings_for_date(self, provider_id: str, date: str) -> List[Booking]: ...

    async def find_blocked_times_for_date(self, provider_id: str, date: str) -> List[BlockedTime]: ...

    async def count_bookings_for_date(self, provider_id: str, date: str) -> int: ...

    async def create_booking_record(self, fields: Dict[str, Any]) -> Booking: ...


def _rejected(error: BookingError, message: str) -> BookingResult:
    logger.info("Booking rejected (%s): %s", error.value, message)
    return BookingResult(success=False, error=error, message=message)


async def _run_custom_validation(hook, booking_input: BookingInput) -> CustomValidationResult:
    outcome = hook(booking_input)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    if isinstance(outcome, CustomValidationResult):
        return outcome
    return CustomValidationResult.model_validate(outcome)


async def process_booking(
    booking_input: BookingInput,
    store: BookingStore,
    config: SchedulingConfig,
) -> BookingResult:
    """
    Admit a booking request: validate, re-check availability against the
    store's current state, then create the record with a date-scoped
    confirmation number and a fresh cancel token.

    Every stage either continues or returns a tagged failure. Store errors
    other than SlotConflictError are not caught.
    """
    options = config.validation

    # 1) Structural validation
    validation = validate_booking_input(booking_input, options)
    if not validation.valid:
        return _rejected(BookingError.validation_error, ", ".join(validation.errors))

    # 2) Caller-supplied hook
    if options.custom_validation is not None:
        custom = await _run_custom_validation(options.custom_validation, booking_input)
        if not custom.valid:
            return _rejected(
                BookingError.validation_error,
                custom.message or "Custom validation failed",
            )

    # 3) Provider
    provider = await store.find_provider(booking_input.provider_id)
    if provider is None:
        return _rejected(BookingError.provider_not_found, "Provider not found")

    # 4) Appointment type
    appointment_type = await store.find_appointment_type(booking_input.appointment_type_id)
    if appointment_type is None:
        return _rejected(BookingError.appointment_type_not_found, "Appointment type not found")

    # 5) Re-check the slot against what is stored right now
    bookings = await store.find_bookings_for_date(booking_input.provider_id, booking_input.date)
    blocked_times = await store.find_blocked_times_for_date(booking_input.provider_id, booking_input.date)

    availability = get_available_slots(
        provider,
        appointment_type,
        booking_input.date,
        bookings,
        blocked_times,
        config,
    )
    if booking_input.time not in availability.available_slots:
        return _rejected(BookingError.slot_unavailable, "This time slot is no longer available")

    # 6) Sequence and derived fields
    sequence = await store.count_bookings_for_date(booking_input.provider_id, booking_input.date) + 1
    confirmation_number = generate_confirmation_number(booking_input.date, sequence)
    cancel_token = generate_cancel_token()
    end_time = format_time(parse_time(booking_input.time) + appointment_type.duration)

    patient = booking_input.patient
    fields = {
        "appointment_type_id": booking_input.appointment_type_id,
        "provider_id": booking_input.provider_id,
        "date": booking_input.date,
        "time": booking_input.time,
        "duration": appointment_type.duration,
        "end_time": end_time,
        "patient_name": patient.name,
        "patient_email": patient.email,
        "patient_phone": patient.phone,
        "notes": patient.notes,
        "status": BookingStatus.confirmed.value,
        "confirmation_number": confirmation_number,
        "cancel_token": cancel_token,
    }

    # 7) Persist; a lost race on the store's uniqueness guarantee means the slot is gone
    try:
        booking = await store.create_booking_record(fields)
    except SlotConflictError:
        return _rejected(BookingError.slot_unavailable, "This time slot is no longer available")

    logger.info("Booking %s created for provider %s", confirmation_number, booking_input.provider_id)
    return BookingResult(success=True, booking=booking, token=cancel_token)
