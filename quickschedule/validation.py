# quickschedule/validation.py

import re
from datetime import datetime, timedelta
from typing import Optional

from quickschedule.config import ValidationOptions
from quickschedule.schemas import BookingInput, ValidationResult

DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
TIME_PATTERN = re.compile(r"([01][0-9]|2[0-3]):[0-5][0-9]")


def validate_booking_input(
    booking_input: BookingInput,
    options: Optional[ValidationOptions] = None,
) -> ValidationResult:
    """
    Structural checks on a booking request. Collects every failure instead
    of stopping at the first one. Never looks at stored data.

    Date is checked for shape only (YYYY-MM-DD), not calendar validity.
    """
    if options is None:
        options = ValidationOptions()

    errors = []
    patient = booking_input.patient

    if not booking_input.appointment_type_id:
        errors.append("Appointment type is required")
    if not booking_input.provider_id:
        errors.append("Provider is required")

    if not booking_input.date or not DATE_PATTERN.fullmatch(booking_input.date):
        errors.append("Invalid date format")

    if not booking_input.time or not TIME_PATTERN.fullmatch(booking_input.time):
        errors.append("Invalid time format")

    if not patient.name:
        errors.append("Patient name is required")

    if options.require_email and not patient.email:
        errors.append("Patient email is required")

    if options.require_phone and not patient.phone:
        errors.append("Patient phone is required")

    return ValidationResult(valid=not errors, errors=errors)


def is_time_in_past(
    date: str,
    time: str,
    min_notice_hours: float,
    *,
    now: Optional[datetime] = None,
) -> bool:
    """
    True when date+time starts less than min_notice_hours from now (or has
    already started). All values are naive wall-clock times; `now` defaults
    to the local clock.
    """
    appointment_start = datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M")
    if now is None:
        now = datetime.now()
    return appointment_start - now < timedelta(hours=min_notice_hours)
