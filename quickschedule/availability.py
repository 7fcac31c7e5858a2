# quickschedule/availability.py

import logging
from datetime import datetime
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from quickschedule.config import SchedulingConfig
from quickschedule.core import filter_conflicts, generate_slots
from quickschedule.schemas import (
    AppointmentType,
    AppointmentTypeSummary,
    AvailabilityResponse,
    BlockedTime,
    Booking,
    BookingStatus,
    Provider,
    ProviderSummary,
)
from quickschedule.timeutils import day_of_week
from quickschedule.validation import is_time_in_past

logger = logging.getLogger(__name__)


def get_available_slots(
    provider: Provider,
    appointment_type: AppointmentType,
    date: str,
    bookings: Sequence[Booking],
    blocked_times: Sequence[BlockedTime],
    config: SchedulingConfig,
) -> AvailabilityResponse:
    """
    Bookable start times for one provider, appointment type and day.

    Pure function of its inputs. Minimum notice is not applied here;
    callers that want it chain filter_min_notice on the result.
    """
    # 1) Working hours for that day of week
    try:
        weekday = day_of_week(date)
    except ValueError:
        # shape-valid but impossible date (e.g. 2024-02-30): nobody works that day
        logger.debug("Unparseable date %r, no availability", date)
        return _build_response(provider, appointment_type, date, [])

    day_schedule = [entry for entry in provider.schedule if entry.day_of_week == weekday]
    if not day_schedule:
        return _build_response(provider, appointment_type, date, [])

    # 2) Daily quota counts active bookings only
    active_bookings = [b for b in bookings if b.status != BookingStatus.cancelled]
    if appointment_type.max_per_day and len(active_bookings) >= appointment_type.max_per_day:
        logger.debug("Daily limit of %s reached on %s", appointment_type.max_per_day, date)
        return _build_response(provider, appointment_type, date, [])

    # 3) Candidates from every working window, first occurrence wins
    candidates: List[str] = []
    for entry in day_schedule:
        candidates.extend(generate_slots(entry.start_time, entry.end_time, config.slot_interval))
    candidates = list(dict.fromkeys(candidates))

    # 4) Provider buffer plus both appointment-type buffers, applied on each side
    total_buffer = (
        provider.buffer_minutes
        + appointment_type.buffer_before
        + appointment_type.buffer_after
    )

    # 5) Only blocks whose literal range covers the date
    blocks_for_day = [b for b in blocked_times if b.start_date <= date <= b.end_date]

    available = filter_conflicts(
        candidates,
        appointment_type.duration,
        active_bookings,
        blocks_for_day,
        total_buffer,
    )
    return _build_response(provider, appointment_type, date, available)


def filter_min_notice(
    slots: Sequence[str],
    date: str,
    min_notice_hours: float,
    *,
    timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> List[str]:
    """
    Drop slots that start sooner than min_notice_hours from now. `now` defaults
    to the current wall clock in `timezone`, compared naively.
    """
    if now is None:
        now = datetime.now(ZoneInfo(timezone)).replace(tzinfo=None)
    return [slot for slot in slots if not is_time_in_past(date, slot, min_notice_hours, now=now)]


def _build_response(
    provider: Provider,
    appointment_type: AppointmentType,
    date: str,
    slots: List[str],
) -> AvailabilityResponse:
    return AvailabilityResponse(
        date=date,
        provider=ProviderSummary(id=provider.id, name=provider.name),
        appointment_type=AppointmentTypeSummary(
            id=appointment_type.id,
            name=appointment_type.name,
            duration=appointment_type.duration,
        ),
        available_slots=slots,
    )
