# quickschedule/core.py

from typing import Iterable, List, Sequence

from quickschedule.schemas import BlockedTime, Booking
from quickschedule.timeutils import format_time, parse_time


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    # half-open intervals: touching endpoints do not overlap
    return start_a < end_b and end_a > start_b


def generate_slots(start_time: str, end_time: str, interval: int) -> List[str]:
    """
    Candidate start times from start_time, every `interval` minutes,
    as long as a full interval still fits before end_time.
    """
    if interval <= 0:
        raise ValueError(f"Slot interval must be positive, got {interval}")

    start = parse_time(start_time)
    end = parse_time(end_time)

    slots = []
    current = start
    while current + interval <= end:
        slots.append(format_time(current))
        current += interval
    return slots


def filter_conflicts(
    slots: Iterable[str],
    appointment_duration: int,
    bookings: Sequence[Booking],
    blocked_times: Sequence[BlockedTime],
    buffer_minutes: int = 0,
) -> List[str]:
    """
    Drop every slot whose [start, start + appointment_duration) interval
    touches a buffered booking or a partial-day block. Any all-day block
    empties the whole day. Input order is preserved.

    Callers pass bookings that should count (cancelled ones already removed).
    """
    # 1) One all-day block voids the day
    if any(b.all_day for b in blocked_times):
        return []

    # 2) Pre-compute occupied intervals
    booked = []
    for b in bookings:
        booking_start = parse_time(b.time)
        booking_end = booking_start + b.duration
        booked.append((booking_start - buffer_minutes, booking_end + buffer_minutes))

    blocked = []
    for b in blocked_times:
        if b.start_time and b.end_time:
            blocked.append((parse_time(b.start_time), parse_time(b.end_time)))

    # 3) Keep slots clear of both
    available = []
    for slot in slots:
        slot_start = parse_time(slot)
        slot_end = slot_start + appointment_duration

        if any(overlaps(slot_start, slot_end, s, e) for s, e in booked):
            continue
        if any(overlaps(slot_start, slot_end, s, e) for s, e in blocked):
            continue

        available.append(slot)
    return available
