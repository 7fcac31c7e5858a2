# quickschedule/errors.py


class SlotConflictError(Exception):
    """
    Raised by a BookingStore when creating a booking would break its uniqueness
    guarantee, e.g. a second active booking for the same provider, date and time,
    or a duplicate confirmation number. process_booking reports it as
    slot_unavailable.
    """
