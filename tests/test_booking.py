"""Tests for the booking admission protocol."""

import pytest
from conftest import MONDAY, TUESDAY, FakeStore, make_block, make_booking

from quickschedule.booking import process_booking
from quickschedule.config import SchedulingConfig, ValidationOptions
from quickschedule.errors import SlotConflictError
from quickschedule.schemas import BookingError, CustomValidationResult


class TestProcessBookingSuccess:
    @pytest.mark.asyncio
    async def test_creates_confirmed_booking(self, booking_input, store, config):
        result = await process_booking(booking_input, store, config)

        assert result.success is True
        assert result.error is None
        assert result.booking.status == "confirmed"
        assert result.booking.time == "09:00"
        assert result.booking.end_time == "09:30"
        assert result.booking.duration == 30

    @pytest.mark.asyncio
    async def test_fields_sent_to_store(self, booking_input, store, config):
        booking_input.patient.notes = "First visit"

        result = await process_booking(booking_input, store, config)

        fields = store.created[0]
        assert fields["provider_id"] == "prov_1"
        assert fields["appointment_type_id"] == "type_1"
        assert fields["date"] == MONDAY
        assert fields["patient_name"] == "Jane Doe"
        assert fields["patient_email"] == "jane@example.com"
        assert fields["patient_phone"] == "555-0100"
        assert fields["notes"] == "First visit"
        assert fields["status"] == "confirmed"
        assert fields["cancel_token"] == result.token

    @pytest.mark.asyncio
    async def test_token_returned_but_not_serialized_on_booking(self, booking_input, store, config):
        result = await process_booking(booking_input, store, config)

        assert len(result.token) == 32
        assert result.token.isalnum()
        assert "cancel_token" not in result.booking.model_dump()
        assert result.model_dump()["token"] == result.token

    @pytest.mark.asyncio
    async def test_first_confirmation_number(self, booking_input, store, config):
        result = await process_booking(booking_input, store, config)
        assert result.booking.confirmation_number == "QS-2024-0318-001"

    @pytest.mark.asyncio
    async def test_sequence_counts_existing_bookings(self, booking_input, store, config):
        store.bookings = [make_booking("13:00"), make_booking("15:00", status="cancelled")]

        result = await process_booking(booking_input, store, config)

        assert result.booking.confirmation_number == "QS-2024-0318-003"

    @pytest.mark.asyncio
    async def test_sequential_requests(self, booking_input, store, config):
        first = await process_booking(booking_input, store, config)
        booking_input.time = "11:00"
        second = await process_booking(booking_input, store, config)

        assert first.booking.confirmation_number.endswith("-001")
        assert second.booking.confirmation_number.endswith("-002")
        assert first.token != second.token

    @pytest.mark.asyncio
    async def test_end_time_uses_type_duration(self, booking_input, store, config, appointment_type):
        appointment_type.duration = 45
        booking_input.time = "10:30"

        result = await process_booking(booking_input, store, config)

        assert result.booking.end_time == "11:15"
        assert result.booking.duration == 45


class TestProcessBookingRejections:
    @pytest.mark.asyncio
    async def test_validation_error_joins_messages(self, booking_input, store, config):
        booking_input.date = "bad"
        booking_input.patient.name = ""

        result = await process_booking(booking_input, store, config)

        assert result.success is False
        assert result.error == BookingError.validation_error
        assert result.message == "Invalid date format, Patient name is required"
        assert store.created == []

    @pytest.mark.asyncio
    async def test_validation_options_from_config(self, booking_input, store):
        booking_input.patient.phone = ""
        config = SchedulingConfig(validation=ValidationOptions(require_phone=True))

        result = await process_booking(booking_input, store, config)

        assert result.error == BookingError.validation_error
        assert result.message == "Patient phone is required"

    @pytest.mark.asyncio
    async def test_custom_validation_async(self, booking_input, store):
        async def no_mondays(booking):
            return {"valid": False, "message": "Closed for inventory"}

        config = SchedulingConfig(validation=ValidationOptions(custom_validation=no_mondays))
        result = await process_booking(booking_input, store, config)

        assert result.error == BookingError.validation_error
        assert result.message == "Closed for inventory"

    @pytest.mark.asyncio
    async def test_custom_validation_default_message(self, booking_input, store):
        config = SchedulingConfig(
            validation=ValidationOptions(custom_validation=lambda booking: CustomValidationResult(valid=False))
        )
        result = await process_booking(booking_input, store, config)

        assert result.error == BookingError.validation_error
        assert result.message == "Custom validation failed"

    @pytest.mark.asyncio
    async def test_custom_validation_passes(self, booking_input, store):
        seen = []

        def hook(booking):
            seen.append(booking.patient.name)
            return {"valid": True}

        config = SchedulingConfig(validation=ValidationOptions(custom_validation=hook))
        result = await process_booking(booking_input, store, config)

        assert result.success is True
        assert seen == ["Jane Doe"]

    @pytest.mark.asyncio
    async def test_provider_not_found(self, booking_input, store, config):
        booking_input.provider_id = "missing"

        result = await process_booking(booking_input, store, config)

        assert result.error == BookingError.provider_not_found
        assert result.message == "Provider not found"

    @pytest.mark.asyncio
    async def test_appointment_type_not_found(self, booking_input, store, config):
        booking_input.appointment_type_id = "missing"

        result = await process_booking(booking_input, store, config)

        assert result.error == BookingError.appointment_type_not_found

    @pytest.mark.asyncio
    async def test_slot_taken(self, booking_input, store, config):
        store.bookings = [make_booking("09:00")]

        result = await process_booking(booking_input, store, config)

        assert result.error == BookingError.slot_unavailable
        assert result.message == "This time slot is no longer available"
        assert store.created == []

    @pytest.mark.asyncio
    async def test_day_not_worked(self, booking_input, store, config):
        booking_input.date = TUESDAY
        result = await process_booking(booking_input, store, config)
        assert result.error == BookingError.slot_unavailable

    @pytest.mark.asyncio
    async def test_impossible_date(self, booking_input, store, config):
        booking_input.date = "2024-02-30"
        result = await process_booking(booking_input, store, config)
        assert result.error == BookingError.slot_unavailable

    @pytest.mark.asyncio
    async def test_off_grid_time(self, booking_input, store, config):
        booking_input.time = "09:15"
        result = await process_booking(booking_input, store, config)
        assert result.error == BookingError.slot_unavailable

    @pytest.mark.asyncio
    async def test_blocked(self, booking_input, store, config):
        store.blocked_times = [make_block(start_time="08:00", end_time="12:00")]
        result = await process_booking(booking_input, store, config)
        assert result.error == BookingError.slot_unavailable

    @pytest.mark.asyncio
    async def test_provider_buffer(self, booking_input, store, config, provider):
        """15 minute buffer around a 10:00 booking: 10:00 is refused, 09:00 is fine."""
        provider.buffer_minutes = 15
        store.bookings = [make_booking("10:00")]

        booking_input.time = "10:00"
        rejected = await process_booking(booking_input, store, config)
        assert rejected.error == BookingError.slot_unavailable

        booking_input.time = "09:00"
        accepted = await process_booking(booking_input, store, config)
        assert accepted.success is True

    @pytest.mark.asyncio
    async def test_second_request_for_same_slot_loses(self, booking_input, store, config):
        first = await process_booking(booking_input, store, config)
        second = await process_booking(booking_input, store, config)

        assert first.success is True
        assert second.error == BookingError.slot_unavailable

    @pytest.mark.asyncio
    async def test_store_uniqueness_violation_is_slot_unavailable(self, booking_input, store, config):
        async def lost_race(fields):
            raise SlotConflictError("duplicate")

        store.create_booking_record = lost_race

        result = await process_booking(booking_input, store, config)

        assert result.success is False
        assert result.error == BookingError.slot_unavailable


class TestProcessBookingFaults:
    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, booking_input, store, config):
        async def broken(provider_id, date):
            raise ConnectionError("database unavailable")

        store.find_bookings_for_date = broken

        with pytest.raises(ConnectionError):
            await process_booking(booking_input, store, config)

    @pytest.mark.asyncio
    async def test_create_errors_propagate(self, booking_input, config, provider, appointment_type):
        class FailingStore(FakeStore):
            async def create_booking_record(self, fields):
                raise RuntimeError("disk full")

        store = FailingStore(providers=[provider], appointment_types=[appointment_type])

        with pytest.raises(RuntimeError):
            await process_booking(booking_input, store, config)
