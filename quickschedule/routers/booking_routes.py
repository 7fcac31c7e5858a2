# quickschedule/routers/booking_routes.py

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from quickschedule.booking import process_booking
from quickschedule.config import SchedulingConfig
from quickschedule.deps import get_scheduling_config, get_store
from quickschedule.schemas import BookingError, BookingInput, BookingStatus, CancelRequest
from quickschedule.store import SqlBookingStore

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["bookings"],
)

ERROR_STATUS = {
    BookingError.validation_error: 400,
    BookingError.provider_not_found: 404,
    BookingError.appointment_type_not_found: 404,
    BookingError.slot_unavailable: 409,
}


@router.post("/book", status_code=201)
async def book(
    booking_input: BookingInput,
    store: SqlBookingStore = Depends(get_store),
    config: SchedulingConfig = Depends(get_scheduling_config),
):
    result = await process_booking(booking_input, store, config)

    status_code = 201 if result.success else ERROR_STATUS[result.error]
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


@router.post("/cancel")
async def cancel(
    request: CancelRequest,
    store: SqlBookingStore = Depends(get_store),
):
    if not request.booking_id or not request.token:
        raise HTTPException(status_code=400, detail="Missing booking_id and token")

    # 1) Find the booking
    booking = await store.find_booking(request.booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")

    # 2) The cancel token is the only credential
    if not booking.cancel_token or not secrets.compare_digest(
        booking.cancel_token.encode(), request.token.encode()
    ):
        raise HTTPException(status_code=403, detail="Invalid token")

    # 3) Already cancelled?
    if booking.status == BookingStatus.cancelled:
        raise HTTPException(status_code=409, detail="Booking already cancelled")

    await store.cancel_booking(request.booking_id, request.reason)
    logger.info("Booking %s cancelled", booking.confirmation_number)
    return {"success": True}
