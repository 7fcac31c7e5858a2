# quickschedule/routers/availability_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from quickschedule.availability import filter_min_notice, get_available_slots
from quickschedule.config import SchedulingConfig
from quickschedule.deps import get_scheduling_config, get_store
from quickschedule.schemas import AppointmentType, AvailabilityResponse, Provider
from quickschedule.store import SqlBookingStore

router = APIRouter(
    tags=["availability"],
)


@router.get("/providers", response_model=List[Provider])
async def list_providers(store: SqlBookingStore = Depends(get_store)):
    return await store.list_providers()


@router.get("/appointment-types", response_model=List[AppointmentType])
async def list_appointment_types(
    provider_id: Optional[str] = None,
    store: SqlBookingStore = Depends(get_store),
):
    return await store.list_appointment_types(provider_id)


@router.get("/availability", response_model=AvailabilityResponse)
async def availability(
    provider_id: str = "",
    appointment_type_id: str = "",
    date: str = "",
    store: SqlBookingStore = Depends(get_store),
    config: SchedulingConfig = Depends(get_scheduling_config),
):
    if not provider_id or not appointment_type_id or not date:
        raise HTTPException(
            status_code=400,
            detail="Missing required params: provider_id, appointment_type_id, date",
        )

    # 1) Lookup provider and appointment type
    provider = await store.find_provider(provider_id)
    if provider is None:
        raise HTTPException(status_code=404, detail="Provider not found")

    appointment_type = await store.find_appointment_type(appointment_type_id)
    if appointment_type is None:
        raise HTTPException(status_code=404, detail="Appointment type not found")

    # 2) Collect bookings and blocks for this provider + date
    bookings = await store.find_bookings_for_date(provider_id, date)
    blocked_times = await store.find_blocked_times_for_date(provider_id, date)

    # 3) Compute slots
    result = get_available_slots(provider, appointment_type, date, bookings, blocked_times, config)

    if config.enforce_min_notice:
        result.available_slots = filter_min_notice(
            result.available_slots,
            date,
            config.min_notice,
            timezone=config.timezone,
        )

    return result
