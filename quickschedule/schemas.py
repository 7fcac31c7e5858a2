# quickschedule/schemas.py

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"
    no_show = "no-show"


class Recurrence(str, Enum):
    # accepted as data only, blocking uses the literal date range
    none = "none"
    daily = "daily"
    weekly = "weekly"


class BookingError(str, Enum):
    validation_error = "validation_error"
    provider_not_found = "provider_not_found"
    appointment_type_not_found = "appointment_type_not_found"
    slot_unavailable = "slot_unavailable"


class WorkingHoursEntry(BaseModel):
    day_of_week: int = Field(ge=0, le=6)  # 0=Sun, 1=Mon....
    start_time: str
    end_time: str


class Provider(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    active: bool = True
    schedule: List[WorkingHoursEntry] = Field(default_factory=list)
    buffer_minutes: int = Field(default=0, ge=0)


class AppointmentType(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None
    duration: int = Field(gt=0)
    active: bool = True
    max_per_day: Optional[int] = Field(default=None, gt=0)
    buffer_before: int = Field(default=0, ge=0)
    buffer_after: int = Field(default=0, ge=0)
    provider_ids: List[str] = Field(default_factory=list)


class Booking(BaseModel):
    id: str
    appointment_type_id: str
    provider_id: str
    date: str
    time: str
    duration: int  # snapshot of the appointment type at creation
    end_time: Optional[str] = None
    patient_name: str = ""
    patient_email: str = ""
    patient_phone: str = ""
    notes: Optional[str] = None
    status: BookingStatus = BookingStatus.confirmed
    confirmation_number: Optional[str] = None
    cancel_token: Optional[str] = Field(default=None, exclude=True)
    cancelled_at: Optional[str] = None
    cancel_reason: Optional[str] = None


class BlockedTime(BaseModel):
    id: Optional[str] = None
    provider_id: str
    reason: Optional[str] = None
    start_date: str
    end_date: str
    all_day: bool = True
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    recurring: Recurrence = Recurrence.none


class PatientInfo(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    notes: Optional[str] = None


class BookingInput(BaseModel):
    # everything defaults to empty so validate_booking_input reports what is missing
    appointment_type_id: str = ""
    provider_id: str = ""
    date: str = ""
    time: str = ""
    patient: PatientInfo = Field(default_factory=PatientInfo)


class ProviderSummary(BaseModel):
    id: str
    name: str


class AppointmentTypeSummary(BaseModel):
    id: str
    name: str
    duration: int


class AvailabilityResponse(BaseModel):
    date: str
    provider: ProviderSummary
    appointment_type: AppointmentTypeSummary
    available_slots: List[str]


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class CustomValidationResult(BaseModel):
    valid: bool
    message: Optional[str] = None


class BookingResult(BaseModel):
    success: bool
    booking: Optional[Booking] = None
    token: Optional[str] = None
    error: Optional[BookingError] = None
    message: Optional[str] = None


class CancelRequest(BaseModel):
    booking_id: str = ""
    token: str = ""
    reason: Optional[str] = None
