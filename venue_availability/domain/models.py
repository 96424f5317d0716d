"""Domain models for venue availability and conflict tracking.

All timestamps are integer milliseconds since the Unix epoch. Durations are
milliseconds, except venue setup/cleanup buffers which are minutes.
"""

from __future__ import annotations

import time
import uuid
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator


MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


class BookingStatus(StrEnum):
    AVAILABLE = "AVAILABLE"
    TENTATIVE = "TENTATIVE"
    CONFIRMED = "CONFIRMED"
    BLOCKED = "BLOCKED"


class ConflictType(StrEnum):
    VENUE_DOUBLE_BOOKING = "VENUE_DOUBLE_BOOKING"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    STAFF_UNAVAILABLE = "STAFF_UNAVAILABLE"
    TIME_OVERLAP = "TIME_OVERLAP"


class Severity(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


def now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Stored entities
# ---------------------------------------------------------------------------


class Venue(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    description: str | None = None
    capacity: int = Field(ge=0)
    location: str | None = None
    amenities: list[str] = Field(default_factory=list)
    hourly_rate: float | None = None
    daily_rate: float | None = None
    setup_time: int = Field(default=0, ge=0)
    cleanup_time: int = Field(default=0, ge=0)
    is_active: bool = True
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)

    @property
    def buffer_ms(self) -> int:
        """Setup plus cleanup turnover, in milliseconds."""
        return (self.setup_time + self.cleanup_time) * MINUTE_MS


class Opportunity(BaseModel):
    """The slice of a sales opportunity that venue booking needs."""

    id: str = Field(default_factory=_new_id)
    name: str
    event_date: int
    is_active: bool = True
    room_assignment: str | None = None
    updated_at: int = Field(default_factory=now_ms)


class AvailabilitySlot(BaseModel):
    id: str = Field(default_factory=_new_id)
    venue_id: str
    start_time: int
    end_time: int
    date: int | None = None
    booking_status: BookingStatus = BookingStatus.AVAILABLE
    opportunity_id: str | None = None
    notes: str | None = None
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)

    @model_validator(mode="after")
    def _end_after_start(self) -> AvailabilitySlot:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.date is None:
            self.date = self.start_time
        return self

    @computed_field
    @property
    def is_booked(self) -> bool:
        return self.booking_status == BookingStatus.CONFIRMED


class ConflictDetectionLog(BaseModel):
    id: str = Field(default_factory=_new_id)
    opportunity_id: str
    conflict_type: ConflictType
    severity: Severity
    conflict_date: int
    conflicting_opportunity_id: str | None = None
    venue_id: str | None = None
    is_resolved: bool = False
    resolution_notes: str | None = None
    detected_at: int = Field(default_factory=now_ms)
    resolved_at: int | None = None


# ---------------------------------------------------------------------------
# Computed results (never stored)
# ---------------------------------------------------------------------------


class VenueDoubleBookingConflict(BaseModel):
    """A live overlap between a candidate window and an existing booking."""

    conflict_type: Literal["VENUE_DOUBLE_BOOKING"] = "VENUE_DOUBLE_BOOKING"
    severity: Severity
    booking: AvailabilitySlot
    venue: Venue | None = None
    opportunity: Opportunity | None = None
    overlap_start: int
    overlap_end: int


class DateConflict(BaseModel):
    """Another active opportunity whose event falls on the same date, at any venue."""

    conflict_type: Literal["DATE_CONFLICT"] = "DATE_CONFLICT"
    severity: Severity = Severity.LOW
    opportunity: Opportunity


ConflictRecord = Annotated[
    VenueDoubleBookingConflict | DateConflict, Field(discriminator="conflict_type")
]


class AlternativeDateSuggestion(BaseModel):
    start_time: int
    end_time: int
    venue: Venue
    is_preferred_date: bool


# ---------------------------------------------------------------------------
# Request DTOs
# ---------------------------------------------------------------------------


class CreateVenueRequest(BaseModel):
    name: str
    description: str | None = None
    capacity: int = Field(ge=0)
    location: str | None = None
    amenities: list[str] = Field(default_factory=list)
    hourly_rate: float | None = None
    daily_rate: float | None = None
    setup_time: int = Field(ge=0)
    cleanup_time: int = Field(ge=0)


class UpdateVenueRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    location: str | None = None
    amenities: list[str] | None = None
    hourly_rate: float | None = None
    daily_rate: float | None = None
    setup_time: int | None = Field(default=None, ge=0)
    cleanup_time: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class CreateSlotRequest(BaseModel):
    venue_id: str
    start_time: int
    end_time: int
    date: int | None = None
    booking_status: BookingStatus | None = None
    opportunity_id: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> CreateSlotRequest:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class UpdateSlotRequest(BaseModel):
    booking_status: BookingStatus | None = None
    opportunity_id: str | None = None
    notes: str | None = None


class ConflictCheckRequest(BaseModel):
    venue_id: str | None = None
    start_time: int
    end_time: int
    exclude_opportunity_id: str | None = None


class DateConflictCheckRequest(BaseModel):
    event_date: int
    venue_id: str | None = None
    event_duration: int | None = Field(default=None, gt=0)
    exclude_opportunity_id: str | None = None


class LogConflictRequest(BaseModel):
    opportunity_id: str
    conflict_type: ConflictType
    severity: Severity
    conflict_date: int
    conflicting_opportunity_id: str | None = None
    venue_id: str | None = None


class ResolveConflictRequest(BaseModel):
    resolution_notes: str | None = None


class BookVenueRequest(BaseModel):
    venue_id: str
    event_duration: int = Field(gt=0)
    booking_status: BookingStatus = BookingStatus.TENTATIVE
    notes: str | None = None

    @field_validator("booking_status")
    @classmethod
    def _holding_status(cls, value: BookingStatus) -> BookingStatus:
        if value not in (BookingStatus.TENTATIVE, BookingStatus.CONFIRMED):
            raise ValueError("booking_status must be TENTATIVE or CONFIRMED")
        return value
