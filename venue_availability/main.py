"""FastAPI application entry point for the venue availability service."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException

from venue_availability.config import get_settings
from venue_availability.domain.errors import BookingConflictError, NotFoundError
from venue_availability.domain.models import (
    AlternativeDateSuggestion,
    AvailabilitySlot,
    BookingStatus,
    BookVenueRequest,
    ConflictCheckRequest,
    ConflictDetectionLog,
    ConflictRecord,
    CreateSlotRequest,
    CreateVenueRequest,
    DateConflictCheckRequest,
    LogConflictRequest,
    ResolveConflictRequest,
    UpdateSlotRequest,
    UpdateVenueRequest,
    Venue,
    VenueDoubleBookingConflict,
)
from venue_availability.logger import get_logger
from venue_availability.repos.memory import create_store
from venue_availability.services import bookings
from venue_availability.services.conflict_log import (
    get_conflicts,
    log_conflict,
    resolve_conflict,
)
from venue_availability.services.conflicts import check_date_conflicts, get_date_conflicts
from venue_availability.services.suggestions import suggest_alternative_dates

logger = get_logger(__name__)

settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.app_version)

# ── Singletons (created at import time for simplicity) ────────────────
store = create_store(seed=settings.seed_demo_data)
search_policy = settings.slot_search_policy()
conflict_policy = settings.conflict_policy()
zone = settings.zone()
logger.info("Loaded %s (seed_demo_data=%s)", settings.app_name, settings.seed_demo_data)


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


def _invalid(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


# ── Venues ────────────────────────────────────────────────────────────


@app.post("/venues", response_model=Venue)
def create_venue(body: CreateVenueRequest) -> Venue:
    return bookings.create_venue(store, **body.model_dump())


@app.get("/venues", response_model=list[Venue])
def list_venues(active_only: bool = False) -> list[Venue]:
    return bookings.list_venues(store, active_only=active_only)


@app.patch("/venues/{venue_id}", response_model=Venue)
def update_venue(venue_id: str, body: UpdateVenueRequest) -> Venue:
    try:
        return bookings.update_venue(
            store, venue_id, **body.model_dump(exclude_unset=True)
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise _invalid(exc) from exc


@app.get("/venues/{venue_id}/suggestions", response_model=list[AlternativeDateSuggestion])
def suggestions(
    venue_id: str,
    preferred_date: int,
    duration: int,
    search_range: int | None = None,
) -> list[AlternativeDateSuggestion]:
    """Return conflict-free slots near *preferred_date*, closest first.

    An unknown venue yields an empty list rather than a 404.
    """
    return suggest_alternative_dates(
        store,
        venue_id=venue_id,
        preferred_date=preferred_date,
        duration=duration,
        search_range=search_range,
        policy=search_policy,
        zone=zone,
    )


# ── Availability slots ────────────────────────────────────────────────


@app.post("/availability", response_model=AvailabilitySlot)
def create_slot(body: CreateSlotRequest) -> AvailabilitySlot:
    try:
        return bookings.create_availability_slot(store, **body.model_dump())
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@app.get("/availability", response_model=list[AvailabilitySlot])
def list_slots(
    venue_id: str | None = None,
    start: int | None = None,
    end: int | None = None,
    booking_status: BookingStatus | None = None,
) -> list[AvailabilitySlot]:
    return bookings.get_venue_availability(
        store,
        venue_id=venue_id,
        start=start,
        end=end,
        booking_status=booking_status,
    )


@app.patch("/availability/{slot_id}", response_model=AvailabilitySlot)
def update_slot(slot_id: str, body: UpdateSlotRequest) -> AvailabilitySlot:
    try:
        return bookings.update_availability_slot(
            store, slot_id, **body.model_dump(exclude_unset=True)
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise _invalid(exc) from exc


# ── Conflicts ─────────────────────────────────────────────────────────


@app.post("/conflicts/check", response_model=list[VenueDoubleBookingConflict])
def check_conflicts(body: ConflictCheckRequest) -> list[VenueDoubleBookingConflict]:
    """Return existing holds overlapping the requested window."""
    return check_date_conflicts(
        store,
        start_time=body.start_time,
        end_time=body.end_time,
        venue_id=body.venue_id,
        exclude_opportunity_id=body.exclude_opportunity_id,
        policy=conflict_policy,
    )


@app.post("/conflicts")
def create_conflict_entry(body: LogConflictRequest) -> dict:
    conflict_id = log_conflict(store.conflicts, **body.model_dump())
    return {"id": conflict_id}


@app.post("/conflicts/{conflict_id}/resolve", response_model=ConflictDetectionLog)
def resolve_conflict_entry(
    conflict_id: str, body: ResolveConflictRequest | None = None
) -> ConflictDetectionLog:
    notes = body.resolution_notes if body else None
    try:
        return resolve_conflict(store.conflicts, conflict_id, resolution_notes=notes)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@app.get("/conflicts", response_model=list[ConflictDetectionLog])
def list_conflict_entries(
    opportunity_id: str | None = None,
    venue_id: str | None = None,
    unresolved_only: bool = False,
) -> list[ConflictDetectionLog]:
    return get_conflicts(
        store.conflicts,
        opportunity_id=opportunity_id,
        venue_id=venue_id,
        unresolved_only=unresolved_only,
    )


# ── Opportunity bookings ──────────────────────────────────────────────


@app.post("/opportunities/date-conflicts", response_model=list[ConflictRecord])
def date_conflicts(body: DateConflictCheckRequest) -> list[ConflictRecord]:
    """Return venue holds and same-date events competing with an event date."""
    return get_date_conflicts(
        store,
        event_date=body.event_date,
        venue_id=body.venue_id,
        event_duration=body.event_duration,
        exclude_opportunity_id=body.exclude_opportunity_id,
        policy=conflict_policy,
    )


@app.post("/opportunities/{opportunity_id}/booking", response_model=AvailabilitySlot)
def book_venue(opportunity_id: str, body: BookVenueRequest) -> AvailabilitySlot:
    try:
        return bookings.book_venue_for_opportunity(
            store,
            opportunity_id=opportunity_id,
            venue_id=body.venue_id,
            event_duration=body.event_duration,
            booking_status=body.booking_status,
            notes=body.notes,
            policy=conflict_policy,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except BookingConflictError as exc:
        raise HTTPException(
            status_code=409,
            detail={
                "message": str(exc),
                "conflicting_slot_ids": [c.booking.id for c in exc.conflicts],
            },
        ) from exc


@app.delete("/opportunities/{opportunity_id}/booking", response_model=list[AvailabilitySlot])
def cancel_booking(
    opportunity_id: str, venue_id: str | None = None
) -> list[AvailabilitySlot]:
    try:
        return bookings.cancel_venue_booking(store, opportunity_id, venue_id=venue_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
