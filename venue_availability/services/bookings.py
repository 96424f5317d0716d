"""Venue and slot administration plus the book/cancel workflow for opportunities."""

from __future__ import annotations

from venue_availability.domain.errors import (
    BookingConflictError,
    OpportunityNotFoundError,
    SlotNotFoundError,
    VenueNotFoundError,
)
from venue_availability.domain.models import (
    MINUTE_MS,
    AvailabilitySlot,
    BookingStatus,
    ConflictType,
    Severity,
    Venue,
)
from venue_availability.domain.policy import ConflictPolicy
from venue_availability.logger import get_logger
from venue_availability.repos.memory import Store
from venue_availability.services.conflict_log import log_conflict
from venue_availability.services.conflicts import (
    DEFAULT_CONFLICT_POLICY,
    check_date_conflicts,
)

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Venues
# ---------------------------------------------------------------------------


def create_venue(store: Store, **fields) -> Venue:
    venue = Venue(**fields)
    store.venues.add(venue)
    logger.info("Created venue %s (%s)", venue.id, venue.name)
    return venue


def list_venues(store: Store, active_only: bool = False) -> list[Venue]:
    return store.venues.list_all(active_only=active_only)


def update_venue(store: Store, venue_id: str, **fields) -> Venue:
    """Apply exactly the given fields to a venue; None is stored as given."""
    return store.venues.patch(venue_id, **fields)


# ---------------------------------------------------------------------------
# Availability slots
# ---------------------------------------------------------------------------


def create_availability_slot(
    store: Store,
    venue_id: str,
    start_time: int,
    end_time: int,
    booking_status: BookingStatus | None = None,
    opportunity_id: str | None = None,
    notes: str | None = None,
    date: int | None = None,
) -> AvailabilitySlot:
    """Record a hold on a venue. Does not check for conflicts."""
    if store.venues.get(venue_id) is None:
        raise VenueNotFoundError(venue_id)
    slot = AvailabilitySlot(
        venue_id=venue_id,
        start_time=start_time,
        end_time=end_time,
        date=date,
        booking_status=booking_status or BookingStatus.AVAILABLE,
        opportunity_id=opportunity_id,
        notes=notes,
    )
    store.slots.insert(slot)
    return slot


def get_venue_availability(
    store: Store,
    venue_id: str | None = None,
    start: int | None = None,
    end: int | None = None,
    booking_status: BookingStatus | None = None,
) -> list[AvailabilitySlot]:
    """List slots, optionally only those lying entirely inside ``[start, end]``."""
    slots = store.slots.query(venue_id=venue_id, booking_status=booking_status)
    return [
        s
        for s in slots
        if (start is None or s.start_time >= start)
        and (end is None or s.end_time <= end)
    ]


def update_availability_slot(store: Store, slot_id: str, **fields) -> AvailabilitySlot:
    return store.slots.patch(slot_id, **fields)


# ---------------------------------------------------------------------------
# Booking workflow
# ---------------------------------------------------------------------------


def book_venue_for_opportunity(
    store: Store,
    opportunity_id: str,
    venue_id: str,
    event_duration: int,
    booking_status: BookingStatus = BookingStatus.TENTATIVE,
    notes: str | None = None,
    policy: ConflictPolicy = DEFAULT_CONFLICT_POLICY,
) -> AvailabilitySlot:
    """Hold ``venue_id`` for the opportunity's event, including turnover buffers.

    The conflict check and the insert are separate steps with no lock between
    them; serialising concurrent bookings is the persistence layer's job.
    Raises ``BookingConflictError`` after logging a HIGH severity entry when
    the event window collides with an existing hold. An existing hold of the
    same opportunity at this venue is moved to the new window, not duplicated.
    """
    opportunity = store.opportunities.get(opportunity_id)
    if opportunity is None:
        raise OpportunityNotFoundError(opportunity_id)
    venue = store.venues.get(venue_id)
    if venue is None:
        raise VenueNotFoundError(venue_id)

    event_start = opportunity.event_date
    event_end = event_start + event_duration
    conflicts = check_date_conflicts(
        store,
        event_start,
        event_end,
        venue_id=venue_id,
        exclude_opportunity_id=opportunity_id,
        policy=policy,
    )
    if conflicts:
        log_conflict(
            store.conflicts,
            opportunity_id=opportunity_id,
            conflict_type=ConflictType.VENUE_DOUBLE_BOOKING,
            severity=Severity.HIGH,
            conflict_date=event_start,
            conflicting_opportunity_id=conflicts[0].booking.opportunity_id,
            venue_id=venue_id,
        )
        logger.warning(
            "Booking refused: venue %s already held for opportunity %s",
            venue_id,
            opportunity_id,
        )
        raise BookingConflictError(conflicts)

    hold = {
        "date": event_start,
        "start_time": event_start - venue.setup_time * MINUTE_MS,
        "end_time": event_end + venue.cleanup_time * MINUTE_MS,
        "booking_status": booking_status,
        "notes": notes,
    }
    existing = _active_holds(store, opportunity_id, venue_id)
    if existing:
        # Rebooking moves the opportunity's hold instead of adding another.
        slot = store.slots.patch(existing[0].id, **hold)
    else:
        slot = AvailabilitySlot(venue_id=venue_id, opportunity_id=opportunity_id, **hold)
        store.slots.insert(slot)
    store.opportunities.patch(opportunity_id, room_assignment=venue.name)
    logger.info(
        "Booked venue %s for opportunity %s as %s", venue_id, opportunity_id, booking_status
    )
    return slot


def cancel_venue_booking(
    store: Store, opportunity_id: str, venue_id: str | None = None
) -> list[AvailabilitySlot]:
    """Release every hold the opportunity has (at ``venue_id``, if given).

    Released slots go back to AVAILABLE with no opportunity attached.
    """
    holds = _active_holds(store, opportunity_id, venue_id)
    if not holds:
        raise SlotNotFoundError(f"booking for opportunity {opportunity_id}")

    released = [
        store.slots.patch(
            hold.id, booking_status=BookingStatus.AVAILABLE, opportunity_id=None
        )
        for hold in holds
    ]
    if store.opportunities.get(opportunity_id) is not None:
        store.opportunities.patch(opportunity_id, room_assignment=None)
    logger.info(
        "Cancelled %d hold(s) for opportunity %s", len(released), opportunity_id
    )
    return released


def _active_holds(
    store: Store, opportunity_id: str, venue_id: str | None = None
) -> list[AvailabilitySlot]:
    holds = store.slots.query(venue_id=venue_id, opportunity_id=opportunity_id)
    return [h for h in holds if h.booking_status != BookingStatus.AVAILABLE]
