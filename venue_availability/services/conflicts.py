"""Services for classifying double-bookings and same-date event conflicts."""

from __future__ import annotations

from venue_availability.domain.models import (
    DAY_MS,
    HOUR_MS,
    BookingStatus,
    ConflictRecord,
    DateConflict,
    Severity,
    VenueDoubleBookingConflict,
)
from venue_availability.domain.policy import ConflictPolicy
from venue_availability.logger import get_logger
from venue_availability.repos.memory import Store
from venue_availability.services.overlap import overlaps

logger = get_logger(__name__)

DEFAULT_CONFLICT_POLICY = ConflictPolicy()

# Retrieval padding only; every candidate still goes through overlaps().
PREFILTER_PADDING_MS = DAY_MS

DEFAULT_EVENT_DURATION_MS = 4 * HOUR_MS

_SEVERITY_BY_STATUS = {
    BookingStatus.CONFIRMED: Severity.HIGH,
    BookingStatus.TENTATIVE: Severity.MEDIUM,
}


def check_date_conflicts(
    store: Store,
    start_time: int,
    end_time: int,
    venue_id: str | None = None,
    exclude_opportunity_id: str | None = None,
    policy: ConflictPolicy = DEFAULT_CONFLICT_POLICY,
) -> list[VenueDoubleBookingConflict]:
    """Return every existing hold that collides with ``[start_time, end_time)``.

    Slots are skipped when they belong to ``exclude_opportunity_id``, sit at a
    different venue than ``venue_id`` (if given), or carry a status outside
    ``policy.statuses_that_conflict``. The window itself is not validated.
    """
    candidates = store.slots.query(
        time_range=(start_time - PREFILTER_PADDING_MS, end_time + PREFILTER_PADDING_MS)
    )

    conflicts: list[VenueDoubleBookingConflict] = []
    for booking in candidates:
        if exclude_opportunity_id and booking.opportunity_id == exclude_opportunity_id:
            continue
        if venue_id and booking.venue_id != venue_id:
            continue
        if not policy.conflicts_with(booking.booking_status):
            continue
        if not overlaps(start_time, end_time, booking.start_time, booking.end_time):
            continue

        opportunity = (
            store.opportunities.get(booking.opportunity_id)
            if booking.opportunity_id
            else None
        )
        conflicts.append(
            VenueDoubleBookingConflict(
                severity=_SEVERITY_BY_STATUS.get(booking.booking_status, Severity.LOW),
                booking=booking,
                venue=store.venues.get(booking.venue_id),
                opportunity=opportunity,
                overlap_start=max(start_time, booking.start_time),
                overlap_end=min(end_time, booking.end_time),
            )
        )

    if conflicts:
        logger.info(
            "Detected %d conflict(s) for window %d-%d (venue=%s)",
            len(conflicts),
            start_time,
            end_time,
            venue_id,
        )
    return conflicts


def get_date_conflicts(
    store: Store,
    event_date: int,
    venue_id: str | None = None,
    event_duration: int | None = None,
    exclude_opportunity_id: str | None = None,
    policy: ConflictPolicy = DEFAULT_CONFLICT_POLICY,
) -> list[ConflictRecord]:
    """Classify everything that competes with an event on ``event_date``.

    With ``venue_id`` the event window (four hours unless ``event_duration``
    is given) is checked against that venue's holds, keeping only holds made
    for another opportunity. Every other active opportunity whose event date
    equals ``event_date`` is reported as a LOW severity ``DateConflict``,
    whatever its venue. Venue conflicts come first.
    """
    conflicts: list[ConflictRecord] = []
    if venue_id:
        event_end = event_date + (event_duration or DEFAULT_EVENT_DURATION_MS)
        conflicts.extend(
            c
            for c in check_date_conflicts(
                store,
                event_date,
                event_end,
                venue_id=venue_id,
                exclude_opportunity_id=exclude_opportunity_id,
                policy=policy,
            )
            if c.booking.opportunity_id
        )

    for opportunity in store.opportunities.query(event_date=event_date, active_only=True):
        if opportunity.id == exclude_opportunity_id:
            continue
        conflicts.append(DateConflict(opportunity=opportunity))

    logger.debug(
        "Found %d conflict(s) for event on %d (venue=%s)",
        len(conflicts),
        event_date,
        venue_id,
    )
    return conflicts
