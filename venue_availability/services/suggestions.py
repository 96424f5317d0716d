"""Service for proposing conflict-free alternative booking slots at a venue."""

from __future__ import annotations

from datetime import datetime, time, timedelta, tzinfo

from dateutil import tz
from dateutil.rrule import DAILY, rrule

from venue_availability.domain.models import (
    DAY_MS,
    MINUTE_MS,
    AlternativeDateSuggestion,
    AvailabilitySlot,
)
from venue_availability.domain.policy import SlotSearchPolicy
from venue_availability.logger import get_logger
from venue_availability.repos.memory import Store
from venue_availability.services.overlap import overlaps

logger = get_logger(__name__)

DEFAULT_SEARCH_POLICY = SlotSearchPolicy()


def suggest_alternative_dates(
    store: Store,
    venue_id: str,
    preferred_date: int,
    duration: int,
    search_range: int | None = None,
    policy: SlotSearchPolicy = DEFAULT_SEARCH_POLICY,
    zone: tzinfo | None = None,
) -> list[AlternativeDateSuggestion]:
    """Return free slots around ``preferred_date``, closest first.

    Every calendar day within ``search_range`` days either side of the
    preferred date is scanned from ``policy.day_start_hour`` to
    ``policy.day_end_hour`` (wall clock in ``zone``, UTC by default) in
    ``policy.step_minutes`` increments. A candidate start ``t`` must satisfy
    ``t + duration <= day_end`` and ``[t, t + duration + setup + cleanup)``
    must not overlap any slot whose status is in
    ``policy.avoided_statuses``. The returned ``end_time`` excludes
    the buffers. An unknown venue yields an empty list.
    """
    venue = store.venues.get(venue_id)
    if venue is None:
        logger.debug("No suggestions: venue %s not found", venue_id)
        return []

    zone = zone or tz.UTC
    range_days = search_range or policy.default_search_range_days
    search_start = preferred_date - range_days * DAY_MS
    search_end = preferred_date + range_days * DAY_MS
    buffer_ms = venue.buffer_ms
    step_ms = policy.step_minutes * MINUTE_MS

    windows = _day_windows(search_start, search_end, policy, zone)
    # A buffered candidate on the last day can reach day_end + buffer_ms.
    fetch_range = (windows[0][0], windows[-1][1] + buffer_ms)
    bookings = [
        slot
        for slot in store.slots.query(venue_id=venue_id, time_range=fetch_range)
        if policy.avoids(slot.booking_status)
    ]

    suggestions: list[AlternativeDateSuggestion] = []
    for day_start, day_end in windows:
        day_bookings = [
            b
            for b in bookings
            if b.start_time < day_end + buffer_ms and b.end_time > day_start
        ]

        current = day_start
        while current + duration <= day_end:
            slot_end = current + duration + buffer_ms
            if not _collides(current, slot_end, day_bookings):
                suggestions.append(
                    AlternativeDateSuggestion(
                        start_time=current,
                        end_time=current + duration,
                        venue=venue,
                        is_preferred_date=abs(current - preferred_date) < DAY_MS,
                    )
                )
            current += step_ms

    suggestions.sort(key=lambda s: abs(s.start_time - preferred_date))
    logger.debug(
        "Generated %d suggestion(s) for venue %s around %d",
        len(suggestions),
        venue_id,
        preferred_date,
    )
    return suggestions


def _collides(start: int, end: int, bookings: list[AvailabilitySlot]) -> bool:
    return any(overlaps(start, end, b.start_time, b.end_time) for b in bookings)


def _day_windows(
    search_start: int, search_end: int, policy: SlotSearchPolicy, zone: tzinfo
) -> list[tuple[int, int]]:
    """Return the bookable ``(start, end)`` window of every local calendar day."""
    first_day = datetime.fromtimestamp(search_start / 1000, zone).date()
    last_day = datetime.fromtimestamp(search_end / 1000, zone).date()

    windows = []
    for day in rrule(
        DAILY,
        dtstart=datetime.combine(first_day, time()),
        until=datetime.combine(last_day, time()),
    ):
        opens = day + timedelta(hours=policy.day_start_hour)
        closes = day + timedelta(hours=policy.day_end_hour)
        windows.append(
            (_to_ms(opens.replace(tzinfo=zone)), _to_ms(closes.replace(tzinfo=zone)))
        )
    return windows


def _to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)
