"""In-memory repositories for venues, opportunities, slots and the conflict log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from venue_availability.domain.errors import (
    ConflictNotFoundError,
    OpportunityNotFoundError,
    SlotNotFoundError,
    VenueNotFoundError,
)
from venue_availability.domain.models import (
    AvailabilitySlot,
    BookingStatus,
    ConflictDetectionLog,
    Opportunity,
    Venue,
    now_ms,
)


def _apply_fields(model, fields: dict) -> None:
    """Validate ``fields`` against the whole model, then assign them in place.

    Nothing is written when validation fails.
    """
    unknown = set(fields) - set(type(model).model_fields)
    if unknown:
        raise ValueError(f"Unknown field(s): {sorted(unknown)}")
    candidate = type(model).model_validate({**model.model_dump(), **fields})
    for name in fields:
        setattr(model, name, getattr(candidate, name))


class VenueRepository:
    """Dict-backed store for Venue instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Venue] = {}

    def add(self, venue: Venue) -> str:
        self._store[venue.id] = venue
        return venue.id

    def get(self, venue_id: str) -> Venue | None:
        return self._store.get(venue_id)

    def list_all(self, active_only: bool = False) -> list[Venue]:
        venues = [v for v in self._store.values() if v.is_active or not active_only]
        return sorted(venues, key=lambda v: v.created_at, reverse=True)

    def patch(self, venue_id: str, **fields) -> Venue:
        venue = self._store.get(venue_id)
        if venue is None:
            raise VenueNotFoundError(venue_id)
        _apply_fields(venue, fields)
        venue.updated_at = now_ms()
        return venue


class OpportunityRepository:
    """Dict-backed store for the opportunity fields venue booking touches."""

    def __init__(self) -> None:
        self._store: dict[str, Opportunity] = {}

    def add(self, opportunity: Opportunity) -> str:
        self._store[opportunity.id] = opportunity
        return opportunity.id

    def get(self, opportunity_id: str) -> Opportunity | None:
        return self._store.get(opportunity_id)

    def query(
        self, event_date: int | None = None, active_only: bool = False
    ) -> list[Opportunity]:
        """Return opportunities matching every given filter, in insertion order."""
        return [
            o
            for o in self._store.values()
            if (event_date is None or o.event_date == event_date)
            and (o.is_active or not active_only)
        ]

    def patch(self, opportunity_id: str, **fields) -> Opportunity:
        opportunity = self._store.get(opportunity_id)
        if opportunity is None:
            raise OpportunityNotFoundError(opportunity_id)
        _apply_fields(opportunity, fields)
        opportunity.updated_at = now_ms()
        return opportunity


class AvailabilitySlotRepository:
    """Dict-backed store for AvailabilitySlot instances.

    Slots are never deleted; cancelled bookings are patched back to AVAILABLE.
    """

    def __init__(self) -> None:
        self._store: dict[str, AvailabilitySlot] = {}

    def insert(self, slot: AvailabilitySlot) -> str:
        self._store[slot.id] = slot
        return slot.id

    def get(self, slot_id: str) -> AvailabilitySlot | None:
        return self._store.get(slot_id)

    def query(
        self,
        venue_id: str | None = None,
        booking_status: BookingStatus | None = None,
        time_range: tuple[int, int] | None = None,
        opportunity_id: str | None = None,
    ) -> list[AvailabilitySlot]:
        """Return slots matching every given filter, in insertion order.

        ``time_range`` keeps slots that intersect ``[start, end]``.
        """
        results = []
        for slot in self._store.values():
            if venue_id is not None and slot.venue_id != venue_id:
                continue
            if booking_status is not None and slot.booking_status != booking_status:
                continue
            if opportunity_id is not None and slot.opportunity_id != opportunity_id:
                continue
            if time_range is not None:
                range_start, range_end = time_range
                if slot.end_time < range_start or slot.start_time > range_end:
                    continue
            results.append(slot)
        return results

    def patch(self, slot_id: str, **fields) -> AvailabilitySlot:
        slot = self._store.get(slot_id)
        if slot is None:
            raise SlotNotFoundError(slot_id)
        _apply_fields(slot, fields)
        slot.updated_at = now_ms()
        return slot


class ConflictLogRepository:
    """Dict-backed store for ConflictDetectionLog entries."""

    def __init__(self) -> None:
        self._store: dict[str, ConflictDetectionLog] = {}

    def insert(self, entry: ConflictDetectionLog) -> str:
        self._store[entry.id] = entry
        return entry.id

    def get(self, conflict_id: str) -> ConflictDetectionLog | None:
        return self._store.get(conflict_id)

    def query(
        self,
        opportunity_id: str | None = None,
        venue_id: str | None = None,
        unresolved_only: bool = False,
    ) -> list[ConflictDetectionLog]:
        """Return matching entries, most recently detected first."""
        entries = [
            e
            for e in self._store.values()
            if (opportunity_id is None or e.opportunity_id == opportunity_id)
            and (venue_id is None or e.venue_id == venue_id)
            and not (unresolved_only and e.is_resolved)
        ]
        return sorted(entries, key=lambda e: e.detected_at, reverse=True)

    def patch(self, conflict_id: str, **fields) -> ConflictDetectionLog:
        entry = self._store.get(conflict_id)
        if entry is None:
            raise ConflictNotFoundError(conflict_id)
        _apply_fields(entry, fields)
        return entry


@dataclass
class Store:
    """Bundle of every repository the services read from and write to."""

    venues: VenueRepository = field(default_factory=VenueRepository)
    opportunities: OpportunityRepository = field(default_factory=OpportunityRepository)
    slots: AvailabilitySlotRepository = field(default_factory=AvailabilitySlotRepository)
    conflicts: ConflictLogRepository = field(default_factory=ConflictLogRepository)


# ---------------------------------------------------------------------------
# Seed data – a couple of venues with bookings over the next few days
# ---------------------------------------------------------------------------


def _ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def _seed(store: Store) -> None:
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

    ballroom = Venue(
        name="Grand Ballroom",
        capacity=300,
        location="Main building, ground floor",
        amenities=["stage", "dance floor", "AV system"],
        hourly_rate=450.0,
        daily_rate=4200.0,
        setup_time=60,
        cleanup_time=60,
    )
    terrace = Venue(
        name="Garden Terrace",
        capacity=80,
        location="East wing",
        amenities=["outdoor heaters"],
        hourly_rate=150.0,
        setup_time=30,
        cleanup_time=30,
    )
    store.venues.add(ballroom)
    store.venues.add(terrace)

    wedding = Opportunity(
        name="Patel wedding reception",
        event_date=_ms(today + timedelta(days=2, hours=17)),
        room_assignment=ballroom.name,
    )
    offsite = Opportunity(
        name="Northwind quarterly offsite",
        event_date=_ms(today + timedelta(days=3, hours=10)),
        room_assignment=terrace.name,
    )
    store.opportunities.add(wedding)
    store.opportunities.add(offsite)

    store.slots.insert(
        AvailabilitySlot(
            venue_id=ballroom.id,
            start_time=wedding.event_date - 60 * 60 * 1000,
            end_time=wedding.event_date + 6 * 60 * 60 * 1000,
            booking_status=BookingStatus.CONFIRMED,
            opportunity_id=wedding.id,
        )
    )
    store.slots.insert(
        AvailabilitySlot(
            venue_id=terrace.id,
            start_time=offsite.event_date - 30 * 60 * 1000,
            end_time=offsite.event_date + 4 * 60 * 60 * 1000,
            booking_status=BookingStatus.TENTATIVE,
            opportunity_id=offsite.id,
        )
    )
    store.slots.insert(
        AvailabilitySlot(
            venue_id=ballroom.id,
            start_time=_ms(today + timedelta(days=5, hours=8)),
            end_time=_ms(today + timedelta(days=5, hours=12)),
            booking_status=BookingStatus.BLOCKED,
            notes="Floor refinishing",
        )
    )


def create_store(seed: bool = False) -> Store:
    """Return a fresh Store, optionally pre-loaded with sample data."""
    store = Store()
    if seed:
        _seed(store)
    return store
