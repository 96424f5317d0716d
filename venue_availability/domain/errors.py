"""Exceptions raised by the availability services and repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from venue_availability.domain.models import VenueDoubleBookingConflict


class NotFoundError(LookupError):
    entity = "Record"

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"{self.entity} not found: {entity_id}")
        self.entity_id = entity_id


class VenueNotFoundError(NotFoundError):
    entity = "Venue"


class OpportunityNotFoundError(NotFoundError):
    entity = "Opportunity"


class SlotNotFoundError(NotFoundError):
    entity = "Availability slot"


class ConflictNotFoundError(NotFoundError):
    entity = "Conflict"


class BookingConflictError(Exception):
    """Raised when a booking would overlap an existing hold on the venue."""

    def __init__(self, conflicts: list[VenueDoubleBookingConflict]) -> None:
        super().__init__(
            "Venue booking conflict detected. Cannot book overlapping time slot."
        )
        self.conflicts = conflicts
