"""Business-policy knobs for conflict detection and slot search."""

from __future__ import annotations

from dataclasses import dataclass, field

from venue_availability.domain.models import BookingStatus


@dataclass(frozen=True)
class SlotSearchPolicy:
    """Where and how the alternative-date search looks for free slots.

    Candidates are stepped through a wall-clock window each day and must stay
    clear of every slot whose status is in ``avoided_statuses``.
    BLOCKED is avoided by default although it is never a double-booking.
    """

    day_start_hour: int = 9
    day_end_hour: int = 22
    step_minutes: int = 60
    default_search_range_days: int = 14
    avoided_statuses: frozenset[BookingStatus] = field(
        default_factory=lambda: frozenset(
            {BookingStatus.CONFIRMED, BookingStatus.TENTATIVE, BookingStatus.BLOCKED}
        )
    )

    def avoids(self, status: BookingStatus) -> bool:
        return status in self.avoided_statuses


@dataclass(frozen=True)
class ConflictPolicy:
    """Slot statuses that count as an existing booking.

    BLOCKED is left out by default: it marks host-imposed maintenance holds,
    which are not double-bookings.
    """

    statuses_that_conflict: frozenset[BookingStatus] = field(
        default_factory=lambda: frozenset(
            {BookingStatus.CONFIRMED, BookingStatus.TENTATIVE}
        )
    )

    def conflicts_with(self, status: BookingStatus) -> bool:
        return status in self.statuses_that_conflict


def validate_slot_search_policy(policy: SlotSearchPolicy) -> None:
    if not 0 <= policy.day_start_hour <= 23:
        raise ValueError("day_start_hour must be between 0 and 23")
    if not 1 <= policy.day_end_hour <= 24:
        raise ValueError("day_end_hour must be between 1 and 24")
    if policy.day_start_hour >= policy.day_end_hour:
        raise ValueError("day_start_hour must be before day_end_hour")
    if policy.step_minutes <= 0:
        raise ValueError("step_minutes must be > 0")
    if policy.default_search_range_days <= 0:
        raise ValueError("default_search_range_days must be > 0")
    if not policy.avoided_statuses:
        raise ValueError("avoided_statuses must not be empty")


def validate_conflict_policy(policy: ConflictPolicy) -> None:
    if not policy.statuses_that_conflict:
        raise ValueError("statuses_that_conflict must not be empty")
