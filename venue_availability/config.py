"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from functools import lru_cache

from dateutil import tz

from venue_availability.domain.models import BookingStatus
from venue_availability.domain.policy import (
    ConflictPolicy,
    SlotSearchPolicy,
    validate_conflict_policy,
    validate_slot_search_policy,
)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    timezone: str
    day_start_hour: int
    day_end_hour: int
    step_minutes: int
    search_range_days: int
    blocked_slots_conflict: bool
    seed_demo_data: bool

    def slot_search_policy(self) -> SlotSearchPolicy:
        policy = SlotSearchPolicy(
            day_start_hour=self.day_start_hour,
            day_end_hour=self.day_end_hour,
            step_minutes=self.step_minutes,
            default_search_range_days=self.search_range_days,
        )
        validate_slot_search_policy(policy)
        return policy

    def zone(self) -> tzinfo:
        zone = tz.gettz(self.timezone)
        if zone is None:
            raise ValueError(f"Unknown timezone: {self.timezone}")
        return zone

    def conflict_policy(self) -> ConflictPolicy:
        statuses = {BookingStatus.CONFIRMED, BookingStatus.TENTATIVE}
        if self.blocked_slots_conflict:
            statuses.add(BookingStatus.BLOCKED)
        policy = ConflictPolicy(statuses_that_conflict=frozenset(statuses))
        validate_conflict_policy(policy)
        return policy


def load_settings() -> Settings:
    """Read settings from the environment without caching."""
    return Settings(
        app_name=os.getenv("VENUE_APP_NAME", "Venue Availability Service"),
        app_version=os.getenv("VENUE_APP_VERSION", "0.1.0"),
        log_level=os.getenv("VENUE_LOG_LEVEL", "INFO"),
        timezone=os.getenv("VENUE_TIMEZONE", "UTC"),
        day_start_hour=_env_int("VENUE_DAY_START_HOUR", 9),
        day_end_hour=_env_int("VENUE_DAY_END_HOUR", 22),
        step_minutes=_env_int("VENUE_STEP_MINUTES", 60),
        search_range_days=_env_int("VENUE_SEARCH_RANGE_DAYS", 14),
        blocked_slots_conflict=_env_bool("VENUE_BLOCKED_CONFLICTS", False),
        seed_demo_data=_env_bool("VENUE_SEED_DEMO_DATA", False),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
