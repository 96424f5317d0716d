"""Service for recording detected conflicts and resolving them."""

from __future__ import annotations

from venue_availability.domain.models import (
    ConflictDetectionLog,
    ConflictType,
    Severity,
    now_ms,
)
from venue_availability.logger import get_logger
from venue_availability.repos.memory import ConflictLogRepository

logger = get_logger(__name__)


def log_conflict(
    repo: ConflictLogRepository,
    opportunity_id: str,
    conflict_type: ConflictType,
    severity: Severity,
    conflict_date: int,
    conflicting_opportunity_id: str | None = None,
    venue_id: str | None = None,
) -> str:
    """Persist an unresolved conflict entry and return its id.

    Recording is independent of live conflict checks; callers decide what to log.
    """
    entry = ConflictDetectionLog(
        opportunity_id=opportunity_id,
        conflict_type=conflict_type,
        severity=severity,
        conflict_date=conflict_date,
        conflicting_opportunity_id=conflicting_opportunity_id,
        venue_id=venue_id,
    )
    conflict_id = repo.insert(entry)
    logger.info(
        "Logged %s conflict %s (severity=%s) for opportunity %s",
        conflict_type,
        conflict_id,
        severity,
        opportunity_id,
    )
    return conflict_id


def resolve_conflict(
    repo: ConflictLogRepository,
    conflict_id: str,
    resolution_notes: str | None = None,
) -> ConflictDetectionLog:
    """Mark a conflict resolved.

    Resolving an already-resolved entry overwrites ``resolved_at`` and
    ``resolution_notes``; there is no way back to unresolved. Raises
    ``ConflictNotFoundError`` for an unknown id.
    """
    entry = repo.patch(
        conflict_id,
        is_resolved=True,
        resolved_at=now_ms(),
        resolution_notes=resolution_notes,
    )
    logger.info("Resolved conflict %s", conflict_id)
    return entry


def get_conflicts(
    repo: ConflictLogRepository,
    opportunity_id: str | None = None,
    venue_id: str | None = None,
    unresolved_only: bool = False,
) -> list[ConflictDetectionLog]:
    return repo.query(
        opportunity_id=opportunity_id,
        venue_id=venue_id,
        unresolved_only=unresolved_only,
    )
