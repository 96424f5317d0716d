"""Interval overlap test shared by conflict checks and slot search."""

from __future__ import annotations


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Return True if interval ``a`` collides with interval ``b``.

    Conflict if any of:
      * ``a_start`` lies in ``[b_start, b_end)``
      * ``a_end`` lies in ``(b_start, b_end]``
      * ``a`` contains ``b`` entirely

    Exact boundary touches (``a_end == b_start`` or ``b_end == a_start``) are
    NOT conflicts for well-formed intervals. Zero-width inputs can still hit
    the containment clause, so the test is not symmetric for them.
    """
    return (
        (b_start <= a_start < b_end)
        or (b_start < a_end <= b_end)
        or (a_start <= b_start and a_end >= b_end)
    )
