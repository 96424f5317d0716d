"""Tests for the interval overlap rule."""

from itertools import product

import pytest

from venue_availability.services.overlap import overlaps


def test_touching_boundary_is_not_an_overlap():
    """[0,10] then [10,20]: one ends exactly when the other starts."""
    assert overlaps(0, 10, 10, 20) is False
    assert overlaps(10, 20, 0, 10) is False


@pytest.mark.parametrize(
    "a, b",
    [
        ((0, 10), (5, 15)),  # partial, a first
        ((5, 15), (0, 10)),  # partial, b first
        ((0, 20), (5, 10)),  # a contains b
        ((5, 10), (0, 20)),  # b contains a
        ((0, 10), (0, 10)),  # identical
        ((0, 10), (9, 10)),  # shared end
    ],
)
def test_overlapping_intervals(a, b):
    assert overlaps(*a, *b) is True


def test_disjoint_intervals():
    assert overlaps(0, 10, 11, 20) is False
    assert overlaps(11, 20, 0, 10) is False


def test_symmetric_for_well_formed_intervals():
    points = range(0, 6)
    intervals = [(s, e) for s, e in product(points, points) if s < e]
    for a, b in product(intervals, intervals):
        assert overlaps(*a, *b) == overlaps(*b, *a), (a, b)


def test_zero_width_point_at_end_counts_via_containment():
    """A zero-width interval sitting on the end of another still collides.

    A plain half-open test would say no here; the containment clause says yes.
    """
    assert overlaps(0, 10, 10, 10) is True
    assert overlaps(10, 10, 0, 10) is True


def test_inverted_interval_is_asymmetric():
    """Malformed (end < start) input is not validated and breaks symmetry."""
    assert overlaps(10, 0, 2, 5) is False
    assert overlaps(2, 5, 10, 0) is True
