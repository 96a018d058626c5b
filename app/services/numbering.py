# app/services/numbering.py
"""
Spot-number allocation.
Pure functions over the numbers currently stored for a lot, recomputed from
storage on every call. Collisions with a concurrent writer are caught by the
(lot_id, number) unique constraint and retried by the callers.
"""

from typing import Iterable


def next_available(existing: Iterable[int], floor: int = 0) -> int:
    """First number above every existing number and above `floor`."""
    return max(max(existing, default=0), floor) + 1


def allocate_after(existing: Iterable[int], count: int, floor: int = 0) -> list:
    """Contiguous block of `count` numbers starting at next_available()."""
    start = next_available(existing, floor)
    return list(range(start, start + count))


def first_fit(existing: Iterable[int], count: int) -> list:
    """Lowest `count` numbers not in use, scanning ascending from 1."""
    used = set(existing)
    numbers = []
    candidate = 1
    while len(numbers) < count:
        if candidate not in used:
            numbers.append(candidate)
        candidate += 1
    return numbers
