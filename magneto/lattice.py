"""Helpers for two-dimensional lattices stored as lists of rows."""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

Lattice = list[list[T]]


def get_dimensions_of_lattice(lattice: Sequence[Sequence[T]]) -> tuple[int, int]:
    """Return ``(lx, ly)``: the length of the first row and the number of rows."""
    if not lattice:
        raise ValueError("a lattice needs at least one row")
    return len(lattice[0]), len(lattice)