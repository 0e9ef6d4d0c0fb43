"""Einteilungs-Modul (Union-Find-Gruppierung, Kostenmodell, Strategien)."""

from .grouping import ConstraintGroup, ConstraintGrouper, UnionFind, build_groups
from .cost import ClassTally, CostModel
from .allocator import (
    Allocator,
    ConstrainedAllocator,
    EmptyRosterError,
    InputError,
    InvalidClassCountError,
    UnconstrainedAllocator,
    allocate_classes,
)

__all__ = [
    "ConstraintGroup",
    "ConstraintGrouper",
    "UnionFind",
    "build_groups",
    "ClassTally",
    "CostModel",
    "Allocator",
    "ConstrainedAllocator",
    "UnconstrainedAllocator",
    "allocate_classes",
    "InputError",
    "EmptyRosterError",
    "InvalidClassCountError",
]
