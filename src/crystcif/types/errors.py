"""
Module: types.errors
--------------------
Error kinds raised while building atomic structures.

All errors derive from `ValueError` so that callers catching invalid input
the usual way keep working, while the subclasses let them tell the
failure modes apart.

Classes
-------
- `StructureError`:
    Base class for every error raised by crystcif
- `UnknownSpeciesError`:
    An element symbol or atomic number is not in the element table
- `ArrayLengthMismatch`:
    A per-atom array does not have one entry per atom, or a position does
    not have three components
- `InvalidCellSpec`:
    A cell argument does not match any recognised cell form
- `NonPeriodicScaledCoordinatesError`:
    Fractional coordinates were requested for a structure that is not
    periodic along all three axes
- `MissingCoordinatesError`:
    An atom site has neither Cartesian nor usable fractional coordinates
"""


class StructureError(ValueError):
    """Base class for crystcif errors."""


class UnknownSpeciesError(StructureError):
    """Element symbol or number missing from the element table."""


class ArrayLengthMismatch(StructureError):
    """Per-atom array length differs from the atom count."""


class InvalidCellSpec(StructureError):
    """Cell argument is not a recognised cell form."""


class NonPeriodicScaledCoordinatesError(StructureError):
    """Scaled coordinates need periodicity along all three axes."""


class MissingCoordinatesError(StructureError):
    """No Cartesian or fractional coordinates available for a site."""


__all__ = [
    "ArrayLengthMismatch",
    "InvalidCellSpec",
    "MissingCoordinatesError",
    "NonPeriodicScaledCoordinatesError",
    "StructureError",
    "UnknownSpeciesError",
]
