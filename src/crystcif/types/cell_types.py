"""
Module: types.cell_types
------------------------
The forms in which a unit cell can be supplied.

A cell is given as one of the NamedTuple variants below (or `None` for a
fully aperiodic system). `crystcif.ucell.resolve_cell` turns any variant
into the canonical pair of three optional Cartesian rows plus periodic
boundary flags.

Classes
-------
- `CubicCell`:
    Cubic cell with a single edge length
- `AxisLengthsCell`:
    Orthorhombic cell given by per-axis lengths; `None` means aperiodic
- `CartesianCell`:
    Full Cartesian cell vectors as rows; `None` rows mean aperiodic
- `LengthsAnglesCell`:
    Cell lengths and angles (degrees)

Functions
---------
- `cell_spec_from_value`:
    Interpret a plain Python value as one of the cell variants

Type Aliases
------------
- `CellSpec`:
    Union of the four cell variants
- `CellRows`:
    Canonical resolved cell, three optional Cartesian rows
- `PeriodicFlags`:
    Per-axis periodic boundary flags
"""

import numpy as np
from beartype.typing import Any, NamedTuple, Optional, Sequence, Tuple, Union
from jaxtyping import Array, Float

from .custom_types import scalar_num
from .errors import InvalidCellSpec


class CubicCell(NamedTuple):
    """Cubic cell with edge length `a` in Ångstroms."""

    a: scalar_num


class AxisLengthsCell(NamedTuple):
    """
    Description
    -----------
    Orthorhombic cell aligned with the Cartesian axes.

    Attributes
    ----------
    - `lengths` (Sequence[Optional[scalar_num]]):
        Lengths along x, y and z in Ångstroms. A `None` entry makes the
        structure aperiodic along that axis.
    """

    lengths: Sequence[Optional[scalar_num]]


class CartesianCell(NamedTuple):
    """
    Description
    -----------
    Cell given by its three Cartesian vectors.

    Attributes
    ----------
    - `vectors` (Sequence[Optional[Sequence[scalar_num]]]):
        Cell vectors a, b and c as rows, in Ångstroms. A `None` row makes
        the structure aperiodic along that axis.
    """

    vectors: Sequence[Optional[Sequence[scalar_num]]]


class LengthsAnglesCell(NamedTuple):
    """
    Description
    -----------
    Cell given in crystallographic lengths and angles form.

    Attributes
    ----------
    - `lengths` (Sequence[scalar_num]):
        Cell lengths [a, b, c] in Ångstroms
    - `angles` (Sequence[scalar_num]):
        Cell angles [α, β, γ] in degrees.
        - α is the angle between b and c
        - β is the angle between a and c
        - γ is the angle between a and b
    """

    lengths: Sequence[scalar_num]
    angles: Sequence[scalar_num]


CellSpec = Union[CubicCell, AxisLengthsCell, CartesianCell, LengthsAnglesCell]
CELL_SPEC_TYPES = (CubicCell, AxisLengthsCell, CartesianCell, LengthsAnglesCell)

CellRows = Tuple[
    Optional[Float[Array, " 3"]],
    Optional[Float[Array, " 3"]],
    Optional[Float[Array, " 3"]],
]
PeriodicFlags = Tuple[bool, bool, bool]


def _is_number(value: Any) -> bool:
    if value is None or isinstance(value, (bool, str, bytes)):
        return False
    return np.ndim(value) == 0 and np.issubdtype(
        np.asarray(value).dtype, np.number
    )


def _is_triplet(value: Any) -> bool:
    if value is None or isinstance(value, (str, bytes)) or _is_number(value):
        return False
    try:
        return len(value) == 3 and all(_is_number(v) for v in value)
    except TypeError:
        return False


def cell_spec_from_value(value: Any) -> Optional[CellSpec]:
    """
    Description
    -----------
    Interpret a plain value as one of the cell variants.

    This is the only place where a cell argument is inspected by shape.
    Everything downstream works on the explicit variants.

    Parameters
    ----------
    - `value` (Any):
        Any of the following:
        - None/False: no periodic boundary
        - a number: cubic cell with that parameter
        - 3 numbers: orthorhombic cell with those parameters
        - 3x3 numbers: full Cartesian cell definition
        - any of the previous two with one or two entries replaced by
          None: partial periodicity
        - 2x3 numbers: cell in lengths + angles form, angles in degrees
        - an existing cell variant, returned unchanged

    Returns
    -------
    - `spec` (Optional[CellSpec]):
        The matching variant, or None for an aperiodic system.

    Raises
    ------
    - `InvalidCellSpec`:
        If the value matches none of the forms above.
    """
    if value is None or value is False:
        return None
    if isinstance(value, CELL_SPEC_TYPES):
        return value
    if _is_number(value):
        return CubicCell(a=value)
    if isinstance(value, (str, bytes)):
        raise InvalidCellSpec(f"Invalid cell: {value!r}")
    try:
        entries = list(value)
    except TypeError as err:
        raise InvalidCellSpec(f"Invalid cell: {value!r}") from err

    if len(entries) == 2 and all(_is_triplet(e) for e in entries):
        return LengthsAnglesCell(lengths=entries[0], angles=entries[1])
    if len(entries) != 3:
        raise InvalidCellSpec(
            f"Invalid cell: expected 3 entries, got {len(entries)}"
        )
    if all(e is None or _is_number(e) for e in entries):
        return AxisLengthsCell(lengths=tuple(entries))

    rows = []
    for i, entry in enumerate(entries):
        if entry is None or entry is False:
            rows.append(None)
        elif _is_number(entry):
            row = [0.0, 0.0, 0.0]
            row[i] = entry
            rows.append(row)
        elif _is_triplet(entry):
            rows.append(list(entry))
        else:
            raise InvalidCellSpec(f"Invalid cell row {i}: {entry!r}")
    return CartesianCell(vectors=tuple(rows))


__all__ = [
    "AxisLengthsCell",
    "CELL_SPEC_TYPES",
    "CartesianCell",
    "CellRows",
    "CellSpec",
    "CubicCell",
    "LengthsAnglesCell",
    "PeriodicFlags",
    "cell_spec_from_value",
]
