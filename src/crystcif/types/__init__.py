"""Custom types and data structures for crystal structures.

Extended Summary
----------------
This module defines the data structures used throughout crystcif: the
supported unit cell forms, the JAX-compatible atomic structure and symmetry
operation PyTrees, the parsed CIF block types, the element table and the
error kinds raised on invalid input.

Routine Listings
----------------
AtomicStructure : class
    JAX-compatible atomic structure with cell and periodic flags
SymmetryOperation : class
    Rotation/translation pair acting on fractional coordinates
AtomicSpecies : class
    Element symbol with its atomic number
CubicCell, AxisLengthsCell, CartesianCell, LengthsAnglesCell : class
    Supported unit cell forms
CifValue, CifSingle, CifLoop, CifDataBlock : class
    Parsed CIF document content
AtomTypeRecord, AtomSiteRecord : class
    Records extracted from CIF blocks
create_atomic_structure : function
    Factory function to create AtomicStructure instances
create_symmetry_operation : function
    Factory function to create SymmetryOperation instances
cell_spec_from_value : function
    Interpret a plain value as a unit cell form
lookup_by_symbol, lookup_by_number : function
    Element table queries

Type Aliases
------------
- `scalar_float`:
    Union type for scalar float values (float or JAX scalar array)
- `scalar_num`:
    Union type for scalar numeric values (int, float, or JAX scalar array)
- `array_like`:
    JAX array, NumPy array or nested Python sequence
"""

from .cell_types import (
    CELL_SPEC_TYPES,
    AxisLengthsCell,
    CartesianCell,
    CellRows,
    CellSpec,
    CubicCell,
    LengthsAnglesCell,
    PeriodicFlags,
    cell_spec_from_value,
)
from .cif_types import (
    AtomSiteRecord,
    AtomTypeRecord,
    CifDataBlock,
    CifDocument,
    CifItem,
    CifLoop,
    CifSingle,
    CifValue,
)
from .custom_types import (
    array_like,
    scalar_float,
    scalar_num,
)
from .elements import (
    AtomicSpecies,
    load_atomic_numbers,
    lookup_by_number,
    lookup_by_symbol,
)
from .errors import (
    ArrayLengthMismatch,
    InvalidCellSpec,
    MissingCoordinatesError,
    NonPeriodicScaledCoordinatesError,
    StructureError,
    UnknownSpeciesError,
)
from .crystal_types import (
    AtomicStructure,
    SymmetryOperation,
    atom_count,
    atomic_numbers,
    chemical_symbols,
    create_atomic_structure,
    create_symmetry_operation,
    get_array,
    scaled_positions,
    with_array,
)

__all__ = [
    "ArrayLengthMismatch",
    "AtomSiteRecord",
    "AtomTypeRecord",
    "AtomicSpecies",
    "AtomicStructure",
    "AxisLengthsCell",
    "CELL_SPEC_TYPES",
    "CartesianCell",
    "CellRows",
    "CellSpec",
    "CifDataBlock",
    "CifDocument",
    "CifItem",
    "CifLoop",
    "CifSingle",
    "CifValue",
    "CubicCell",
    "InvalidCellSpec",
    "LengthsAnglesCell",
    "MissingCoordinatesError",
    "NonPeriodicScaledCoordinatesError",
    "PeriodicFlags",
    "StructureError",
    "SymmetryOperation",
    "UnknownSpeciesError",
    "array_like",
    "atom_count",
    "atomic_numbers",
    "cell_spec_from_value",
    "chemical_symbols",
    "create_atomic_structure",
    "create_symmetry_operation",
    "get_array",
    "load_atomic_numbers",
    "lookup_by_number",
    "lookup_by_symbol",
    "scalar_float",
    "scalar_num",
    "scaled_positions",
    "with_array",
]
