"""
Module: types.crystal_types
---------------------------
Data structures and factory functions for atomic structure representation.

Classes
-------
- `AtomicStructure`:
    JAX-compatible periodic (or partially periodic) atomic structure
- `SymmetryOperation`:
    JAX-compatible rotation/translation pair acting on fractional
    coordinates

Factory Functions
-----------------
- `create_atomic_structure`:
    Factory function to create AtomicStructure instances with validation
- `create_symmetry_operation`:
    Factory function to create SymmetryOperation instances with validation

Functions
---------
- `atom_count`:
    Number of atoms in a structure
- `chemical_symbols`:
    Element symbols of all atoms
- `atomic_numbers`:
    Atomic numbers of all atoms
- `get_array`:
    Per-atom array by name
- `with_array`:
    Copy of a structure with a per-atom array attached
- `scaled_positions`:
    Fractional coordinates of all atoms
"""

from types import MappingProxyType

import jax
import jax.numpy as jnp
import numpy as np
from beartype.typing import Any, Mapping, NamedTuple, Optional, Sequence, Tuple, Union
from jax.tree_util import register_pytree_node_class
from jaxtyping import Array, Float, Int

from crystcif._typing_utils import beartype, jaxtyped
from crystcif.ucell.unitcell import invert_cell, resolve_cell

from .cell_types import CELL_SPEC_TYPES, CellRows, PeriodicFlags
from .custom_types import array_like
from .elements import UNKNOWN_ATOMIC_NUMBER, lookup_by_number, lookup_by_symbol
from .errors import (
    ArrayLengthMismatch,
    InvalidCellSpec,
    NonPeriodicScaledCoordinatesError,
    UnknownSpeciesError,
)

jax.config.update("jax_enable_x64", True)

BUILTIN_ARRAYS = ("positions", "numbers", "symbols")


@register_pytree_node_class
class AtomicStructure(NamedTuple):
    """
    Description
    -----------
    A JAX-compatible data structure holding an atomic structure with its
    (possibly partial) periodic cell. Inspired by the Atoms class of the
    Atomic Simulation Environment.

    Attributes
    ----------
    - `positions` (Float[Array, "N 3"]):
        Cartesian positions in Ångstroms.
    - `numbers` (Int[Array, "N"]):
        Atomic numbers (Z) of each atom, -1 for species accepted in
        tolerant mode.
    - `symbols` (Tuple[str, ...]):
        Element symbol of each atom.
    - `cell` (CellRows):
        Cell vectors a, b, c as rows in Ångstroms. The row of an aperiodic
        axis is None.
    - `inv_cell` (Optional[Float[Array, "3 3"]]):
        Inverse of the cell matrix; None unless periodic along all axes.
    - `pbc` (Tuple[bool, bool, bool]):
        Periodic boundary flag of each axis.
    - `arrays` (Mapping[str, Any]):
        Read-only mapping of additional per-atom arrays, e.g. site labels.
    - `info` (Mapping[str, Any]):
        Read-only mapping of additional data attached to the structure.

    Notes
    -----
    The structure is immutable: numeric arrays are JAX arrays, string
    arrays are read-only NumPy arrays and both mappings are
    `MappingProxyType` views, nested mappings of `info` included. Use
    `with_array` to obtain a copy carrying a new per-atom array.

    Only JAX arrays are PyTree children. Periodic flags, symbols, info and
    non-numeric per-atom arrays such as site labels are auxiliary data, so
    transforms like `jax.jit` and `jax.tree_util.tree_map` never see them.
    """

    positions: Float[Array, "N 3"]
    numbers: Int[Array, "N"]
    symbols: Tuple[str, ...]
    cell: CellRows
    inv_cell: Optional[Float[Array, "3 3"]]
    pbc: PeriodicFlags
    arrays: Mapping[str, Any]
    info: Mapping[str, Any]

    def tree_flatten(self):
        numeric = {}
        text = []
        for name, values in self.arrays.items():
            if isinstance(values, jax.Array):
                numeric[name] = values
            else:
                text.append((name, _array_to_aux(values)))
        return (
            (
                self.positions,
                self.numbers,
                self.cell,
                self.inv_cell,
                numeric,
            ),
            (self.symbols, self.pbc, self.info, tuple(self.arrays), tuple(text)),
        )

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        positions, numbers, cell, inv_cell, numeric = children
        symbols, pbc, info, names, text = aux_data
        text_arrays = {name: _array_from_aux(packed) for name, packed in text}
        arrays = {
            name: numeric[name] if name in numeric else text_arrays[name]
            for name in names
        }
        return cls(
            positions=positions,
            numbers=numbers,
            symbols=symbols,
            cell=tuple(cell),
            inv_cell=inv_cell,
            pbc=pbc,
            arrays=MappingProxyType(arrays),
            info=info,
        )


def _array_to_aux(values: np.ndarray) -> Tuple[np.dtype, Tuple[int, ...], tuple]:
    return values.dtype, values.shape, tuple(values.ravel().tolist())


def _array_from_aux(packed) -> np.ndarray:
    dtype, shape, flat = packed
    values = np.array(flat, dtype=dtype).reshape(shape)
    values.flags.writeable = False
    return values


@register_pytree_node_class
class SymmetryOperation(NamedTuple):
    """
    Description
    -----------
    A symmetry operation acting on fractional coordinates as
    ``p' = rotation @ p + translation``.

    Attributes
    ----------
    - `rotation` (Float[Array, "3 3"]):
        Rotation part of the operation.
    - `translation` (Float[Array, "3"]):
        Translation part of the operation, in fractions of the cell.
    """

    rotation: Float[Array, "3 3"]
    translation: Float[Array, "3"]

    def tree_flatten(self):
        return ((self.rotation, self.translation), None)

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        return cls(*children)


@jaxtyped(typechecker=beartype)
def create_symmetry_operation(
    rotation: array_like,
    translation: array_like,
) -> SymmetryOperation:
    """
    Factory function to create a SymmetryOperation with shape checking.

    Parameters
    ----------
    - `rotation` : array_like
        3x3 rotation matrix acting on fractional coordinates.
    - `translation` : array_like
        Translation vector in fractions of the cell.

    Returns
    -------
    - `SymmetryOperation` : SymmetryOperation
        Operation with float64 JAX arrays.

    Raises
    ------
    ValueError
        If the rotation is not 3x3 or the translation does not have 3
        components.
    """
    rotation = jnp.asarray(rotation, dtype=jnp.float64)
    translation = jnp.asarray(translation, dtype=jnp.float64)
    if rotation.shape != (3, 3):
        raise ValueError(f"rotation must have shape (3, 3), got {rotation.shape}")
    if translation.shape != (3,):
        raise ValueError(
            f"translation must have shape (3,), got {translation.shape}"
        )
    return SymmetryOperation(rotation=rotation, translation=translation)


def _resolve_species(element, tolerant: bool) -> Tuple[str, int]:
    is_number = isinstance(element, (int, np.integer)) and not isinstance(
        element, bool
    )
    if is_number:
        species = lookup_by_number(int(element))
    else:
        species = lookup_by_symbol(str(element))
    if species is None:
        if is_number or not tolerant:
            raise UnknownSpeciesError(
                f'Non-existing element "{element}" passed to '
                "create_atomic_structure"
            )
        return str(element), UNKNOWN_ATOMIC_NUMBER
    return species.symbol, species.number


def _check_positions(positions, n_atoms: int) -> Float[Array, "N 3"]:
    if positions is None:
        positions = []
    if isinstance(positions, (jax.Array, np.ndarray)):
        shape = tuple(positions.shape)
        if shape[:1] != (n_atoms,):
            raise ArrayLengthMismatch(
                f"Invalid positions array: shape {shape} for {n_atoms} atoms"
            )
        if n_atoms == 0:
            return jnp.zeros((0, 3), dtype=jnp.float64)
        if shape[1:] != (3,):
            raise ArrayLengthMismatch(
                f"Invalid positions array: shape {shape}, expected "
                f"({n_atoms}, 3)"
            )
        return jnp.asarray(positions, dtype=jnp.float64)
    # Ragged Python input is checked row by row
    rows = list(positions)
    if len(rows) != n_atoms:
        raise ArrayLengthMismatch(
            f"Invalid positions array: {len(rows)} positions for "
            f"{n_atoms} atoms"
        )
    for i, row in enumerate(rows):
        if np.shape(row) != (3,):
            raise ArrayLengthMismatch(
                f"Invalid positions array: position {i} has shape "
                f"{np.shape(row)}, expected (3,)"
            )
    if n_atoms == 0:
        return jnp.zeros((0, 3), dtype=jnp.float64)
    return jnp.asarray(np.asarray(rows, dtype=np.float64))


def _freeze(values: Any, n_atoms: int, name: str) -> Any:
    arr = values if isinstance(values, jax.Array) else np.asarray(values)
    if arr.ndim == 0 or arr.shape[0] != n_atoms:
        raise ArrayLengthMismatch(
            f"Invalid array size for '{name}': expected {n_atoms} entries, "
            f"got shape {arr.shape}"
        )
    if isinstance(arr, jax.Array):
        return arr
    if np.issubdtype(arr.dtype, np.number) or arr.dtype == np.bool_:
        return jnp.asarray(arr)
    frozen = arr.copy()
    frozen.flags.writeable = False
    return frozen


def _freeze_info(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze_info(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze_info(v) for v in value)
    return value


@beartype
def create_atomic_structure(
    elements: Sequence[Union[str, int]],
    positions: Optional[array_like] = None,
    cell: Any = None,
    info: Optional[Mapping[str, Any]] = None,
    scaled: bool = False,
    tolerant: bool = False,
) -> AtomicStructure:
    """
    Description
    -----------
    Factory function to create an AtomicStructure with data validation.

    Parameters
    ----------
    - `elements` (Sequence[Union[str, int]]):
        Element symbols or atomic numbers, one per atom.
    - `positions` (Optional[array_like]):
        One 3D position per atom. Cartesian in Ångstroms, or fractional if
        `scaled` is True. Default: no positions.
    - `cell` (Optional[CellSpec]):
        None for an aperiodic system, or one of CubicCell, AxisLengthsCell,
        CartesianCell, LengthsAnglesCell. Use `cell_spec_from_value` to
        interpret plain values.
    - `info` (Optional[Mapping[str, Any]]):
        Additional data attached to the structure.
    - `scaled` (bool):
        If True, interpret the positions as fractional coordinates.
    - `tolerant` (bool):
        If True, accept element symbols that are not in the periodic table;
        they get atomic number -1. Unknown atomic numbers are never
        accepted.

    Returns
    -------
    - `structure` (AtomicStructure):
        Validated, immutable AtomicStructure instance.

    Raises
    ------
    - `UnknownSpeciesError`:
        If a species cannot be resolved.
    - `ArrayLengthMismatch`:
        If the number of positions differs from the number of elements, or
        a position does not have three components.
    - `InvalidCellSpec`:
        If `cell` is not a recognised cell form.
    - `NonPeriodicScaledCoordinatesError`:
        If `scaled` is set for a structure that is not fully periodic.

    Flow
    ----
    - Resolve every element to its symbol and atomic number
    - Resolve the cell into rows and periodic flags
    - Compute the inverse cell when periodic along all axes
    - Check there is one three-component position per atom
    - Convert scaled positions through the cell matrix
    - Create and return AtomicStructure instance
    """
    resolved = [_resolve_species(el, tolerant) for el in elements]
    symbols: Tuple[str, ...] = tuple(sym for sym, _ in resolved)
    numbers: Int[Array, "N"] = jnp.asarray(
        [num for _, num in resolved], dtype=jnp.int64
    )
    n_atoms = len(symbols)

    if cell is not None and not isinstance(cell, CELL_SPEC_TYPES):
        raise InvalidCellSpec(
            f"Invalid cell passed to create_atomic_structure: {cell!r}"
        )
    cell_rows, pbc = resolve_cell(cell)
    inv_cell = invert_cell(cell_rows)

    cart: Float[Array, "N 3"] = _check_positions(positions, n_atoms)
    if scaled:
        if inv_cell is None:
            raise NonPeriodicScaledCoordinatesError(
                "Impossible to use scaled coordinates with non-periodic system"
            )
        cart = cart @ jnp.stack(cell_rows, axis=0)

    return AtomicStructure(
        positions=cart,
        numbers=numbers,
        symbols=symbols,
        cell=cell_rows,
        inv_cell=inv_cell,
        pbc=pbc,
        arrays=MappingProxyType({}),
        info=_freeze_info(info or {}),
    )


def atom_count(structure: AtomicStructure) -> int:
    """Number of atoms in the structure."""
    return len(structure.symbols)


def chemical_symbols(structure: AtomicStructure) -> Tuple[str, ...]:
    """Element symbols of all atoms."""
    return structure.symbols


def atomic_numbers(structure: AtomicStructure) -> Int[Array, "N"]:
    """Atomic numbers of all atoms."""
    return structure.numbers


def get_array(structure: AtomicStructure, name: str) -> Any:
    """
    Description
    -----------
    Return a per-atom array by name.

    Parameters
    ----------
    - `structure` (AtomicStructure):
        Structure to query.
    - `name` (str):
        "positions", "numbers", "symbols" or the name of an array added
        with `with_array`.

    Returns
    -------
    - `array` (Any):
        The stored array. JAX arrays, tuples and read-only NumPy arrays
        cannot be modified in place.

    Raises
    ------
    - KeyError:
        If no array with that name exists.
    """
    if name in BUILTIN_ARRAYS:
        return getattr(structure, name)
    return structure.arrays[name]


def with_array(
    structure: AtomicStructure,
    name: str,
    values: Any,
) -> AtomicStructure:
    """
    Description
    -----------
    Return a copy of the structure with a per-atom array set.

    Parameters
    ----------
    - `structure` (AtomicStructure):
        Structure to extend.
    - `name` (str):
        Name of the array. "positions" replaces the Cartesian positions;
        "numbers" and "symbols" cannot be replaced.
    - `values` (Any):
        One entry per atom.

    Returns
    -------
    - `structure` (AtomicStructure):
        New structure; the input is left untouched.

    Raises
    ------
    - `ArrayLengthMismatch`:
        If `values` does not have one entry per atom.
    - ValueError:
        If `name` is "numbers" or "symbols".
    """
    n_atoms = atom_count(structure)
    if name in ("numbers", "symbols"):
        raise ValueError(f"'{name}' is fixed at construction")
    if name == "positions":
        return structure._replace(positions=_check_positions(values, n_atoms))
    arrays = dict(structure.arrays)
    arrays[name] = _freeze(values, n_atoms, name)
    return structure._replace(arrays=MappingProxyType(arrays))


@jaxtyped(typechecker=beartype)
def scaled_positions(structure: AtomicStructure) -> Float[Array, "N 3"]:
    """
    Description
    -----------
    Fractional coordinates of all atoms, ``positions @ inv_cell``.

    Parameters
    ----------
    - `structure` (AtomicStructure):
        A structure periodic along all three axes.

    Returns
    -------
    - `scaled` (Float[Array, "N 3"]):
        Fractional coordinates, not wrapped into the unit cell.

    Raises
    ------
    - `NonPeriodicScaledCoordinatesError`:
        If the structure is not periodic along all three axes.
    """
    if structure.inv_cell is None:
        raise NonPeriodicScaledCoordinatesError(
            "Scaled positions need a structure periodic along all axes"
        )
    return structure.positions @ structure.inv_cell
