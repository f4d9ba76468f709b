"""Functions for unit cell calculations and transformations.

Extended Summary
----------------
This module provides conversions between the Cartesian cell-vector form and
the lengths and angles form of a unit cell, resolution of the supported cell
forms into canonical cell rows with periodic boundary flags, and conversions
between fractional and Cartesian coordinates.

Routine Listings
----------------
cell_to_cellpar : function
    Compute unit cell lengths and angles from lattice vectors
cellpar_to_cell : function
    Construct Cartesian unit cell vectors from lengths and angles
resolve_cell : function
    Resolve a cell variant into cell rows and periodic boundary flags
invert_cell : function
    Inverse of a fully periodic cell
fractional_to_cartesian : function
    Convert fractional coordinates to Cartesian coordinates
cartesian_to_fractional : function
    Convert Cartesian coordinates to fractional coordinates

Notes
-----
Cell vectors are stored as rows and coordinates follow the row-vector
convention ``cartesian = fractional @ cell``.
"""

import jax
import jax.numpy as jnp
from beartype.typing import Optional, Tuple
from jaxtyping import Array, Bool, Float

from crystcif._typing_utils import beartype, jaxtyped
from crystcif.types.cell_types import (
    AxisLengthsCell,
    CartesianCell,
    CellRows,
    CubicCell,
    LengthsAnglesCell,
    PeriodicFlags,
)
from crystcif.types.custom_types import array_like
from crystcif.types.errors import InvalidCellSpec

jax.config.update("jax_enable_x64", True)

# Below this product of lengths an angle is reported as 90 degrees
DEGENERATE_LENGTH_PRODUCT = 1e-16
# |sin| within this distance of 1 is snapped, giving exact right angles
ORTHOGONAL_SNAP = 1e-14
# ab_normal counts as parallel to x below this cross product norm
PARALLEL_TOLERANCE = 1e-5


@jaxtyped(typechecker=beartype)
def cell_to_cellpar(
    cell: Float[Array, "3 3"],
    radians: bool = False,
) -> Tuple[Float[Array, "3"], Float[Array, "3"]]:
    """Compute unit cell lengths and angles from lattice vectors.

    Parameters
    ----------
    cell : Float[Array, "3 3"]
        Unit cell vectors as rows of 3x3 matrix.
    radians : bool, optional
        If True, angles are returned in radians. Default: False.

    Returns
    -------
    Tuple[Float[Array, "3"], Float[Array, "3"]]
        Unit cell lengths [a, b, c] in angstroms and unit cell angles
        [α, β, γ], where α is the angle between b and c, β between a and c,
        and γ between a and b.

    Algorithm
    ---------
    - Calculate vector lengths
    - For each axis i take the pair j = (i + 2) % 3, k = (i + 1) % 3
    - Angle i is the arccos of the normalised dot product of vectors j, k
    - A degenerate pair (product of lengths below 1e-16) gives 90 degrees
    - Convert angles to degrees unless radians were requested

    Examples
    --------
    >>> import jax.numpy as jnp
    >>> from crystcif.ucell import cell_to_cellpar
    >>>
    >>> lengths, angles = cell_to_cellpar(jnp.eye(3) * 3.0)
    >>> print(f"Cell lengths: {lengths}")
    >>> print(f"Cell angles: {angles}")
    """
    lengths: Float[Array, "3"] = jnp.linalg.norm(cell, axis=1)
    j_idx = jnp.array([2, 0, 1])
    k_idx = jnp.array([1, 2, 0])
    length_products: Float[Array, "3"] = lengths[j_idx] * lengths[k_idx]
    dots: Float[Array, "3"] = jnp.einsum("ij,ij->i", cell[j_idx], cell[k_idx])
    is_degenerate: Bool[Array, "3"] = (
        length_products <= DEGENERATE_LENGTH_PRODUCT
    )
    safe_products: Float[Array, "3"] = jnp.where(
        is_degenerate, 1.0, length_products
    )
    cosines: Float[Array, "3"] = jnp.clip(dots / safe_products, -1.0, 1.0)
    angles: Float[Array, "3"] = jnp.where(
        is_degenerate, jnp.pi / 2.0, jnp.arccos(cosines)
    )
    if not radians:
        angles = jnp.degrees(angles)
    return lengths, angles


def _unit(vector: Float[Array, "3"]) -> Float[Array, "3"]:
    return vector / jnp.linalg.norm(vector)


@jaxtyped(typechecker=beartype)
def cellpar_to_cell(
    lengths: array_like,
    angles: array_like,
    ab_normal: Optional[array_like] = None,
    a_direction: Optional[array_like] = None,
    radians: bool = False,
) -> Float[Array, "3 3"]:
    r"""Construct Cartesian unit cell vectors from lengths and angles.

    Parameters
    ----------
    lengths : array_like
        Cell lengths [a, b, c] in angstroms.
    angles : array_like
        Cell angles [α, β, γ], in degrees unless `radians` is set.
    ab_normal : array_like, optional
        Desired direction for the normal to the AB plane.
        Default: [0, 0, 1].
    a_direction : array_like, optional
        Direction for the a vector, projected onto the AB plane. Defaults
        to [1, 0, 0], or [0, 0, 1] when `ab_normal` is parallel to x.
    radians : bool, optional
        If True, consider the angles in radians. Default: False.

    Returns
    -------
    Float[Array, "3 3"]
        Unit cell vectors as rows of 3x3 matrix.

    Algorithm
    ---------
    - Build an orthonormal X, Y, Z system with Z along `ab_normal` and X
      along the projection of `a_direction` onto the normal plane of Z
    - Convert angles to radians and snap sines within 1e-14 of ±1 so that
      right angles come out exact
    - Build a along x, b in the x-y plane and c from all three angles, with
      its z component fixed by |c| = c
    - Rotate the three vectors into the X, Y, Z system

    Notes
    -----
    This is a reconstruction rather than an inverse of `cell_to_cellpar`:
    the orientation of the input cell is not preserved.

    Examples
    --------
    >>> from crystcif.ucell import cellpar_to_cell
    >>>
    >>> # Build vectors for a hexagonal cell
    >>> vectors = cellpar_to_cell([3.0, 3.0, 5.0], [90.0, 90.0, 120.0])
    >>> print(f"Cell vectors:\n{vectors}")
    """
    lengths_arr: Float[Array, "3"] = jnp.asarray(lengths, dtype=jnp.float64)
    angles_arr: Float[Array, "3"] = jnp.asarray(angles, dtype=jnp.float64)
    if ab_normal is None:
        ab_normal = [0.0, 0.0, 1.0]
    normal: Float[Array, "3"] = jnp.asarray(ab_normal, dtype=jnp.float64)
    if a_direction is None:
        x_axis = jnp.array([1.0, 0.0, 0.0])
        normal_along_x: Bool[Array, ""] = (
            jnp.linalg.norm(jnp.cross(normal, x_axis)) < PARALLEL_TOLERANCE
        )
        direction: Float[Array, "3"] = jnp.where(
            normal_along_x, jnp.array([0.0, 0.0, 1.0]), x_axis
        )
    else:
        direction = jnp.asarray(a_direction, dtype=jnp.float64)

    ad: Float[Array, "3"] = _unit(direction)
    z_hat: Float[Array, "3"] = _unit(normal)
    x_hat: Float[Array, "3"] = _unit(ad - jnp.dot(ad, z_hat) * z_hat)
    y_hat: Float[Array, "3"] = jnp.cross(z_hat, x_hat)

    angles_rad: Float[Array, "3"] = (
        angles_arr if radians else jnp.radians(angles_arr)
    )
    cos_a: Float[Array, "3"] = jnp.cos(angles_rad)
    sin_a: Float[Array, "3"] = jnp.sin(angles_rad)
    # Round for orthorhombic cells
    snap: Bool[Array, "3"] = jnp.abs(jnp.abs(sin_a) - 1.0) < ORTHOGONAL_SNAP
    sin_a = jnp.where(snap, jnp.sign(sin_a), sin_a)
    cos_a = jnp.where(snap, 0.0, cos_a)

    a, b, c = lengths_arr[0], lengths_arr[1], lengths_arr[2]
    a_vec: Float[Array, "3"] = jnp.array([a, 0.0, 0.0])
    b_vec: Float[Array, "3"] = jnp.array([b * cos_a[2], b * sin_a[2], 0.0])
    c_x: Float[Array, ""] = c * cos_a[1]
    c_y: Float[Array, ""] = c * (cos_a[0] - cos_a[1] * cos_a[2]) / sin_a[2]
    c_z_sq: Float[Array, ""] = (c**2) - (c_x**2) - (c_y**2)
    c_z: Float[Array, ""] = jnp.sqrt(jnp.clip(c_z_sq, 0.0))
    c_vec: Float[Array, "3"] = jnp.array([c_x, c_y, c_z])

    abc: Float[Array, "3 3"] = jnp.stack([a_vec, b_vec, c_vec], axis=0)
    basis: Float[Array, "3 3"] = jnp.stack([x_hat, y_hat, z_hat], axis=0)
    return abc @ basis


def _as_row(row, axis: int) -> Float[Array, "3"]:
    try:
        arr = jnp.asarray(row, dtype=jnp.float64)
    except (TypeError, ValueError) as err:
        raise InvalidCellSpec(f"Invalid cell row {axis}: {row!r}") from err
    if arr.shape != (3,):
        raise InvalidCellSpec(
            f"Invalid cell row {axis}: expected 3 components, "
            f"got shape {arr.shape}"
        )
    return arr


def _as_triplet(values, name: str) -> Float[Array, "3"]:
    try:
        arr = jnp.asarray(values, dtype=jnp.float64)
    except (TypeError, ValueError) as err:
        raise InvalidCellSpec(f"Invalid cell {name}: {values!r}") from err
    if arr.shape != (3,):
        raise InvalidCellSpec(
            f"Invalid cell {name}: expected 3 values, got shape {arr.shape}"
        )
    return arr


def _three_entries(values, name: str) -> list:
    try:
        entries = list(values)
    except TypeError as err:
        raise InvalidCellSpec(f"Invalid cell {name}: {values!r}") from err
    if len(entries) != 3:
        raise InvalidCellSpec(
            f"Invalid cell {name}: expected 3 entries, got {len(entries)}"
        )
    return entries


def resolve_cell(spec) -> Tuple[CellRows, PeriodicFlags]:
    """
    Description
    -----------
    Resolve a cell variant into canonical cell rows and periodic flags.

    Parameters
    ----------
    - `spec` (Optional[CellSpec]):
        None for an aperiodic system, or one of CubicCell,
        AxisLengthsCell, CartesianCell, LengthsAnglesCell.

    Returns
    -------
    - `cell` (CellRows):
        Three Cartesian rows, None for every aperiodic axis.
    - `pbc` (PeriodicFlags):
        True for every axis that has a row.

    Raises
    ------
    - `InvalidCellSpec`:
        If `spec` is not a cell variant, or its content has the wrong shape.

    Flow
    ----
    - None: no rows, no periodicity
    - CubicCell: a times the identity
    - AxisLengthsCell: one axis-aligned row per non-None length
    - CartesianCell: each non-None row checked for 3 components
    - LengthsAnglesCell: rows from `cellpar_to_cell`
    """
    rows: list
    if spec is None:
        rows = [None, None, None]
    elif isinstance(spec, CubicCell):
        diagonal = jnp.eye(3, dtype=jnp.float64) * jnp.float64(spec.a)
        rows = [diagonal[0], diagonal[1], diagonal[2]]
    elif isinstance(spec, AxisLengthsCell):
        rows = []
        for i, length in enumerate(_three_entries(spec.lengths, "lengths")):
            if length is None:
                rows.append(None)
            else:
                rows.append(jnp.eye(3, dtype=jnp.float64)[i] * length)
    elif isinstance(spec, CartesianCell):
        rows = [
            None if row is None else _as_row(row, i)
            for i, row in enumerate(_three_entries(spec.vectors, "vectors"))
        ]
    elif isinstance(spec, LengthsAnglesCell):
        matrix = cellpar_to_cell(
            _as_triplet(spec.lengths, "lengths"),
            _as_triplet(spec.angles, "angles"),
        )
        rows = [matrix[0], matrix[1], matrix[2]]
    else:
        raise InvalidCellSpec(
            f"Invalid cell passed to resolve_cell: {type(spec).__name__}"
        )
    cell: CellRows = (rows[0], rows[1], rows[2])
    pbc: PeriodicFlags = tuple(row is not None for row in cell)
    return cell, pbc


def invert_cell(cell: CellRows) -> Optional[Float[Array, "3 3"]]:
    """Inverse of the cell matrix, or None unless all three rows exist."""
    if any(row is None for row in cell):
        return None
    return jnp.linalg.inv(jnp.stack(cell, axis=0))


@jaxtyped(typechecker=beartype)
def fractional_to_cartesian(
    fractional: Float[Array, "*batch 3"],
    cell: Float[Array, "3 3"],
) -> Float[Array, "*batch 3"]:
    """Convert fractional coordinates to Cartesian (``frac @ cell``)."""
    return fractional @ cell


@jaxtyped(typechecker=beartype)
def cartesian_to_fractional(
    cartesian: Float[Array, "*batch 3"],
    cell: Float[Array, "3 3"],
) -> Float[Array, "*batch 3"]:
    """Convert Cartesian coordinates to fractional ones."""
    return cartesian @ jnp.linalg.inv(cell)
