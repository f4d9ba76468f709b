"""Symmetry expansion of an asymmetric unit.

Extended Summary
----------------
Every site of the asymmetric unit is mapped through each symmetry operation
and the images are wrapped into the unit cell. An image is kept only if it
lies at least `tolerance` away, under the minimal-image convention, from
every image already kept for the same site.

Routine Listings
----------------
wrap_fractional : function
    Reduce fractional coordinates into [0, 1)
shortest_periodic_length : function
    Minimal-image Cartesian length of fractional displacements
expand_asymmetric_unit : function
    Apply symmetry operations to sites and remove duplicate images

Notes
-----
Operations and sites are processed in input order, so among images closer
than the tolerance the earliest one is kept.
"""

import itertools
import logging

import jax
import jax.numpy as jnp
from beartype.typing import Sequence, Tuple
from jax import lax
from jaxtyping import Array, Bool, Float

from crystcif._typing_utils import beartype, jaxtyped
from crystcif.types import SymmetryOperation, scalar_float

jax.config.update("jax_enable_x64", True)

logger = logging.getLogger(__name__)

# Distance (Å) below which two symmetry images are the same site
DEFAULT_SYMMETRY_TOLERANCE = 1e-3

_LATTICE_SHIFTS: Float[Array, "27 3"] = jnp.array(
    list(itertools.product((-1.0, 0.0, 1.0), repeat=3)), dtype=jnp.float64
)


@jaxtyped(typechecker=beartype)
def wrap_fractional(
    fractional: Float[Array, "*batch 3"],
) -> Float[Array, "*batch 3"]:
    """Reduce every component into [0, 1)."""
    wrapped = fractional - jnp.floor(fractional)
    # floor can leave exactly 1.0 for tiny negative inputs
    return jnp.where(wrapped >= 1.0, wrapped - 1.0, wrapped)


@jaxtyped(typechecker=beartype)
def shortest_periodic_length(
    delta: Float[Array, "*batch 3"],
    cell: Float[Array, "3 3"],
) -> Float[Array, "*batch"]:
    """
    Description
    -----------
    Length of the shortest periodic image of fractional displacements.

    Parameters
    ----------
    - `delta` (Float[Array, "*batch 3"]):
        Displacements in fractional coordinates.
    - `cell` (Float[Array, "3 3"]):
        Cell vectors as rows, used as the metric.

    Returns
    -------
    - `length` (Float[Array, "*batch"]):
        Minimal Cartesian length over all lattice translations of each
        displacement, in Ångstroms.

    Flow
    ----
    - Wrap each displacement into [0, 1)
    - Add every lattice translation in {-1, 0, 1}^3
    - Convert to Cartesian and take the shortest length
    """
    wrapped = wrap_fractional(delta)
    images = wrapped[..., None, :] + _LATTICE_SHIFTS
    lengths = jnp.linalg.norm(images @ cell, axis=-1)
    return jnp.min(lengths, axis=-1)


@jax.jit
def _accepted_images(
    candidates: Float[Array, "M 3"],
    cell: Float[Array, "3 3"],
    tolerance: Float[Array, ""],
) -> Bool[Array, "M"]:
    n_candidates = candidates.shape[0]
    indices = jnp.arange(n_candidates)

    def body_fn(i, kept):
        distances = shortest_periodic_length(candidates - candidates[i], cell)
        is_duplicate = jnp.any((distances < tolerance) & kept & (indices < i))
        return kept.at[i].set(jnp.logical_not(is_duplicate))

    kept_init = jnp.zeros(n_candidates, dtype=bool).at[0].set(True)
    return lax.fori_loop(1, n_candidates, body_fn, kept_init)


@jaxtyped(typechecker=beartype)
def expand_asymmetric_unit(
    cell: Float[Array, "3 3"],
    fractional_positions: Float[Array, "N 3"],
    labels: Sequence[str],
    symbols: Sequence[str],
    operators: Sequence[SymmetryOperation],
    tolerance: scalar_float = DEFAULT_SYMMETRY_TOLERANCE,
) -> Tuple[Float[Array, "M 3"], Tuple[str, ...], Tuple[str, ...]]:
    """
    Description
    -----------
    Apply symmetry operations to each site and drop duplicate images.

    Parameters
    ----------
    - `cell` (Float[Array, "3 3"]):
        Cell vectors as rows, the metric for duplicate detection.
    - `fractional_positions` (Float[Array, "N 3"]):
        Fractional coordinates of the asymmetric unit.
    - `labels` (Sequence[str]):
        Site label of each position.
    - `symbols` (Sequence[str]):
        Element symbol of each position.
    - `operators` (Sequence[SymmetryOperation]):
        Operations to apply, in order. The identity does not need to be
        included.
    - `tolerance` (scalar_float):
        Distance in Ångstroms under which two images of a site are the same.
        Default: 1e-3.

    Returns
    -------
    - `positions` (Float[Array, "M 3"]):
        Fractional coordinates of all kept images, site by site. The first
        image of each site is its input position, unwrapped.
    - `labels` (Tuple[str, ...]):
        Label of the site each image comes from.
    - `symbols` (Tuple[str, ...]):
        Element symbol of the site each image comes from.

    Flow
    ----
    - Stack the operations into rotation and translation arrays
    - For each site, apply every operation and wrap into [0, 1)
    - Put the original position first, then the images in operation order
    - Keep an image only if no earlier kept image of the same site is
      closer than the tolerance
    - Concatenate the kept images of all sites
    """
    if len(labels) != fractional_positions.shape[0] or len(symbols) != len(
        labels
    ):
        raise ValueError(
            "labels and symbols must have one entry per position"
        )
    if not operators:
        return fractional_positions, tuple(labels), tuple(symbols)

    rotations: Float[Array, "K 3 3"] = jnp.stack(
        [op.rotation for op in operators]
    )
    translations: Float[Array, "K 3"] = jnp.stack(
        [op.translation for op in operators]
    )
    tol = jnp.asarray(tolerance, dtype=jnp.float64)

    orbits = []
    all_labels = []
    all_symbols = []
    for p0, label, symbol in zip(fractional_positions, labels, symbols):
        images = wrap_fractional(
            jnp.einsum("kij,j->ki", rotations, p0) + translations
        )
        candidates = jnp.concatenate([p0[None, :], images], axis=0)
        kept = _accepted_images(candidates, cell, tol)
        orbit = candidates[kept]
        orbits.append(orbit)
        all_labels.extend([label] * orbit.shape[0])
        all_symbols.extend([symbol] * orbit.shape[0])
        logger.debug("Site %s expanded to %d images", label, orbit.shape[0])

    if not orbits:
        return fractional_positions, (), ()
    return (
        jnp.concatenate(orbits, axis=0),
        tuple(all_labels),
        tuple(all_symbols),
    )
