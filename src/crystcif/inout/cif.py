"""Conversion of CIF documents into atomic structures.

Extended Summary
----------------
Every data block that lists atom sites becomes one AtomicStructure. The
cell, when given, is realised in Cartesian form, sites without Cartesian
coordinates are placed from their fractional coordinates, and the
asymmetric unit is expanded with the block's symmetry operations.

Routine Listings
----------------
structure_from_block : function
    Build the AtomicStructure of a single data block
structures_from_cif : function
    Build one AtomicStructure per qualifying block of a parsed document
read_cif : function
    Parse CIF text into atomic structures
parse_cif : function
    Parse a CIF file into atomic structures
"""

import logging
import re
from pathlib import Path

import jax
import jax.numpy as jnp
from beartype.typing import Dict, List, Mapping, Union

from crystcif._typing_utils import beartype
from crystcif.symmetry import DEFAULT_SYMMETRY_TOLERANCE, expand_asymmetric_unit
from crystcif.types import (
    AtomicStructure,
    AtomSiteRecord,
    CartesianCell,
    CifDataBlock,
    MissingCoordinatesError,
    create_atomic_structure,
    lookup_by_symbol,
    scalar_num,
    with_array,
)
from crystcif.ucell import (
    cartesian_to_fractional,
    cellpar_to_cell,
    fractional_to_cartesian,
)

from .blocks import (
    ATOM_SITE_TAGS,
    atom_sites,
    atom_types,
    cell_parameters,
    symmetry_operators,
)
from .reader import read_cif_document

jax.config.update("jax_enable_x64", True)

logger = logging.getLogger(__name__)

_SYMBOL_RE = re.compile(r"\s*([A-Za-z])([A-Za-z]?)")


def _element_symbol(site: AtomSiteRecord) -> str:
    """Element part of a type symbol ("Fe3+") or, failing that, a label."""
    source = site.type_symbol if site.type_symbol is not None else site.label
    match = _SYMBOL_RE.match(source)
    if match is None:
        return source
    first, second = match.group(1).upper(), match.group(2).lower()
    if second and lookup_by_symbol(first + second) is not None:
        return first + second
    if lookup_by_symbol(first) is not None:
        return first
    return source


@beartype
def structure_from_block(
    block: CifDataBlock,
    symmetry_tolerance: scalar_num = DEFAULT_SYMMETRY_TOLERANCE,
    tolerant: bool = False,
) -> AtomicStructure:
    """
    Description
    -----------
    Build the atomic structure described by one CIF data block.

    Parameters
    ----------
    - `block` (CifDataBlock):
        Block holding `_atom_site_label`.
    - `symmetry_tolerance` (scalar_num):
        Distance in Ångstroms under which two symmetry images of a site
        are considered the same. Default: 1e-3.
    - `tolerant` (bool):
        Accept element symbols missing from the periodic table.

    Returns
    -------
    - `structure` (AtomicStructure):
        Expanded structure. Site labels are attached as the "labels"
        array, the block name and atom types (if any) are in `info`.

    Raises
    ------
    - `MissingCoordinatesError`:
        If a site has no Cartesian coordinates and no fractional
        coordinates usable with the cell.
    - `UnknownSpeciesError`:
        If a site's element is unknown and `tolerant` is False.

    Flow
    ----
    - Extract atom types, atom sites and cell parameters
    - The block is periodic iff the cell parameters are usable
    - Realise the Cartesian cell from lengths and angles
    - Place each site, preferring Cartesian over fractional coordinates
    - If periodic and operators exist, expand in fractional coordinates
    - Create the structure and attach the site labels
    """
    atypes = atom_types(block)
    asites: List[AtomSiteRecord] = atom_sites(block) or []
    cellpar = cell_parameters(block)
    pbc = cellpar is not None
    cell = cellpar_to_cell(*cellpar) if pbc else None

    symbols: List[str] = []
    labels: List[str] = []
    positions = []
    for site in asites:
        symbols.append(_element_symbol(site))
        labels.append(site.label)
        if site.cartesian is not None:
            positions.append(jnp.asarray(site.cartesian, dtype=jnp.float64))
        elif site.fractional is not None and pbc:
            positions.append(
                fractional_to_cartesian(
                    jnp.asarray(site.fractional, dtype=jnp.float64), cell
                )
            )
        elif not pbc:
            raise MissingCoordinatesError(
                f"Block {block.name}: absolute coordinates are necessary "
                f"without a unit cell (site {site.label})"
            )
        else:
            raise MissingCoordinatesError(
                f"Block {block.name}: site {site.label} has no coordinates"
            )
    if positions:
        cart = jnp.stack(positions, axis=0)
    else:
        cart = jnp.zeros((0, 3), dtype=jnp.float64)

    if pbc:
        operators = symmetry_operators(block)
        if operators:
            frac = cartesian_to_fractional(cart, cell)
            frac, labels, symbols = expand_asymmetric_unit(
                cell,
                frac,
                labels,
                symbols,
                operators,
                tolerance=float(symmetry_tolerance),
            )
            cart = fractional_to_cartesian(frac, cell)
            logger.debug(
                "Block %s: %d sites expanded to %d atoms",
                block.name,
                len(asites),
                len(labels),
            )

    info = {"name": block.name}
    if atypes is not None:
        info["atom_types"] = atypes
    structure = create_atomic_structure(
        list(symbols),
        cart,
        cell=CartesianCell(vectors=cell) if pbc else None,
        info=info,
        tolerant=tolerant,
    )
    return with_array(structure, "labels", list(labels))


@beartype
def structures_from_cif(
    document: Mapping[str, CifDataBlock],
    symmetry_tolerance: scalar_num = DEFAULT_SYMMETRY_TOLERANCE,
    tolerant: bool = False,
) -> Dict[str, AtomicStructure]:
    """
    Description
    -----------
    Build one atomic structure per data block that lists atom sites.

    Parameters
    ----------
    - `document` (Mapping[str, CifDataBlock]):
        Parsed CIF document, block name to block.
    - `symmetry_tolerance` (scalar_num):
        Distance in Ångstroms under which two symmetry images of a site
        are considered the same. Default: 1e-3.
    - `tolerant` (bool):
        Accept element symbols missing from the periodic table.

    Returns
    -------
    - `structures` (Dict[str, AtomicStructure]):
        Structures keyed by block name, in document order. Blocks without
        `_atom_site_label` are left out.
    """
    structures: Dict[str, AtomicStructure] = {}
    for name, block in document.items():
        if ATOM_SITE_TAGS[0] not in block:
            logger.debug("Block %s has no atom sites, skipping", name)
            continue
        structures[name] = structure_from_block(
            block, symmetry_tolerance=symmetry_tolerance, tolerant=tolerant
        )
    return structures


@beartype
def read_cif(
    cif_text: str,
    symmetry_tolerance: scalar_num = DEFAULT_SYMMETRY_TOLERANCE,
    tolerant: bool = False,
) -> Dict[str, AtomicStructure]:
    """
    Description
    -----------
    Parse CIF text into atomic structures, one per data block with atom
    sites.

    Parameters
    ----------
    - `cif_text` (str):
        CIF file content.
    - `symmetry_tolerance` (scalar_num):
        Distance in Ångstroms under which two symmetry images of a site
        are considered the same. Default: 1e-3.
    - `tolerant` (bool):
        Accept element symbols missing from the periodic table.

    Returns
    -------
    - `structures` (Dict[str, AtomicStructure]):
        Structures keyed by block name.

    Examples
    --------
    >>> from crystcif.inout import read_cif
    >>> structures = read_cif(open("NaCl.cif").read())
    >>> nacl = structures["NaCl"]
    >>> print(nacl.positions.shape)
    """
    return structures_from_cif(
        read_cif_document(cif_text),
        symmetry_tolerance=symmetry_tolerance,
        tolerant=tolerant,
    )


@beartype
def parse_cif(
    cif_path: Union[str, Path],
    symmetry_tolerance: scalar_num = DEFAULT_SYMMETRY_TOLERANCE,
    tolerant: bool = False,
) -> Dict[str, AtomicStructure]:
    """
    Description
    -----------
    Parse a CIF file into atomic structures.

    Parameters
    ----------
    - `cif_path` (Union[str, Path]):
        Path to the CIF file.
    - `symmetry_tolerance` (scalar_num):
        Distance in Ångstroms under which two symmetry images of a site
        are considered the same. Default: 1e-3.
    - `tolerant` (bool):
        Accept element symbols missing from the periodic table.

    Returns
    -------
    - `structures` (Dict[str, AtomicStructure]):
        Structures keyed by block name.

    Raises
    ------
    - FileNotFoundError:
        If the file does not exist.
    - ValueError:
        If the file does not have a .cif extension.
    """
    cif_path = Path(cif_path)
    if not cif_path.exists():
        raise FileNotFoundError(f"CIF file not found: {cif_path}")
    if cif_path.suffix.lower() != ".cif":
        raise ValueError(f"File must have .cif extension: {cif_path}")
    return read_cif(
        cif_path.read_text(),
        symmetry_tolerance=symmetry_tolerance,
        tolerant=tolerant,
    )
