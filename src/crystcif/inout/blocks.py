"""Extraction of typed field groups from a CIF data block.

Extended Summary
----------------
Each extractor reads one group of related tags out of a parsed CifDataBlock.
Extraction is tolerant: a missing anchor tag means the group is absent, and
secondary tags that are missing or do not line up with the anchor are
treated as absent fields instead of failing the whole group.

Routine Listings
----------------
extract_tags : function
    Pull a group of tags whose loops line up with the first one
atom_types : function
    Atom type descriptions and bond radii keyed by type symbol
atom_sites : function
    Atom site labels, type symbols and coordinates
cell_parameters : function
    Cell lengths and angles, if complete and non-degenerate
symmetry_operators : function
    Symmetry operations from operator strings or a Hall symbol
"""

import logging

from beartype.typing import Dict, List, Optional, Sequence, Tuple

from crystcif._typing_utils import beartype
from crystcif.symmetry.operators import (
    operators_from_hall_symbol,
    parse_operator_string,
)
from crystcif.types import (
    AtomSiteRecord,
    AtomTypeRecord,
    CifDataBlock,
    CifItem,
    CifLoop,
    CifSingle,
    CifValue,
    SymmetryOperation,
)

logger = logging.getLogger(__name__)

ATOM_TYPE_TAGS = (
    "_atom_type_symbol",
    "_atom_type_description",
    "_atom_type_radius_bond",
)
ATOM_SITE_TAGS = (
    "_atom_site_label",
    "_atom_site_type_symbol",
    "_atom_site_Cartn_x",
    "_atom_site_Cartn_y",
    "_atom_site_Cartn_z",
    "_atom_site_fract_x",
    "_atom_site_fract_y",
    "_atom_site_fract_z",
)
CELL_TAGS = (
    "_cell_length_a",
    "_cell_length_b",
    "_cell_length_c",
    "_cell_angle_alpha",
    "_cell_angle_beta",
    "_cell_angle_gamma",
)
SYMOP_TAGS = (
    "_space_group_symop_operation_xyz",
    "_symmetry_equiv_pos_as_xyz",
)
HALL_TAGS = (
    "_space_group_name_Hall",
    "_symmetry_space_group_name_Hall",
)


@beartype
def extract_tags(
    block: CifDataBlock,
    tags: Sequence[str],
) -> Optional[List[Optional[List[CifValue]]]]:
    """
    Description
    -----------
    Extract a group of tags from a block. The first tag is the mandatory
    anchor of the group.

    Parameters
    ----------
    - `block` (CifDataBlock):
        Block to read from.
    - `tags` (Sequence[str]):
        Tag names, anchor first.

    Returns
    -------
    - `values` (Optional[List[Optional[List[CifValue]]]]):
        None if the anchor is missing. Otherwise one entry per tag: the
        values of that tag, with single values lifted to one-element lists,
        or None if the tag is missing, is not of the same kind (single or
        loop) as the anchor, or is a loop of a different length.
    """
    items: List[Optional[CifItem]] = [block.get(tag) for tag in tags]
    anchor = items[0]
    if anchor is None:
        return None
    is_loop = isinstance(anchor, CifLoop)
    base_len = len(anchor.values) if is_loop else 1

    extracted: List[Optional[List[CifValue]]] = []
    for tag, item in zip(tags, items):
        if item is None:
            extracted.append(None)
        elif isinstance(item, CifLoop) != is_loop:
            logger.debug(
                "Block %s: %s is not a %s",
                block.name,
                tag,
                "loop" if is_loop else "single value",
            )
            extracted.append(None)
        elif is_loop and len(item.values) != base_len:
            logger.debug(
                "Block %s: %s has %d values, expected %d",
                block.name,
                tag,
                len(item.values),
                base_len,
            )
            extracted.append(None)
        elif is_loop:
            extracted.append(list(item.values))
        else:
            extracted.append([item.value])
    return extracted


@beartype
def atom_types(block: CifDataBlock) -> Optional[Dict[str, AtomTypeRecord]]:
    """Atom types of the block keyed by type symbol, or None if absent."""
    typevals = extract_tags(block, ATOM_TYPE_TAGS)
    if typevals is None:
        return None
    symbols, descriptions, radii = typevals
    atypes: Dict[str, AtomTypeRecord] = {}
    for i, symbol in enumerate(symbols):
        atypes[symbol.text] = AtomTypeRecord(
            description=None if descriptions is None else descriptions[i].get_value(),
            radius_bond=None if radii is None else radii[i].get_value(),
        )
    return atypes


def _triplet(
    columns: Sequence[Optional[List[CifValue]]], row: int
) -> Optional[Tuple[float, float, float]]:
    if any(col is None for col in columns):
        return None
    values = [col[row].get_value() for col in columns]
    if not all(isinstance(v, float) for v in values):
        return None
    return (values[0], values[1], values[2])


@beartype
def atom_sites(block: CifDataBlock) -> Optional[List[AtomSiteRecord]]:
    """
    Description
    -----------
    Extract the atom sites of a block.

    Parameters
    ----------
    - `block` (CifDataBlock):
        Block to read from.

    Returns
    -------
    - `sites` (Optional[List[AtomSiteRecord]]):
        None if the block has no `_atom_site_label`. Otherwise one record
        per site. A coordinate triple is set only when all three columns
        exist and hold numbers for that site.
    """
    sitevals = extract_tags(block, ATOM_SITE_TAGS)
    if sitevals is None:
        return None
    labels, type_symbols = sitevals[0], sitevals[1]
    cartesian_cols, fractional_cols = sitevals[2:5], sitevals[5:8]

    sites: List[AtomSiteRecord] = []
    for i, label in enumerate(labels):
        type_symbol = None
        if type_symbols is not None and not type_symbols[i].null:
            type_symbol = type_symbols[i].text
        sites.append(
            AtomSiteRecord(
                label=label.text,
                type_symbol=type_symbol,
                cartesian=_triplet(cartesian_cols, i),
                fractional=_triplet(fractional_cols, i),
            )
        )
    return sites


@beartype
def cell_parameters(
    block: CifDataBlock,
) -> Optional[Tuple[Tuple[float, float, float], Tuple[float, float, float]]]:
    """
    Description
    -----------
    Extract the cell lengths and angles of a block.

    Parameters
    ----------
    - `block` (CifDataBlock):
        Block to read from.

    Returns
    -------
    - `cellpar` (Optional[Tuple[lengths, angles]]):
        Lengths [a, b, c] in Ångstroms and angles [α, β, γ] in degrees.
        None if any of the six tags is missing or not a number, or if any
        length is zero; such a block is treated as aperiodic.
    """
    values: List[float] = []
    for tag in CELL_TAGS:
        item = block.get(tag)
        value = item.value.get_value() if isinstance(item, CifSingle) else None
        if not isinstance(value, float):
            logger.debug("Block %s: no usable %s", block.name, tag)
            return None
        values.append(value)
    lengths = (values[0], values[1], values[2])
    angles = (values[3], values[4], values[5])
    if any(length == 0 for length in lengths):
        logger.debug("Block %s: zero cell length", block.name)
        return None
    return lengths, angles


def _first_present(block: CifDataBlock, tags: Sequence[str]) -> Optional[CifItem]:
    for tag in tags:
        item = block.get(tag)
        if item is not None:
            return item
    return None


@beartype
def symmetry_operators(
    block: CifDataBlock,
) -> Optional[List[SymmetryOperation]]:
    """
    Description
    -----------
    Extract the symmetry operations of a block.

    Parameters
    ----------
    - `block` (CifDataBlock):
        Block to read from.

    Returns
    -------
    - `operations` (Optional[List[SymmetryOperation]]):
        Operations other than the identity, or None when there is nothing
        to expand.

    Flow
    ----
    - If an operator-string tag exists, use it: a single value or a loop
      of one entry means identity only and gives None; otherwise every
      entry after the first (the identity) is parsed
    - Else, if a Hall symbol tag exists, expand the symbol
    - Unreadable operators or Hall symbols are logged and give None
    """
    symops = _first_present(block, SYMOP_TAGS)
    if symops is not None:
        if isinstance(symops, CifSingle) or len(symops.values) < 2:
            logger.debug("Block %s: identity symmetry only", block.name)
            return None
        try:
            return [parse_operator_string(v.text) for v in symops.values[1:]]
        except ValueError as err:
            logger.warning(
                "Block %s: ignoring symmetry operators: %s", block.name, err
            )
            return None

    hall = _first_present(block, HALL_TAGS)
    if not isinstance(hall, CifSingle) or hall.value.null:
        return None
    try:
        return operators_from_hall_symbol(hall.value.text)
    except (RuntimeError, ValueError) as err:
        logger.warning(
            "Block %s: ignoring Hall symbol %r: %s",
            block.name,
            hall.value.text,
            err,
        )
        return None
