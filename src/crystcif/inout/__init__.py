"""Reading crystal structures from CIF.

Extended Summary
----------------
This module tokenizes CIF text into data blocks, extracts atom types, atom
sites, cell parameters and symmetry operators from each block, and builds
one symmetry-expanded AtomicStructure per block that lists atom sites.

Routine Listings
----------------
read_cif_document : function
    Tokenize CIF text into an ordered mapping of block name to CifDataBlock
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
structure_from_block : function
    Build the AtomicStructure of a single data block
structures_from_cif : function
    Build one AtomicStructure per qualifying block of a parsed document
read_cif : function
    Parse CIF text into atomic structures
parse_cif : function
    Parse a CIF file into atomic structures

Notes
-----
Blocks without usable cell parameters are read as aperiodic structures.
"""

from .blocks import (
    atom_sites,
    atom_types,
    cell_parameters,
    extract_tags,
    symmetry_operators,
)
from .cif import parse_cif, read_cif, structure_from_block, structures_from_cif
from .reader import read_cif_document

__all__ = [
    "atom_sites",
    "atom_types",
    "cell_parameters",
    "extract_tags",
    "parse_cif",
    "read_cif",
    "read_cif_document",
    "structure_from_block",
    "structures_from_cif",
    "symmetry_operators",
]
