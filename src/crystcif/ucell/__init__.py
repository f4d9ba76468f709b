"""Unit cell geometry for crystal structures.

Extended Summary
----------------
This module provides the conversions between the Cartesian and the
lengths and angles forms of a unit cell, the resolution of every supported
cell form into canonical cell rows with periodic boundary flags, and the
fractional/Cartesian coordinate transforms built on them.

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
"""

from .unitcell import (
    cartesian_to_fractional,
    cell_to_cellpar,
    cellpar_to_cell,
    fractional_to_cartesian,
    invert_cell,
    resolve_cell,
)

__all__ = [
    "cartesian_to_fractional",
    "cell_to_cellpar",
    "cellpar_to_cell",
    "fractional_to_cartesian",
    "invert_cell",
    "resolve_cell",
]
