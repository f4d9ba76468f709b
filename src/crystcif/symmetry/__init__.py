"""Space-group symmetry operations and asymmetric unit expansion.

Extended Summary
----------------
This module turns CIF operator strings and Hall symbols into symmetry
operations acting on fractional coordinates, and expands an asymmetric unit
into the full set of sites with periodic duplicate removal.

Routine Listings
----------------
parse_operator_string : function
    Parse a CIF operator string into a SymmetryOperation
operators_from_hall_symbol : function
    All operations of the space group named by a Hall symbol
apply_operation : function
    Apply a SymmetryOperation to fractional coordinates
wrap_fractional : function
    Reduce fractional coordinates into [0, 1)
shortest_periodic_length : function
    Minimal-image Cartesian length of fractional displacements
expand_asymmetric_unit : function
    Apply symmetry operations to sites and remove duplicate images
"""

from .expansion import (
    DEFAULT_SYMMETRY_TOLERANCE,
    expand_asymmetric_unit,
    shortest_periodic_length,
    wrap_fractional,
)
from .operators import (
    apply_operation,
    operators_from_hall_symbol,
    parse_operator_string,
)

__all__ = [
    "DEFAULT_SYMMETRY_TOLERANCE",
    "apply_operation",
    "expand_asymmetric_unit",
    "operators_from_hall_symbol",
    "parse_operator_string",
    "shortest_periodic_length",
    "wrap_fractional",
]
