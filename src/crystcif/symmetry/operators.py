"""Symmetry operators from CIF operator strings and Hall symbols.

Extended Summary
----------------
Operator strings such as ``-x+1/2,y,z+1/2`` are parsed with exact rational
arithmetic into a rotation matrix and a translation vector. Hall symbols are
expanded into the full list of operations of their space group by gemmi.

Routine Listings
----------------
parse_operator_string : function
    Parse a CIF operator string into a SymmetryOperation
operators_from_hall_symbol : function
    All operations of the space group named by a Hall symbol
apply_operation : function
    Apply a SymmetryOperation to fractional coordinates
"""

import fractions
import re

import gemmi
import jax
import numpy as np
from beartype.typing import List, Tuple
from jaxtyping import Array, Float

from crystcif._typing_utils import beartype, jaxtyped
from crystcif.types import SymmetryOperation, create_symmetry_operation

jax.config.update("jax_enable_x64", True)

_TERM_RE = re.compile(r"([+-]?)([^+-]+)")


def _parse_component(
    component: str,
) -> Tuple[List[fractions.Fraction], fractions.Fraction]:
    comp = component.strip().lower().replace(" ", "").replace("'", "")
    comp = comp.replace('"', "")
    terms = _TERM_RE.findall(comp)
    if not comp or "".join(sign + term for sign, term in terms) != comp:
        raise ValueError(f"Cannot parse operator component: {component!r}")
    coefficients = [fractions.Fraction(0)] * 3
    shift = fractions.Fraction(0)
    for sign, term in terms:
        factor = -1 if sign == "-" else 1
        for axis, var in enumerate(("x", "y", "z")):
            if term.endswith(var):
                coeff_str = term[:-1].rstrip("*")
                coeff = (
                    fractions.Fraction(1)
                    if coeff_str == ""
                    else fractions.Fraction(coeff_str)
                )
                coefficients[axis] += factor * coeff
                break
        else:
            shift += factor * fractions.Fraction(term)
    return coefficients, shift


@beartype
def parse_operator_string(text: str) -> SymmetryOperation:
    """
    Description
    -----------
    Parse a CIF symmetry operator string.

    Parameters
    ----------
    - `text` (str):
        Operator in xyz notation, e.g. "x,y,z", "-y,x-y,z+1/3" or
        "1/2+x, 1/2-y, -z". Surrounding quotes and whitespace are ignored.

    Returns
    -------
    - `operation` (SymmetryOperation):
        Rotation and translation acting on fractional coordinates.

    Raises
    ------
    - ValueError:
        If the string does not have three components or a term cannot be
        read.
    """
    components = text.strip().strip("'\"").split(",")
    if len(components) != 3:
        raise ValueError(
            f"Operator must have 3 comma-separated components: {text!r}"
        )
    rotation = np.zeros((3, 3), dtype=np.float64)
    translation = np.zeros(3, dtype=np.float64)
    for row, component in enumerate(components):
        coefficients, shift = _parse_component(component)
        rotation[row] = [float(c) for c in coefficients]
        translation[row] = float(shift)
    return create_symmetry_operation(rotation, translation)


@beartype
def operators_from_hall_symbol(symbol: str) -> List[SymmetryOperation]:
    """
    Description
    -----------
    Expand a Hall symbol into the operations of its space group.

    Parameters
    ----------
    - `symbol` (str):
        Hall symbol, e.g. "-P 2ac 2n".

    Returns
    -------
    - `operations` (List[SymmetryOperation]):
        All operations of the group, identity first, centring translations
        included.

    Raises
    ------
    - RuntimeError, ValueError:
        Raised by gemmi if the symbol cannot be interpreted.
    """
    group_ops = gemmi.symops_from_hall(symbol.strip())
    return [
        create_symmetry_operation(
            np.array(op.rot, dtype=np.float64) / op.DEN,
            np.array(op.tran, dtype=np.float64) / op.DEN,
        )
        for op in group_ops
    ]


@jaxtyped(typechecker=beartype)
def apply_operation(
    operation: SymmetryOperation,
    fractional: Float[Array, "*batch 3"],
) -> Float[Array, "*batch 3"]:
    """Apply ``rotation @ p + translation`` to fractional positions."""
    return fractional @ operation.rotation.T + operation.translation
