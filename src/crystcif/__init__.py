"""
=========================================================

CRYSTCIF Package (:mod:`crystcif`)

=========================================================

This is the root of the crystcif package, containing submodules for:
- Custom types and the element table (`types`)
- Unit cell geometry (`ucell`)
- Symmetry operations and expansion (`symmetry`)
- CIF reading (`inout`)

Each submodule can be directly accessed after importing crystcif.
"""

import logging

from . import types
from . import inout, symmetry, ucell

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["inout", "symmetry", "types", "ucell"]
