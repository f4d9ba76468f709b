"""
Module: types.cif_types
-----------------------
Data structures for parsed CIF documents and the records extracted from
them.

Classes
-------
- `CifValue`:
    One CIF value, with its unquoted text and typed scalar
- `CifSingle`:
    A tag carrying a single value
- `CifLoop`:
    A tag carrying a column of loop values
- `CifDataBlock`:
    Read-only, case-insensitive mapping from tag to CifSingle or CifLoop
- `AtomTypeRecord`:
    Fields of one `_atom_type_` loop row
- `AtomSiteRecord`:
    Fields of one `_atom_site_` loop row

Type Aliases
------------
- `CifItem`:
    Union of CifSingle and CifLoop
- `CifDocument`:
    Mapping from data block name to CifDataBlock
"""

import re
from collections.abc import Mapping as _MappingABC

from beartype.typing import (
    Dict,
    Iterator,
    Mapping,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)

_NUMBER_RE = re.compile(
    r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?(?:\(\d+\))?$"
)


class CifValue(NamedTuple):
    """
    Description
    -----------
    A single CIF value.

    Attributes
    ----------
    - `text` (str):
        The value text with any quoting or text-field delimiters removed.
    - `quoted` (bool):
        True if the value was quoted in the source, which makes it a
        string even if it looks like a number.
    - `null` (bool):
        True for the CIF null values ``?`` (unknown) and ``.``
        (inapplicable).
    """

    text: str
    quoted: bool = False
    null: bool = False

    def get_value(self) -> Optional[Union[float, str]]:
        """Typed scalar: None for nulls, float for numbers, else the text.

        Standard uncertainties are dropped, so ``5.431(2)`` reads as 5.431.
        """
        if self.null:
            return None
        if not self.quoted and _NUMBER_RE.match(self.text):
            return float(self.text.split("(", 1)[0])
        return self.text


class CifSingle(NamedTuple):
    """A tag carrying one value."""

    value: CifValue


class CifLoop(NamedTuple):
    """A tag carrying one column of a loop."""

    values: Tuple[CifValue, ...]


CifItem = Union[CifSingle, CifLoop]


class CifDataBlock(_MappingABC):
    """
    Description
    -----------
    One parsed CIF data block: a read-only mapping from tag name to
    CifSingle or CifLoop. Tag lookup is case-insensitive, as in CIF.

    Parameters
    ----------
    - `name` (str):
        Block name, without the ``data_`` prefix.
    - `items` (Mapping[str, CifItem]):
        Tag to item mapping. Later duplicates of a tag replace earlier ones.
    """

    def __init__(self, name: str, items: Mapping[str, CifItem]) -> None:
        self._name = name
        self._items: Dict[str, CifItem] = {
            tag.lower(): item for tag, item in items.items()
        }

    @property
    def name(self) -> str:
        return self._name

    def __getitem__(self, tag: str) -> CifItem:
        return self._items[tag.lower()]

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"CifDataBlock(name={self._name!r}, tags={len(self._items)})"


CifDocument = Mapping[str, CifDataBlock]


class AtomTypeRecord(NamedTuple):
    """Description and bond radius of one atom type, when given."""

    description: Optional[Union[float, str]] = None
    radius_bond: Optional[Union[float, str]] = None


class AtomSiteRecord(NamedTuple):
    """
    Description
    -----------
    One atom site as listed in a CIF block.

    Attributes
    ----------
    - `label` (str):
        Site label, e.g. "Fe1".
    - `type_symbol` (Optional[str]):
        Atom type symbol, e.g. "Fe3+", when given.
    - `cartesian` (Optional[Tuple[float, float, float]]):
        Cartesian coordinates in Ångstroms, when all three are given.
    - `fractional` (Optional[Tuple[float, float, float]]):
        Fractional coordinates, when all three are given.
    """

    label: str
    type_symbol: Optional[str] = None
    cartesian: Optional[Tuple[float, float, float]] = None
    fractional: Optional[Tuple[float, float, float]] = None


__all__ = [
    "AtomSiteRecord",
    "AtomTypeRecord",
    "CifDataBlock",
    "CifDocument",
    "CifItem",
    "CifLoop",
    "CifSingle",
    "CifValue",
]
