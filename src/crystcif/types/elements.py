"""
Module: types.elements
----------------------
Element table used to resolve chemical species.

Classes
-------
- `AtomicSpecies`:
    Symbol and atomic number of one chemical element

Functions
---------
- `load_atomic_numbers`:
    Load the symbol to atomic number mapping from a JSON file
- `lookup_by_symbol`:
    Resolve an element symbol to its AtomicSpecies
- `lookup_by_number`:
    Resolve an atomic number to its AtomicSpecies
"""

import json
from functools import lru_cache
from pathlib import Path

from beartype.typing import Dict, NamedTuple, Optional

from crystcif._typing_utils import beartype

DEFAULT_ATOMIC_NUMBERS_PATH = (
    Path(__file__).resolve().parents[1] / "data" / "atomic_numbers.json"
)

# Atomic number stored for symbols accepted in tolerant mode
UNKNOWN_ATOMIC_NUMBER = -1


class AtomicSpecies(NamedTuple):
    """
    Description
    -----------
    A chemical species as stored on an atomic structure.

    Attributes
    ----------
    - `symbol` (str):
        Element symbol, e.g. "Fe".
    - `number` (int):
        Atomic number, or -1 for a symbol accepted in tolerant mode.
    """

    symbol: str
    number: int


@lru_cache(maxsize=None)
def _cached_table(path: str) -> Dict[str, int]:
    with open(path, "r") as f:
        return json.load(f)


@beartype
def load_atomic_numbers(
    path: str = str(DEFAULT_ATOMIC_NUMBERS_PATH),
) -> Dict[str, int]:
    """
    Description
    -----------
    Load the atomic numbers mapping from a JSON file.

    Parameters
    ----------
    - `path` (str, optional):
        Path to the atomic numbers JSON file.
        Defaults to the table shipped in 'crystcif/data/atomic_numbers.json'.

    Returns
    -------
    - `atomic_numbers` (dict[str, int]):
        Dictionary mapping element symbols to atomic numbers.
    """
    return dict(_cached_table(path))


@lru_cache(maxsize=None)
def _symbols_by_number() -> Dict[int, str]:
    return {
        number: symbol
        for symbol, number in _cached_table(
            str(DEFAULT_ATOMIC_NUMBERS_PATH)
        ).items()
    }


@beartype
def lookup_by_symbol(symbol: str) -> Optional[AtomicSpecies]:
    """Return the species for an exact (case-sensitive) element symbol."""
    number = _cached_table(str(DEFAULT_ATOMIC_NUMBERS_PATH)).get(symbol)
    if number is None:
        return None
    return AtomicSpecies(symbol=symbol, number=number)


@beartype
def lookup_by_number(number: int) -> Optional[AtomicSpecies]:
    """Return the species with the given atomic number, if any."""
    symbol = _symbols_by_number().get(number)
    if symbol is None:
        return None
    return AtomicSpecies(symbol=symbol, number=number)


__all__ = [
    "AtomicSpecies",
    "DEFAULT_ATOMIC_NUMBERS_PATH",
    "UNKNOWN_ATOMIC_NUMBER",
    "load_atomic_numbers",
    "lookup_by_number",
    "lookup_by_symbol",
]
