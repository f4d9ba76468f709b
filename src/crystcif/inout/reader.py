"""Tokenizing CIF text into data blocks.

Extended Summary
----------------
The CIF grammar is handled by gemmi. This module only converts gemmi's
document into the package's CifDataBlock mapping, keeping for every value
its unquoted text, whether it was quoted and whether it is a CIF null.

Routine Listings
----------------
read_cif_document : function
    Tokenize CIF text into an ordered mapping of block name to CifDataBlock
"""

import logging

import gemmi
from beartype.typing import Dict

from crystcif._typing_utils import beartype
from crystcif.types import CifDataBlock, CifItem, CifLoop, CifSingle, CifValue

logger = logging.getLogger(__name__)

_QUOTES = ("'", '"', ";")


def _to_value(raw: str) -> CifValue:
    return CifValue(
        text=gemmi.cif.as_string(raw),
        quoted=raw.lstrip()[:1] in _QUOTES,
        null=gemmi.cif.is_null(raw),
    )


@beartype
def read_cif_document(text: str) -> Dict[str, CifDataBlock]:
    """
    Description
    -----------
    Tokenize CIF text into data blocks.

    Parameters
    ----------
    - `text` (str):
        Full content of a CIF file.

    Returns
    -------
    - `document` (Dict[str, CifDataBlock]):
        Data blocks in file order, keyed by block name. Single values
        become CifSingle, every loop column becomes a CifLoop. Save frames
        are ignored.

    Raises
    ------
    - ValueError, RuntimeError:
        Raised by gemmi for text that is not valid CIF syntax.
    """
    doc = gemmi.cif.read_string(text)
    document: Dict[str, CifDataBlock] = {}
    for block in doc:
        items: Dict[str, CifItem] = {}
        for item in block:
            if item.pair is not None:
                tag, raw = item.pair
                items[tag] = CifSingle(value=_to_value(raw))
            elif item.loop is not None:
                loop = item.loop
                width = loop.width()
                values = list(loop.values)
                for col, tag in enumerate(loop.tags):
                    items[tag] = CifLoop(
                        values=tuple(_to_value(raw) for raw in values[col::width])
                    )
        logger.debug("Read block %s with %d tags", block.name, len(items))
        document[block.name] = CifDataBlock(block.name, items)
    return document
