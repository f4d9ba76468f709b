"""Tests for tokenizing CIF text into data blocks."""

import chex
import pytest
from absl.testing import parameterized

from crystcif.inout import read_cif_document
from crystcif.types import CifDataBlock, CifLoop, CifSingle

CIF_TEXT = """
data_first
_cell_length_a 5.431(2)
_symmetry_space_group_name_Hall '-P 1'
_journal_name_full ?
_chemical_name_mineral .
_publ_section_title
;
Silicon
;
loop_
_atom_site_label
_atom_site_fract_x
_atom_site_fract_y
Si1 0.0 0.125
Si2 0.25 '0.5'

data_second
_cell_length_a 4.0
"""


class TestReadCifDocument(chex.TestCase):
    """Conversion of gemmi documents into data blocks."""

    def setUp(self) -> None:
        super().setUp()
        self.document = read_cif_document(CIF_TEXT)
        self.block = self.document["first"]

    def test_blocks_in_order(self) -> None:
        assert list(self.document) == ["first", "second"]
        assert isinstance(self.block, CifDataBlock)
        assert self.block.name == "first"

    def test_single_values(self) -> None:
        item = self.block["_cell_length_a"]
        assert isinstance(item, CifSingle)
        assert item.value.text == "5.431(2)"
        assert item.value.get_value() == pytest.approx(5.431)

    def test_quoted_value(self) -> None:
        value = self.block["_symmetry_space_group_name_Hall"].value
        assert value.text == "-P 1"
        assert value.quoted

    @parameterized.named_parameters(
        ("unknown", "_journal_name_full"),
        ("inapplicable", "_chemical_name_mineral"),
    )
    def test_nulls(self, tag) -> None:
        value = self.block[tag].value
        assert value.null
        assert value.get_value() is None

    def test_text_field(self) -> None:
        value = self.block["_publ_section_title"].value
        assert value.quoted
        assert value.text.strip() == "Silicon"

    def test_loop_columns(self) -> None:
        labels = self.block["_atom_site_label"]
        assert isinstance(labels, CifLoop)
        assert [v.text for v in labels.values] == ["Si1", "Si2"]
        ys = self.block["_atom_site_fract_y"].values
        assert ys[0].get_value() == pytest.approx(0.125)
        assert ys[1].get_value() == "0.5"

    def test_second_block(self) -> None:
        second = self.document["second"]
        assert len(second) == 1
        assert "_atom_site_label" not in second
