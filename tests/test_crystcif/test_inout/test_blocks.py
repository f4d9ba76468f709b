"""Tests for extracting field groups from CIF data blocks."""

import chex
import jax.numpy as jnp
import pytest
from absl.testing import parameterized

from crystcif.inout import (
    atom_sites,
    atom_types,
    cell_parameters,
    extract_tags,
    symmetry_operators,
)
from crystcif.types import (
    AtomTypeRecord,
    CifDataBlock,
    CifLoop,
    CifSingle,
    CifValue,
)

NULL = CifValue("?", null=True)


def _value(text):
    return text if isinstance(text, CifValue) else CifValue(text)


def _single(text):
    return CifSingle(_value(text))


def _loop(*texts):
    return CifLoop(tuple(_value(t) for t in texts))


def _block(**items):
    return CifDataBlock("test", items)


CUBIC_CELL = {
    "_cell_length_a": _single("4.0"),
    "_cell_length_b": _single("4.0"),
    "_cell_length_c": _single("4.0"),
    "_cell_angle_alpha": _single("90"),
    "_cell_angle_beta": _single("90"),
    "_cell_angle_gamma": _single("90"),
}


class TestExtractTags(chex.TestCase):
    """Alignment of tag groups with their anchor."""

    def test_missing_anchor(self) -> None:
        block = _block(_b=_loop("1", "2"))
        assert extract_tags(block, ["_a", "_b"]) is None

    def test_aligned_loops(self) -> None:
        block = _block(_a=_loop("x", "y"), _b=_loop("1", "2"))
        a_vals, b_vals = extract_tags(block, ["_a", "_b"])
        assert [v.text for v in a_vals] == ["x", "y"]
        assert [v.get_value() for v in b_vals] == [1.0, 2.0]

    def test_mismatched_secondaries_are_absent(self) -> None:
        block = _block(
            _a=_loop("x", "y"),
            _short=_loop("1"),
            _single=_single("3"),
        )
        values = extract_tags(block, ["_a", "_short", "_single", "_missing"])
        assert len(values[0]) == 2
        assert values[1] is None
        assert values[2] is None
        assert values[3] is None

    def test_single_anchor_is_lifted(self) -> None:
        block = _block(_a=_single("x"), _b=_single("1"), _c=_loop("2", "3"))
        a_vals, b_vals, c_vals = extract_tags(block, ["_a", "_b", "_c"])
        assert [v.text for v in a_vals] == ["x"]
        assert [v.text for v in b_vals] == ["1"]
        assert c_vals is None


class TestAtomTypes(chex.TestCase):
    """The _atom_type_ group."""

    def test_absent(self) -> None:
        assert atom_types(_block(**CUBIC_CELL)) is None

    def test_types(self) -> None:
        block = _block(
            _atom_type_symbol=_loop("Na1+", "Cl1-"),
            _atom_type_description=_loop("sodium", "chloride"),
            _atom_type_radius_bond=_loop("1.02", NULL),
        )
        types = atom_types(block)
        assert list(types) == ["Na1+", "Cl1-"]
        assert types["Na1+"] == AtomTypeRecord("sodium", 1.02)
        assert types["Cl1-"].radius_bond is None

    def test_optional_fields_missing(self) -> None:
        types = atom_types(_block(_atom_type_symbol=_single("O")))
        assert types == {"O": AtomTypeRecord()}


class TestAtomSites(chex.TestCase):
    """The _atom_site_ group."""

    def test_absent(self) -> None:
        assert atom_sites(_block(**CUBIC_CELL)) is None

    def test_fractional_sites(self) -> None:
        block = _block(
            _atom_site_label=_loop("Na1", "Cl1"),
            _atom_site_type_symbol=_loop("Na", NULL),
            _atom_site_fract_x=_loop("0.0", "0.5"),
            _atom_site_fract_y=_loop("0.0", "0.5(1)"),
            _atom_site_fract_z=_loop("0.0", "0.5"),
        )
        sites = atom_sites(block)
        assert [s.label for s in sites] == ["Na1", "Cl1"]
        assert sites[0].type_symbol == "Na"
        assert sites[1].type_symbol is None
        assert sites[1].fractional == (0.5, 0.5, 0.5)
        assert sites[0].cartesian is None

    def test_incomplete_triplets(self) -> None:
        block = _block(
            _atom_site_label=_loop("A", "B"),
            _atom_site_Cartn_x=_loop("1.0", "2.0"),
            _atom_site_Cartn_y=_loop("1.0", NULL),
            _atom_site_Cartn_z=_loop("1.0", "2.0"),
            _atom_site_fract_x=_loop("0.1", "0.2"),
            _atom_site_fract_y=_loop("0.1", "0.2"),
        )
        sites = atom_sites(block)
        assert sites[0].cartesian == (1.0, 1.0, 1.0)
        assert sites[1].cartesian is None
        assert sites[0].fractional is None
        assert sites[1].fractional is None

    def test_single_site(self) -> None:
        block = _block(
            _atom_site_label=_single("He1"),
            _atom_site_Cartn_x=_single("0"),
            _atom_site_Cartn_y=_single("0"),
            _atom_site_Cartn_z=_single("1.5"),
        )
        (site,) = atom_sites(block)
        assert site.label == "He1"
        assert site.cartesian == (0.0, 0.0, 1.5)


class TestCellParameters(chex.TestCase):
    """The _cell_ group."""

    def test_complete(self) -> None:
        items = dict(CUBIC_CELL)
        items["_cell_length_a"] = _single("5.431(2)")
        lengths, angles = cell_parameters(_block(**items))
        assert lengths == pytest.approx((5.431, 4.0, 4.0))
        assert angles == (90.0, 90.0, 90.0)

    @parameterized.named_parameters(
        ("missing", "_cell_length_c", None),
        ("null", "_cell_angle_beta", _single(NULL)),
        ("text", "_cell_angle_gamma", _single("unknown")),
        ("zero_length", "_cell_length_b", _single("0.0")),
        ("loop", "_cell_length_a", _loop("4.0", "4.0")),
    )
    def test_unusable(self, tag, item) -> None:
        items = dict(CUBIC_CELL)
        if item is None:
            del items[tag]
        else:
            items[tag] = item
        assert cell_parameters(_block(**items)) is None


class TestSymmetryOperators(chex.TestCase):
    """Operators from operator strings and Hall symbols."""

    def test_absent(self) -> None:
        assert symmetry_operators(_block(**CUBIC_CELL)) is None

    def test_operator_loop_skips_identity(self) -> None:
        block = _block(
            _space_group_symop_operation_xyz=_loop("x,y,z", "-x,-y,-z", "x+1/2,y,z")
        )
        ops = symmetry_operators(block)
        assert len(ops) == 2
        chex.assert_trees_all_close(ops[0].rotation, -jnp.eye(3))
        chex.assert_trees_all_close(ops[1].translation, jnp.array([0.5, 0.0, 0.0]))

    def test_legacy_tag(self) -> None:
        block = _block(_symmetry_equiv_pos_as_xyz=_loop("x,y,z", "-x,-y,-z"))
        assert len(symmetry_operators(block)) == 1

    @parameterized.named_parameters(
        ("single", _single("x,y,z")),
        ("one_entry_loop", _loop("x,y,z")),
    )
    def test_identity_only(self, item) -> None:
        assert symmetry_operators(_block(_symmetry_equiv_pos_as_xyz=item)) is None

    def test_unreadable_operator(self) -> None:
        block = _block(_symmetry_equiv_pos_as_xyz=_loop("x,y,z", "-x,-y"))
        with self.assertLogs("crystcif.inout.blocks", level="WARNING"):
            assert symmetry_operators(block) is None

    def test_operator_list_wins_over_hall(self) -> None:
        block = _block(
            _symmetry_equiv_pos_as_xyz=_single("x,y,z"),
            _symmetry_space_group_name_Hall=_single("-P 1"),
        )
        assert symmetry_operators(block) is None

    @parameterized.named_parameters(
        ("current_tag", "_space_group_name_Hall"),
        ("legacy_tag", "_symmetry_space_group_name_Hall"),
    )
    def test_hall_fallback(self, tag) -> None:
        ops = symmetry_operators(_block(**{tag: _single("-P 1")}))
        assert len(ops) == 2

    def test_unreadable_hall(self) -> None:
        block = _block(_space_group_name_Hall=_single("Q 1"))
        with self.assertLogs("crystcif.inout.blocks", level="WARNING"):
            assert symmetry_operators(block) is None

    def test_null_hall(self) -> None:
        block = _block(_space_group_name_Hall=_single(NULL))
        assert symmetry_operators(block) is None
