"""Tests for building atomic structures from CIF documents."""

import tempfile
from pathlib import Path

import chex
import jax
import jax.numpy as jnp
import pytest
from absl.testing import parameterized
from jax import tree_util

from crystcif.inout import parse_cif, read_cif, read_cif_document, structures_from_cif
from crystcif.types import (
    MissingCoordinatesError,
    UnknownSpeciesError,
    atom_count,
    get_array,
    scaled_positions,
)

CELL_4 = """
_cell_length_a 4.0
_cell_length_b 4.0
_cell_length_c 4.0
_cell_angle_alpha 90
_cell_angle_beta 90
_cell_angle_gamma 90
"""

SITES = """
loop_
_atom_site_label
_atom_site_type_symbol
_atom_site_fract_x
_atom_site_fract_y
_atom_site_fract_z
Na1 Na1+ 0.0 0.0 0.0
Cl1 Cl1- 0.1 0.2 0.3
"""

SYMOPS = """
loop_
_symmetry_equiv_pos_as_xyz
'x, y, z'
'-x, -y, -z'
"""

TYPES = """
loop_
_atom_type_symbol
_atom_type_radius_bond
Na1+ 1.02
Cl1- 1.81
"""

EXPECTED_POSITIONS = jnp.array(
    [[0.0, 0.0, 0.0], [0.4, 0.8, 1.2], [3.6, 3.2, 2.8]]
)


class TestReadCif(chex.TestCase):
    """Single block documents."""

    def test_operator_expansion(self) -> None:
        structures = read_cif("data_NaCl\n" + CELL_4 + SYMOPS + TYPES + SITES)
        assert list(structures) == ["NaCl"]
        structure = structures["NaCl"]
        assert atom_count(structure) == 3
        assert structure.symbols == ("Na", "Cl", "Cl")
        assert list(get_array(structure, "labels")) == ["Na1", "Cl1", "Cl1"]
        assert structure.pbc == (True, True, True)
        chex.assert_trees_all_close(
            structure.positions, EXPECTED_POSITIONS, atol=1e-10
        )
        chex.assert_trees_all_close(
            jnp.stack(structure.cell), 4.0 * jnp.eye(3), atol=1e-12
        )

    def test_info(self) -> None:
        structure = read_cif("data_NaCl\n" + CELL_4 + SYMOPS + TYPES + SITES)[
            "NaCl"
        ]
        assert structure.info["name"] == "NaCl"
        assert structure.info["atom_types"]["Cl1-"].radius_bond == pytest.approx(
            1.81
        )

    def test_atom_types_are_read_only(self) -> None:
        structure = read_cif("data_NaCl\n" + CELL_4 + SYMOPS + TYPES + SITES)[
            "NaCl"
        ]
        with pytest.raises(TypeError):
            structure.info["atom_types"]["Na1+"] = None
        assert structure.info["atom_types"]["Na1+"].radius_bond == pytest.approx(
            1.02
        )

    def test_hall_expansion(self) -> None:
        text = (
            "data_NaCl\n"
            + CELL_4
            + "_symmetry_space_group_name_Hall '-P 1'\n"
            + SITES
        )
        structure = read_cif(text)["NaCl"]
        assert "atom_types" not in structure.info
        assert atom_count(structure) == 3
        chex.assert_trees_all_close(
            structure.positions, EXPECTED_POSITIONS, atol=1e-10
        )

    def test_no_operators(self) -> None:
        structure = read_cif("data_x\n" + CELL_4 + SITES)["x"]
        assert atom_count(structure) == 2
        chex.assert_trees_all_close(
            scaled_positions(structure),
            jnp.array([[0.0, 0.0, 0.0], [0.1, 0.2, 0.3]]),
            atol=1e-12,
        )

    def test_cartesian_preferred(self) -> None:
        text = (
            "data_x\n"
            + CELL_4
            + """
loop_
_atom_site_label
_atom_site_Cartn_x
_atom_site_Cartn_y
_atom_site_Cartn_z
_atom_site_fract_x
_atom_site_fract_y
_atom_site_fract_z
O1 1.0 1.0 1.0 0.5 0.5 0.5
"""
        )
        structure = read_cif(text)["x"]
        assert structure.symbols == ("O",)
        chex.assert_trees_all_close(
            structure.positions, jnp.array([[1.0, 1.0, 1.0]])
        )

    def test_hexagonal_cell(self) -> None:
        text = """
data_hex
_cell_length_a 3.0
_cell_length_b 3.0
_cell_length_c 5.0
_cell_angle_alpha 90
_cell_angle_beta 90
_cell_angle_gamma 120
loop_
_atom_site_label
_atom_site_fract_x
_atom_site_fract_y
_atom_site_fract_z
Zn1 0.0 1.0 0.0
"""
        structure = read_cif(text)["hex"]
        chex.assert_trees_all_close(
            structure.positions, jnp.array([[-1.5, 1.5 * jnp.sqrt(3.0), 0.0]]),
            atol=1e-12,
        )


class TestTransforms(chex.TestCase):
    """JAX transforms over structures read from CIF text."""

    def setUp(self) -> None:
        super().setUp()
        self.structure = read_cif(
            "data_NaCl\n" + CELL_4 + SYMOPS + TYPES + SITES
        )["NaCl"]

    def test_jit(self) -> None:
        doubled = jax.jit(lambda st: st.positions * 2.0)(self.structure)
        chex.assert_trees_all_close(doubled, 2.0 * EXPECTED_POSITIONS, atol=1e-10)

    def test_tree_map(self) -> None:
        doubled = tree_util.tree_map(lambda x: x * 2, self.structure)
        chex.assert_trees_all_close(
            doubled.positions, 2.0 * EXPECTED_POSITIONS, atol=1e-10
        )
        assert list(get_array(doubled, "labels")) == ["Na1", "Cl1", "Cl1"]
        assert doubled.info["atom_types"] == self.structure.info["atom_types"]


class TestSymbols(chex.TestCase):
    """Element symbols of sites."""

    @parameterized.named_parameters(
        ("charged", "Fe1 Fe3+", "Fe"),
        ("upper_case", "X1 FE", "Fe"),
        ("lower_case", "X1 o1", "O"),
        ("label_only", "Ca1 ?", "Ca"),
        ("label_with_suffix", "OW1 ?", "O"),
    )
    def test_symbol(self, row, expected) -> None:
        text = f"""
data_x
loop_
_atom_site_label
_atom_site_type_symbol
_atom_site_Cartn_x
_atom_site_Cartn_y
_atom_site_Cartn_z
{row} 0 0 0
"""
        structure = read_cif(text)["x"]
        assert structure.symbols == (expected,)

    def test_unknown_species(self) -> None:
        text = """
data_x
loop_
_atom_site_label
_atom_site_type_symbol
_atom_site_Cartn_x
_atom_site_Cartn_y
_atom_site_Cartn_z
Q1 Qq 0 0 0
"""
        with pytest.raises(UnknownSpeciesError):
            read_cif(text)
        structure = read_cif(text, tolerant=True)["x"]
        assert structure.symbols == ("Qq",)
        assert int(structure.numbers[0]) == -1


class TestMultipleBlocks(chex.TestCase):
    """Documents with several data blocks."""

    def test_blocks(self) -> None:
        text = (
            "data_crystal\n"
            + CELL_4
            + SITES
            + """
data_empty
_journal_name_full 'Nothing here'

data_molecule
loop_
_atom_site_label
_atom_site_Cartn_x
_atom_site_Cartn_y
_atom_site_Cartn_z
H1 0.0 0.0 0.0
H2 0.0 0.0 0.74
"""
        )
        structures = read_cif(text)
        assert list(structures) == ["crystal", "molecule"]
        molecule = structures["molecule"]
        assert molecule.pbc == (False, False, False)
        assert molecule.inv_cell is None
        assert molecule.symbols == ("H", "H")

    def test_zero_length_cell_is_aperiodic(self) -> None:
        text = """
data_flat
_cell_length_a 0
_cell_length_b 4.0
_cell_length_c 4.0
_cell_angle_alpha 90
_cell_angle_beta 90
_cell_angle_gamma 90
loop_
_atom_site_label
_atom_site_Cartn_x
_atom_site_Cartn_y
_atom_site_Cartn_z
C1 0.0 0.0 0.0
"""
        structure = read_cif(text)["flat"]
        assert structure.pbc == (False, False, False)

    def test_fractional_without_cell(self) -> None:
        text = """
data_broken
loop_
_atom_site_label
_atom_site_fract_x
_atom_site_fract_y
_atom_site_fract_z
C1 0.0 0.0 0.0
"""
        with pytest.raises(MissingCoordinatesError):
            read_cif(text)

    def test_site_without_coordinates(self) -> None:
        text = "data_broken\n" + CELL_4 + "loop_\n_atom_site_label\nC1\nC2\n"
        with pytest.raises(MissingCoordinatesError):
            read_cif(text)

    def test_structures_from_document(self) -> None:
        document = read_cif_document("data_NaCl\n" + CELL_4 + SYMOPS + SITES)
        structures = structures_from_cif(document, symmetry_tolerance=1.0)
        # The two Cl images are 2.4 Å apart under the minimal image
        assert atom_count(structures["NaCl"]) == 3

    def test_large_tolerance_merges_images(self) -> None:
        document = read_cif_document("data_NaCl\n" + CELL_4 + SYMOPS + SITES)
        structures = structures_from_cif(document, symmetry_tolerance=3.0)
        assert atom_count(structures["NaCl"]) == 2


class TestParseCif(chex.TestCase):
    """Reading CIF files from disk."""

    def test_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nacl.cif"
            path.write_text("data_NaCl\n" + CELL_4 + SYMOPS + SITES)
            structures = parse_cif(path)
            assert atom_count(structures["NaCl"]) == 3
            assert list(parse_cif(str(path))) == ["NaCl"]

    def test_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            parse_cif("/nonexistent/path/structure.cif")

    def test_wrong_extension(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nacl.txt"
            path.write_text("data_NaCl\n" + CELL_4 + SITES)
            with pytest.raises(ValueError, match=".cif extension"):
                parse_cif(path)
