"""Tests for the elemental composition algebra and Unimod parsing.

Covers the sorted/deduplicated/non-zero invariant, merge-based arithmetic,
isotope substitutions, charge and mass computation.
"""

import pytest

from mzcore.chemistry.atom import biomolecule_atom_table
from mzcore.chemistry.composition import (
    ElementCount,
    ElementalComposition,
    molecular_formula,
    parse_unimod_composition,
)
from mzcore.chemistry.element import Element
from mzcore.constants import ELECTRON_MASS, WATER_MONO_MASS
from mzcore.errors import MalformedFormulaError, UnknownElementError


def assert_normalized(composition):
    """Strictly sorted by (element, isotope), no duplicates, no zero counts."""
    keys = [element_count.key for element_count in composition.element_counts]
    assert keys == sorted(keys)
    assert len(keys) == len(set(keys))
    assert all(element_count.count != 0.0 for element_count in composition.element_counts)


@pytest.fixture
def water():
    return ElementalComposition.from_monoisotope_tuples([(Element.H, 2), (Element.O, 1)])


@pytest.fixture
def ammonia():
    return ElementalComposition.from_monoisotope_tuples([(Element.N, 1), (Element.H, 3)])


@pytest.fixture
def glycine():
    return molecular_formula([("C", 0, 2), ("H", 0, 3), ("O", 0, 1), ("N", 0, 1)])


class TestSimplify:
    """Test normalization of element counts."""

    def test_unsorted_input_is_sorted(self):
        """Test construction sorts terms by element then isotope."""
        composition = ElementalComposition([
            ElementCount(Element.O, 0, 1),
            ElementCount(Element.C, 1, 2),
            ElementCount(Element.H, 0, 4),
            ElementCount(Element.C, 0, 3),
        ])

        assert [(ec.element, ec.isotope_index) for ec in composition] == [
            (Element.H, 0), (Element.C, 0), (Element.C, 1), (Element.O, 0),
        ]
        assert_normalized(composition)

    def test_duplicates_are_summed(self):
        """Test duplicated keys are summed, not rejected."""
        composition = ElementalComposition([
            ElementCount(Element.C, 0, 2),
            ElementCount(Element.C, 0, 3),
        ])

        assert len(composition) == 1
        assert composition.count_of(Element.C) == 5.0

    def test_zero_counts_dropped(self):
        """Test terms that cancel out disappear."""
        composition = ElementalComposition([
            ElementCount(Element.C, 0, 2),
            ElementCount(Element.H, 0, 0),
            ElementCount(Element.C, 0, -2),
        ])

        assert len(composition) == 0

    def test_idempotent(self, glycine):
        """Test simplify twice gives the same composition."""
        once = glycine.copy().simplify()
        twice = glycine.copy().simplify().simplify()

        assert once == twice
        assert_normalized(twice)

    def test_fractional_counts(self):
        """Test real-valued counts (averagine-like) are supported."""
        composition = ElementalComposition.from_monoisotope_tuples([
            (Element.C, 4.9384), (Element.H, 7.7583),
        ])

        assert composition.count_of(Element.C) == pytest.approx(4.9384)


class TestAdd:
    """Test single term insertion."""

    def test_insert_keeps_order(self, water):
        """Test inserting a new element lands at its sorted place."""
        water.add(ElementCount(Element.C, 0, 1))

        assert [ec.element for ec in water] == [Element.H, Element.C, Element.O]
        assert_normalized(water)

    def test_accumulate_existing(self, water):
        """Test adding an existing key accumulates its count."""
        water.add(ElementCount(Element.H, 0, 2))

        assert water.count_of(Element.H) == 4.0
        assert len(water) == 2

    def test_cancel_existing(self, water):
        """Test adding the opposite count removes the term."""
        water.add(ElementCount(Element.O, 0, -1))

        assert water.count_of(Element.O) == 0.0
        assert len(water) == 1

    def test_append_at_end(self, water):
        """Test heavier element goes to the end."""
        water.add(ElementCount(Element.S, 0, 1))

        assert water.element_counts[-1].element == Element.S


class TestArithmetic:
    """Test merge-based composition arithmetic."""

    def test_addition(self, water, ammonia):
        """Test addition merges counts."""
        total = water + ammonia

        assert total.count_of(Element.H) == 5.0
        assert total.count_of(Element.N) == 1.0
        assert total.count_of(Element.O) == 1.0
        assert_normalized(total)

    def test_addition_commutative(self, water, glycine):
        """Test A + B == B + A."""
        assert water + glycine == glycine + water

    def test_subtraction_inverts_addition(self, water, glycine, ammonia):
        """Test (A + B) - B == A."""
        for a, b in [(water, glycine), (glycine, ammonia), (ammonia, water)]:
            assert (a + b) - b == a

    def test_subtraction_drops_zero_terms(self, water):
        """Test A - A is empty."""
        assert (water - water).is_empty()

    def test_negative_counts(self, water, glycine):
        """Test subtraction can produce negative counts."""
        diff = water - glycine

        assert diff.count_of(Element.C) == -2.0
        assert diff.count_of(Element.H) == -1.0
        assert_normalized(diff)

    def test_scalar_multiplication(self, water):
        """Test multiplication scales counts and additional mass."""
        water.additional_mass = 1.5
        doubled = water * 2

        assert doubled.count_of(Element.H) == 4.0
        assert doubled.count_of(Element.O) == 2.0
        assert doubled.additional_mass == 3.0
        assert 2 * water == doubled

    def test_multiplication_by_zero(self, water):
        """Test multiplying by zero gives an empty composition."""
        assert (water * 0).is_empty()

    def test_negation(self, water):
        """Test unary minus negates every count."""
        assert (-water).count_of(Element.H) == -2.0

    def test_non_integer_multiplier_rejected(self, water):
        """Test multiplication only accepts integers."""
        with pytest.raises(TypeError):
            water * 1.5

    def test_inplace_addition(self, water, ammonia):
        """Test += merges in place."""
        composition = water.copy()
        composition += ammonia

        assert composition == water + ammonia

    def test_sum(self, water, ammonia):
        """Test sum() starting from 0."""
        assert sum([water, ammonia, water]) == water * 2 + ammonia

    def test_additional_mass_combines_linearly(self):
        """Test additional mass adds and subtracts with compositions."""
        a = ElementalComposition.with_additional_mass(10.0)
        b = ElementalComposition.with_additional_mass(2.5)

        assert (a + b).additional_mass == 12.5
        assert (a - b).additional_mass == 7.5

    def test_operands_unchanged(self, water, ammonia):
        """Test binary operators do not mutate operands."""
        before = water.copy()
        _ = water + ammonia
        _ = water - ammonia

        assert water == before

    def test_fractional_round_trip_is_not_exact(self):
        """Test equality compares fractional counts exactly."""
        a = ElementalComposition.from_monoisotope_tuples([(Element.C, 0.1)])
        b = ElementalComposition.from_monoisotope_tuples([(Element.C, 0.2)])

        round_trip = (a + b) - b

        assert round_trip != a
        assert round_trip.count_of(Element.C) == pytest.approx(0.1)

    def test_integer_round_trip_is_exact(self, water, glycine):
        """Test (A + B) - B == A for whole-number counts."""
        assert (glycine + water) - water == glycine


class TestIsotopesAndCharge:
    """Test isotope substitution, charge and mass."""

    def test_global_isotope_substitution(self, glycine):
        """Test remapping all carbons to 13C."""
        labeled = glycine.with_global_isotope_modifications([(Element.C, 1)])

        assert labeled.count_of(Element.C, 0) == 0.0
        assert labeled.count_of(Element.C, 1) == 2.0
        assert_normalized(labeled)

    def test_substitution_merges_colliding_terms(self):
        """Test terms remapped onto the same key are merged."""
        composition = molecular_formula([("C", 0, 3), ("C", 1, 2)])
        labeled = composition.with_global_isotope_modifications([(Element.C, 1)])

        assert len(labeled) == 1
        assert labeled.count_of(Element.C, 1) == 5.0

    def test_charge_from_electrons(self):
        """Test charge is the negated electron count."""
        composition = molecular_formula([("H", 0, 1), ("e", 0, -1)])

        assert composition.charge() == 1

    def test_charge_without_electrons(self, water):
        """Test neutral compositions have zero charge."""
        assert water.charge() == 0

    def test_water_mono_mass(self, water):
        """Test water mass from the atom table."""
        assert water.mono_mass() == pytest.approx(WATER_MONO_MASS, abs=1e-5)

    def test_electron_mass_included(self):
        """Test electrons contribute their mass."""
        proton = molecular_formula([("H", 0, 1), ("e", 0, -1)])
        hydrogen = biomolecule_atom_table().mono_mass(Element.H)

        assert proton.mono_mass() == pytest.approx(hydrogen - ELECTRON_MASS)

    def test_additional_mass_in_mass(self, water):
        """Test additional mass adds to the monoisotopic mass."""
        shifted = water + ElementalComposition.with_additional_mass(1.0)

        assert shifted.mono_mass() == pytest.approx(water.mono_mass() + 1.0)

    def test_unknown_element_in_atom_table(self):
        """Test mass of an element missing from the atom table fails."""
        composition = molecular_formula([("Fe", 0, 1)])

        with pytest.raises(UnknownElementError):
            composition.mono_mass()

    def test_formula_string_unknown_isotope(self):
        """Test isotopes outside the atom table render with their index."""
        composition = molecular_formula([("Fe", 1, 1), ("C", 1, 2)])

        assert composition.to_formula_string() == "13C(2) Fe[iso=1]"
        assert "Fe[iso=1]" in repr(composition)


class TestUnimodParsing:
    """Test Unimod composition string parsing."""

    def test_simple_formula(self):
        """Test element symbols with counts."""
        composition = parse_unimod_composition("H(2) C(2) O")

        assert composition.count_of(Element.H) == 2.0
        assert composition.count_of(Element.C) == 2.0
        assert composition.count_of(Element.O) == 1.0

    def test_negative_counts(self):
        """Test signed counts in parentheses."""
        composition = parse_unimod_composition("H(-1) N(-1) O")

        assert composition.to_formula_string() == "H(-1) N(-1) O"

    def test_isotope_prefix(self):
        """Test heavy isotope labels (SILAC Lys +8)."""
        composition = parse_unimod_composition("C(-6) 13C(6) N(-2) 15N(2)")

        assert composition.count_of(Element.C, 1) == 6.0
        assert composition.mono_mass() == pytest.approx(8.014199, abs=1e-5)

    def test_phospho(self):
        """Test phosphorylation mass."""
        composition = parse_unimod_composition("H O(3) P")

        assert composition.mono_mass() == pytest.approx(79.966331, abs=1e-5)

    def test_named_bricks(self):
        """Test acetyl brick equals its elemental formula."""
        assert parse_unimod_composition("Ac") == parse_unimod_composition("H(2) C(2) O")

    def test_glycan_bricks(self):
        """Test HexNAc monosaccharide mass."""
        composition = parse_unimod_composition("HexNAc")

        assert composition.mono_mass() == pytest.approx(203.079373, abs=1e-5)

    def test_malformed_formula(self):
        """Test unparsable tokens raise MalformedFormulaError."""
        with pytest.raises(MalformedFormulaError):
            parse_unimod_composition("H(2 C")

    def test_unknown_brick(self):
        """Test unknown names raise MalformedFormulaError."""
        with pytest.raises(MalformedFormulaError):
            parse_unimod_composition("Xyz(2)")

    def test_malformed_is_value_error(self):
        """Test parse errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_unimod_composition("%%")


class TestAtomTable:
    """Test isotope lookups of the biomolecule atom table."""

    def test_isotopes(self):
        """Test isotope indices, masses and neutron numbers."""
        carbon = biomolecule_atom_table().atom(Element.C)

        assert carbon.atomic_number == 6
        assert carbon.isotope_index(13) == 1
        assert carbon.isotope_mass(1) == pytest.approx(13.0033548378)
        assert carbon.neutron_number(1) == 7

    def test_average_and_most_abundant_mass(self):
        """Test abundance-weighted masses."""
        sulfur = biomolecule_atom_table().atom(Element.S)
        selenium = biomolecule_atom_table().atom(Element.Se)

        assert sulfur.average_mass == pytest.approx(32.065, abs=1e-3)
        assert selenium.most_abundant_mass == pytest.approx(79.9165218)
        assert selenium.mono_mass == pytest.approx(73.922475934)

    def test_unknown_isotope(self):
        """Test unknown isotopes raise UnknownElementError."""
        hydrogen = biomolecule_atom_table().atom(Element.H)

        with pytest.raises(UnknownElementError):
            hydrogen.isotope_index(3)
        with pytest.raises(UnknownElementError):
            hydrogen.isotope_mass(5)
