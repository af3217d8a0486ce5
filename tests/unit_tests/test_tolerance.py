"""Tests for tolerance windows, m/z conversions and bounded range search."""

import numpy as np
import pytest

from mzcore.constants import PROTON_MASS
from mzcore.ms.tolerance import (
    MassTolUnit,
    MassTolWindow,
    binary_search_mz_range,
    binary_search_slice,
    calc_mz_tol_in_daltons,
    calc_mz_tol_in_ppm,
    mass_to_mz,
    mz_to_mass,
)


def identity(x):
    return x


def check_slice_invariants(values, low, high, left, right):
    """Boundary invariants plus coverage of every value in [low, high]."""
    assert 0 <= left <= right <= len(values)
    assert left == 0 or values[left] < low
    assert right == len(values) or values[right] > high
    inside = [i for i, v in enumerate(values) if low <= v <= high]
    assert all(left <= i < right for i in inside)


class TestMassTolWindow:
    """Test tolerance window bounds."""

    def test_ppm_asymmetric(self):
        """Test ppm(-10, 20) around 1000."""
        lo, hi = MassTolWindow.ppm(-10.0, 20.0).bounds(1000.0)

        assert lo == pytest.approx(999.99)
        assert hi == pytest.approx(1000.02)

    def test_ppm_symmetric(self):
        """Test ppm(-10, 10) around 487."""
        lo, hi = MassTolWindow.ppm(-10.0, 10.0).bounds(487.0)

        assert lo == pytest.approx(486.99513, abs=1e-5)
        assert hi == pytest.approx(487.00487, abs=1e-5)

    def test_ppm_fifty(self):
        """Test ppm(-50, 50) around 1000."""
        assert MassTolWindow.ppm(-50.0, 50.0).bounds(1000.0) == pytest.approx((999.95, 1000.05))

    def test_mmu(self):
        """Test milli mass units."""
        assert MassTolWindow.mmu(-5.0, 5.0).bounds(500.0) == pytest.approx((499.995, 500.005))

    def test_da(self):
        """Test absolute Dalton window."""
        assert MassTolWindow.Da(-0.5, 0.25).bounds(500.0) == pytest.approx((499.5, 500.25))

    def test_contains_inclusive(self):
        """Test both window ends are inclusive."""
        window = MassTolWindow.Da(-0.5, 0.5)

        assert window.contains(500.0, 499.5)
        assert window.contains(500.0, 500.5)
        assert not window.contains(500.0, 500.51)

    def test_scaling(self):
        """Test scalar multiplication scales both bounds."""
        window = MassTolWindow.ppm(-10.0, 20.0) * 2

        assert window == MassTolWindow.ppm(-20.0, 40.0)
        assert 0.5 * window == MassTolWindow.ppm(-10.0, 20.0)

    def test_symmetric(self):
        """Test symmetric constructor."""
        assert MassTolWindow.symmetric(5.0, MassTolUnit.mmu) == MassTolWindow.mmu(-5.0, 5.0)

    def test_ppm_to_delta_mass(self):
        """Test ppm converted to Da."""
        assert MassTolWindow.ppm_to_delta_mass(1000.0, 10.0) == pytest.approx(0.01)


class TestMassTolUnit:
    """Test tolerance unit parsing and conversions."""

    @pytest.mark.parametrize("text,unit", [
        ("Da", MassTolUnit.Da),
        ("mmu", MassTolUnit.mmu),
        ("ppm", MassTolUnit.ppm),
    ])
    def test_from_str(self, text, unit):
        """Test known unit strings."""
        assert MassTolUnit.from_str(text) is unit

    def test_unknown_unit(self):
        """Test unknown units raise ValueError."""
        with pytest.raises(ValueError, match="tolerance unit"):
            MassTolUnit.from_str("mDa")

    def test_tolerance_in_daltons(self):
        """Test conversions to Da."""
        assert calc_mz_tol_in_daltons(1000.0, 0.02, MassTolUnit.Da) == 0.02
        assert calc_mz_tol_in_daltons(1000.0, 20.0, MassTolUnit.mmu) == pytest.approx(0.02)
        assert calc_mz_tol_in_daltons(1000.0, 20.0, MassTolUnit.ppm) == pytest.approx(0.02)

    def test_tolerance_in_ppm(self):
        """Test conversions to ppm."""
        assert calc_mz_tol_in_ppm(1000.0, 0.02, MassTolUnit.Da) == pytest.approx(20.0)
        assert calc_mz_tol_in_ppm(1000.0, 20.0, MassTolUnit.mmu) == pytest.approx(20.0)
        assert calc_mz_tol_in_ppm(1000.0, 20.0, MassTolUnit.ppm) == 20.0


class TestMassToMz:
    """Test neutral mass / m/z conversion."""

    def test_singly_charged(self):
        """Test z=1 adds one proton."""
        assert mass_to_mz(1000.0, 1) == pytest.approx(1000.0 + PROTON_MASS)

    def test_doubly_charged(self):
        """Test z=2 adds two protons and divides by 2."""
        assert mass_to_mz(1000.0, 2) == pytest.approx((1000.0 + 2 * PROTON_MASS) / 2)

    def test_negative_charge(self):
        """Test negative charges remove protons."""
        assert mass_to_mz(1000.0, -2) == pytest.approx((1000.0 - 2 * PROTON_MASS) / 2)

    @pytest.mark.parametrize("charge", [1, 2, 3, -1, -2])
    def test_inverse(self, charge):
        """Test mz_to_mass inverts mass_to_mz."""
        assert mz_to_mass(mass_to_mz(1234.5678, charge), charge) == pytest.approx(1234.5678)


class TestBinarySearchSlice:
    """Test the bounded sorted-range search."""

    def test_window_in_middle(self):
        """Test a window covering interior values."""
        values = [100.0, 200.0, 300.0, 400.0, 500.0]
        left, right = binary_search_slice(values, identity, 250.0, 400.0)

        assert (left, right) == (1, 4)
        check_slice_invariants(values, 250.0, 400.0, left, right)

    def test_duplicated_keys(self):
        """Test runs of equal keys are fully included."""
        values = [1.0, 2.0, 2.0, 2.0, 2.0, 3.0, 3.0, 4.0]
        for low, high in [(2.0, 2.0), (2.0, 3.0), (3.0, 3.0), (1.0, 4.0), (2.5, 2.9)]:
            left, right = binary_search_slice(values, identity, low, high)
            check_slice_invariants(values, low, high, left, right)

    def test_low_above_all(self):
        """Test a window above every value selects nothing."""
        values = [1.0, 2.0, 3.0]
        left, right = binary_search_slice(values, identity, 10.0, 20.0)

        check_slice_invariants(values, 10.0, 20.0, left, right)
        assert [v for v in values[left:right] if 10.0 <= v <= 20.0] == []
        assert right == len(values)

    def test_high_below_all(self):
        """Test a window below every value gives an empty slice."""
        values = [10.0, 20.0, 30.0]
        left, right = binary_search_slice(values, identity, 1.0, 5.0)

        assert (left, right) == (0, 0)

    def test_empty_slice(self):
        """Test searching an empty sequence."""
        assert binary_search_slice([], identity, 1.0, 2.0) == (0, 0)

    def test_key_function(self):
        """Test searching objects through a key."""
        items = [(100.0, "a"), (200.0, "b"), (200.0, "c"), (300.0, "d")]
        left, right = binary_search_slice(items, lambda item: item[0], 200.0, 200.0)

        assert [name for mz, name in items[left:right] if mz == 200.0] == ["b", "c"]

    def test_random_sorted_values(self):
        """Test invariants on random sorted data with duplicates."""
        values = sorted(np.round(np.random.uniform(0, 50, 200)).tolist())
        for _ in range(50):
            low, high = sorted(np.random.uniform(-5, 55, 2).tolist())
            left, right = binary_search_slice(values, identity, low, high)
            check_slice_invariants(values, low, high, left, right)


class TestBinarySearchMzRange:
    """Test the array range search kernel."""

    def test_exact_range(self):
        """Test only values inside the window are returned."""
        mz = np.array([100.0, 200.0, 200.0, 300.0, 400.0])
        start, stop = binary_search_mz_range(mz, 150.0, 300.0)

        assert (start, stop) == (1, 4)

    def test_inclusive_bounds(self):
        """Test window ends are inclusive."""
        mz = np.array([100.0, 200.0, 300.0])

        assert binary_search_mz_range(mz, 200.0, 200.0) == (1, 2)

    def test_no_match(self):
        """Test empty range between values."""
        mz = np.array([100.0, 200.0, 300.0])
        start, stop = binary_search_mz_range(mz, 210.0, 290.0)

        assert start == stop

    def test_empty_array(self):
        """Test searching an empty array."""
        start, stop = binary_search_mz_range(np.empty(0, dtype=np.float64), 1.0, 2.0)

        assert start == stop == 0
