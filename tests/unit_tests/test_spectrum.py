"""Tests for peaks, spectrum data and most-intense peak selection."""

import numpy as np
import pytest

from mzcore.ms.spectrum import Peak, SpectrumData, select_most_intense_peak
from mzcore.ms.tolerance import MassTolWindow


@pytest.fixture
def peaks():
    """Peaks sorted by m/z."""
    return [
        Peak(100.00, 10.0),
        Peak(499.99, 50.0),
        Peak(500.00, 80.0),
        Peak(500.01, 30.0),
        Peak(600.00, 90.0),
    ]


class TestPeak:
    """Test peak ordering."""

    def test_order_by_intensity(self):
        """Test intensity is the primary sort key."""
        assert Peak(500.0, 10.0) < Peak(100.0, 20.0)
        assert max([Peak(100.0, 5.0), Peak(200.0, 50.0), Peak(300.0, 20.0)]).mz == 200.0

    def test_mz_breaks_ties(self):
        """Test equal intensities are ordered by m/z."""
        assert Peak(100.0, 10.0) < Peak(200.0, 10.0)

    def test_equality(self):
        """Test peaks with identical values are equal."""
        assert Peak(100.0, 10.0) == Peak(100.0, 10.0)
        assert Peak(100.0, 10.0) != Peak(100.0, 11.0)


class TestSpectrumData:
    """Test spectrum arrays."""

    def test_to_peaks(self):
        """Test conversion to Peak records."""
        spectrum = SpectrumData([100.0, 200.0], [1.0, 2.0])

        assert spectrum.to_peaks() == [Peak(100.0, 1.0), Peak(200.0, 2.0)]

    def test_length_mismatch(self):
        """Test parallel arrays must have the same length."""
        with pytest.raises(ValueError, match="differ in length"):
            SpectrumData([100.0, 200.0], [1.0])

    def test_sorted_check(self):
        """Test detection of m/z order."""
        assert SpectrumData(np.array([1.0, 2.0, 3.0]), np.ones(3)).is_sorted_by_mz()
        assert not SpectrumData(np.array([1.0, 3.0, 2.0]), np.ones(3)).is_sorted_by_mz()


class TestSelectMostIntensePeak:
    """Test tolerance-based peak selection."""

    def test_most_intense_in_window(self, peaks):
        """Test the most intense peak within tolerance is selected."""
        best = select_most_intense_peak(peaks, 500.0, MassTolWindow.Da(-0.02, 0.02))

        assert best == Peak(500.00, 80.0)

    def test_window_excludes_neighbours(self, peaks):
        """Test peaks outside the window are ignored even if more intense."""
        best = select_most_intense_peak(peaks, 500.0, MassTolWindow.ppm(-30.0, 30.0))

        assert best.mz == 500.00
        assert best.intensity < 90.0

    def test_no_peak_in_window(self, peaks):
        """Test None when nothing lies within tolerance."""
        assert select_most_intense_peak(peaks, 300.0, MassTolWindow.Da(-0.5, 0.5)) is None

    def test_empty_peaks(self):
        """Test None on an empty peak list."""
        assert select_most_intense_peak([], 300.0, MassTolWindow.Da(-0.5, 0.5)) is None

    def test_ties_keep_first_peak(self):
        """Test the first-seen peak wins on equal intensities."""
        tied = [Peak(500.00, 10.0), Peak(500.01, 10.0)]
        best = select_most_intense_peak(tied, 500.0, MassTolWindow.Da(-0.05, 0.05))

        assert best.mz == 500.00

    def test_offset_shifts_window(self, peaks):
        """Test the offset moves both bounds."""
        best = select_most_intense_peak(
            peaks, 599.0, MassTolWindow.Da(-0.01, 0.01), offset=1.0
        )

        assert best == Peak(600.00, 90.0)
