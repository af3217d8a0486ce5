"""Centroided spectrum data and tolerance-based peak selection."""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import List, Optional, Sequence

import numpy as np

from .tolerance import MassTolWindow, binary_search_slice


@total_ordering
@dataclass(frozen=True, eq=False)
class Peak:
    """A centroided peak.

    Peaks order by intensity first and m/z second, so ``max(peaks)`` is the
    most intense peak. Sort by ``peak.mz`` explicitly for m/z order.
    """

    mz: float
    intensity: float

    def _order_key(self):
        return self.intensity, self.mz

    def __eq__(self, other) -> bool:
        if not isinstance(other, Peak):
            return NotImplemented
        return self._order_key() == other._order_key()

    def __lt__(self, other: "Peak") -> bool:
        if not isinstance(other, Peak):
            return NotImplemented
        return self._order_key() < other._order_key()

    def __hash__(self) -> int:
        return hash(self._order_key())


@dataclass
class SpectrumData:
    """Parallel m/z and intensity arrays of one spectrum."""

    mz_list: np.ndarray
    intensity_list: np.ndarray

    def __post_init__(self):
        self.mz_list = np.asarray(self.mz_list, dtype=np.float64)
        self.intensity_list = np.asarray(self.intensity_list, dtype=np.float32)
        if len(self.mz_list) != len(self.intensity_list):
            raise ValueError(
                f"m/z and intensity lists differ in length: "
                f"{len(self.mz_list)} != {len(self.intensity_list)}"
            )

    def __len__(self) -> int:
        return len(self.mz_list)

    def to_peaks(self) -> List[Peak]:
        return [
            Peak(float(mz), float(intensity))
            for mz, intensity in zip(self.mz_list, self.intensity_list)
        ]

    def is_sorted_by_mz(self) -> bool:
        return bool(np.all(self.mz_list[1:] >= self.mz_list[:-1]))


def select_most_intense_peak(
    peaks: Sequence[Peak],
    center: float,
    tolerance: MassTolWindow,
    offset: Optional[float] = None,
) -> Optional[Peak]:
    """Select the most intense peak within ``tolerance`` of ``center``.

    Binary search narrows ``peaks`` (sorted by m/z) to the window, then a
    linear scan keeps the most intense peak. On equal intensities the first
    peak seen (lowest m/z) wins.

    Parameters
    ----------
    peaks : sequence of Peak
        Peaks sorted ascending by m/z
    center : float
        Query m/z
    tolerance : MassTolWindow
        Search window around ``center``
    offset : float, optional
        Static shift applied to both window bounds, e.g. to compare
        proton-subtracted peak masses against m/z-based tolerances

    Returns
    -------
    peak : Peak or None
        None when no peak lies in the window
    """
    lo, hi = tolerance.bounds(center)
    if offset is not None:
        lo += offset
        hi += offset

    i, j = binary_search_slice(peaks, lambda peak: peak.mz, lo, hi)

    best_peak = None
    for peak in peaks[i:j]:
        if not lo <= peak.mz <= hi:
            continue
        if best_peak is None or peak.intensity > best_peak.intensity:
            best_peak = peak

    return best_peak
