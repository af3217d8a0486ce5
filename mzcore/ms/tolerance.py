"""Mass tolerance windows, m/z conversions and bounded range search.

Tolerances come in three units:
- ppm: relative, parts per million of the center mass
- mmu: absolute, milli mass units (1 mmu = 0.001 Da)
- Da: absolute, Daltons

A ``MassTolWindow`` may be asymmetric (``lo`` below and ``hi`` above the
center). The range search helpers locate the slice of a sorted sequence that
covers a [low, high] window, which is the building block for every
"what lies within tolerance of this mass" query.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence, Tuple, TypeVar

import numba
import numpy as np

from ..constants import PROTON_MASS

T = TypeVar("T")


# =============================================================================
# Tolerance Units and Windows
# =============================================================================

class MassTolUnit(Enum):
    """Unit of a mass tolerance value."""
    Da = "Da"
    mmu = "mmu"
    ppm = "ppm"

    @classmethod
    def from_str(cls, unit: str) -> "MassTolUnit":
        """Parse ``'Da'``, ``'mmu'`` or ``'ppm'``."""
        try:
            return cls(unit)
        except ValueError:
            raise ValueError(f"Unknown mass tolerance unit: {unit}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MassTolWindow:
    """Asymmetric tolerance window around a center mass.

    ``lo`` is expected to be <= 0 and ``hi`` >= 0, but this is not enforced.

    Examples
    --------
    >>> MassTolWindow.ppm(-10.0, 20.0).bounds(1000.0)
    (999.99, 1000.02)
    >>> MassTolWindow.Da(-0.5, 0.5).contains(500.0, 500.5)
    True
    """

    unit: MassTolUnit
    lo: float
    hi: float

    @classmethod
    def ppm(cls, lo: float, hi: float) -> "MassTolWindow":
        return cls(MassTolUnit.ppm, lo, hi)

    @classmethod
    def mmu(cls, lo: float, hi: float) -> "MassTolWindow":
        return cls(MassTolUnit.mmu, lo, hi)

    @classmethod
    def Da(cls, lo: float, hi: float) -> "MassTolWindow":
        return cls(MassTolUnit.Da, lo, hi)

    @classmethod
    def symmetric(cls, tol: float, unit: MassTolUnit) -> "MassTolWindow":
        return cls(unit, -tol, tol)

    def bounds(self, center: float) -> Tuple[float, float]:
        """Compute the (lower, upper) window in Da around ``center``."""
        if self.unit is MassTolUnit.Da:
            return center + self.lo, center + self.hi
        if self.unit is MassTolUnit.mmu:
            return center + self.lo / 1000.0, center + self.hi / 1000.0

        delta_lo = center * self.lo / 1_000_000.0
        delta_hi = center * self.hi / 1_000_000.0
        return center + delta_lo, center + delta_hi

    def contains(self, center: float, value: float) -> bool:
        """True if ``value`` lies within the window around ``center`` (inclusive)."""
        lo, hi = self.bounds(center)
        return lo <= value <= hi

    @staticmethod
    def ppm_to_delta_mass(center: float, ppm: float) -> float:
        return ppm * center / 1_000_000.0

    def __mul__(self, factor: float) -> "MassTolWindow":
        return MassTolWindow(self.unit, self.lo * factor, self.hi * factor)

    __rmul__ = __mul__


def calc_mz_tol_in_daltons(mz: float, mz_tol: float, tol_unit: MassTolUnit) -> float:
    """Convert a tolerance value to Da at the given m/z."""
    if tol_unit is MassTolUnit.Da:
        return mz_tol
    if tol_unit is MassTolUnit.mmu:
        return mz_tol / 1000.0
    return mz_tol * mz / 1_000_000.0


def calc_mz_tol_in_ppm(mz: float, mz_tol: float, tol_unit: MassTolUnit) -> float:
    """Convert a tolerance value to ppm at the given m/z."""
    if tol_unit is MassTolUnit.Da:
        return mz_tol * 1e6 / mz
    if tol_unit is MassTolUnit.mmu:
        return mz_tol * 1000.0 / mz
    return mz_tol


# =============================================================================
# Mass / Charge Conversion
# =============================================================================

@numba.njit(cache=True)
def mass_to_mz(mass: float, charge: int) -> float:
    """Convert a neutral mass to m/z at ``charge``.

    Negative charges give the m/z of the deprotonated ion.
    """
    if charge == 1:
        return mass + PROTON_MASS
    return (mass + charge * PROTON_MASS) / abs(charge)


@numba.njit(cache=True)
def mz_to_mass(mz: float, charge: int) -> float:
    """Convert an m/z at ``charge`` back to the neutral mass."""
    return mz * abs(charge) - charge * PROTON_MASS


# =============================================================================
# Bounded Range Search
# =============================================================================

def binary_search_slice(
    sorted_slice: Sequence[T],
    key: Callable[[T], float],
    low: float,
    high: float,
) -> Tuple[int, int]:
    """Widest (left, right) such that ``sorted_slice[left:right]`` holds every key in [low, high].

    Parameters
    ----------
    sorted_slice : sequence
        Items sorted ascending by ``key`` (duplicated keys allowed)
    key : callable
        Extracts the sort key of an item
    low, high : float
        Inclusive key window

    Returns
    -------
    left, right : int
        Slice bounds satisfying:

        * ``key(sorted_slice[left]) < low`` or ``left == 0``
        * ``key(sorted_slice[right]) > high`` or ``right == len(sorted_slice)``
        * ``0 <= left <= right <= len(sorted_slice)``

    Notes
    -----
    The slice may start one item below ``low``; callers filter the items
    against the window when they need exact membership.

    Examples
    --------
    >>> binary_search_slice([1.0, 2.0, 2.0, 2.0, 3.0], lambda x: x, 2.0, 2.0)
    (0, 4)
    """
    n = len(sorted_slice)

    # First item with key >= low, then step back onto the last item below low
    left = bisect.bisect_left(sorted_slice, low, key=key)
    left = max(left - 1, 0)
    while left > 0 and key(sorted_slice[left]) >= low:
        left -= 1

    # First item with key > high
    right = bisect.bisect_right(sorted_slice, high, lo=left, hi=n, key=key)
    while right < n and key(sorted_slice[right]) <= high:
        right += 1

    return left, right


@numba.njit(cache=True)
def binary_search_mz_range(
    sorted_mz: np.ndarray,
    mz_min: float,
    mz_max: float,
) -> Tuple[int, int]:
    """Half-open index range of ``sorted_mz`` values inside [mz_min, mz_max].

    Array counterpart of ``binary_search_slice`` with exact bounds: every
    returned index is within the window. ``start == stop`` means no match.

    Parameters
    ----------
    sorted_mz : np.ndarray
        m/z values sorted ascending. Not validated.
    mz_min, mz_max : float
        Inclusive window

    Returns
    -------
    start, stop : int
        ``sorted_mz[start:stop]`` is the matching range
    """
    n = len(sorted_mz)

    # First m/z >= mz_min
    left, right = 0, n
    while left < right:
        mid = (left + right) // 2
        if sorted_mz[mid] < mz_min:
            left = mid + 1
        else:
            right = mid
    start = left

    # First m/z > mz_max
    left, right = start, n
    while left < right:
        mid = (left + right) // 2
        if sorted_mz[mid] <= mz_max:
            left = mid + 1
        else:
            right = mid

    return start, left
