"""Spectrum annotation: match experimental peaks to a fragmentation table.

Two matching algorithms share the same flattened, m/z-sorted view of the
fragmentation table:

1. ``annotate_spectrum``: sort + single-linkage clustering + forward
   two-pointer join. Theoretical values closer than the tolerance are grouped
   into clusters and a cursor walks the clusters once while peaks are visited
   in ascending m/z order. Only the cluster under the cursor is scanned, so a
   peak whose window straddles two clusters only sees the first one, and
   unsorted peaks silently lose matches.
2. ``annotate_spectrum_by_range``: one bounded binary search per peak over the
   sorted theoretical values. Finds every pair within tolerance regardless of
   clustering or peak order, and accepts a per-peak (ppm) tolerance.

Neither algorithm deduplicates: a peak may match several theoretical ions and
a theoretical ion may be claimed by several peaks. ``deduplicate_matches``
keeps one peak per theoretical ion.
"""

import logging
from enum import Enum
from typing import List, NamedTuple, Sequence, Tuple

import numba
import numpy as np

from ..ms.tolerance import MassTolUnit, binary_search_mz_range, calc_mz_tol_in_daltons
from .config import AnnotationParams
from .fragmentation import FragmentationTable
from .model import FragmentIonSeries

logger = logging.getLogger(__name__)


class MatchedPeak(NamedTuple):
    """An experimental peak matched to one theoretical fragment ion."""

    peak_index: int  # index in the experimental peak list
    peak_mz: float
    peak_intensity: float
    theo_mz: float
    mz_error: float  # peak_mz - theo_mz
    charge: int
    ion_series: FragmentIonSeries
    frag_index: int  # row of the fragmentation table (starts at 0)
    aa_position: int  # residue position in the sequence (starts at 1)


class PeakSelectionStrategy(Enum):
    """How to pick one peak among several matching the same theoretical ion."""
    NEAREST_PEAK = "nearest"
    HIGHEST_PEAK = "highest"


# =============================================================================
# Core Kernels (Numba-Compiled)
# =============================================================================

@numba.njit(cache=True)
def _cluster_bounds(sorted_mz: np.ndarray, tol: float) -> Tuple[np.ndarray, np.ndarray]:
    """Split sorted m/z values into clusters wherever the gap exceeds ``tol``.

    Returns
    -------
    starts, ends : np.ndarray (int64)
        Half-open index range of every cluster
    """
    n = len(sorted_mz)
    starts = np.empty(n, dtype=np.int64)
    ends = np.empty(n, dtype=np.int64)
    if n == 0:
        return starts, ends

    n_clusters = 0
    starts[0] = 0
    for i in range(1, n):
        if sorted_mz[i] - sorted_mz[i - 1] > tol:
            ends[n_clusters] = i
            n_clusters += 1
            starts[n_clusters] = i
    ends[n_clusters] = n
    n_clusters += 1

    return starts[:n_clusters], ends[:n_clusters]


@numba.njit(cache=True)
def _grow(values: np.ndarray, capacity: int) -> np.ndarray:
    grown = np.empty(capacity, dtype=np.int64)
    grown[:len(values)] = values
    return grown


@numba.njit(cache=True)
def _forward_cluster_join(
    sorted_mz: np.ndarray,
    cluster_starts: np.ndarray,
    cluster_ends: np.ndarray,
    peak_mz: np.ndarray,
    tol: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Forward two-pointer join of ascending peaks against clusters.

    The cursor skips every cluster whose last value lies below
    ``peak - tol`` and never moves back.

    Returns
    -------
    peak_indices, theo_indices : np.ndarray (int64)
        Matching (peak, sorted theoretical value) index pairs, peak-major
    """
    n_clusters = len(cluster_starts)
    capacity = max(16, len(peak_mz))
    peak_indices = np.empty(capacity, dtype=np.int64)
    theo_indices = np.empty(capacity, dtype=np.int64)
    n_matches = 0

    cursor = 0
    for p in range(len(peak_mz)):
        min_mz = peak_mz[p] - tol
        while cursor < n_clusters and sorted_mz[cluster_ends[cursor] - 1] < min_mz:
            cursor += 1
        if cursor == n_clusters:
            break

        for k in range(cluster_starts[cursor], cluster_ends[cursor]):
            if abs(peak_mz[p] - sorted_mz[k]) <= tol:
                if n_matches == capacity:
                    capacity *= 2
                    peak_indices = _grow(peak_indices, capacity)
                    theo_indices = _grow(theo_indices, capacity)
                peak_indices[n_matches] = p
                theo_indices[n_matches] = k
                n_matches += 1

    return peak_indices[:n_matches], theo_indices[:n_matches]


@numba.njit(cache=True)
def _range_join(
    sorted_mz: np.ndarray,
    peak_mz: np.ndarray,
    peak_tol: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Per-peak binary range search, complete for any peak order."""
    capacity = max(16, len(peak_mz))
    peak_indices = np.empty(capacity, dtype=np.int64)
    theo_indices = np.empty(capacity, dtype=np.int64)
    n_matches = 0

    for p in range(len(peak_mz)):
        start, stop = binary_search_mz_range(
            sorted_mz, peak_mz[p] - peak_tol[p], peak_mz[p] + peak_tol[p]
        )
        for k in range(start, stop):
            if n_matches == capacity:
                capacity *= 2
                peak_indices = _grow(peak_indices, capacity)
                theo_indices = _grow(theo_indices, capacity)
            peak_indices[n_matches] = p
            theo_indices[n_matches] = k
            n_matches += 1

    return peak_indices[:n_matches], theo_indices[:n_matches]


# =============================================================================
# Helper Functions
# =============================================================================

def _as_peak_array(spectrum_peaks) -> np.ndarray:
    """(n, 2) float64 array of (m/z, intensity) rows."""
    peaks = np.asarray(spectrum_peaks, dtype=np.float64)
    if peaks.size == 0:
        return peaks.reshape(0, 2)
    if peaks.ndim != 2 or peaks.shape[1] != 2:
        raise ValueError(
            f"spectrum peaks must be (m/z, intensity) pairs, got shape {peaks.shape}"
        )
    return peaks


def _flatten_frag_table(
    frag_table: FragmentationTable,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Flatten and sort all table values by m/z.

    Returns
    -------
    sorted_mz, col_indices, row_indices : np.ndarray
        Parallel arrays sorted by ascending m/z (stable)
    """
    if not frag_table:
        empty_int = np.empty(0, dtype=np.int64)
        return np.empty(0, dtype=np.float64), empty_int, empty_int

    mz_values = np.concatenate([
        np.asarray(column.mz_values, dtype=np.float64) for column in frag_table
    ])
    col_indices = np.concatenate([
        np.full(len(column.mz_values), col_idx, dtype=np.int64)
        for col_idx, column in enumerate(frag_table)
    ])
    row_indices = np.concatenate([
        np.arange(len(column.mz_values), dtype=np.int64) for column in frag_table
    ])

    order = np.argsort(mz_values, kind="mergesort")
    return mz_values[order], col_indices[order], row_indices[order]


def _build_matched_peaks(
    peaks: np.ndarray,
    frag_table: FragmentationTable,
    sorted_mz: np.ndarray,
    col_indices: np.ndarray,
    row_indices: np.ndarray,
    peak_indices: np.ndarray,
    theo_indices: np.ndarray,
) -> List[MatchedPeak]:
    matched_peaks = []
    for peak_idx, theo_idx in zip(peak_indices, theo_indices):
        column = frag_table[col_indices[theo_idx]]
        row = int(row_indices[theo_idx])
        n_rows = len(column.mz_values)

        if column.is_n_terminal:
            aa_position = row + 1
        else:
            aa_position = n_rows + 1 - row

        peak_mz = float(peaks[peak_idx, 0])
        theo_mz = float(sorted_mz[theo_idx])
        matched_peaks.append(MatchedPeak(
            peak_index=int(peak_idx),
            peak_mz=peak_mz,
            peak_intensity=float(peaks[peak_idx, 1]),
            theo_mz=theo_mz,
            mz_error=peak_mz - theo_mz,
            charge=column.charge,
            ion_series=column.ion_series,
            frag_index=row,
            aa_position=aa_position,
        ))
    return matched_peaks


# =============================================================================
# Annotation
# =============================================================================

def annotate_spectrum(
    spectrum_peaks,
    frag_table: FragmentationTable,
    mz_error_tol: float,
) -> List[MatchedPeak]:
    """Match peaks against a fragmentation table within an absolute tolerance.

    Parameters
    ----------
    spectrum_peaks : sequence of (float, float) or np.ndarray (n, 2)
        (m/z, intensity) pairs, expected in ascending m/z order
    frag_table : FragmentationTable
        Theoretical fragment ions
    mz_error_tol : float
        Absolute tolerance in Da, applied as +/- around each peak

    Returns
    -------
    matched_peaks : list of MatchedPeak
        Every (peak, theoretical ion) pair with ``|peak_mz - theo_mz| <= tol``
        found by the forward cluster cursor, ordered by peak then m/z

    Notes
    -----
    Peaks out of m/z order are not reordered and lose matches; a warning is
    logged when this is detected. Use ``annotate_spectrum_by_range`` for a
    complete search.
    """
    peaks = _as_peak_array(spectrum_peaks)
    sorted_mz, col_indices, row_indices = _flatten_frag_table(frag_table)

    if len(peaks) == 0 or len(sorted_mz) == 0:
        return []

    peak_mz = np.ascontiguousarray(peaks[:, 0])
    if np.any(peak_mz[1:] < peak_mz[:-1]):
        logger.warning("Spectrum peaks are not sorted by m/z, some matches will be missed")

    cluster_starts, cluster_ends = _cluster_bounds(sorted_mz, mz_error_tol)
    peak_indices, theo_indices = _forward_cluster_join(
        sorted_mz, cluster_starts, cluster_ends, peak_mz, mz_error_tol
    )

    logger.debug(
        f"Annotated {len(peaks)} peaks against {len(sorted_mz)} fragments "
        f"({len(cluster_starts)} clusters): {len(peak_indices)} matches"
    )

    return _build_matched_peaks(
        peaks, frag_table, sorted_mz, col_indices, row_indices, peak_indices, theo_indices
    )


def annotate_spectrum_by_range(
    spectrum_peaks,
    frag_table: FragmentationTable,
    mz_error_tol: float,
    tol_unit: MassTolUnit = MassTolUnit.Da,
) -> List[MatchedPeak]:
    """Match peaks with one bounded range query per peak.

    Unlike ``annotate_spectrum`` this finds every pair within tolerance even
    for unsorted peaks or windows spanning several clusters. The tolerance may
    be relative (ppm), in which case it is evaluated at each peak's m/z.

    Parameters
    ----------
    spectrum_peaks : sequence of (float, float) or np.ndarray (n, 2)
        (m/z, intensity) pairs in any order
    frag_table : FragmentationTable
        Theoretical fragment ions
    mz_error_tol : float
        Tolerance value
    tol_unit : MassTolUnit
        Unit of ``mz_error_tol`` (Da by default)

    Returns
    -------
    matched_peaks : list of MatchedPeak
        Ordered by peak index then theoretical m/z
    """
    peaks = _as_peak_array(spectrum_peaks)
    sorted_mz, col_indices, row_indices = _flatten_frag_table(frag_table)

    if len(peaks) == 0 or len(sorted_mz) == 0:
        return []

    peak_mz = np.ascontiguousarray(peaks[:, 0])
    peak_tol = np.array(
        [calc_mz_tol_in_daltons(mz, mz_error_tol, tol_unit) for mz in peak_mz],
        dtype=np.float64,
    )

    peak_indices, theo_indices = _range_join(sorted_mz, peak_mz, peak_tol)

    logger.debug(
        f"Annotated {len(peaks)} peaks against {len(sorted_mz)} fragments "
        f"by range search: {len(peak_indices)} matches"
    )

    return _build_matched_peaks(
        peaks, frag_table, sorted_mz, col_indices, row_indices, peak_indices, theo_indices
    )


def annotate_with_params(
    spectrum_peaks,
    frag_table: FragmentationTable,
    params: AnnotationParams,
) -> List[MatchedPeak]:
    """Annotate with the algorithm and tolerance selected by ``params``.

    Raises
    ------
    ValueError
        If the forward cluster search is requested with a ppm tolerance.
    """
    if params.complete_search:
        return annotate_spectrum_by_range(
            spectrum_peaks, frag_table, params.mz_tolerance, params.tolerance_unit
        )

    if params.tolerance_unit is MassTolUnit.ppm:
        raise ValueError(
            "Forward cluster annotation needs an absolute tolerance (Da or mmu), "
            "set complete_search=True for ppm tolerances"
        )

    # Absolute units do not depend on m/z
    tol_da = params.tolerance_in_daltons(0.0)
    return annotate_spectrum(spectrum_peaks, frag_table, tol_da)


def deduplicate_matches(
    matched_peaks: Sequence[MatchedPeak],
    strategy: PeakSelectionStrategy = PeakSelectionStrategy.NEAREST_PEAK,
) -> List[MatchedPeak]:
    """Keep one matched peak per theoretical fragment ion.

    Theoretical ions are identified by (ion series, charge, row). On ties the
    first match wins. Output follows the order in which theoretical ions are
    first encountered.

    Parameters
    ----------
    matched_peaks : sequence of MatchedPeak
        Output of an annotation function
    strategy : PeakSelectionStrategy
        NEAREST_PEAK keeps the smallest absolute m/z error, HIGHEST_PEAK the
        most intense peak

    Returns
    -------
    matched_peaks : list of MatchedPeak
    """
    best_by_ion = {}
    for matched_peak in matched_peaks:
        ion_key = (matched_peak.ion_series, matched_peak.charge, matched_peak.frag_index)
        best = best_by_ion.get(ion_key)
        if best is None:
            best_by_ion[ion_key] = matched_peak
        elif strategy == PeakSelectionStrategy.NEAREST_PEAK:
            if abs(matched_peak.mz_error) < abs(best.mz_error):
                best_by_ion[ion_key] = matched_peak
        elif strategy == PeakSelectionStrategy.HIGHEST_PEAK:
            if matched_peak.peak_intensity > best.peak_intensity:
                best_by_ion[ion_key] = matched_peak
        else:
            raise ValueError(f"Unknown peak selection strategy: {strategy}")

    return list(best_by_ion.values())
