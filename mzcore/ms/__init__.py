"""Mass tolerance arithmetic, bounded range search and spectrum data."""

from .tolerance import (
    MassTolUnit,
    MassTolWindow,
    binary_search_mz_range,
    binary_search_slice,
    calc_mz_tol_in_daltons,
    calc_mz_tol_in_ppm,
    mass_to_mz,
    mz_to_mass,
)
from .spectrum import Peak, SpectrumData, select_most_intense_peak

__all__ = [
    # Tolerances
    'MassTolUnit',
    'MassTolWindow',
    'calc_mz_tol_in_daltons',
    'calc_mz_tol_in_ppm',
    # m/z conversion
    'mass_to_mz',
    'mz_to_mass',
    # Range search
    'binary_search_slice',
    'binary_search_mz_range',
    # Spectra
    'Peak',
    'SpectrumData',
    'select_most_intense_peak',
]
