"""mzcore - Peptide fragment ion computation and MS/MS spectrum annotation.

This library computes theoretical fragment ion m/z values for (modified)
peptides and matches them against experimental fragment spectra. Hot loops
are Numba-compiled kernels over NumPy arrays.

Subpackages:
- chemistry: elements, atoms, elemental compositions, amino acids, peptides
- ms: mass tolerance windows, m/z conversion, spectra and peak selection
- msms: ion series, fragmentation tables and spectrum annotation
"""

__version__ = "0.1.0"

from mzcore import chemistry
from mzcore import ms
from mzcore import msms

__all__ = [
    "chemistry",
    "ms",
    "msms",
]
