"""Neutral mass of amino acid sequences."""

from enum import Enum
from typing import Iterable, Optional

from ..constants import WATER_AVERAGE_MASS, WATER_MONO_MASS
from .amino_acid import ResidueMassLookup, standard_amino_acid_table


class MassType(Enum):
    """Which residue mass to sum."""
    MONOISOTOPIC = "monoisotopic"
    AVERAGE = "average"


def calc_aa_seq_mass(
    aa_seq: Iterable[str],
    aa_table: Optional[ResidueMassLookup] = None,
    mass_type: MassType = MassType.MONOISOTOPIC,
) -> float:
    """Calculate the neutral mass of a peptide sequence.

    The mass is the sum of residue masses plus one water for the free termini.

    Parameters
    ----------
    aa_seq : str or iterable of str
        One-letter residue codes
    aa_table : ResidueMassLookup, optional
        Residue table (standard 20 amino acids by default)
    mass_type : MassType
        Sum monoisotopic or average residue masses

    Returns
    -------
    mass : float
        Neutral peptide mass in Da

    Raises
    ------
    UnknownResidueError
        If a residue code is not in the table.

    Examples
    --------
    >>> round(calc_aa_seq_mass("INTERSTELLAR"), 4)
    1401.7576
    """
    if aa_table is None:
        aa_table = standard_amino_acid_table()

    mono = mass_type is MassType.MONOISOTOPIC

    seq_mass = 0.0
    for code in aa_seq:
        aa = aa_table.aa_from_code(code)
        seq_mass += aa.mono_mass if mono else aa.average_mass

    return seq_mass + (WATER_MONO_MASS if mono else WATER_AVERAGE_MASS)
