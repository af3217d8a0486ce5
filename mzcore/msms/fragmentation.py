"""Theoretical fragment ion tables with Numba JIT compilation.

A fragmentation table holds one column of m/z values per (ion series, charge)
combination. Row ``i`` of a column is the fragment that retains ``i + 1``
residues counted from the series' terminus, so every column of a peptide of
length N has N - 1 rows (the full-length ion is never reported).

Modifications are applied after the unmodified table is built, through two
cumulative mass increment arrays (one per terminus), so residue sums are never
recomputed per modification.

Key design:
1. Numba kernels for the cumulative residue sums and increment propagation
2. Python wrappers for residue lookups, validation and logging
3. Residue masses resolved through any ``ResidueMassLookup`` table
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numba
import numpy as np

from ..chemistry.amino_acid import ResidueMassLookup, standard_amino_acid_table
from ..chemistry.peptide import LinearPeptide
from ..constants import WATER_MONO_MASS
from ..errors import (
    InvalidModificationPositionError,
    MalformedModificationError,
    UnsupportedIonSeriesError,
)
from ..ms.tolerance import mass_to_mz, mz_to_mass
from .config import FragmentationConfig
from .model import FragmentIonSeries

logger = logging.getLogger(__name__)


@dataclass
class TheoreticalFragmentIons:
    """One column of a fragmentation table."""

    ion_series: FragmentIonSeries
    charge: int
    mz_values: np.ndarray

    @property
    def is_n_terminal(self) -> bool:
        return bool(self.ion_series.is_n_terminal())

    def __len__(self) -> int:
        return len(self.mz_values)


FragmentationTable = List[TheoreticalFragmentIons]


# =============================================================================
# Core Kernels (Numba-Compiled)
# =============================================================================

@numba.njit(cache=True)
def _cumulative_fragment_mz(
    residue_masses: np.ndarray,
    mass_shift: float,
    charge: int,
    reverse: bool,
) -> np.ndarray:
    """Running residue sum converted to m/z after every residue but the last.

    Parameters
    ----------
    residue_masses : np.ndarray (float64)
        Monoisotopic residue masses in sequence order
    mass_shift : float
        Initial value of the running sum (water + ion series shift)
    charge : int
        Fragment charge
    reverse : bool
        Traverse from the C-terminus

    Returns
    -------
    mz_values : np.ndarray (float64)
        ``len(residue_masses) - 1`` m/z values (empty for fewer than 2 residues)
    """
    seq_len = len(residue_masses)
    n_rows = max(seq_len - 1, 0)
    mz_values = np.empty(n_rows, dtype=np.float64)

    seq_mass = mass_shift
    for i in range(n_rows):
        if reverse:
            seq_mass += residue_masses[seq_len - 1 - i]
        else:
            seq_mass += residue_masses[i]
        mz_values[i] = mass_to_mz(seq_mass, charge)

    return mz_values


@numba.njit(cache=True)
def _mass_increment_prefix_arrays(
    positions: np.ndarray,
    mass_increments: np.ndarray,
    seq_len: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Cumulative mass increments seen from each terminus.

    ``forward[i]`` sums the increments at 1-based positions <= i + 1, and
    ``reverse[i]`` those at positions >= seq_len - i. Positions must already be
    validated to lie in [1, seq_len].
    """
    forward = np.zeros(seq_len, dtype=np.float64)
    reverse = np.zeros(seq_len, dtype=np.float64)

    for k in range(len(positions)):
        pos = positions[k]
        forward[pos - 1] += mass_increments[k]
        reverse[seq_len - pos] += mass_increments[k]

    for i in range(1, seq_len):
        forward[i] += forward[i - 1]
        reverse[i] += reverse[i - 1]

    return forward, reverse


@numba.njit(cache=True)
def _apply_mass_increments(
    mz_values: np.ndarray,
    cumulative_increments: np.ndarray,
    charge: int,
) -> np.ndarray:
    """Shift every row by its cumulative mass increment divided by charge.

    The division uses the signed charge, so negative charges shift the m/z
    down while ``mass_to_mz`` divides by ``abs(charge)``.
    """
    updated = np.empty_like(mz_values)
    for i in range(len(mz_values)):
        updated[i] = mz_values[i] + cumulative_increments[i] / charge
    return updated


@numba.njit(cache=True)
def _recharge_mz_values(mz_values: np.ndarray, charge: int, new_charge: int) -> np.ndarray:
    updated = np.empty_like(mz_values)
    for i in range(len(mz_values)):
        updated[i] = mass_to_mz(mz_to_mass(mz_values[i], charge), new_charge)
    return updated


# =============================================================================
# Helper Functions
# =============================================================================

def _residue_mono_masses(pep_seq: str, aa_table: ResidueMassLookup) -> np.ndarray:
    """Monoisotopic mass of every residue, failing on the first unknown code."""
    masses = np.empty(len(pep_seq), dtype=np.float64)
    for i, code in enumerate(pep_seq):
        masses[i] = aa_table.aa_from_code(code).mono_mass
    return masses


def _normalize_mod_position(position: int, seq_len: int) -> int:
    """Map the terminal sentinels 0 (N-term) and -1 (C-term) to 1 and seq_len."""
    if position == 0:
        return 1
    if position == -1:
        return seq_len
    return position


# =============================================================================
# Fragmentation Table Builders
# =============================================================================

def compute_frag_series_mz_values(
    pep_seq: str,
    ion_series: FragmentIonSeries,
    charge: int,
    aa_table: Optional[ResidueMassLookup] = None,
) -> np.ndarray:
    """Compute the m/z values of one ion series at one charge.

    Parameters
    ----------
    pep_seq : str
        Peptide sequence (one-letter codes)
    ion_series : FragmentIonSeries
        Ion series with an N- or C-terminal direction
    charge : int
        Fragment charge state
    aa_table : ResidueMassLookup, optional
        Residue table (standard 20 amino acids by default)

    Returns
    -------
    mz_values : np.ndarray (float64)
        One m/z value per cleavage site, ``len(pep_seq) - 1`` values

    Raises
    ------
    UnsupportedIonSeriesError
        If the ion series has no defined direction.
    UnknownResidueError
        If a residue is not in the table.
    ValueError
        If the charge is zero.

    Examples
    --------
    >>> b_ions = compute_frag_series_mz_values("PEPTIDE", FragmentIonSeries.b, 1)
    >>> len(b_ions)
    6
    """
    is_n_terminal = ion_series.is_n_terminal()
    if is_n_terminal is None:
        raise UnsupportedIonSeriesError(ion_series)
    if charge == 0:
        raise ValueError("fragment charge can't be zero")

    if aa_table is None:
        aa_table = standard_amino_acid_table()

    residue_masses = _residue_mono_masses(pep_seq, aa_table)
    mass_shift = WATER_MONO_MASS + ion_series.mono_mass_shift()

    return _cumulative_fragment_mz(residue_masses, mass_shift, charge, not is_n_terminal)


def compute_frag_table_without_mods(
    pep_seq: str,
    ion_series_list: Sequence[FragmentIonSeries],
    frag_ion_charges: Sequence[int],
    aa_table: Optional[ResidueMassLookup] = None,
) -> FragmentationTable:
    """Build the unmodified fragmentation table.

    Columns are ordered ion-series-major, charge-minor. Peptides shorter than
    two residues yield empty columns.

    Examples
    --------
    >>> table = compute_frag_table_without_mods(
    ...     "INTERSTELLAR", [FragmentIonSeries.b, FragmentIonSeries.y], [1]
    ... )
    >>> [len(column) for column in table]
    [11, 11]
    """
    if aa_table is None:
        aa_table = standard_amino_acid_table()

    if len(pep_seq) < 2:
        logger.warning(
            f"Peptide '{pep_seq}' has fewer than 2 residues, fragment columns will be empty"
        )

    frag_table = []
    for ion_series in ion_series_list:
        for charge in frag_ion_charges:
            mz_values = compute_frag_series_mz_values(pep_seq, ion_series, charge, aa_table)
            frag_table.append(TheoreticalFragmentIons(ion_series, charge, mz_values))

    logger.debug(
        f"Fragmentation table of {pep_seq}: {len(frag_table)} columns x "
        f"{max(len(pep_seq) - 1, 0)} rows"
    )

    return frag_table


def compute_frag_table_with_mods(
    pep_seq: str,
    frag_table_without_mods: FragmentationTable,
    located_mass_increments: Sequence[Tuple[int, float]],
) -> FragmentationTable:
    """Apply localized mass increments to an unmodified table.

    Parameters
    ----------
    pep_seq : str
        Peptide sequence the table was built from
    frag_table_without_mods : FragmentationTable
        Table from ``compute_frag_table_without_mods`` (left untouched)
    located_mass_increments : sequence of (int, float)
        (position, mass increment) pairs. Positions are 1-based; 0 and -1
        stand for the N- and C-terminal residue.

    Returns
    -------
    frag_table : FragmentationTable
        New table of the same shape with shifted m/z values

    Raises
    ------
    InvalidModificationPositionError
        If a position falls outside [1, len(pep_seq)].
    ValueError
        If a column was not built from a sequence of this length.
    """
    seq_len = len(pep_seq)

    n_rows = max(seq_len - 1, 0)
    for frag_series in frag_table_without_mods:
        if len(frag_series.mz_values) != n_rows:
            raise ValueError(
                f"fragment column {frag_series.ion_series} has {len(frag_series.mz_values)} "
                f"rows, expected {n_rows} for peptide {pep_seq}"
            )

    positions = np.empty(len(located_mass_increments), dtype=np.int64)
    mass_increments = np.empty(len(located_mass_increments), dtype=np.float64)
    for k, (position, mass_increment) in enumerate(located_mass_increments):
        aa_pos = _normalize_mod_position(int(position), seq_len)
        if aa_pos < 1 or aa_pos > seq_len:
            raise InvalidModificationPositionError(position, pep_seq, mass_increment)
        positions[k] = aa_pos
        mass_increments[k] = mass_increment

    forward, reverse = _mass_increment_prefix_arrays(positions, mass_increments, seq_len)

    frag_table = []
    for frag_series in frag_table_without_mods:
        cumulative_increments = forward if frag_series.is_n_terminal else reverse
        mz_values = _apply_mass_increments(
            frag_series.mz_values, cumulative_increments, frag_series.charge
        )
        frag_table.append(
            TheoreticalFragmentIons(frag_series.ion_series, frag_series.charge, mz_values)
        )

    return frag_table


def parse_mod_string(pep_mods_str: Optional[str]) -> List[Tuple[int, float]]:
    """Parse ``'<mass>@<position>'`` tokens separated by commas.

    Returns (position, mass) pairs with positions as written (0 and -1 are
    kept as terminal sentinels). None or a blank string gives no mods.

    Examples
    --------
    >>> parse_mod_string("79.9663@3,-17.0265@0")
    [(3, 79.9663), (0, -17.0265)]
    """
    if pep_mods_str is None or not pep_mods_str.strip():
        return []

    located_mass_increments = []
    for token in pep_mods_str.split(","):
        token = token.strip()
        mass_str, sep, position_str = token.partition("@")
        if not sep:
            raise MalformedModificationError(token)
        try:
            mod_mass = float(mass_str)
            mod_pos = int(position_str)
        except ValueError:
            raise MalformedModificationError(token) from None
        located_mass_increments.append((mod_pos, mod_mass))

    return located_mass_increments


def compute_frag_table_from_mod_string(
    pep_seq: str,
    pep_mods_str: Optional[str],
    ion_series_list: Sequence[FragmentIonSeries],
    frag_ion_charges: Sequence[int],
    aa_table: Optional[ResidueMassLookup] = None,
) -> FragmentationTable:
    """Build a fragmentation table with modifications given as text."""
    frag_table = compute_frag_table_without_mods(
        pep_seq, ion_series_list, frag_ion_charges, aa_table
    )

    located_mass_increments = parse_mod_string(pep_mods_str)
    if not located_mass_increments:
        return frag_table

    return compute_frag_table_with_mods(pep_seq, frag_table, located_mass_increments)


def compute_frag_table(
    pep_seq: str,
    located_mass_increments: Sequence[Tuple[int, float]],
    ion_series_list: Sequence[FragmentIonSeries],
    frag_ion_charges: Sequence[int],
    aa_table: Optional[ResidueMassLookup] = None,
) -> FragmentationTable:
    """Build a fragmentation table with (position, mass) modifications."""
    frag_table = compute_frag_table_without_mods(
        pep_seq, ion_series_list, frag_ion_charges, aa_table
    )
    return compute_frag_table_with_mods(pep_seq, frag_table, located_mass_increments)


def change_frag_series_charge_state(
    frag_series: TheoreticalFragmentIons,
    new_charge: int,
) -> TheoreticalFragmentIons:
    """Recompute a column at another charge state."""
    if new_charge == 0:
        raise ValueError("fragment charge can't be zero")
    mz_values = _recharge_mz_values(frag_series.mz_values, frag_series.charge, new_charge)
    return TheoreticalFragmentIons(frag_series.ion_series, new_charge, mz_values)


# =============================================================================
# Table Factory
# =============================================================================

class FragmentationTableFactory:
    """Fragmentation table builder bound to one residue table.

    Parameters
    ----------
    aa_table : ResidueMassLookup, optional
        Residue table used for every table built (standard 20 amino acids by
        default). Custom or proteinogenic tables are passed in here.
    config : FragmentationConfig, optional
        Default ion series and charges
    """

    def __init__(
        self,
        aa_table: Optional[ResidueMassLookup] = None,
        config: Optional[FragmentationConfig] = None,
    ):
        self.aa_table = aa_table if aa_table is not None else standard_amino_acid_table()
        self.config = config

    def _resolve_config(self, config: Optional[FragmentationConfig]) -> FragmentationConfig:
        config = config if config is not None else self.config
        if config is None:
            raise ValueError("No FragmentationConfig given and no default configured")
        return config

    def table(
        self,
        pep_seq: str,
        located_mass_increments: Sequence[Tuple[int, float]] = (),
        config: Optional[FragmentationConfig] = None,
    ) -> FragmentationTable:
        config = self._resolve_config(config)
        return compute_frag_table(
            pep_seq, located_mass_increments, config.ion_series, config.charges, self.aa_table
        )

    def table_from_mod_string(
        self,
        pep_seq: str,
        pep_mods_str: Optional[str],
        config: Optional[FragmentationConfig] = None,
    ) -> FragmentationTable:
        config = self._resolve_config(config)
        return compute_frag_table_from_mod_string(
            pep_seq, pep_mods_str, config.ion_series, config.charges, self.aa_table
        )

    def table_for_peptide(
        self,
        peptide: LinearPeptide,
        config: Optional[FragmentationConfig] = None,
    ) -> FragmentationTable:
        """Table of a peptide with its localized modifications applied."""
        return self.table(peptide.sequence, peptide.localized_mods(), config)
