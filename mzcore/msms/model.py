"""Fragment ion series, activation types and related MS/MS vocabulary.

Each ion series carries a monoisotopic mass shift and a direction. The shift
is added to the running sum of residue masses when a fragmentation table is
built, so for example b ions (shift = -H2O) end up as residues + proton and
y ions (shift = 0) as residues + H2O + proton after the fragment builder adds
back one water and converts to m/z.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ..chemistry.atom import AtomTable, biomolecule_atom_table
from ..chemistry.element import Element
from ..constants import (
    CO2_MONO_MASS,
    CO_MONO_MASS,
    NH3_MONO_MASS,
    PROTON_MASS,
    WATER_MONO_MASS,
)


class ActivationType(Enum):
    """Precursor activation (fragmentation) method."""
    CID = "CID"
    ECD = "ECD"
    ETD = "ETD"
    HCD = "HCD"
    PSD = "PSD"

    def __str__(self) -> str:
        return self.value


class MsAnalyzer(Enum):
    """Mass analyzer used to acquire the fragment spectrum."""
    FTMS = "FTMS"
    TRAP = "TRAP"

    def __str__(self) -> str:
        return self.value


class FragmentIonSeriesDirection(Enum):
    """End of the peptide a fragment ion series retains."""
    N_TERMINAL = "N-terminal"
    C_TERMINAL = "C-terminal"
    UNSPECIFIED = "unspecified"


class FragmentType(Enum):
    """Broad fragment category, valued with its short label."""
    IMMONIUM = "IM"
    INTERNAL = "IN"
    SATELLITE = "SAT"
    SEQUENCE = "SEQ"

    def __str__(self) -> str:
        return self.value


class NeutralLoss(Enum):
    """Common neutral losses from fragment ions."""
    CH4OS = "CH4OS"
    H2O = "H2O"
    H3PO4 = "H3PO4"
    HPO3 = "HPO3"
    NH3 = "NH3"

    @property
    def mono_mass(self) -> float:
        return _NEUTRAL_LOSS_MONO_MASSES[self]

    def __str__(self) -> str:
        return self.value


_NEUTRAL_LOSS_MONO_MASSES = {
    NeutralLoss.CH4OS: 63.99828547,  # methanesulfenic acid (oxidized Met)
    NeutralLoss.H2O: WATER_MONO_MASS,
    NeutralLoss.H3PO4: 97.97689557,  # phosphoric acid (pSer/pThr)
    NeutralLoss.HPO3: 79.96633093,  # metaphosphoric acid (pTyr)
    NeutralLoss.NH3: NH3_MONO_MASS,
}


# =============================================================================
# Fragment Ion Series
# =============================================================================

class FragmentIonSeries(Enum):
    """Named peptide backbone fragment series, valued with its display label."""

    a = "a"
    a_H2O = "a-H2O"
    a_NH3 = "a-NH3"
    b = "b"
    b_H2O = "b-H2O"
    b_NH3 = "b-NH3"
    c = "c"
    c_dot = "c·"
    c_m1 = "c-1"
    c_p1 = "c+1"
    c_p2 = "c+2"
    c_H2O = "c-H2O"
    c_NH3 = "c-NH3"
    d = "d"
    v = "v"
    w = "w"
    x = "x"
    x_H2O = "x-H2O"
    x_NH3 = "x-NH3"
    y = "y"
    y_H2O = "y-H2O"
    y_NH3 = "y-NH3"
    ya = "ya"
    yb = "yb"
    z = "z"
    z_H2O = "z-H2O"
    z_NH3 = "z-NH3"
    z_dot = "z·"
    z_p1 = "z+1"
    z_p2 = "z+2"
    z_p3 = "z+3"
    immonium = "immonium"

    @classmethod
    def from_label(cls, label: str) -> "FragmentIonSeries":
        """Look up a series by its display label (``'b-H2O'``) or member name (``'b_H2O'``)."""
        try:
            return cls(label)
        except ValueError:
            pass
        try:
            return cls[label]
        except KeyError:
            raise ValueError(f"Unknown fragment ion series: {label}") from None

    def mono_mass_shift(self, atom_table: Optional[AtomTable] = None) -> float:
        """Monoisotopic mass added to the residue sum of this series.

        The d, v, w, ya, yb and immonium series have no defined shift yet and
        return 0.
        """
        if atom_table is None:
            atom_table = biomolecule_atom_table()
        h = atom_table.mono_mass(Element.H)
        n = atom_table.mono_mass(Element.N)
        o = atom_table.mono_mass(Element.O)

        W, NH3, CO, CO2, P = (
            WATER_MONO_MASS, NH3_MONO_MASS, CO_MONO_MASS, CO2_MONO_MASS, PROTON_MASS,
        )
        S = FragmentIonSeries

        # z-type backbone: -H2O, +O, -N
        z_base = -W + o - n

        shifts = {
            S.a: -(W + CO),
            S.a_H2O: -(2.0 * W + CO),
            S.a_NH3: -(CO + NH3 + W),
            S.b: -W,
            S.b_H2O: -2.0 * W,
            S.b_NH3: -(W + NH3),
            S.c: -W + NH3,
            S.c_dot: -W + NH3 + P,
            S.c_m1: -W + NH3 - P,
            S.c_p1: -W + NH3 + P,
            S.c_p2: -W + NH3 + 2.0 * P,
            S.c_H2O: -2.0 * W + NH3,
            S.c_NH3: -W,
            S.d: 0.0,
            S.v: 0.0,
            S.w: 0.0,
            S.x: -W + CO2,
            S.x_H2O: -2.0 * W + CO2,
            S.x_NH3: -W - NH3 + CO2,
            S.y: 0.0,
            S.y_H2O: -W,
            S.y_NH3: -NH3,
            S.ya: 0.0,
            S.yb: 0.0,
            S.z: z_base,
            S.z_H2O: z_base - W - h,
            S.z_NH3: z_base - NH3 - h,
            S.z_dot: z_base,
            S.z_p1: z_base + h,
            S.z_p2: z_base + 2.0 * h,
            S.z_p3: z_base + 3.0 * h,
            S.immonium: 0.0,
        }
        return shifts[self]

    @property
    def direction(self) -> FragmentIonSeriesDirection:
        return _DIRECTION_BY_SERIES[self]

    def is_n_terminal(self) -> Optional[bool]:
        """True for N-terminal, False for C-terminal, None when unspecified."""
        direction = self.direction
        if direction is FragmentIonSeriesDirection.UNSPECIFIED:
            return None
        return direction is FragmentIonSeriesDirection.N_TERMINAL

    @property
    def neutral_loss(self) -> Optional[NeutralLoss]:
        if self.value.endswith("-H2O"):
            return NeutralLoss.H2O
        if self.value.endswith("-NH3"):
            return NeutralLoss.NH3
        return None

    @property
    def fragment_type(self) -> FragmentType:
        if self is FragmentIonSeries.immonium:
            return FragmentType.IMMONIUM
        return FragmentType.SEQUENCE

    def __str__(self) -> str:
        return self.value


_N_TERMINAL_PREFIXES = ("a", "b", "c")
_C_TERMINAL_PREFIXES = ("x", "y", "z")

_DIRECTION_BY_SERIES = {}
for _series in FragmentIonSeries:
    if _series.name[0] in _N_TERMINAL_PREFIXES:
        _DIRECTION_BY_SERIES[_series] = FragmentIonSeriesDirection.N_TERMINAL
    elif _series.name[0] in _C_TERMINAL_PREFIXES:
        _DIRECTION_BY_SERIES[_series] = FragmentIonSeriesDirection.C_TERMINAL
    else:
        # d, v, w, immonium
        _DIRECTION_BY_SERIES[_series] = FragmentIonSeriesDirection.UNSPECIFIED
del _series
