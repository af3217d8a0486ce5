"""Amino acid codes, residue definitions and residue tables.

The residue table is the residue-mass capability consumed by the fragmentation
table builder: anything with an ``aa_from_code`` method resolving a one-letter
code to a mass-bearing definition (or raising ``UnknownResidueError``) can be
passed in. Two concrete tables are provided:

- ``standard_amino_acid_table()``: the 20 standard amino acids
- ``proteinogenic_amino_acid_table()``: standard + U, O and the ambiguous
  codes B, J, X, Z

Sources
-------
- https://proteomicsresource.washington.edu/tools/masses.php
- http://www.matrixscience.com/help/aa_help.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

import numpy as np

from ..constants import AVERAGE_AA_MASS
from ..errors import UnknownResidueError


# =============================================================================
# Amino Acid Codes
# =============================================================================

class AA(Enum):
    """Closed set of amino acid codes understood by mzcore."""

    # The 20 standard amino acids
    ALA = "Ala"
    ARG = "Arg"
    ASN = "Asn"
    ASP = "Asp"
    CYS = "Cys"
    GLN = "Gln"
    GLU = "Glu"
    GLY = "Gly"
    HIS = "His"
    ILE = "Ile"
    LEU = "Leu"
    LYS = "Lys"
    MET = "Met"
    PHE = "Phe"
    PRO = "Pro"
    SER = "Ser"
    THR = "Thr"
    TRP = "Trp"
    TYR = "Tyr"
    VAL = "Val"

    # Non-standard proteinogenic amino acids
    SEC = "Sec"
    PYL = "Pyl"

    # Ambiguous codes
    ASX = "Asx"
    XLE = "Xle"
    XAA = "Xaa"
    GLX = "Glx"

    @property
    def code1(self) -> str:
        return _CODE1_BY_AA[self]

    @property
    def code3(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code: str) -> "AA":
        """Resolve a one-letter code.

        Raises
        ------
        UnknownResidueError
            If the code is not a known amino acid.
        """
        aa = _AA_BY_CODE1.get(code)
        if aa is None:
            raise UnknownResidueError(code)
        return aa

    def definition(self, table: Optional["AminoAcidTable"] = None) -> "AminoAcidDefinition":
        """Residue definition from ``table`` (proteinogenic table by default)."""
        if table is None:
            table = proteinogenic_amino_acid_table()
        return table.aa_from_code(self.code1)

    def __str__(self) -> str:
        return self.code1


_CODE1_BY_AA = {
    AA.ALA: "A",
    AA.ARG: "R",
    AA.ASN: "N",
    AA.ASP: "D",
    AA.CYS: "C",
    AA.GLN: "Q",
    AA.GLU: "E",
    AA.GLY: "G",
    AA.HIS: "H",
    AA.ILE: "I",
    AA.LEU: "L",
    AA.LYS: "K",
    AA.MET: "M",
    AA.PHE: "F",
    AA.PRO: "P",
    AA.SER: "S",
    AA.THR: "T",
    AA.TRP: "W",
    AA.TYR: "Y",
    AA.VAL: "V",
    AA.SEC: "U",
    AA.PYL: "O",
    AA.ASX: "B",
    AA.XLE: "J",
    AA.XAA: "X",
    AA.GLX: "Z",
}

_AA_BY_CODE1 = {code1: aa for aa, code1 in _CODE1_BY_AA.items()}

STANDARD_AA_CODES = "ACDEFGHIKLMNPQRSTVWY"


# =============================================================================
# Residue Definitions
# =============================================================================

_ACUG = set("ACUG")


@dataclass(frozen=True)
class AminoAcidDefinition:
    """Mass-bearing description of one residue."""

    code1: str
    code3: str
    name: str
    formula: Optional[str]
    mono_mass: float
    average_mass: float
    occurrence: float = 0.0  # occurrence in human proteins
    pka1: float = 0.0  # C-term pKa
    pka2: float = 0.0  # N-term pKa
    pka3: float = 0.0  # side chain pKa
    pi: float = 0.0  # isoelectric point
    codons: Tuple[str, ...] = ()

    def __post_init__(self):
        if len(self.code1) != 1:
            raise ValueError("code1 must contain a single character")
        if len(self.code3) < 3:
            raise ValueError("code3 must contain three characters")
        if not self.name:
            raise ValueError("name is empty")
        if self.formula is not None and not self.formula:
            raise ValueError("formula is empty")
        for codon in self.codons:
            if len(codon) != 3:
                raise ValueError("a codon must contain three characters")
            if not set(codon) <= _ACUG:
                raise ValueError("a codon must only contain ACUG letters")
        if self.mono_mass <= 0.0:
            raise ValueError("mono_mass must be a strictly positive number")
        if self.average_mass <= 0.0:
            raise ValueError("average_mass must be a strictly positive number")

    @property
    def aa(self) -> AA:
        return AA.from_code(self.code1)


class ResidueMassLookup(Protocol):
    """Anything able to resolve a residue code to its definition."""

    def aa_from_code(self, code: str) -> AminoAcidDefinition:
        ...


@dataclass
class AminoAcidTable:
    """Residue definitions keyed by one-letter code."""

    amino_acids: List[AminoAcidDefinition]
    aa_by_code1: Dict[str, AminoAcidDefinition] = field(init=False, repr=False)

    def __post_init__(self):
        if not self.amino_acids:
            raise ValueError("amino_acids is empty")

        self.aa_by_code1 = {aa.code1: aa for aa in self.amino_acids}
        if len(self.aa_by_code1) != len(self.amino_acids):
            raise ValueError("provided amino acids have duplicated entries")

    def __contains__(self, code: str) -> bool:
        return code in self.aa_by_code1

    def __len__(self) -> int:
        return len(self.amino_acids)

    def aa_from_code(self, code: str) -> AminoAcidDefinition:
        aa = self.aa_by_code1.get(code)
        if aa is None:
            raise UnknownResidueError(code)
        return aa

    def iter_residues(self, sequence: Iterable[str]):
        """Yield the definition of every residue, failing on the first unknown one."""
        for code in sequence:
            yield self.aa_from_code(code)

    def residue_masses(self, sequence: str, mono: bool = True) -> np.ndarray:
        """Per-residue masses of ``sequence`` as a float64 array."""
        masses = np.empty(len(sequence), dtype=np.float64)
        for i, aa in enumerate(self.iter_residues(sequence)):
            masses[i] = aa.mono_mass if mono else aa.average_mass
        return masses

    def with_amino_acids(self, extra: Iterable[AminoAcidDefinition]) -> "AminoAcidTable":
        """New table extended with custom residues."""
        return AminoAcidTable(list(self.amino_acids) + list(extra))


# =============================================================================
# Built-in Tables
# =============================================================================

@lru_cache(maxsize=None)
def standard_amino_acid_table() -> AminoAcidTable:
    """The 20 standard amino acids (read-only, shared)."""
    return AminoAcidTable([
        AminoAcidDefinition(
            "A", "Ala", "Alanine", "C(3) H(5) O N", 71.03711381, 71.0779,
            0.078, 2.35, 9.87, 0.0, 6.01, ("GCA", "GCC", "GCG", "GCU"),
        ),
        AminoAcidDefinition(
            "R", "Arg", "Arginine", "C(6) H(12) O N(4)", 156.1011111, 156.18568,
            0.051, 1.82, 8.99, 12.48, 10.76, ("AGA", "AGG", "CGA", "CGC", "CGG", "CGU"),
        ),
        AminoAcidDefinition(
            "N", "Asn", "Asparagine", "C(4) H(6) O(2) N(2)", 114.0429275, 114.10264,
            0.043, 2.14, 8.72, 0.0, 5.41, ("AAC", "AAU"),
        ),
        AminoAcidDefinition(
            "D", "Asp", "Aspartic acid", "C(4) H(5) O(3) N", 115.0269431, 115.0874,
            0.053, 1.99, 9.9, 3.9, 2.85, ("GAC", "GAU"),
        ),
        AminoAcidDefinition(
            "C", "Cys", "Cysteine", "C(3) H(5) O N S", 103.0091845, 103.1429,
            0.019, 1.92, 10.7, 8.18, 5.05, ("UGC", "UGU"),
        ),
        AminoAcidDefinition(
            "E", "Glu", "Glutamic acid", "C(5) H(7) O(3) N", 129.0425931, 129.11398,
            0.063, 2.1, 9.47, 4.07, 3.15, ("GAA", "GAG"),
        ),
        AminoAcidDefinition(
            "Q", "Gln", "Glutamine", "C(5) H(8) O(2) N(2)", 128.0585775, 128.12922,
            0.042, 2.17, 9.13, 0.0, 5.65, ("CAA", "CAG"),
        ),
        AminoAcidDefinition(
            "G", "Gly", "Glycine", "C(2) H(3) O N", 57.02146374, 57.05132,
            0.072, 2.35, 9.78, 0.0, 6.06, ("GGA", "GGC", "GGG", "GGU"),
        ),
        AminoAcidDefinition(
            "H", "His", "Histidine", "C(6) H(7) O N(3)", 137.0589119, 137.13928,
            0.023, 1.8, 9.33, 6.04, 7.6, ("CAC", "CAU"),
        ),
        AminoAcidDefinition(
            "I", "Ile", "Isoleucine", "C(6) H(11) O N", 113.084064, 113.15764,
            0.053, 2.32, 9.76, 0.0, 6.05, ("AUA", "AUC", "AUU"),
        ),
        AminoAcidDefinition(
            "L", "Leu", "Leucine", "C(6) H(11) O N", 113.084064, 113.15764,
            0.091, 2.33, 9.74, 0.0, 6.01, ("CUA", "CUC", "CUG", "CUU", "UUA", "UUG"),
        ),
        AminoAcidDefinition(
            "K", "Lys", "Lysine", "C(6) H(12) O N(2)", 128.0949631, 128.17228,
            0.059, 2.16, 9.06, 10.54, 9.6, ("AAA", "AAG"),
        ),
        AminoAcidDefinition(
            "M", "Met", "Methionine", "C(5) H(9) O N S", 131.0404846, 131.19606,
            0.023, 2.13, 9.28, 0.0, 5.74, ("AUG",),
        ),
        AminoAcidDefinition(
            "F", "Phe", "Phenylalanine", "C(9) H(9) O N", 147.0684139, 147.17386,
            0.039, 2.2, 9.31, 0.0, 5.49, ("UUC", "UUU"),
        ),
        AminoAcidDefinition(
            "P", "Pro", "Proline", "C(5) H(7) O N", 97.05276388, 97.11518,
            0.052, 1.95, 10.64, 0.0, 6.3, ("CCA", "CCC", "CCG", "CCU"),
        ),
        AminoAcidDefinition(
            "S", "Ser", "Serine", "C(3) H(5) O(2) N", 87.03202844, 87.0773,
            0.068, 2.19, 9.21, 5.68, 5.68, ("AGC", "AGU", "UCA", "UCC", "UCG", "UCU"),
        ),
        AminoAcidDefinition(
            "T", "Thr", "Threonine", "C(4) H(7) O(2) N", 101.0476785, 101.10388,
            0.059, 2.09, 9.1, 5.53, 5.6, ("ACA", "ACC", "ACG", "ACU"),
        ),
        AminoAcidDefinition(
            "W", "Trp", "Tryptophan", "C(11) H(10) O N(2)", 186.079313, 186.2099,
            0.014, 2.46, 9.41, 5.885, 5.89, ("UGG",),
        ),
        AminoAcidDefinition(
            "Y", "Tyr", "Tyrosine", "C(9) H(9) O(2) N", 163.0633286, 163.17326,
            0.032, 2.2, 9.21, 10.46, 5.64, ("UAC", "UAU"),
        ),
        AminoAcidDefinition(
            "V", "Val", "Valine", "C(5) H(9) O N", 99.06841395, 99.13106,
            0.066, 2.39, 9.74, 0.0, 6.0, ("GUA", "GUC", "GUG", "GUU"),
        ),
    ])


@lru_cache(maxsize=None)
def proteinogenic_amino_acid_table() -> AminoAcidTable:
    """Standard amino acids plus U, O and the ambiguous codes B, J, X, Z.

    Source: http://en.wikipedia.org/wiki/Proteinogenic_amino_acid
    """
    return standard_amino_acid_table().with_amino_acids([
        AminoAcidDefinition("B", "Asx", "Asn or Asp", None, 114.5349353, 114.59502),
        AminoAcidDefinition(
            "J", "Xle", "Ile or Leu", "C(6) H(11) O N", 113.084064, 113.15764,
        ),
        AminoAcidDefinition(
            "O", "Pyl", "Pyrrolysine", "C(12) H(21) O(3) N(3)", 237.1477266, 237.298143,
            codons=("UAG",),
        ),
        AminoAcidDefinition(
            "U", "Sec", "Selenocysteine", "C(3) H(5) N O Se", 150.9536353, 150.0379,
            pka3=5.73, pi=5.47, codons=("UGA",),
        ),
        AminoAcidDefinition("X", "Xaa", "Unknown", None, AVERAGE_AA_MASS, AVERAGE_AA_MASS),
        AminoAcidDefinition("Z", "Glx", "Glu or Gln", None, 128.5505853, 128.6216),
    ])
