"""Peptides, simple modifications and PTM definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .amino_acid import ResidueMassLookup
from .mass_calc import MassType, calc_aa_seq_mass


# =============================================================================
# Modification Identifiers
# =============================================================================

class PtmIdAllocator:
    """Hands out identifiers for ad-hoc modifications.

    Identifiers count down from ``start`` (0, -1, -2, ...) so they never
    collide with the positive identifiers of predefined PTMs. Callers own the
    allocator and pass it where new modification records are created.
    """

    def __init__(self, start: int = 0):
        self._next_id = start

    def next_id(self) -> int:
        new_id = self._next_id
        self._next_id -= 1
        return new_id

    def __repr__(self) -> str:
        return f"PtmIdAllocator(next_id={self._next_id})"


@dataclass(frozen=True)
class SimpleModification:
    """Mass increment at an optional residue position.

    ``position`` is 1-based; 0 stands for the N-terminus and -1 for the
    C-terminus. ``None`` leaves the modification unlocalized.
    """

    id: int
    mono_mass: float
    position: Optional[int] = None

    @property
    def average_mass(self) -> Optional[float]:
        return None

    @classmethod
    def from_tuple(
        cls,
        mass_and_position: Tuple[float, Optional[int]],
        id_allocator: PtmIdAllocator,
    ) -> "SimpleModification":
        mono_mass, position = mass_and_position
        return cls(id_allocator.next_id(), mono_mass, position)


# =============================================================================
# Peptides
# =============================================================================

@dataclass(frozen=True)
class LinearPeptide:
    """Unbranched peptide with its (modified) neutral masses."""

    sequence: str
    mono_mass: float
    average_mass: Optional[float] = None
    mods: Tuple[SimpleModification, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.sequence:
            raise ValueError("sequence is empty")
        if self.mono_mass <= 0.0:
            raise ValueError("mono_mass must be a strictly positive number")
        if self.average_mass is not None and self.average_mass <= 0.0:
            raise ValueError("average_mass must be a strictly positive number")
        # Accept any sequence of mods but store an immutable tuple
        object.__setattr__(self, "mods", tuple(self.mods))

    @classmethod
    def from_sequence(
        cls,
        sequence: str,
        aa_table: Optional[ResidueMassLookup] = None,
        mods: Sequence[SimpleModification] = (),
    ) -> "LinearPeptide":
        """Build a peptide, computing masses from the residue table.

        Modification masses are added to the monoisotopic mass only, since
        simple modifications carry no average mass.
        """
        mono_mass = calc_aa_seq_mass(sequence, aa_table, MassType.MONOISOTOPIC)
        mono_mass += sum(mod.mono_mass for mod in mods)
        average_mass = None
        if not mods:
            average_mass = calc_aa_seq_mass(sequence, aa_table, MassType.AVERAGE)
        return cls(sequence, mono_mass, average_mass, tuple(mods))

    def __len__(self) -> int:
        return len(self.sequence)

    def localized_mods(self) -> List[Tuple[int, float]]:
        """(position, mass) pairs of all localized modifications."""
        return [(mod.position, mod.mono_mass) for mod in self.mods if mod.position is not None]


# =============================================================================
# PTM Definitions
# =============================================================================

class PtmLocation(Enum):
    """Where a PTM may occur, valued with the Unimod ``position_t`` strings."""

    PROTEIN_N_TERM = "Protein N-term"
    PROTEIN_C_TERM = "Protein C-term"
    ANY_N_TERM = "Any N-term"
    ANY_C_TERM = "Any C-term"
    ANYWHERE = "Anywhere"

    @classmethod
    def from_str(cls, value: str) -> "PtmLocation":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown PTM location: {value}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AminoAcidPtm:
    """A named PTM constrained to a residue and a location."""

    id: int
    name: str
    formula: str
    mono_mass: float
    average_mass: float
    position_constraint: PtmLocation
    residue_constraint: str

    def __post_init__(self):
        if not self.name:
            raise ValueError("name is empty")
        if not self.formula:
            raise ValueError("formula is empty")
        if self.mono_mass <= 0.0:
            raise ValueError("mono_mass must be a strictly positive number")
        if self.average_mass <= 0.0:
            raise ValueError("average_mass must be a strictly positive number")
        if len(self.residue_constraint) != 1:
            raise ValueError("residue_constraint must be a single residue code")
