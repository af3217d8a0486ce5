"""Chemistry building blocks for mass computations.

Core components:
1. Elemental composition algebra (sorted, merge-based arithmetic)
2. Element / atom / isotope tables
3. Amino acid residue tables (residue mass lookup)
4. Peptides, simple modifications and PTM definitions
"""

from .element import Element
from .atom import (
    Atom,
    AtomicComposition,
    AtomTable,
    Isotope,
    biomolecule_atom_table,
)
from .composition import (
    ElementCount,
    ElementalComposition,
    molecular_formula,
    parse_unimod_composition,
)
from .amino_acid import (
    AA,
    AminoAcidDefinition,
    AminoAcidTable,
    ResidueMassLookup,
    proteinogenic_amino_acid_table,
    standard_amino_acid_table,
)
from .mass_calc import MassType, calc_aa_seq_mass
from .peptide import (
    AminoAcidPtm,
    LinearPeptide,
    PtmIdAllocator,
    PtmLocation,
    SimpleModification,
)

__all__ = [
    # Elements and atoms
    'Element',
    'Atom',
    'AtomicComposition',
    'AtomTable',
    'Isotope',
    'biomolecule_atom_table',
    # Compositions
    'ElementCount',
    'ElementalComposition',
    'molecular_formula',
    'parse_unimod_composition',
    # Amino acids
    'AA',
    'AminoAcidDefinition',
    'AminoAcidTable',
    'ResidueMassLookup',
    'proteinogenic_amino_acid_table',
    'standard_amino_acid_table',
    'MassType',
    'calc_aa_seq_mass',
    # Peptides and PTMs
    'AminoAcidPtm',
    'LinearPeptide',
    'PtmIdAllocator',
    'PtmLocation',
    'SimpleModification',
]
