"""Atoms, isotopes and the atom table used for element mass lookups.

The atom table is the element-mass capability consumed by the rest of mzcore:
ion series mass shifts read the monoisotopic masses of H, N and O from it, and
elemental compositions are converted to masses through it.

Isotope lists are ordered with the monoisotopic (lightest, most abundant for
biomolecule elements) isotope first. An isotope index of 0 therefore selects
the monoisotopic mass; index i > 0 selects ``isotopes[i]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Tuple

from ..errors import UnknownElementError
from .element import Element


@dataclass(frozen=True)
class Isotope:
    """A single isotope: mass number, exact mass (Da) and natural abundance."""

    mass_number: int
    mass: float
    abundance: float

    def __post_init__(self):
        if self.mass_number <= 0:
            raise ValueError("mass_number must be a strictly positive number")
        if self.mass <= 0.0:
            raise ValueError("mass must be a strictly positive number")
        if self.abundance < 0.0:
            raise ValueError("abundance must be a positive number")

    def neutron_number(self, proton_number: int) -> int:
        return self.mass_number - proton_number


@dataclass(frozen=True)
class Atom:
    """An element together with its isotopes (monoisotope first)."""

    element: Element
    name: str
    isotopes: Tuple[Isotope, ...]

    def __post_init__(self):
        if not self.name:
            raise ValueError("name is empty")
        if not self.isotopes:
            raise ValueError("isotopes is empty")

    @property
    def symbol(self) -> str:
        return self.element.symbol

    @property
    def atomic_number(self) -> int:
        return self.element.atomic_number

    def neutron_number(self, isotope_index: int) -> int:
        return self.isotopes[isotope_index].neutron_number(self.atomic_number)

    @property
    def mono_mass(self) -> float:
        return self.isotopes[0].mass

    @property
    def average_mass(self) -> float:
        """Abundance-weighted mean mass over the listed isotopes."""
        weighted_mass_sum = 0.0
        weight_sum = 0.0
        for isotope in self.isotopes:
            weighted_mass_sum += isotope.mass * isotope.abundance
            weight_sum += isotope.abundance
        return weighted_mass_sum / weight_sum

    @property
    def most_abundant_mass(self) -> float:
        return max(self.isotopes, key=lambda isotope: isotope.abundance).mass

    def isotope_mass(self, isotope_index: int) -> float:
        if isotope_index < 0 or isotope_index >= len(self.isotopes):
            raise UnknownElementError(
                f"wrong isotope index {isotope_index} for element {self.symbol}"
            )
        return self.isotopes[isotope_index].mass

    def isotope_index(self, mass_number: int) -> int:
        """Index of the isotope with the given mass number."""
        for idx, isotope in enumerate(self.isotopes):
            if isotope.mass_number == mass_number:
                return idx
        raise UnknownElementError(
            f"unknown isotope {mass_number}{self.symbol}"
        )


@dataclass(frozen=True)
class AtomicComposition:
    """Composition resolved to concrete isotopes: (isotope mass, count) pairs."""

    atoms: Tuple[Tuple[Element, Isotope, float], ...]
    additional_mass: float = 0.0

    def calc_mass(self) -> float:
        mass = self.additional_mass
        for _, isotope, count in self.atoms:
            mass += isotope.mass * count
        return mass


@dataclass
class AtomTable:
    """Lookup table of atoms keyed by element."""

    atoms: List[Atom]
    atom_by_element: Dict[Element, Atom] = field(init=False, repr=False)

    def __post_init__(self):
        if not self.atoms:
            raise ValueError("atoms is empty")

        self.atom_by_element = {atom.element: atom for atom in self.atoms}
        if len(self.atom_by_element) != len(self.atoms):
            raise ValueError("provided atoms have duplicated entries")

    def __contains__(self, element: Element) -> bool:
        return element in self.atom_by_element

    def atom(self, element: Element) -> Atom:
        atom = self.atom_by_element.get(element)
        if atom is None:
            raise UnknownElementError(f"unknown element {element}")
        return atom

    def mono_mass(self, element: Element) -> float:
        return self.atom(element).mono_mass

    def elemental_to_atomic_composition(self, composition) -> AtomicComposition:
        """Resolve every (element, isotope index) term of an elemental composition.

        Electron terms are skipped: their mass is not an isotope mass and is
        handled by the caller.
        """
        atoms = []
        for element_count in composition.element_counts:
            if element_count.element is Element.Electron:
                continue
            atom = self.atom(element_count.element)
            if element_count.isotope_index >= len(atom.isotopes):
                raise UnknownElementError(
                    f"wrong isotope index {element_count.isotope_index}"
                )
            atoms.append(
                (atom.element, atom.isotopes[element_count.isotope_index], element_count.count)
            )

        return AtomicComposition(
            atoms=tuple(atoms),
            additional_mass=composition.additional_mass,
        )


# =============================================================================
# Biomolecule Atom Table
# =============================================================================

@lru_cache(maxsize=None)
def biomolecule_atom_table() -> AtomTable:
    """Atoms found in peptides and their common modifications.

    Built once and shared; treat the returned table as read-only.
    """
    return AtomTable([
        Atom(Element.H, "Hydrogen", (
            Isotope(1, 1.00782503207, 0.999885),
            Isotope(2, 2.0141017778, 0.000115),
        )),
        Atom(Element.C, "Carbon", (
            Isotope(12, 12.0000000, 0.9893),
            Isotope(13, 13.0033548378, 0.0107),
        )),
        Atom(Element.N, "Nitrogen", (
            Isotope(14, 14.0030740048, 0.99636),
            Isotope(15, 15.0001088982, 0.00364),
        )),
        Atom(Element.O, "Oxygen", (
            Isotope(16, 15.99491461956, 0.99757),
            Isotope(17, 16.99913170, 0.00038),
            Isotope(18, 17.9991610, 0.00205),
        )),
        Atom(Element.P, "Phosphorus", (
            Isotope(31, 30.97376163, 1.0000),
        )),
        Atom(Element.S, "Sulfur", (
            Isotope(32, 31.97207100, 0.9499),
            Isotope(33, 32.97145876, 0.0075),
            Isotope(34, 33.96786690, 0.0425),
            Isotope(36, 35.96708076, 0.0001),
        )),
        # Se-80 is the most abundant, but 74 is kept first for mass-number order
        Atom(Element.Se, "Selenium", (
            Isotope(74, 73.922475934, 0.0089),
            Isotope(76, 75.919213704, 0.0937),
            Isotope(77, 76.919914154, 0.0763),
            Isotope(78, 77.91730928, 0.2377),
            Isotope(80, 79.9165218, 0.4961),
            Isotope(82, 81.9166995, 0.0873),
        )),
    ])
