"""Elemental composition algebra.

An elemental composition is a list of (element, isotope index, count) terms
kept strictly sorted by (element, isotope index), with at most one term per
key and no zero counts. Every operation returns a composition that satisfies
this invariant again.

Combining two compositions is a single merge pass over both sorted term lists
(the merge step of merge sort), so ``a + b`` costs O(n + m) rather than the
O((n + m) log(n + m)) of concatenating and re-sorting. Compositions are
combined many times while parsing formulas, which is where this matters.

Examples
--------
>>> water = molecular_formula([(Element.H, 0, 2), (Element.O, 0, 1)])
>>> ammonia = ElementalComposition.from_monoisotope_tuples([(Element.N, 1), (Element.H, 3)])
>>> (water + ammonia).element_counts[0]
ElementCount(element=<Element.H: 1>, isotope_index=0, count=5.0)
>>> (water * 2).mono_mass()
36.0211...
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from numbers import Integral
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..constants import ELECTRON_MASS
from ..errors import MalformedFormulaError, UnknownElementError
from .atom import AtomTable, biomolecule_atom_table
from .element import Element

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementCount:
    """One composition term.

    ``isotope_index`` is 0 for the natural abundance distribution and > 0 for
    a specific isotope. ``count`` is a float so that averagine-like fractional
    compositions can be expressed.
    """

    element: Element
    isotope_index: int = 0
    count: float = 1.0

    @property
    def key(self) -> Tuple[int, int]:
        return (self.element, self.isotope_index)

    def scaled(self, factor: float) -> "ElementCount":
        return ElementCount(self.element, self.isotope_index, self.count * factor)


def _merge_element_counts(
    lhs: Sequence[ElementCount],
    rhs: Sequence[ElementCount],
    sign: float,
) -> List[ElementCount]:
    """Merge two sorted term lists, adding ``sign * rhs`` to ``lhs``.

    Both inputs must already be sorted and deduplicated. Terms cancelling to
    zero are dropped.
    """
    merged = []
    i = 0
    j = 0
    n_lhs = len(lhs)
    n_rhs = len(rhs)

    while i < n_lhs and j < n_rhs:
        left = lhs[i]
        right = rhs[j]
        if left.key < right.key:
            merged.append(left)
            i += 1
        elif left.key > right.key:
            merged.append(right.scaled(sign))
            j += 1
        else:
            count = left.count + sign * right.count
            if count != 0.0:
                merged.append(ElementCount(left.element, left.isotope_index, count))
            i += 1
            j += 1

    merged.extend(lhs[i:])
    merged.extend(right.scaled(sign) for right in rhs[j:])

    return merged


class ElementalComposition:
    """A molecular formula plus an optional mass of unspecified origin.

    Parameters
    ----------
    element_counts : iterable of ElementCount
        Terms in any order; duplicated keys are summed, zero counts dropped.
    additional_mass : float
        Monoisotopic mass offset that is not explained by any element
        (e.g. an unexplained delta mass).
    """

    __slots__ = ("element_counts", "additional_mass")

    def __init__(
        self,
        element_counts: Iterable[ElementCount] = (),
        additional_mass: float = 0.0,
    ):
        self.element_counts: List[ElementCount] = list(element_counts)
        self.additional_mass = float(additional_mass)
        self.simplify()

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def _from_sorted(cls, element_counts: List[ElementCount], additional_mass: float):
        # Caller guarantees the invariant, skip the normalization pass
        composition = cls.__new__(cls)
        composition.element_counts = element_counts
        composition.additional_mass = additional_mass
        return composition

    @classmethod
    def from_tuples(
        cls, element_counts: Iterable[Tuple[Element, int, float]]
    ) -> "ElementalComposition":
        """Build from (element, isotope index, count) triples."""
        return cls(
            ElementCount(element, isotope_index, float(count))
            for element, isotope_index, count in element_counts
        )

    @classmethod
    def from_monoisotope_tuples(
        cls, element_counts: Iterable[Tuple[Element, float]]
    ) -> "ElementalComposition":
        """Build from (element, count) pairs at natural abundance."""
        return cls(
            ElementCount(element, 0, float(count))
            for element, count in element_counts
        )

    @classmethod
    def with_additional_mass(cls, additional_mass: float) -> "ElementalComposition":
        """Empty formula carrying only a mass of unspecified origin."""
        return cls._from_sorted([], float(additional_mass))

    # -------------------------------------------------------------------------
    # Normalization
    # -------------------------------------------------------------------------

    def simplify(self) -> "ElementalComposition":
        """Sort terms, sum duplicated keys and drop zero counts (in place).

        Idempotent. Returns ``self`` for chaining.
        """
        self.element_counts.sort(key=lambda element_count: element_count.key)

        simplified = []
        for element_count in self.element_counts:
            if simplified and simplified[-1].key == element_count.key:
                previous = simplified[-1]
                simplified[-1] = ElementCount(
                    previous.element,
                    previous.isotope_index,
                    previous.count + element_count.count,
                )
            else:
                simplified.append(element_count)

        self.element_counts = [
            element_count for element_count in simplified if element_count.count != 0.0
        ]
        return self

    def add(self, element_count: ElementCount) -> None:
        """Insert or accumulate a single term, keeping the terms sorted.

        Linear scan from the front; no re-sort.
        """
        key = element_count.key
        for index, current in enumerate(self.element_counts):
            if key > current.key:
                continue
            if key == current.key:
                count = current.count + element_count.count
                if count == 0.0:
                    del self.element_counts[index]
                else:
                    self.element_counts[index] = ElementCount(
                        current.element, current.isotope_index, count
                    )
            elif element_count.count != 0.0:
                self.element_counts.insert(index, element_count)
            return

        if element_count.count != 0.0:
            self.element_counts.append(element_count)

    def with_global_isotope_modifications(
        self, substitutions: Iterable[Tuple[Element, int]]
    ) -> "ElementalComposition":
        """Copy with every term of the given elements moved to a new isotope.

        Terms that end up on the same key are merged.
        """
        isotope_by_element = dict(substitutions)
        return ElementalComposition(
            (
                ElementCount(
                    element_count.element,
                    isotope_by_element.get(element_count.element, element_count.isotope_index),
                    element_count.count,
                )
                for element_count in self.element_counts
            ),
            self.additional_mass,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def count_of(self, element: Element, isotope_index: int = 0) -> float:
        for element_count in self.element_counts:
            if element_count.element == element and element_count.isotope_index == isotope_index:
                return element_count.count
        return 0.0

    def charge(self) -> int:
        """Charge of the species: the negated number of electrons."""
        return -int(self.count_of(Element.Electron))

    def is_empty(self) -> bool:
        return not self.element_counts and self.additional_mass == 0.0

    def mono_mass(self, atom_table: Optional[AtomTable] = None) -> float:
        """Monoisotopic mass, including ``additional_mass`` and electrons.

        Raises
        ------
        UnknownElementError
            If an element or isotope index is missing from the atom table.
        """
        if atom_table is None:
            atom_table = biomolecule_atom_table()

        atomic_composition = atom_table.elemental_to_atomic_composition(self)
        return atomic_composition.calc_mass() + self.count_of(Element.Electron) * ELECTRON_MASS

    def to_formula_string(self) -> str:
        """Render in Unimod brick notation, e.g. ``'H(2) 13C(6) O'``.

        Isotopes missing from the biomolecule atom table are written with an
        ``[iso=N]`` suffix holding the isotope index.
        """
        atom_table = biomolecule_atom_table()
        parts = []
        for element_count in self.element_counts:
            element = element_count.element
            isotope_index = element_count.isotope_index
            symbol = element.symbol
            if isotope_index > 0:
                if element in atom_table and isotope_index < len(atom_table.atom(element).isotopes):
                    mass_number = atom_table.atom(element).isotopes[isotope_index].mass_number
                    symbol = f"{mass_number}{symbol}"
                else:
                    symbol = f"{symbol}[iso={isotope_index}]"

            count = element_count.count
            count_str = str(int(count)) if float(count).is_integer() else str(count)
            parts.append(symbol if count == 1.0 else f"{symbol}({count_str})")
        return " ".join(parts)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __add__(self, other: "ElementalComposition") -> "ElementalComposition":
        if not isinstance(other, ElementalComposition):
            return NotImplemented
        return ElementalComposition._from_sorted(
            _merge_element_counts(self.element_counts, other.element_counts, 1.0),
            self.additional_mass + other.additional_mass,
        )

    def __radd__(self, other):
        # Lets sum() start from its default 0
        if other == 0:
            return self.copy()
        return NotImplemented

    def __iadd__(self, other: "ElementalComposition") -> "ElementalComposition":
        if not isinstance(other, ElementalComposition):
            return NotImplemented
        self.element_counts = _merge_element_counts(
            self.element_counts, other.element_counts, 1.0
        )
        self.additional_mass += other.additional_mass
        return self

    def __sub__(self, other: "ElementalComposition") -> "ElementalComposition":
        if not isinstance(other, ElementalComposition):
            return NotImplemented
        return ElementalComposition._from_sorted(
            _merge_element_counts(self.element_counts, other.element_counts, -1.0),
            self.additional_mass - other.additional_mass,
        )

    def __mul__(self, multiplier: int) -> "ElementalComposition":
        if not isinstance(multiplier, Integral):
            return NotImplemented
        if multiplier == 0:
            return ElementalComposition._from_sorted([], 0.0)
        return ElementalComposition._from_sorted(
            [element_count.scaled(multiplier) for element_count in self.element_counts],
            self.additional_mass * int(multiplier),
        )

    __rmul__ = __mul__

    def __neg__(self) -> "ElementalComposition":
        return self * -1

    def __eq__(self, other) -> bool:
        # Counts compare exactly, fractional counts may differ after round trips
        if not isinstance(other, ElementalComposition):
            return NotImplemented
        return (
            self.element_counts == other.element_counts
            and self.additional_mass == other.additional_mass
        )

    __hash__ = None

    def copy(self) -> "ElementalComposition":
        return ElementalComposition._from_sorted(list(self.element_counts), self.additional_mass)

    def __len__(self) -> int:
        return len(self.element_counts)

    def __iter__(self):
        return iter(self.element_counts)

    def __repr__(self) -> str:
        return (
            f"ElementalComposition('{self.to_formula_string()}', "
            f"additional_mass={self.additional_mass})"
        )


# =============================================================================
# Formula Literals
# =============================================================================

def molecular_formula(
    terms: Iterable[Tuple[Union[Element, str], int, float]],
) -> ElementalComposition:
    """Build a composition from ordered (element, isotope index, count) triples.

    Elements may be given as ``Element`` members or chemical symbols.

    Examples
    --------
    >>> molecular_formula([("C", 0, 12), ("C", 1, 1), ("H", 0, 24)])
    ElementalComposition('H(24) C(12) 13C', additional_mass=0.0)
    """
    return ElementalComposition.from_tuples(
        (
            Element.from_symbol(element) if isinstance(element, str) else element,
            isotope_index,
            count,
        )
        for element, isotope_index, count in terms
    )


# =============================================================================
# Unimod Composition Parsing
# =============================================================================

_UNIMOD_TOKEN = re.compile(r"^(\d*)([A-Za-z]+)(?:\((-?\d+)\))?$")

# Named Unimod bricks that are not single elements
_UNIMOD_BRICKS = {
    "ac": ((Element.C, 2), (Element.H, 2), (Element.O, 1)),
    "me": ((Element.C, 1), (Element.H, 2)),
    "kdn": ((Element.C, 9), (Element.H, 14), (Element.O, 8)),
    "kdo": ((Element.C, 8), (Element.H, 12), (Element.O, 7)),
    "sulf": ((Element.S, 1),),
    # Monosaccharide residues
    "hex": ((Element.C, 6), (Element.H, 10), (Element.O, 5)),
    "hexnac": ((Element.C, 8), (Element.H, 13), (Element.N, 1), (Element.O, 5)),
    "dhex": ((Element.C, 6), (Element.H, 10), (Element.O, 4)),
    "hexa": ((Element.C, 6), (Element.H, 8), (Element.O, 6)),
    "pent": ((Element.C, 5), (Element.H, 8), (Element.O, 4)),
    "neuac": ((Element.C, 11), (Element.H, 17), (Element.N, 1), (Element.O, 8)),
    "neugc": ((Element.C, 11), (Element.H, 17), (Element.N, 1), (Element.O, 9)),
}


def _parse_unimod_brick(name: str, mass_number: str) -> ElementalComposition:
    brick = _UNIMOD_BRICKS.get(name.lower())
    if brick is not None and not mass_number:
        return ElementalComposition.from_monoisotope_tuples(brick)

    try:
        element = Element.from_symbol(name)
    except UnknownElementError as e:
        raise MalformedFormulaError(f"Could not parse unimod brick: `{name}`") from e

    isotope_index = 0
    if mass_number:
        isotope_index = biomolecule_atom_table().atom(element).isotope_index(int(mass_number))

    return ElementalComposition([ElementCount(element, isotope_index, 1.0)])


def parse_unimod_composition(composition: str) -> ElementalComposition:
    """Parse a Unimod composition string.

    Tokens are separated by whitespace. Each token is an element symbol or a
    named brick (Ac, Me, Kdn, Kdo, Sulf, Hex, HexNAc, ...), optionally
    prefixed by an isotope mass number and followed by a signed count in
    parentheses.

    Examples
    --------
    >>> parse_unimod_composition("H(-1) N(-1) O").to_formula_string()
    'H(-1) N(-1) O'
    >>> parse_unimod_composition("13C(6) 15N(2)").mono_mass()
    108.0203...

    Raises
    ------
    MalformedFormulaError
        On an unparsable token or unknown brick.
    """
    result = ElementalComposition()
    for token in composition.split():
        match = _UNIMOD_TOKEN.match(token)
        if match is None:
            raise MalformedFormulaError(f"Weird formula composition: {composition}")

        mass_number, name, count = match.groups()
        brick = _parse_unimod_brick(name, mass_number)
        multiplier = int(count) if count is not None else 1
        result += brick * multiplier

    logger.debug(f"Parsed unimod composition '{composition}' -> {result.to_formula_string()}")
    return result
