"""Exceptions raised by mzcore.

Each error derives from the built-in exception that callers would naturally
catch (``KeyError`` for failed lookups, ``ValueError`` for bad input), so
``except ValueError`` keeps working around mzcore calls.
"""


class MzCoreError(Exception):
    """Base class for all mzcore errors."""


# =============================================================================
# Lookup Failures
# =============================================================================

class UnknownResidueError(MzCoreError, KeyError):
    """Residue code is not defined in the amino acid table."""

    def __init__(self, code):
        self.code = code
        super().__init__(f"can't find amino acid '{code}' in the provided table")

    def __str__(self):
        return self.args[0]


class UnknownElementError(MzCoreError, KeyError):
    """Element symbol, atom or isotope index is not defined."""

    def __str__(self):
        return self.args[0]


# =============================================================================
# Invalid Configuration
# =============================================================================

class InvalidModificationPositionError(MzCoreError, ValueError):
    """Modification position falls outside [1, sequence length]."""

    def __init__(self, position: int, sequence: str, mass: float):
        self.position = position
        self.sequence = sequence
        self.mass = mass
        super().__init__(
            f"invalid amino acid position ({position}) for peptide {sequence} "
            f"of length {len(sequence)} (mod mass = {mass})"
        )


class UnsupportedIonSeriesError(MzCoreError, ValueError):
    """Ion series has no N-/C-terminal direction and cannot be tabulated."""

    def __init__(self, ion_series):
        self.ion_series = ion_series
        super().__init__(f"unsupported ion type: {ion_series}")


# =============================================================================
# Malformed Textual Input
# =============================================================================

class MalformedModificationError(MzCoreError, ValueError):
    """Modification token does not parse as ``<mass>@<position>``."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(
            f"malformed modification '{token}', expected '<mass>@<position>'"
        )


class MalformedFormulaError(MzCoreError, ValueError):
    """Elemental composition string cannot be parsed."""
