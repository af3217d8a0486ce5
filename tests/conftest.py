"""Pytest configuration for mzcore tests.

This module provides common fixtures and configuration for all tests.
mzcore is pure computation without I/O, so fixtures are plain values.
"""

import numpy as np
import pytest


@pytest.fixture
def simple_peptide():
    """Simple peptide for basic tests."""
    return "PEPTIDE"


@pytest.fixture
def tryptic_peptides():
    """Collection of typical tryptic peptides."""
    return [
        "PEPTIDE",
        "ACDEK",
        "TESTPEPTIDER",
        "YGGFMTSEK",
        "LGEHNIDVLEGNEQFINAAK",
    ]


@pytest.fixture
def known_peptide_masses():
    """Known neutral monoisotopic peptide masses (residues + H2O).

    Used to verify mass calculation accuracy.
    """
    return {
        "PEPTIDE": 799.360023,
        "INTERSTELLAR": 1401.75759215,
    }


@pytest.fixture
def aa_table():
    """Standard 20 amino acid table."""
    from mzcore.chemistry.amino_acid import standard_amino_acid_table
    return standard_amino_acid_table()


@pytest.fixture
def proton_mass():
    """Proton mass constant."""
    from mzcore.constants import PROTON_MASS
    return PROTON_MASS


@pytest.fixture
def h2o_mass():
    """Water mass constant."""
    from mzcore.constants import WATER_MONO_MASS
    return WATER_MONO_MASS


# Random seed for reproducibility
@pytest.fixture(scope="session", autouse=True)
def set_random_seed():
    """Set random seed for reproducible tests."""
    np.random.seed(42)
