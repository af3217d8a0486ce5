"""Physical constants and default tolerances for mass spectrometry calculations.

This module provides the physical constants used throughout mzcore. Values are
sourced from NIST CODATA and established proteomics standards.

Key Features
------------
- Correct PROTON_MASS (1.007276466812 Da, not hydrogen atom mass!)
- Neutral fragment masses (H2O, NH3, CO) used by ion series mass shifts
- Default tolerance settings for MS1/MS2

Sources
-------
- NIST physical constants: https://physics.nist.gov/cgi-bin/cuu/Value
- Unimod masses: https://www.unimod.org/masses.html
"""

# =============================================================================
# Fundamental Physical Constants (NIST 2010 CODATA)
# =============================================================================

# Proton mass (NOT hydrogen atom mass!)
# CRITICAL: Use 1.007276..., not 1.007825 (which is H atom mass)
PROTON_MASS = 1.007276466812  # Da

ELECTRON_MASS = 0.00054857990946  # Da

# =============================================================================
# Neutral Fragment Masses
# =============================================================================

# Water (H2O), monoisotopic and average
WATER_MONO_MASS = 18.010565  # Da
WATER_AVERAGE_MASS = 18.01525697318  # Da

# Ammonia (NH3)
NH3_MONO_MASS = 17.02654910101  # Da

# Carbon monoxide (CO)
CO_MONO_MASS = 27.99491461956  # Da

# Carbon dioxide (CO2): 12.0 + 2 * 15.99491461956
CO2_MONO_MASS = 43.98982923912  # Da

# =============================================================================
# Peptide Averages
# =============================================================================

# Average residue mass, used for the unknown amino acid 'X'
AVERAGE_AA_MASS = 111.1254  # Da

# Average spacing of peptide isotope peaks
AVERAGE_PEPTIDE_ISOTOPE_MASS_DIFF = 1.0027  # Da

# =============================================================================
# Default Tolerance Settings
# =============================================================================

# Default MS1 (precursor) mass tolerance in PPM
DEFAULT_MS1_TOLERANCE = 10.0  # ppm

# Default MS2 (fragment) mass tolerance in PPM
DEFAULT_MS2_TOLERANCE = 20.0  # ppm

# Default absolute MS2 tolerance used by the spectrum annotator
# Typical for ion trap / low-resolution fragment spectra
DEFAULT_MS2_TOLERANCE_DA = 0.02  # Da


def validate_constants():
    """Validate that constants are physically reasonable.

    Raises AssertionError if any constant is out of expected range.
    """
    assert 1.0072 < PROTON_MASS < 1.0073, f"PROTON_MASS is wrong: {PROTON_MASS}"
    assert 0.0005 < ELECTRON_MASS < 0.0006, f"ELECTRON_MASS is wrong: {ELECTRON_MASS}"
    assert 18.00 < WATER_MONO_MASS < 18.02, f"WATER_MONO_MASS is wrong: {WATER_MONO_MASS}"

    # Hydrogen atom = proton + electron
    h_atom_mass = PROTON_MASS + ELECTRON_MASS
    assert abs(h_atom_mass - 1.00782503207) < 1e-6, \
        f"H atom mass inconsistent: {h_atom_mass}"
