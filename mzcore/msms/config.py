"""Fragmentation and annotation parameters.

Fragmentation presets follow the ion series typically observed for each
activation method, e.g. ``FragmentationConfig.from_activation(ActivationType.HCD)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..constants import DEFAULT_MS2_TOLERANCE_DA
from ..ms.tolerance import MassTolUnit, calc_mz_tol_in_daltons
from .model import ActivationType, FragmentIonSeries, MsAnalyzer

S = FragmentIonSeries


@dataclass(frozen=True)
class FragmentationConfig:
    """Ion series and fragment charges to tabulate.

    Columns of the fragmentation table are ordered ion-series-major,
    charge-minor, in the order given here.
    """

    ion_series: Tuple[FragmentIonSeries, ...]
    charges: Tuple[int, ...] = (1,)

    def __post_init__(self):
        object.__setattr__(self, "ion_series", tuple(self.ion_series))
        object.__setattr__(self, "charges", tuple(self.charges))

        if not self.ion_series:
            raise ValueError("ion_series is empty")
        if len(set(self.ion_series)) != len(self.ion_series):
            raise ValueError(
                f"ion_series contains duplicated entries: "
                f"{[str(s) for s in self.ion_series]}"
            )
        if not self.charges:
            raise ValueError("charges is empty")
        if any(charge == 0 for charge in self.charges):
            raise ValueError("fragment charge can't be zero")

    def contains_ion_series(self, ion_series: FragmentIonSeries) -> bool:
        return ion_series in self.ion_series

    @classmethod
    def from_activation(
        cls,
        activation_type: ActivationType,
        analyzer: MsAnalyzer = MsAnalyzer.FTMS,
        charges: Tuple[int, ...] = (1,),
    ) -> "FragmentationConfig":
        """Create the ion series preset of an activation method.

        Args:
            activation_type: Fragmentation method
            analyzer: Mass analyzer (only changes the ETD preset)
            charges: Fragment charge states

        Returns:
            FragmentationConfig with the method's usual ion series
        """
        if activation_type == ActivationType.CID:
            ion_series = (S.b, S.b_NH3, S.b_H2O, S.y, S.y_NH3, S.y_H2O)
        elif activation_type == ActivationType.ECD:
            ion_series = (S.c, S.y, S.z_p1, S.z_p2)
        elif activation_type == ActivationType.ETD:
            # z ions only with FTMS
            if analyzer == MsAnalyzer.FTMS:
                ion_series = (S.c, S.y, S.z, S.z_p1, S.z_p2)
            else:
                ion_series = (S.c, S.y, S.z_p1, S.z_p2)
        elif activation_type == ActivationType.HCD:
            ion_series = (
                S.a, S.a_NH3, S.a_H2O,
                S.b, S.b_NH3, S.b_H2O,
                S.y, S.y_NH3, S.y_H2O,
                S.ya, S.yb,
            )
        elif activation_type == ActivationType.PSD:
            ion_series = (S.a, S.a_NH3, S.a_H2O, S.b, S.b_NH3, S.b_H2O, S.y)
        else:
            raise ValueError(f"Unknown activation type: {activation_type}")

        return cls(ion_series=ion_series, charges=tuple(charges))


@dataclass(frozen=True)
class AnnotationParams:
    """Parameters of spectrum annotation.

    The annotator applies a single symmetric absolute tolerance. A ppm
    tolerance is converted to Da at the m/z of interest.
    """

    mz_tolerance: float = DEFAULT_MS2_TOLERANCE_DA
    tolerance_unit: MassTolUnit = MassTolUnit.Da

    # Per-peak range query instead of the forward-only cluster cursor
    complete_search: bool = False

    def __post_init__(self):
        if self.mz_tolerance < 0:
            raise ValueError(f"mz_tolerance must be positive, got {self.mz_tolerance}")
        if isinstance(self.tolerance_unit, str):
            object.__setattr__(self, "tolerance_unit", MassTolUnit.from_str(self.tolerance_unit))

    def tolerance_in_daltons(self, mz: float) -> float:
        return calc_mz_tol_in_daltons(mz, self.mz_tolerance, self.tolerance_unit)
