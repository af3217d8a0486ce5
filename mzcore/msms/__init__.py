"""MS/MS fragmentation tables and spectrum annotation.

Core algorithms:
1. Cumulative residue sums per ion series and charge (fragmentation table)
2. Prefix-sum propagation of localized modification masses
3. Sort + cluster + forward two-pointer peak annotation
4. Per-peak binary range search annotation (complete variant)
"""

from .model import (
    ActivationType,
    FragmentIonSeries,
    FragmentIonSeriesDirection,
    FragmentType,
    MsAnalyzer,
    NeutralLoss,
)
from .config import AnnotationParams, FragmentationConfig
from .fragmentation import (
    FragmentationTable,
    FragmentationTableFactory,
    TheoreticalFragmentIons,
    change_frag_series_charge_state,
    compute_frag_series_mz_values,
    compute_frag_table,
    compute_frag_table_from_mod_string,
    compute_frag_table_with_mods,
    compute_frag_table_without_mods,
    parse_mod_string,
)
from .annotator import (
    MatchedPeak,
    PeakSelectionStrategy,
    annotate_spectrum,
    annotate_spectrum_by_range,
    annotate_with_params,
    deduplicate_matches,
)

__all__ = [
    # Model
    'ActivationType',
    'FragmentIonSeries',
    'FragmentIonSeriesDirection',
    'FragmentType',
    'MsAnalyzer',
    'NeutralLoss',
    # Configuration
    'AnnotationParams',
    'FragmentationConfig',
    # Fragmentation tables
    'FragmentationTable',
    'FragmentationTableFactory',
    'TheoreticalFragmentIons',
    'change_frag_series_charge_state',
    'compute_frag_series_mz_values',
    'compute_frag_table',
    'compute_frag_table_from_mod_string',
    'compute_frag_table_with_mods',
    'compute_frag_table_without_mods',
    'parse_mod_string',
    # Annotation
    'MatchedPeak',
    'PeakSelectionStrategy',
    'annotate_spectrum',
    'annotate_spectrum_by_range',
    'annotate_with_params',
    'deduplicate_matches',
]
