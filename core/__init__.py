"""
CMA Adjustment Engine - Core Business Logic

Pipeline:
1. Rates (defaults shadowed per CMA)
2. Per-comparable adjustment calculation
3. Comparable set aggregation and summary
4. Provenance of the comparable set (MLS / nearby search / manual)
"""

# Adjustment Engine v1.0
from .adjustments import (
    PropertyForAdjustment,
    CustomAdjustment,
    CompAdjustmentOverrides,
    AdjustmentItem,
    CompAdjustmentResult,
    AdjustmentSummary,
    AdjustmentRates,
    DEFAULT_ADJUSTMENT_RATES,
    CmaAdjustments,
    compute_adjustment,
    compute_all_adjustments,
    summarize_adjustments,
    has_pool,
)

# Comparable set provenance
from .provenance import CompSource, SourceDescriptor, describe_source

__all__ = [
    # Adjustment Engine
    "PropertyForAdjustment",
    "CustomAdjustment",
    "CompAdjustmentOverrides",
    "AdjustmentItem",
    "CompAdjustmentResult",
    "AdjustmentSummary",
    "AdjustmentRates",
    "DEFAULT_ADJUSTMENT_RATES",
    "CmaAdjustments",
    "compute_adjustment",
    "compute_all_adjustments",
    "summarize_adjustments",
    "has_pool",
    # Provenance
    "CompSource",
    "SourceDescriptor",
    "describe_source",
]
