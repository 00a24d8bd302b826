"""
Adjustment Engine v1.0

Prices comparable listings against a subject property using per-unit
dollar rates, with user overrides per comparable and category.
"""

from .models import (
    PropertyForAdjustment,
    CustomAdjustment,
    CompAdjustmentOverrides,
    AdjustmentItem,
    CompAdjustmentResult,
    AdjustmentSummary,
)
from .rates import AdjustmentRates, DEFAULT_ADJUSTMENT_RATES
from .calculator import (
    LOT_SIZE_THRESHOLD,
    compute_adjustment,
    get_property_address,
    get_property_id,
    has_pool,
    resolve_lot_size,
    resolve_sale_price,
)
from .aggregator import compute_all_adjustments, override_key, summarize_adjustments
from .container import CmaAdjustments

__all__ = [
    # Models
    "PropertyForAdjustment",
    "CustomAdjustment",
    "CompAdjustmentOverrides",
    "AdjustmentItem",
    "CompAdjustmentResult",
    "AdjustmentSummary",
    # Rates
    "AdjustmentRates",
    "DEFAULT_ADJUSTMENT_RATES",
    # Calculator
    "LOT_SIZE_THRESHOLD",
    "compute_adjustment",
    "get_property_address",
    "get_property_id",
    "has_pool",
    "resolve_lot_size",
    "resolve_sale_price",
    # Aggregator
    "compute_all_adjustments",
    "override_key",
    "summarize_adjustments",
    # Container
    "CmaAdjustments",
]

__version__ = "1.0"
