"""
Comparable Set Aggregator

Applies the calculator across an ordered list of comparables. Results
keep the input order; any sorting belongs to the presentation layer.
"""

from typing import List, Mapping, Optional, Sequence

from .calculator import (
    OverridesInput,
    PropertyInput,
    RatesInput,
    as_property,
    as_rates,
    compute_adjustment,
    get_property_id,
)
from .models import AdjustmentSummary, CompAdjustmentResult


POSITIONAL_KEY_PREFIX = "#"


def override_key(comp: PropertyInput, index: int) -> str:
    """
    Key under which a comparable's overrides are stored.

    Comparables without a listing id or MLS number fall back to a
    positional key so they never share overrides. Positional keys are
    only valid for the comparable set they were made against.
    """
    return get_property_id(comp) or f"{POSITIONAL_KEY_PREFIX}{index}"


def is_positional_key(key: str) -> bool:
    return key.startswith(POSITIONAL_KEY_PREFIX) and key[1:].isdigit()


def compute_all_adjustments(
    subject: PropertyInput,
    comparables: Sequence[PropertyInput],
    rates: RatesInput = None,
    overrides_map: Optional[Mapping[str, OverridesInput]] = None,
) -> List[CompAdjustmentResult]:
    """
    Calculate adjustments for every comparable, in input order.

    Args:
        subject: The property being valued
        comparables: Comparable listings, in display order
        rates: Per-unit rates (default: DEFAULT_ADJUSTMENT_RATES)
        overrides_map: Overrides keyed by ``override_key``

    Returns:
        One CompAdjustmentResult per comparable
    """
    subject = as_property(subject)
    rates = as_rates(rates)
    overrides_map = overrides_map or {}

    results = []
    for index, comp in enumerate(comparables or []):
        comp = as_property(comp)
        overrides = overrides_map.get(override_key(comp, index))
        results.append(compute_adjustment(subject, comp, rates, overrides))
    return results


def summarize_adjustments(results: Sequence[CompAdjustmentResult]) -> AdjustmentSummary:
    """
    Summarise adjusted prices across a comparable set.

    Price statistics only consider comparables with a known sale price;
    unpriced comps would otherwise drag the figures toward zero. The
    median uses the mean of the two middle values for even counts.
    """
    priced = sorted(r.adjusted_price for r in results if r.sale_price > 0)
    summary = AdjustmentSummary(
        count=len(results),
        priced_count=len(priced),
        total_adjustment=sum(r.total_adjustment for r in results),
    )
    if not priced:
        return summary

    n = len(priced)
    if n % 2 == 1:
        median = priced[n // 2]
    else:
        median = (priced[n // 2 - 1] + priced[n // 2]) / 2

    summary.average_adjusted_price = sum(priced) / n
    summary.median_adjusted_price = median
    summary.min_adjusted_price = priced[0]
    summary.max_adjusted_price = priced[-1]
    return summary
