"""
Property Adjustment Calculator

Compares one comparable against the subject property and produces an
itemized list of dollar adjustments plus the adjusted sale price.

Factors are evaluated in a fixed order:
1. Square footage
2. Bedrooms
3. Bathrooms
4. Pool
5. Garage spaces
6. Year built (only when both years are known)
7. Lot size (computed values below the noise threshold are hidden)
8. Custom adjustments, in the order supplied

The calculator never raises on missing or malformed data. Absent values
count as zero, which yields no adjustment for that factor.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from .models import (
    AdjustmentItem,
    CompAdjustmentOverrides,
    CompAdjustmentResult,
    PropertyForAdjustment,
    to_number,
)
from .rates import AdjustmentRates, DEFAULT_ADJUSTMENT_RATES

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Constants
# =============================================================================

# Computed lot size adjustments at or below this magnitude are not shown
LOT_SIZE_THRESHOLD = 100

UNKNOWN_ADDRESS = "Unknown"

PropertyInput = Union[PropertyForAdjustment, Mapping[str, Any]]
OverridesInput = Union[CompAdjustmentOverrides, Mapping[str, Any], None]
RatesInput = Union[AdjustmentRates, Mapping[str, Any], None]


# =============================================================================
# Input Normalisation
# =============================================================================

def as_property(value: Optional[PropertyInput]) -> PropertyForAdjustment:
    """Accept a PropertyForAdjustment or a raw listing record."""
    if isinstance(value, PropertyForAdjustment):
        return value
    return PropertyForAdjustment.from_dict(value)


def as_overrides(value: OverridesInput) -> Optional[CompAdjustmentOverrides]:
    """Accept CompAdjustmentOverrides, a raw record, or None."""
    if value is None or isinstance(value, CompAdjustmentOverrides):
        return value
    return CompAdjustmentOverrides.from_dict(value)


def as_rates(value: RatesInput) -> AdjustmentRates:
    """Accept AdjustmentRates, a partial rate record, or None."""
    if isinstance(value, AdjustmentRates):
        return value
    return DEFAULT_ADJUSTMENT_RATES.merged(value)


def _num(value: Any) -> float:
    number = to_number(value)
    return number if number is not None else 0


# =============================================================================
# Field Resolution
# =============================================================================

def get_property_id(prop: PropertyInput) -> str:
    """Listing id, else MLS number, else empty string."""
    prop = as_property(prop)
    return prop.listing_id or prop.mls_number or ""


def get_property_address(prop: PropertyInput) -> str:
    """Street address, else generic address, else "Unknown"."""
    prop = as_property(prop)
    return prop.street_address or prop.address or UNKNOWN_ADDRESS


def resolve_sale_price(prop: PropertyInput) -> float:
    """Close price, else sold price, else list price, else 0."""
    prop = as_property(prop)
    return _num(prop.close_price) or _num(prop.sold_price) or _num(prop.list_price)


def resolve_lot_size(prop: PropertyInput) -> float:
    """Lot size in square feet, falling back to the generic lot area."""
    prop = as_property(prop)
    return _num(prop.lot_size_square_feet) or _num(prop.lot_size_area)


def has_pool(prop: PropertyInput) -> bool:
    """
    Normalise pool features to a presence flag.

    A list counts as a pool when it is non-empty and not every entry is
    "none". A string counts unless it is empty or "none". Anything else
    is treated as no pool.
    """
    features = as_property(prop).pool_features
    if not features:
        return False
    if isinstance(features, (list, tuple)):
        return not all(str(f).lower() == "none" for f in features)
    if isinstance(features, str):
        return features.lower() not in ("none", "")
    return False


# =============================================================================
# Description Formatting
# =============================================================================

def _plain(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _grouped(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:,}"


def _signed(diff: float, grouped: bool = False) -> str:
    text = _grouped(diff) if grouped else _plain(diff)
    return f"+{text}" if diff > 0 else text


# =============================================================================
# Calculator
# =============================================================================

def compute_adjustment(
    subject: PropertyInput,
    comp: PropertyInput,
    rates: RatesInput = None,
    overrides: OverridesInput = None,
) -> CompAdjustmentResult:
    """
    Calculate the itemized adjustments for one comparable.

    Args:
        subject: The property being valued
        comp: The comparable listing
        rates: Per-unit rates (default: DEFAULT_ADJUSTMENT_RATES)
        overrides: Optional explicit values per category for this comp

    Returns:
        CompAdjustmentResult; inputs are never mutated
    """
    subject = as_property(subject)
    comp = as_property(comp)
    rates = as_rates(rates)
    overrides = as_overrides(overrides) or CompAdjustmentOverrides()

    items: List[AdjustmentItem] = []

    # Square footage
    sqft_diff = _num(subject.living_area) - _num(comp.living_area)
    sqft_adj = _pick_override(overrides.sqft, sqft_diff * rates.sqft_per_unit)
    if sqft_adj != 0:
        items.append(AdjustmentItem(
            name="Sq Ft",
            value=sqft_adj,
            description=f"{_signed(sqft_diff)} sqft @ ${_plain(rates.sqft_per_unit)}/sqft",
        ))

    # Bedrooms
    bed_diff = _num(subject.bedrooms_total) - _num(comp.bedrooms_total)
    bed_adj = _pick_override(overrides.bedrooms, bed_diff * rates.bedroom_value)
    if bed_adj != 0:
        items.append(AdjustmentItem(
            name="Beds",
            value=bed_adj,
            description=f"{_signed(bed_diff)} beds @ ${_grouped(rates.bedroom_value)}/bed",
        ))

    # Bathrooms
    bath_diff = _num(subject.bathrooms_total) - _num(comp.bathrooms_total)
    bath_adj = _pick_override(overrides.bathrooms, bath_diff * rates.bathroom_value)
    if bath_adj != 0:
        items.append(AdjustmentItem(
            name="Baths",
            value=bath_adj,
            description=f"{_signed(bath_diff)} baths @ ${_grouped(rates.bathroom_value)}/bath",
        ))

    # Pool: emitted only when presence differs
    subject_pool = has_pool(subject)
    comp_pool = has_pool(comp)
    if subject_pool != comp_pool:
        computed = rates.pool_value if subject_pool else -rates.pool_value
        items.append(AdjustmentItem(
            name="Pool",
            value=_pick_override(overrides.pool, computed),
            description="Subject has pool" if subject_pool else "Comp has pool",
        ))

    # Garage spaces
    garage_diff = _num(subject.garage_spaces) - _num(comp.garage_spaces)
    garage_adj = _pick_override(overrides.garage, garage_diff * rates.garage_per_space)
    if garage_adj != 0:
        items.append(AdjustmentItem(
            name="Garage",
            value=garage_adj,
            description=(
                f"{_signed(garage_diff)} spaces @ "
                f"${_grouped(rates.garage_per_space)}/space"
            ),
        ))

    # Year built: zero or missing means unknown, so the factor is skipped
    subject_year = _num(subject.year_built)
    comp_year = _num(comp.year_built)
    if subject_year > 0 and comp_year > 0:
        year_diff = subject_year - comp_year
        year_adj = _pick_override(overrides.year_built, year_diff * rates.year_built_per_year)
        if year_adj != 0:
            items.append(AdjustmentItem(
                name="Year Built",
                value=year_adj,
                description=(
                    f"{_signed(year_diff)} years @ "
                    f"${_grouped(rates.year_built_per_year)}/year"
                ),
            ))

    # Lot size: user overrides always shown, computed noise suppressed
    lot_diff = resolve_lot_size(subject) - resolve_lot_size(comp)
    if overrides.lot_size is not None:
        lot_adj = overrides.lot_size
        show_lot = True
    else:
        lot_adj = lot_diff * rates.lot_size_per_sqft
        show_lot = abs(lot_adj) > LOT_SIZE_THRESHOLD
    if show_lot:
        items.append(AdjustmentItem(
            name="Lot Size",
            value=lot_adj,
            description=(
                f"{_signed(lot_diff, grouped=True)} sqft @ "
                f"${_plain(rates.lot_size_per_sqft)}/sqft"
            ),
        ))

    for custom in overrides.custom:
        items.append(AdjustmentItem(name=custom.name, value=custom.value))

    total_adjustment = sum(item.value for item in items)
    sale_price = resolve_sale_price(comp)
    comp_id = get_property_id(comp)

    logger.debug(
        "Adjusted comp %r: %d items, total %s", comp_id, len(items), total_adjustment
    )

    return CompAdjustmentResult(
        comp_id=comp_id,
        comp_address=get_property_address(comp),
        sale_price=sale_price,
        adjustments=items,
        total_adjustment=total_adjustment,
        adjusted_price=sale_price + total_adjustment,
    )


def _pick_override(override: Optional[float], computed: float) -> float:
    """An override replaces the computed value; it never adds to it."""
    return override if override is not None else computed
