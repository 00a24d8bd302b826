"""
Adjustment Rates

Dollar coefficients applied per unit of difference between a subject
property and a comparable. Rates are immutable values; a CMA carries its
own copy which shadows the defaults field by field.
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping, Optional

from .models import to_number


# Mapping of persisted (camelCase) keys to dataclass attribute names
RATE_FIELDS = {
    "sqftPerUnit": "sqft_per_unit",
    "bedroomValue": "bedroom_value",
    "bathroomValue": "bathroom_value",
    "poolValue": "pool_value",
    "garagePerSpace": "garage_per_space",
    "yearBuiltPerYear": "year_built_per_year",
    "lotSizePerSqft": "lot_size_per_sqft",
}


@dataclass(frozen=True)
class AdjustmentRates:
    """Per-unit dollar rates for each adjustment category."""

    sqft_per_unit: float = 100
    bedroom_value: float = 10000
    bathroom_value: float = 7500
    pool_value: float = 25000
    garage_per_space: float = 5000
    year_built_per_year: float = 500
    lot_size_per_sqft: float = 2

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> "AdjustmentRates":
        """
        Return a copy with the given fields replaced.

        Keys may be camelCase (as persisted) or attribute names. A field
        that is present wins outright; absent or malformed fields keep
        this instance's value.
        """
        if not overrides:
            return self

        changes = {}
        attr_names = {f.name for f in fields(self)}
        for key, raw in overrides.items():
            attr = RATE_FIELDS.get(key, key)
            if attr not in attr_names:
                continue
            value = to_number(raw)
            if value is not None:
                changes[attr] = value

        return replace(self, **changes) if changes else self

    @classmethod
    def from_dict(
        cls,
        data: Optional[Mapping[str, Any]],
        base: Optional["AdjustmentRates"] = None,
    ) -> "AdjustmentRates":
        """Build rates from a persisted record, falling back to ``base``."""
        return (base or DEFAULT_ADJUSTMENT_RATES).merged(data)

    def to_dict(self) -> dict:
        """Convert to the persisted camelCase form."""
        values = asdict(self)
        return {key: values[attr] for key, attr in RATE_FIELDS.items()}


DEFAULT_ADJUSTMENT_RATES = AdjustmentRates()
