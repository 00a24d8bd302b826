"""
Data models for the adjustment engine.

Property records arrive from MLS data as loosely-typed JSON. Every numeric
field is optional and a malformed value is treated exactly like a missing
one, so that valuation degrades to "no adjustment" instead of failing.
"""

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a loosely-typed numeric value.

    Returns None for missing, boolean, NaN, non-numeric strings and any
    other unsupported type.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if not cleaned:
            return None
        try:
            value = float(cleaned)
        except ValueError:
            return None
        if value.is_integer():
            value = int(value)
    if not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    return value


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among the given keys."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


@dataclass
class PropertyForAdjustment:
    """
    The valuation-relevant subset of a listing.

    Used for both the subject property and each comparable.
    """
    # Identity
    listing_id: Optional[str] = None
    mls_number: Optional[str] = None
    street_address: Optional[str] = None
    address: Optional[str] = None

    # Physical characteristics
    living_area: Optional[float] = None
    bedrooms_total: Optional[float] = None
    bathrooms_total: Optional[float] = None
    pool_features: Any = None  # str, list of str, or absent
    garage_spaces: Optional[float] = None
    year_built: Optional[int] = None
    lot_size_square_feet: Optional[float] = None
    lot_size_area: Optional[float] = None

    # Prices, in resolution priority order
    close_price: Optional[float] = None
    sold_price: Optional[float] = None
    list_price: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PropertyForAdjustment":
        """Create from an MLS-style record (camelCase or snake_case keys)."""
        if not isinstance(data, Mapping):
            return cls()

        return cls(
            listing_id=_text(_pick(data, "listingId", "listing_id")),
            mls_number=_text(_pick(data, "mlsNumber", "mls_number")),
            street_address=_text(_pick(data, "streetAddress", "street_address")),
            address=_text(data.get("address")),
            living_area=to_number(_pick(data, "livingArea", "living_area")),
            bedrooms_total=to_number(_pick(data, "bedroomsTotal", "bedrooms_total")),
            bathrooms_total=to_number(_pick(data, "bathroomsTotal", "bathrooms_total")),
            pool_features=_pick(data, "poolFeatures", "pool_features"),
            garage_spaces=to_number(_pick(data, "garageSpaces", "garage_spaces")),
            year_built=to_number(_pick(data, "yearBuilt", "year_built")),
            lot_size_square_feet=to_number(
                _pick(data, "lotSizeSquareFeet", "lot_size_square_feet")
            ),
            lot_size_area=to_number(_pick(data, "lotSizeArea", "lot_size_area")),
            close_price=to_number(_pick(data, "closePrice", "close_price")),
            sold_price=to_number(_pick(data, "soldPrice", "sold_price")),
            list_price=to_number(_pick(data, "listPrice", "list_price")),
        )


@dataclass(frozen=True)
class CustomAdjustment:
    """A user-named adjustment with a signed dollar value."""
    name: str
    value: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CustomAdjustment":
        """Create from a persisted record. A malformed value counts as 0."""
        value = to_number(data.get("value"))
        return cls(name=str(data.get("name") or ""), value=value if value is not None else 0)

    def to_dict(self) -> dict:
        return {"name": self.name, "value": self.value}


# Persisted override keys and their attribute names
OVERRIDE_FIELDS = {
    "sqft": "sqft",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "pool": "pool",
    "garage": "garage",
    "yearBuilt": "year_built",
    "lotSize": "lot_size",
}


@dataclass(frozen=True)
class CompAdjustmentOverrides:
    """
    Explicit per-comparable adjustment values.

    A value that is present replaces the computed adjustment for its
    category outright. None means "use the computed value".
    """
    sqft: Optional[float] = None
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    pool: Optional[float] = None
    garage: Optional[float] = None
    year_built: Optional[float] = None
    lot_size: Optional[float] = None
    custom: tuple = ()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "CompAdjustmentOverrides":
        """Create from a persisted record (camelCase or snake_case keys)."""
        if not isinstance(data, Mapping):
            return cls()

        values = {}
        for key, attr in OVERRIDE_FIELDS.items():
            values[attr] = to_number(_pick(data, key, attr))

        custom = data.get("custom") or []
        if not isinstance(custom, (list, tuple)):
            custom = []
        values["custom"] = tuple(
            CustomAdjustment.from_dict(entry)
            for entry in custom
            if isinstance(entry, Mapping)
        )
        return cls(**values)

    def to_dict(self) -> dict:
        """Convert to the persisted camelCase form."""
        data = {key: getattr(self, attr) for key, attr in OVERRIDE_FIELDS.items()}
        data["custom"] = [c.to_dict() for c in self.custom]
        return data


@dataclass(frozen=True)
class AdjustmentItem:
    """One line of an itemized adjustment breakdown."""
    name: str
    value: float
    description: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"name": self.name, "value": self.value}
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass
class CompAdjustmentResult:
    """Adjusted valuation of a single comparable."""
    comp_id: str
    comp_address: str
    sale_price: float
    adjustments: List[AdjustmentItem] = field(default_factory=list)
    total_adjustment: float = 0
    adjusted_price: float = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "compId": self.comp_id,
            "compAddress": self.comp_address,
            "salePrice": self.sale_price,
            "adjustments": [a.to_dict() for a in self.adjustments],
            "totalAdjustment": self.total_adjustment,
            "adjustedPrice": self.adjusted_price,
        }


@dataclass
class AdjustmentSummary:
    """Statistics over a set of adjusted comparables."""
    count: int
    priced_count: int
    total_adjustment: float = 0
    average_adjusted_price: Optional[float] = None
    median_adjusted_price: Optional[float] = None
    min_adjusted_price: Optional[float] = None
    max_adjusted_price: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "pricedCount": self.priced_count,
            "totalAdjustment": self.total_adjustment,
            "averageAdjustedPrice": self.average_adjusted_price,
            "medianAdjustedPrice": self.median_adjusted_price,
            "minAdjustedPrice": self.min_adjusted_price,
            "maxAdjustedPrice": self.max_adjusted_price,
        }
