"""
CMA Adjustments Container

Holds the three pieces of adjustment state a CMA owns: whether
adjustments are shown, the effective rates, and per-comparable overrides.
The container is immutable; every edit produces a new container which
the owner stores in place of the old one.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Sequence

from .aggregator import compute_all_adjustments, is_positional_key
from .calculator import OverridesInput, PropertyInput, as_overrides, as_rates
from .models import CompAdjustmentOverrides, CompAdjustmentResult
from .rates import AdjustmentRates, DEFAULT_ADJUSTMENT_RATES


@dataclass(frozen=True)
class CmaAdjustments:
    """Adjustment settings persisted with a CMA."""
    enabled: bool = False
    rates: AdjustmentRates = DEFAULT_ADJUSTMENT_RATES
    comp_adjustments: Mapping[str, CompAdjustmentOverrides] = field(
        default_factory=dict
    )

    def __post_init__(self):
        object.__setattr__(self, "rates", as_rates(self.rates))
        frozen = MappingProxyType({
            str(key): as_overrides(value) or CompAdjustmentOverrides()
            for key, value in dict(self.comp_adjustments).items()
        })
        object.__setattr__(self, "comp_adjustments", frozen)

    # =========================================================================
    # Whole-object edits
    # =========================================================================

    def with_enabled(self, enabled: bool) -> "CmaAdjustments":
        return replace(self, enabled=bool(enabled))

    def with_rates(self, rates: AdjustmentRates) -> "CmaAdjustments":
        return replace(self, rates=rates)

    def with_rate(self, name: str, value: Any) -> "CmaAdjustments":
        """Replace one rate, keyed by camelCase or attribute name."""
        return replace(self, rates=self.rates.merged({name: value}))

    def with_comp_overrides(
        self, comp_key: str, overrides: OverridesInput
    ) -> "CmaAdjustments":
        comp_adjustments = dict(self.comp_adjustments)
        comp_adjustments[comp_key] = as_overrides(overrides) or CompAdjustmentOverrides()
        return replace(self, comp_adjustments=comp_adjustments)

    def without_comp_overrides(self, comp_key: str) -> "CmaAdjustments":
        comp_adjustments = dict(self.comp_adjustments)
        comp_adjustments.pop(comp_key, None)
        return replace(self, comp_adjustments=comp_adjustments)

    def without_positional_overrides(self) -> "CmaAdjustments":
        """Drop overrides keyed by position, which a new comparable set invalidates."""
        kept = {
            key: overrides
            for key, overrides in self.comp_adjustments.items()
            if not is_positional_key(key)
        }
        if len(kept) == len(self.comp_adjustments):
            return self
        return replace(self, comp_adjustments=kept)

    # =========================================================================
    # Calculation
    # =========================================================================

    def compute(
        self,
        subject: Optional[PropertyInput],
        comparables: Sequence[PropertyInput],
    ) -> List[CompAdjustmentResult]:
        """Adjusted results for display; empty while adjustments are off."""
        if not self.enabled or subject is None:
            return []
        return compute_all_adjustments(
            subject, comparables, self.rates, self.comp_adjustments
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        """Convert to the JSON blob stored on the CMA record."""
        return {
            "enabled": self.enabled,
            "rates": self.rates.to_dict(),
            "compAdjustments": {
                key: overrides.to_dict()
                for key, overrides in self.comp_adjustments.items()
            },
        }

    @classmethod
    def from_dict(
        cls,
        data: Optional[Mapping[str, Any]],
        default_rates: Optional[AdjustmentRates] = None,
    ) -> "CmaAdjustments":
        """Create from a stored blob; absent parts fall back to defaults."""
        base = default_rates or DEFAULT_ADJUSTMENT_RATES
        if not isinstance(data, Mapping):
            return cls(rates=base)

        comp_adjustments = data.get("compAdjustments") or {}
        if not isinstance(comp_adjustments, Mapping):
            comp_adjustments = {}

        return cls(
            enabled=bool(data.get("enabled", False)),
            rates=AdjustmentRates.from_dict(data.get("rates"), base=base),
            comp_adjustments={
                str(key): CompAdjustmentOverrides.from_dict(value)
                for key, value in comp_adjustments.items()
            },
        )
