"""
CMA Record

A Comparative Market Analysis as stored: the subject property, the
comparable set with its provenance, and the adjustments container.
Property records are kept as the raw MLS dictionaries they arrived as.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.adjustments import (
    AdjustmentRates,
    CmaAdjustments,
    CompAdjustmentResult,
)
from core.provenance import SourceDescriptor, describe_source


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class CmaRecord:
    """A stored CMA."""
    name: str
    subject: Optional[dict] = None
    comparables: list[dict] = field(default_factory=list)
    adjustments: CmaAdjustments = field(default_factory=CmaAdjustments)

    # Comparable set provenance
    source: Optional[str] = None
    generated_at: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None

    cma_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def compute_results(self) -> list[CompAdjustmentResult]:
        """Adjusted comparables, or an empty list while adjustments are off."""
        return self.adjustments.compute(self.subject, self.comparables)

    def describe_source(self) -> SourceDescriptor:
        """Provenance badge for this CMA's comparable set."""
        return describe_source(
            self.source,
            generated_at=self.generated_at,
            last_updated_at=self.last_updated_at,
            comparables_count=len(self.comparables),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and JSON output."""
        return {
            "id": self.cma_id,
            "name": self.name,
            "subject": self.subject,
            "comparables": list(self.comparables),
            "adjustments": self.adjustments.to_dict(),
            "source": self.source,
            "generatedAt": self.generated_at.isoformat() if self.generated_at else None,
            "lastUpdatedAt": (
                self.last_updated_at.isoformat() if self.last_updated_at else None
            ),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(
        cls, data: dict, default_rates: Optional[AdjustmentRates] = None
    ) -> CmaRecord:
        """Create record from dictionary."""
        return cls(
            cma_id=data["id"],
            name=data["name"],
            subject=data.get("subject"),
            comparables=list(data.get("comparables") or []),
            adjustments=CmaAdjustments.from_dict(data.get("adjustments"), default_rates),
            source=data.get("source"),
            generated_at=_parse_datetime(data.get("generatedAt")),
            last_updated_at=_parse_datetime(data.get("lastUpdatedAt")),
            created_at=datetime.fromisoformat(data["createdAt"]),
            updated_at=datetime.fromisoformat(data["updatedAt"]),
        )
