"""
CMA Repository - In-Memory Storage for CMA Records

Stores each CMA's comparable set, provenance and adjustments container.
Uses in-memory storage with optional JSON file persistence.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from core.adjustments import AdjustmentRates, CmaAdjustments, DEFAULT_ADJUSTMENT_RATES
from core.cma.record import CmaRecord
from core.provenance import CompSource, resolve_source

logger = logging.getLogger(__name__)


# =============================================================================
# Repository
# =============================================================================


class CmaRepository:
    """
    Repository for storing and retrieving CMA records.

    The adjustments container is only ever replaced as a whole, so its
    enabled flag, rates and overrides always stay consistent.
    """

    def __init__(
        self,
        persist_path: Optional[str] = None,
        default_rates: Optional[AdjustmentRates] = None,
    ):
        """
        Initialise repository.

        Args:
            persist_path: Optional path to persist data to JSON file
            default_rates: Rates given to new CMAs (default: process defaults)
        """
        self._records: dict[str, CmaRecord] = {}
        self._persist_path = Path(persist_path) if persist_path else None
        self._default_rates = default_rates or DEFAULT_ADJUSTMENT_RATES

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    @property
    def default_rates(self) -> AdjustmentRates:
        return self._default_rates

    def _save_to_file(self) -> None:
        """Persist data to file."""
        if not self._persist_path:
            return

        data = {
            "cmas": {cid: record.to_dict() for cid, record in self._records.items()},
            "saved_at": datetime.utcnow().isoformat(),
        }

        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_path.write_text(json.dumps(data, indent=2))

    def _load_from_file(self) -> None:
        """Load data from file."""
        try:
            data = json.loads(self._persist_path.read_text())
            for cid, record_data in data.get("cmas", {}).items():
                self._records[cid] = CmaRecord.from_dict(record_data, self._default_rates)
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            # Start fresh rather than refusing to boot
            logger.warning("Could not load CMA data from %s: %s", self._persist_path, e)

    # =========================================================================
    # CRUD Operations
    # =========================================================================

    def create(
        self,
        name: str,
        subject: Optional[dict] = None,
        comparables: Optional[Sequence[dict]] = None,
        source: Optional[str] = None,
        adjustments: Optional[CmaAdjustments] = None,
        cma_id: Optional[str] = None,
    ) -> CmaRecord:
        """
        Create a new CMA.

        Args:
            name: Display name
            subject: Subject property record
            comparables: Comparable records, in display order
            source: Provenance tag of the comparable set
            adjustments: Initial container (default: disabled, default rates)
            cma_id: Explicit id (default: generated)

        Returns:
            New CmaRecord

        Raises:
            ValueError: If cma_id already exists
        """
        if cma_id and cma_id in self._records:
            raise ValueError(f"CMA {cma_id} already exists")

        now = datetime.utcnow()
        record = CmaRecord(
            name=name,
            subject=subject,
            comparables=list(comparables or []),
            adjustments=adjustments or CmaAdjustments(rates=self._default_rates),
            source=resolve_source(source).value if comparables else source,
            generated_at=now if comparables else None,
            created_at=now,
            updated_at=now,
        )
        if cma_id:
            record.cma_id = cma_id

        self._records[record.cma_id] = record
        logger.info("Created CMA %s with %d comparables", record.cma_id, len(record.comparables))

        self._save_to_file()
        return record

    def get(self, cma_id: str) -> Optional[CmaRecord]:
        """
        Get a CMA by id.

        Returns:
            CmaRecord if found, None otherwise
        """
        return self._records.get(cma_id)

    def replace_adjustments(
        self,
        cma_id: str,
        adjustments: CmaAdjustments,
    ) -> Optional[CmaRecord]:
        """
        Replace a CMA's adjustments container.

        Returns:
            Updated CmaRecord, or None if not found
        """
        record = self._records.get(cma_id)
        if not record:
            return None

        record.adjustments = adjustments
        record.updated_at = datetime.utcnow()
        logger.info(
            "Replaced adjustments for CMA %s (enabled=%s, overrides=%d)",
            cma_id,
            adjustments.enabled,
            len(adjustments.comp_adjustments),
        )

        self._save_to_file()
        return record

    def replace_comparables(
        self,
        cma_id: str,
        comparables: Sequence[dict],
        source: Optional[str] = CompSource.MANUAL.value,
    ) -> Optional[CmaRecord]:
        """
        Replace a CMA's comparable set.

        Edits default to the manual source; the first set stored on a CMA
        also records its generation time. Overrides keyed by position
        are dropped because they belonged to the previous set.

        Returns:
            Updated CmaRecord, or None if not found
        """
        record = self._records.get(cma_id)
        if not record:
            return None

        now = datetime.utcnow()
        record.comparables = list(comparables)
        record.adjustments = record.adjustments.without_positional_overrides()
        record.source = resolve_source(source).value
        if record.generated_at is None:
            record.generated_at = now
        else:
            record.last_updated_at = now
        record.updated_at = now
        logger.info(
            "Replaced comparables for CMA %s (%d comps, source=%s)",
            cma_id,
            len(record.comparables),
            record.source,
        )

        self._save_to_file()
        return record

    def delete(self, cma_id: str) -> bool:
        """
        Delete a CMA.

        Returns:
            True if deleted, False if not found
        """
        if cma_id in self._records:
            del self._records[cma_id]
            self._save_to_file()
            return True
        return False

    # =========================================================================
    # Query Operations
    # =========================================================================

    def list_all(self) -> list[CmaRecord]:
        """Get all CMAs, newest first."""
        return sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)

    def count(self) -> int:
        """Get total number of CMAs."""
        return len(self._records)


# =============================================================================
# Singleton Instance
# =============================================================================

_repository_instance: Optional[CmaRepository] = None


def get_cma_repository(
    persist_path: Optional[str] = None,
    default_rates: Optional[AdjustmentRates] = None,
) -> CmaRepository:
    """
    Get the CMA repository singleton.

    Args:
        persist_path: Optional path for persistence (only used on first call)
        default_rates: Rates for new CMAs (only used on first call)

    Returns:
        CmaRepository instance
    """
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = CmaRepository(persist_path, default_rates)
    return _repository_instance
