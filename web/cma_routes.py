"""
CMA Routes - Web API for Comparable Adjustments

Exposes the adjustment engine and provenance descriptors to the
presentation layer. Property records are accepted as free-form MLS
dictionaries; malformed fields degrade to "no adjustment" rather than
being rejected.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from core.adjustments import (
    AdjustmentRates,
    CmaAdjustments,
    CompAdjustmentResult,
    compute_all_adjustments,
    summarize_adjustments,
)
from core.cma import CmaRecord, CmaRepository
from core.provenance import CompSource, describe_source
from utils.formatting import format_adjustment, format_currency

logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/api", tags=["cma"])


def get_repository(request: Request) -> CmaRepository:
    return request.app.state.cma_repository


def get_default_rates(request: Request) -> AdjustmentRates:
    return request.app.state.default_rates


def require_cma(request: Request, cma_id: str) -> CmaRecord:
    """
    Look up a CMA by id.

    Raises:
        HTTPException(404) if the CMA does not exist
    """
    record = get_repository(request).get(cma_id)
    if record is None:
        raise HTTPException(status_code=404, detail="CMA not found")
    return record


# =============================================================================
# Request Models
# =============================================================================


class ComputeAdjustmentsRequest(BaseModel):
    """Stateless adjustment calculation."""
    subject: Dict[str, Any]
    comparables: List[Dict[str, Any]] = []
    rates: Optional[Dict[str, Any]] = None
    compAdjustments: Dict[str, Dict[str, Any]] = {}


class AdjustmentsPayload(BaseModel):
    """Full adjustments container. Always replaces the stored one."""
    enabled: bool = False
    rates: Optional[Dict[str, Any]] = None
    compAdjustments: Dict[str, Dict[str, Any]] = {}


class CreateCmaRequest(BaseModel):
    name: str
    subject: Optional[Dict[str, Any]] = None
    comparables: List[Dict[str, Any]] = []
    source: Optional[str] = None
    adjustments: Optional[AdjustmentsPayload] = None


class ComparablesPayload(BaseModel):
    comparables: List[Dict[str, Any]]
    source: Optional[str] = CompSource.MANUAL.value


# =============================================================================
# Helpers
# =============================================================================


def _container_from_payload(
    payload: AdjustmentsPayload, default_rates: AdjustmentRates
) -> CmaAdjustments:
    return CmaAdjustments.from_dict(
        {
            "enabled": payload.enabled,
            "rates": payload.rates,
            "compAdjustments": payload.compAdjustments,
        },
        default_rates,
    )


def _result_payload(result: CompAdjustmentResult) -> dict:
    """Result dictionary with display strings alongside the raw figures."""
    data = result.to_dict()
    data["display"] = {
        "salePrice": format_currency(result.sale_price),
        "totalAdjustment": format_adjustment(result.total_adjustment),
        "adjustedPrice": format_currency(result.adjusted_price),
        "adjustments": [format_adjustment(a.value) for a in result.adjustments],
    }
    return data


def _results_response(results: List[CompAdjustmentResult]) -> dict:
    return {
        "results": [_result_payload(r) for r in results],
        "summary": summarize_adjustments(results).to_dict(),
    }


# =============================================================================
# Stateless Calculation
# =============================================================================


@router.post("/adjustments/compute")
def compute_adjustments(body: ComputeAdjustmentsRequest, request: Request):
    """Calculate adjusted prices for a subject and its comparables."""
    rates = AdjustmentRates.from_dict(body.rates, base=get_default_rates(request))
    results = compute_all_adjustments(
        body.subject, body.comparables, rates, body.compAdjustments
    )
    logger.info("Computed adjustments for %d comparables", len(results))
    return _results_response(results)


@router.get("/comp-sources/{source}")
def get_comp_source(
    source: str,
    generated_at: Optional[str] = Query(None, alias="generatedAt"),
    last_updated_at: Optional[str] = Query(None, alias="lastUpdatedAt"),
    comparables_count: Optional[int] = Query(None, alias="comparablesCount"),
):
    """Provenance badge data for a comparable set source tag."""
    descriptor = describe_source(
        source,
        generated_at=generated_at,
        last_updated_at=last_updated_at,
        comparables_count=comparables_count,
    )
    return descriptor.to_dict()


# =============================================================================
# CMA Records
# =============================================================================


@router.post("/cmas", status_code=201)
def create_cma(body: CreateCmaRequest, request: Request):
    """Create a CMA with its comparable set and adjustments."""
    adjustments = None
    if body.adjustments is not None:
        adjustments = _container_from_payload(body.adjustments, get_default_rates(request))

    record = get_repository(request).create(
        name=body.name,
        subject=body.subject,
        comparables=body.comparables,
        source=body.source,
        adjustments=adjustments,
    )
    return record.to_dict()


@router.get("/cmas")
def list_cmas(request: Request):
    return [record.to_dict() for record in get_repository(request).list_all()]


@router.get("/cmas/{cma_id}")
def get_cma(cma_id: str, request: Request):
    return require_cma(request, cma_id).to_dict()


@router.delete("/cmas/{cma_id}")
def delete_cma(cma_id: str, request: Request):
    if not get_repository(request).delete(cma_id):
        raise HTTPException(status_code=404, detail="CMA not found")
    return {"deleted": True}


@router.put("/cmas/{cma_id}/adjustments")
def replace_adjustments(cma_id: str, body: AdjustmentsPayload, request: Request):
    """Replace the whole adjustments container of a CMA."""
    require_cma(request, cma_id)
    container = _container_from_payload(body, get_default_rates(request))
    record = get_repository(request).replace_adjustments(cma_id, container)
    return record.adjustments.to_dict()


@router.put("/cmas/{cma_id}/comparables")
def replace_comparables(cma_id: str, body: ComparablesPayload, request: Request):
    """Replace the comparable set of a CMA and record its source."""
    require_cma(request, cma_id)
    record = get_repository(request).replace_comparables(
        cma_id, body.comparables, body.source
    )
    return record.to_dict()


@router.get("/cmas/{cma_id}/adjustments/results")
def get_adjustment_results(cma_id: str, request: Request):
    """Adjusted comparables for a CMA; empty while adjustments are off."""
    record = require_cma(request, cma_id)
    response = _results_response(record.compute_results())
    response["cmaId"] = record.cma_id
    response["enabled"] = record.adjustments.enabled
    return response


@router.get("/cmas/{cma_id}/source")
def get_cma_source(cma_id: str, request: Request):
    """Provenance badge data for a CMA's comparable set."""
    return require_cma(request, cma_id).describe_source().to_dict()
