"""
CMA storage.

Persists each CMA's comparable set, its provenance and its adjustments
container.
"""

from core.cma.record import CmaRecord
from core.cma.repository import CmaRepository, get_cma_repository

__all__ = [
    "CmaRecord",
    "CmaRepository",
    "get_cma_repository",
]
