"""
Utility modules for the CMA adjustment service.
"""

from .formatting import format_adjustment, format_currency
from .config import Config

__all__ = ["format_adjustment", "format_currency", "Config"]
