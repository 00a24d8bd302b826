"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from core.adjustments import AdjustmentRates, DEFAULT_ADJUSTMENT_RATES


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    cma_store_path: Optional[str] = field(
        default_factory=lambda: os.getenv("CMA_STORE_PATH") or None
    )

    # Default adjustment rates (unset means the built-in default)
    sqft_per_unit: Optional[float] = field(
        default_factory=lambda: _env_float("ADJ_SQFT_PER_UNIT")
    )
    bedroom_value: Optional[float] = field(
        default_factory=lambda: _env_float("ADJ_BEDROOM_VALUE")
    )
    bathroom_value: Optional[float] = field(
        default_factory=lambda: _env_float("ADJ_BATHROOM_VALUE")
    )
    pool_value: Optional[float] = field(
        default_factory=lambda: _env_float("ADJ_POOL_VALUE")
    )
    garage_per_space: Optional[float] = field(
        default_factory=lambda: _env_float("ADJ_GARAGE_PER_SPACE")
    )
    year_built_per_year: Optional[float] = field(
        default_factory=lambda: _env_float("ADJ_YEAR_BUILT_PER_YEAR")
    )
    lot_size_per_sqft: Optional[float] = field(
        default_factory=lambda: _env_float("ADJ_LOT_SIZE_PER_SQFT")
    )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def default_rates(self) -> AdjustmentRates:
        """Process-wide default rates with any configured overrides applied."""
        return DEFAULT_ADJUSTMENT_RATES.merged({
            "sqft_per_unit": self.sqft_per_unit,
            "bedroom_value": self.bedroom_value,
            "bathroom_value": self.bathroom_value,
            "pool_value": self.pool_value,
            "garage_per_space": self.garage_per_space,
            "year_built_per_year": self.year_built_per_year,
            "lot_size_per_sqft": self.lot_size_per_sqft,
        })

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "data_dir": self.data_dir,
            "cma_store_path": self.cma_store_path,
            "default_rates": self.default_rates().to_dict(),
        }
