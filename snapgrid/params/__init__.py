"""
Parameter management for extraction runs.

This module provides:
- The sampling request and derived output grid (schema.py)
- Validated, immutable run parameters (schema.py)
- YAML loading utilities (loader.py)
"""

from snapgrid.params.schema import (
    ExtractionBounds,
    ExtractionConfig,
    OutputParams,
    RunParams,
    StrainRateParams,
    ValidationError,
    configure_grid,
)
from snapgrid.params.loader import (
    load_params,
    save_params,
)

__all__ = [
    # Sampling request
    "ExtractionBounds",
    "ExtractionConfig",
    "configure_grid",
    # Run parameters
    "OutputParams",
    "RunParams",
    "StrainRateParams",
    "ValidationError",
    # Loader functions
    "load_params",
    "save_params",
]
