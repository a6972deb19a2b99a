"""Parameter schema with validation.

Two groups live here:
- ExtractionBounds / ExtractionConfig: the per-run sampling request and the
  output grid derived from it by configure_grid()
- StrainRateParams / OutputParams / RunParams: tunable constants, loadable
  from YAML
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from snapgrid.errors import (
    InvalidGridError,
    InvalidGridResolution,
    InvalidNumericBound,
)


class ValidationError(ValueError):
    """Parameter validation failed."""
    pass


def _positive(value: float, name: str) -> None:
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")


def _non_negative(value: float, name: str) -> None:
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")


def _finite(value: float, name: str) -> None:
    if not math.isfinite(value):
        raise InvalidNumericBound(f"{name} must be finite, got {value}")


# =============================================================================
# Sampling request and output grid
# =============================================================================


@dataclass(frozen=True)
class ExtractionBounds:
    """Validated sampling request: snapshot path, bounds and y-resolution."""
    filename: str
    xmin: float
    ymin: float
    xmax: float
    ymax: float
    ny: int

    def __post_init__(self) -> None:
        if isinstance(self.ny, bool) or not isinstance(self.ny, int) or self.ny <= 0:
            raise InvalidGridResolution(f"ny must be a positive integer, got {self.ny}")
        for name in ("xmin", "ymin", "xmax", "ymax"):
            _finite(getattr(self, name), name)
        if self.xmax <= self.xmin or self.ymax <= self.ymin:
            raise InvalidNumericBound(
                "Bounds must satisfy xmax>xmin and ymax>ymin, got "
                f"x=[{self.xmin}, {self.xmax}], y=[{self.ymin}, {self.ymax}]"
            )


@dataclass(frozen=True)
class ExtractionConfig:
    """Output grid for one run.

    dy = (ymax - ymin)/ny, nx = floor((xmax - xmin)/dy), dx = (xmax - xmin)/nx.
    Build with configure_grid(); nx is never specified independently.
    """
    filename: str
    xmin: float
    ymin: float
    xmax: float
    ymax: float
    ny: int
    nx: int
    dx: float
    dy: float

    def __post_init__(self) -> None:
        if self.nx <= 0:
            raise InvalidGridError(f"nx must be positive, got {self.nx}")
        if self.ny <= 0:
            raise InvalidGridResolution(f"ny must be positive, got {self.ny}")
        if self.dx <= 0 or self.dy <= 0:
            raise InvalidGridError(
                f"Spacing must be positive, got dx={self.dx}, dy={self.dy}"
            )

    @property
    def shape(self) -> tuple[int, int]:
        return (self.nx, self.ny)

    @property
    def n_samples(self) -> int:
        return self.nx * self.ny

    def cell_center_x(self, i: int) -> float:
        return self.dx * (i + 0.5) + self.xmin

    def cell_center_y(self, j: int) -> float:
        return self.dy * (j + 0.5) + self.ymin


def configure_grid(bounds: ExtractionBounds) -> ExtractionConfig:
    """Derive nx, dx and dy from validated bounds.

    Args:
        bounds: Validated sampling request

    Returns:
        Immutable ExtractionConfig

    Raises:
        InvalidGridError: If the derived nx is not positive
    """
    dy = (bounds.ymax - bounds.ymin) / bounds.ny
    nx = int((bounds.xmax - bounds.xmin) / dy)
    if nx <= 0:
        raise InvalidGridError("Computed nx <= 0. Check the provided bounds.")
    dx = (bounds.xmax - bounds.xmin) / nx

    return ExtractionConfig(
        filename=bounds.filename,
        xmin=bounds.xmin,
        ymin=bounds.ymin,
        xmax=bounds.xmax,
        ymax=bounds.ymax,
        ny=bounds.ny,
        nx=nx,
        dx=dx,
        dy=dy,
    )


# =============================================================================
# Run parameters
# =============================================================================


@dataclass(frozen=True)
class StrainRateParams:
    """Strain rate: viscosity_ratio [-], axis_epsilon [length], log_floor [log10]."""
    viscosity_ratio: float = 0.02
    axis_epsilon: float = 1e-10
    log_floor: float = -10.0

    def __post_init__(self) -> None:
        _positive(self.viscosity_ratio, "viscosity_ratio")
        _non_negative(self.axis_epsilon, "axis_epsilon")
        if not math.isfinite(self.log_floor):
            raise ValidationError(f"log_floor must be finite, got {self.log_floor}")


@dataclass(frozen=True)
class OutputParams:
    """Output: float_format (Python format spec, 'g' matches C %g)."""
    float_format: str = "g"

    def __post_init__(self) -> None:
        try:
            format(0.5, self.float_format)
        except (ValueError, TypeError) as e:
            raise ValidationError(
                f"float_format is not a valid float format: {self.float_format!r}"
            ) from e


@dataclass(frozen=True)
class RunParams:
    """Complete run parameters."""

    strain_rate: StrainRateParams = field(default_factory=StrainRateParams)
    output: OutputParams = field(default_factory=OutputParams)

    def to_dict(self) -> dict[str, Any]:
        """Convert to nested dictionary."""
        return {
            "strain_rate": asdict(self.strain_rate),
            "output": asdict(self.output),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunParams":
        """Create from nested dictionary."""
        param_classes = {
            "strain_rate": StrainRateParams,
            "output": OutputParams,
        }
        unknown = set(data) - set(param_classes)
        if unknown:
            raise ValidationError(f"Unknown parameter groups: {sorted(unknown)}")
        try:
            kwargs = {k: param_classes[k](**(data[k] or {})) for k in data}
        except TypeError as e:
            raise ValidationError(str(e)) from e
        return cls(**kwargs)

    def with_updates(self, **kwargs: Any) -> "RunParams":
        """Create new params with updates."""
        current = self.to_dict()
        for key, value in kwargs.items():
            if key not in current:
                raise ValidationError(f"Unknown parameter group: {key}")
            if isinstance(value, dict):
                current[key].update(value)
            else:
                current[key] = asdict(value)
        return self.from_dict(current)
