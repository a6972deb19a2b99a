"""
YAML run-parameter loading and saving.

Provides utilities to load RunParams from YAML files and save them next to
extracted data for reproducibility.
"""

from pathlib import Path

import yaml

from snapgrid.params.schema import RunParams, ValidationError


def load_params(path: str | Path) -> RunParams:
    """
    Load run parameters from a YAML file.

    Args:
        path: Path to YAML parameter file

    Returns:
        RunParams instance with validated parameters

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If any parameter validation fails
        yaml.YAMLError: If the YAML is malformed

    Example:
        params = load_params("params/planar.yaml")
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Parameter file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ValidationError(f"Parameters must be a dictionary, got {type(data)}")

    return RunParams.from_dict(data)


def save_params(params: RunParams, path: str | Path) -> None:
    """
    Save run parameters to a YAML file.

    Args:
        params: RunParams instance to save
        path: Path to write YAML file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(params.to_dict(), f, default_flow_style=False, sort_keys=False)

