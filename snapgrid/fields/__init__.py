"""Field management for the source mesh.

This module provides declarative field containers for the Taichi fields that
live on the restored source mesh.

Main classes:
- FieldSpec: Declarative field specification
- FieldRole: Field categorization (PRIMARY, DERIVED)
- FieldContainer: Manages Taichi field lifecycle

Factory functions:
- create_snapshot_specs: f, u_x, u_y
- create_derived_spec: one derived scalar
"""

from snapgrid.fields.base import (
    FieldContainer,
    FieldRole,
    FieldSpec,
    create_derived_spec,
    create_snapshot_specs,
)

__all__ = [
    "FieldContainer",
    "FieldRole",
    "FieldSpec",
    "create_derived_spec",
    "create_snapshot_specs",
]
