"""
snapgrid: resample derived fields from fluid snapshots using Taichi.

Restores a two-phase flow snapshot, computes derived scalars (strain-rate
invariant, velocity magnitude) on the source mesh and samples them onto a
uniform Cartesian grid as plain-text rows.
"""

__version__ = "0.1.0"
