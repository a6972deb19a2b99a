"""
Output functions for sampled rows.

Rows are plain text, one per output cell, i-major then j-minor:

    x y v0 v1 ... v_{F-1}

Every number uses the same Python format spec ('g' by default, which matches
C's %g). There is no header; column order is registration order.
"""

import sys
from typing import TextIO

from snapgrid.params.schema import ExtractionConfig
from snapgrid.sampling import SampleBuffer


def format_row(x: float, y: float, values, float_format: str = "g") -> str:
    """Format one output row, newline-terminated."""
    return " ".join(format(v, float_format) for v in (x, y, *values)) + "\n"


def write_fields(
    config: ExtractionConfig,
    buffer: SampleBuffer,
    stream: TextIO,
    float_format: str = "g",
) -> int:
    """
    Stream all sampled rows.

    Args:
        config: Output grid
        buffer: Filled SampleBuffer
        stream: Text stream receiving the rows
        float_format: Format spec applied to every column

    Returns:
        Number of rows written (nx * ny)
    """
    data = buffer.to_numpy()
    n_fields = buffer.field_count

    rows = 0
    for i in range(config.nx):
        x = config.cell_center_x(i)
        row = data[i]
        for j in range(config.ny):
            y = config.cell_center_y(j)
            start = n_fields * j
            stream.write(format_row(x, y, row[start:start + n_fields], float_format))
            rows += 1
    return rows


def cleanup_output(stream: TextIO, buffer: SampleBuffer, close: bool = False) -> None:
    """
    Flush the row stream, optionally close it, and release the sample buffer.

    Standard streams are never closed.
    """
    stream.flush()
    if close and stream not in (sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__):
        stream.close()
    buffer.release()
