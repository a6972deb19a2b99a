"""Type definitions for snapgrid.

All source-mesh fields, derived scalars and the sample buffer use double
precision so that grid coordinates and log-scaled values match the host-side
arithmetic of the planner and writer.
"""

import taichi as ti

# ti.f64 is required: the CPU and CUDA backends support it, Vulkan does not
DTYPE = ti.f64
