"""Protocol constants for the orbital pool.

All quantities are 18-decimal fixed-point integers unless noted otherwise.
"""

# Fixed-point unit (1.0)
ONE = 10**18

# Absolute tolerance on the sphere invariant |sum((r - x_i)^2) - r^2|.
# Also the slack allowed on the boundary inequality dot(x, v) <= k.
EPSILON = 10**15

# Tolerance on dot(x, v) == k for ticks resting on their boundary plane
BOUNDARY_TOLERANCE = 10**12

# Tolerance on normalized interior projections (alpha / r) when deciding
# whether a trade crosses a tick boundary
CROSSING_TOLERANCE = 10**9

# Maximum number of segments a single swap may be split into
MAX_SEGMENTS = 64

# Iteration caps for the numeric solvers (fixed for deterministic termination)
SQRT_MAX_ITERATIONS = 100
NTH_ROOT_ITERATIONS = 10
TORUS_MAX_ITERATIONS = 80

# Default number of tokens traded by a pool
DEFAULT_TOKEN_COUNT = 3
