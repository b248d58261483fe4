"""
===============================================================================
KERNEL DISTRIBUTIONS - Numerical Constants
===============================================================================
Central repository for the constants and tolerances used by the quaternion
perturbation and statistics code. Angles are in radians throughout.
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
RAD2DEG = 180.0 / PI

# Volume of the unit 3-sphere is 2*pi^2; quaternions q and -q describe the
# same rotation, so the uniform density over SO(3) is 1 / pi^2.
LOG_UNIFORM_QUATERNION_DENSITY = -np.log(PI ** 2)

# =============================================================================
# FLOATING-POINT PRECISIONS
# =============================================================================
# Precisions a Quaternion may carry. The precision chosen at the call site is
# propagated through every downstream computation.
SUPPORTED_DTYPES = {
    'float16': np.float16,
    'float32': np.float32,
    'float64': np.float64,
}

# LAPACK has no half-precision routines, the eigen-decomposition of a float16
# matrix is carried out in this precision and cast back.
MIN_DECOMPOSITION_DTYPE = np.float32

# =============================================================================
# TOLERANCES
# =============================================================================
NORM_TOLERANCE = 1e-10            # Below this a quaternion counts as zero
UNIT_NORM_TOLERANCE = 1e-6        # |q| - 1 allowed by Quaternion.is_unit
ANTIPODAL_TOLERANCE = 1e-6        # Scalar part within this of -1 warns in log_map

# Rotation vectors have three components, quaternions four.
ROTATION_VECTOR_SIZE = 3
QUATERNION_SIZE = 4
