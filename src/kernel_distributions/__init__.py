"""
===============================================================================
KERNEL DISTRIBUTIONS - Rotation Perturbations and Statistics
===============================================================================
Fixed-size, allocation-light building blocks for probability distributions
over 3-D orientations.

Modules:
    core.quaternion -- Quaternion type with a fixed floating-point precision
    perturbation    -- exp_map / log_map, compose ("plus"), difference ("minus")
    broadcast       -- compose_each / difference_each over collections
    statistics      -- Weighted Markley mean and tangent-space covariance
    uniform         -- QuaternionUniform distribution, ZeroIdentity transform
    config          -- YAML configuration and logging setup
    visualization   -- Diagnostic plots
===============================================================================
"""

from kernel_distributions.core.exceptions import (
    DegenerateWeightsError, KernelDistributionsError, NumericDomainWarning,
    ShapeMismatchError,
)
from kernel_distributions.core.quaternion import Quaternion
from kernel_distributions.perturbation import (
    compose, difference, exp_map, log_map, nonzero_sign, outer_product,
)
from kernel_distributions.broadcast import compose_each, difference_each
from kernel_distributions.statistics import cov, mean, mean_and_cov, weighted_scatter
from kernel_distributions.uniform import QuaternionUniform, ZeroIdentity

__version__ = '0.1.0'
