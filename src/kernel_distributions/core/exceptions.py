"""
Error and warning types raised by the quaternion perturbation and statistics
code.

All failures are synchronous and surface as typed exceptions rather than
sentinel values: a shape mismatch or a degenerate weighting never returns a
NaN or a zero quaternion.
"""


class KernelDistributionsError(Exception):
    """Base class for all errors raised by kernel_distributions."""


class ShapeMismatchError(KernelDistributionsError, ValueError):
    """Two collections combined element-wise have incompatible lengths, or an
    operand does not have the size of a rotation vector / quaternion."""


class DegenerateWeightsError(KernelDistributionsError, ValueError):
    """The weights of a mean or covariance do not define a normalization:
    empty input, all weights zero, or negative / non-finite weights."""


class NumericDomainWarning(RuntimeWarning):
    """Valid input close to a point where the result loses precision, e.g. a
    quaternion whose scalar part approaches -1 in log_map."""
