"""
===============================================================================
KERNEL DISTRIBUTIONS - Weighted Quaternion Statistics
===============================================================================

Weighted mean and tangent-space covariance of a collection of unit
quaternions, e.g. the particles of a filter tracking a 3-D orientation.

Mean
----
Quaternions do not form a vector space, so the arithmetic mean of their
components is not a rotation. Markley et al. (2007) define the average
orientation as the maximizer of sum_i w_i (q . q_i)^2 on the unit sphere,
which is the eigenvector of

    M = sum_i w_i * q_i q_i^T          (4x4, symmetric)

belonging to its largest eigenvalue. Since q_i and -q_i contribute the same
outer product, the estimator is insensitive to the double-cover sign of the
inputs.

Covariance
----------
The covariance lives in the 3-D tangent space of the mean mu:

    d_i = difference(q_i, mu)
    Sigma = sum_i w_i d_i d_i^T / V

with V = sum(w) (biased) or V = sum(w) - sum(w^2) / sum(w) for reliability
weights (corrected). The d_i are already deviations, so no further centering
is applied.

Weights
-------
weights=None weights every quaternion equally (V = n, corrected V = n - 1).
Explicit weights are non-negative importances, cast to the precision of the
quaternions.

References
----------
    [1] Markley, Cheng, Crassidis & Oshman, "Averaging Quaternions",
        Journal of Guidance, Control, and Dynamics, 30(4), 2007.
    [2] https://en.wikipedia.org/wiki/Weighted_arithmetic_mean#Reliability_weights
===============================================================================
"""

import logging

import numpy as np
from scipy.linalg import eigh

from kernel_distributions.core.constants import MIN_DECOMPOSITION_DTYPE, QUATERNION_SIZE
from kernel_distributions.core.exceptions import DegenerateWeightsError, ShapeMismatchError
from kernel_distributions.core.quaternion import Quaternion
from kernel_distributions.broadcast import difference_each
from kernel_distributions.perturbation import nonzero_sign

logger = logging.getLogger(__name__)


# =============================================================================
# INPUT PREPARATION
# =============================================================================

def _stack_components(quaternions) -> np.ndarray:
    """Nested sequences of quaternions -> array of shape (..., 4)."""
    if isinstance(quaternions, Quaternion):
        return quaternions.components
    rows = [_stack_components(q) for q in quaternions]
    try:
        return np.stack(rows)
    except ValueError as err:
        raise ShapeMismatchError(
            f"Quaternion collection is ragged or empty along one axis: {err}"
        ) from err


def _validate_weights(w: np.ndarray) -> None:
    if w.size == 0:
        raise DegenerateWeightsError("Cannot average an empty collection.")
    if not np.all(np.isfinite(w)):
        raise DegenerateWeightsError("Weights must be finite.")
    if np.any(w < 0):
        raise DegenerateWeightsError("Weights must be non-negative.")
    if not np.any(w > 0):
        raise DegenerateWeightsError(
            "All weights are zero, the weighted mean is undefined."
        )


def _prepare(quaternions, weights):
    """
    Stack the quaternions and broadcast the weights to match.

    Returns
    -------
    (np.ndarray, np.ndarray)
        Components of shape (..., 4) and weights of shape (...), both in the
        precision of the quaternions.
    """
    if isinstance(quaternions, Quaternion):
        raise TypeError("Expected a collection of quaternions, got a single Quaternion.")
    if len(quaternions) == 0:
        raise DegenerateWeightsError("Cannot average an empty collection.")

    components = _stack_components(quaternions)
    if components.shape[-1] != QUATERNION_SIZE:
        raise ShapeMismatchError(f"Unexpected quaternion array shape {components.shape}")

    if weights is None:
        w = np.ones(components.shape[:-1], dtype=components.dtype)
    else:
        w = np.asarray(weights, dtype=components.dtype)
    if w.shape != components.shape[:-1]:
        raise ShapeMismatchError(
            f"Got {w.shape} weights for a collection of shape {components.shape[:-1]}"
        )
    return components, w


# =============================================================================
# MEAN
# =============================================================================

def _markley_mean(components: np.ndarray, w: np.ndarray) -> Quaternion:
    """Markley average of the rows of an (n, 4) component array."""
    _validate_weights(w)
    dtype = components.dtype

    # M = sum_i w_i * q_i q_i^T
    M = (components * w[:, np.newaxis]).T @ components

    # eigh sorts ascending: the last column belongs to the largest eigenvalue
    eigenvalues, eigenvectors = eigh(M.astype(np.promote_types(dtype, MIN_DECOMPOSITION_DTYPE)))
    logger.debug("Markley mean of %d quaternions, eigenvalue gap %.3e",
                 len(components), eigenvalues[-1] - eigenvalues[-2])

    # Eigenvectors of a symmetric matrix have unit length, no normalization
    v = eigenvectors[:, -1].astype(dtype)
    return nonzero_sign(Quaternion(*v, dtype=dtype))


def mean(quaternions, weights=None, axis=None):
    """
    Weighted mean orientation of a collection of unit quaternions.

    Parameters
    ----------
    quaternions : sequence of Quaternion, or a nested (2-D) sequence
        The orientations to average.
    weights : array_like, optional
        Non-negative weights of the same shape as the collection. Uniform
        when omitted.
    axis : {None, 0, 1}, optional
        Only used for 2-D collections. None pools every element into a single
        mean; 0 or 1 averages along that axis and returns one mean per slice
        of the other axis.

    Returns
    -------
    Quaternion or list of Quaternion
        Unit quaternion(s) in the precision of the inputs. The sign is
        canonicalized with nonzero_sign().

    Raises
    ------
    DegenerateWeightsError
        If the collection is empty or the weights are all zero, negative or
        non-finite.
    ShapeMismatchError
        If the weights do not match the collection.
    """
    components, w = _prepare(quaternions, weights)

    if components.ndim == 2:
        if axis not in (None, 0):
            raise ValueError(f"axis must be None or 0 for a 1-D collection, got {axis}")
        return _markley_mean(components, w)

    if components.ndim == 3:
        if axis is None:
            return _markley_mean(components.reshape(-1, QUATERNION_SIZE), w.reshape(-1))
        if axis not in (0, 1):
            raise ValueError(f"axis must be None, 0 or 1, got {axis}")
        # Put the averaged axis second and map over the first
        slices = np.moveaxis(components, axis, 1)
        slice_weights = np.moveaxis(w, axis, 1)
        return [_markley_mean(q, sw) for q, sw in zip(slices, slice_weights)]

    raise ShapeMismatchError(
        f"Expected a 1-D or 2-D collection of quaternions, got shape {components.shape[:-1]}"
    )


# =============================================================================
# COVARIANCE
# =============================================================================

def weighted_scatter(vectors, weights, corrected: bool = False) -> np.ndarray:
    """
    Weighted covariance of zero-mean observations.

        Sigma = sum_i w_i x_i x_i^T / V

    Parameters
    ----------
    vectors : array_like, shape (n, d)
        One observation per row, already expressed as deviations.
    weights : array_like, shape (n,)
        Non-negative weights.
    corrected : bool
        False divides by V = sum(w). True divides by
        V = sum(w) - sum(w^2) / sum(w), the unbiased normalization for
        reliability (importance) weights.

    Returns
    -------
    np.ndarray
        Symmetric (d, d) matrix in the precision of the observations.

    Raises
    ------
    DegenerateWeightsError
        If V is not positive (e.g. a single observation with corrected=True).
    """
    x = np.asarray(vectors)
    w = np.asarray(weights, dtype=x.dtype)
    if x.ndim != 2 or w.shape != (x.shape[0],):
        raise ShapeMismatchError(
            f"Expected (n, d) observations and n weights, got {x.shape} and {w.shape}"
        )
    _validate_weights(w)

    total = np.sum(w)
    if corrected:
        denominator = total - np.sum(w * w) / total
    else:
        denominator = total
    if not denominator > 0:
        raise DegenerateWeightsError(
            f"Covariance normalization {float(denominator):.3e} is not positive."
        )

    scatter = (x * w[:, np.newaxis]).T @ x
    return scatter / denominator


def mean_and_cov(quaternions, weights=None, corrected: bool = False):
    """
    Weighted mean and tangent-space covariance of a collection of quaternions.

    For particle filters use reliability weights, which describe the
    importance of each sample, together with corrected=True.

    Parameters
    ----------
    quaternions : sequence of Quaternion
    weights : array_like, optional
        Non-negative weights, uniform when omitted.
    corrected : bool
        Select the bias-corrected normalization, see weighted_scatter().

    Returns
    -------
    (Quaternion, np.ndarray)
        The mean (identical to mean(quaternions, weights)) and the 3x3
        covariance of difference(q_i, mean) in radians^2.
    """
    components, w = _prepare(quaternions, weights)
    if components.ndim != 2:
        raise ShapeMismatchError(
            "The covariance is defined for a 1-D collection of quaternions, "
            f"got shape {components.shape[:-1]}"
        )

    mu = _markley_mean(components, w)
    diffs = np.stack(difference_each(list(quaternions), mu))
    sigma = weighted_scatter(diffs, w, corrected=corrected)
    logger.debug("Covariance of %d quaternions (corrected=%s), trace %.3e rad^2",
                 len(diffs), corrected, float(np.trace(sigma)))
    return mu, sigma


def cov(quaternions, weights=None, corrected: bool = False) -> np.ndarray:
    """
    Tangent-space covariance of a collection of quaternions about their
    weighted mean. See mean_and_cov().
    """
    _, sigma = mean_and_cov(quaternions, weights, corrected=corrected)
    return sigma
