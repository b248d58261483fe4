"""
===============================================================================
KERNEL DISTRIBUTIONS - Rotation Perturbation Operators
===============================================================================

Exponential / logarithmic maps between rotation vectors and unit quaternions,
and the "plus" / "minus" operators built on them (Sola 2012, eqs. 158 and
161):

    qs = compose(qr, theta)        qs = qr (+) theta = qr * exp_map(theta)
    theta = difference(qs, qr)     theta = qs (-) qr = log_map(qr^-1 * qs)

A rotation vector theta is a 3-element array of the quaternion's precision:
direction = rotation axis, magnitude = rotation angle in radians. It lives in
the vector space tangent to the reference orientation, where ordinary vector
arithmetic (differences, covariances) is valid.

Both operators fall back to ordinary + and - for operands that are not
quaternions, so code that is generic over "rotation or real value" (e.g. a
particle filter state) can use them unconditionally.

References
----------
    [1] Sola, "Quaternion kinematics for the error-state Kalman filter",
        LAAS-CNRS, 2012.
===============================================================================
"""

import warnings

import numpy as np

from kernel_distributions.core.constants import ANTIPODAL_TOLERANCE, ROTATION_VECTOR_SIZE
from kernel_distributions.core.exceptions import NumericDomainWarning, ShapeMismatchError
from kernel_distributions.core.quaternion import Quaternion


# =============================================================================
# OPERAND CLASSIFICATION
# =============================================================================

def as_rotation_vector(v) -> np.ndarray:
    """
    Convert a single rotation vector to a floating numpy array of shape (3,).

    Floating inputs keep their precision, anything else becomes float64.

    Raises
    ------
    ShapeMismatchError
        If v is not a single 3-element vector.
    """
    v = np.asarray(v)
    if not np.issubdtype(v.dtype, np.floating):
        v = v.astype(np.float64)
    if v.shape != (ROTATION_VECTOR_SIZE,):
        raise ShapeMismatchError(
            f"A rotation vector has {ROTATION_VECTOR_SIZE} components, "
            f"got shape {v.shape}"
        )
    return v


def is_vector_collection(v) -> bool:
    """
    True if v holds several rotation vectors rather than a single one.

    Collections are a 2-D array whose COLUMNS are rotation vectors, or a
    list / tuple whose elements are vectors. A flat list of three numbers is a
    single vector, an empty list an empty collection.
    """
    if isinstance(v, np.ndarray):
        return v.ndim == 2
    if isinstance(v, (list, tuple)):
        return len(v) == 0 or np.ndim(v[0]) > 0
    return False


def is_quaternion_collection(x) -> bool:
    """True for a list, tuple or object array whose elements are quaternions."""
    if isinstance(x, np.ndarray):
        if x.dtype != object or x.ndim != 1:
            return False
    elif not isinstance(x, (list, tuple)):
        return False
    return all(isinstance(q, Quaternion) for q in x)


def rotation_vectors(v) -> list:
    """Split a collection of rotation vectors into a list of (3,) arrays."""
    if isinstance(v, np.ndarray):
        if v.ndim != 2 or v.shape[0] != ROTATION_VECTOR_SIZE:
            raise ShapeMismatchError(
                f"A matrix of rotation vectors must have {ROTATION_VECTOR_SIZE} "
                f"rows (one column per vector), got shape {v.shape}"
            )
        return [as_rotation_vector(column) for column in v.T]
    return [as_rotation_vector(u) for u in v]


# =============================================================================
# EXPONENTIAL / LOGARITHMIC MAP
# =============================================================================

def nonzero_sign(q: Quaternion) -> Quaternion:
    """
    Canonical representative of the rotation described by q.

    q and -q describe the same rotation. All four components are flipped when
    the sign bit of the scalar part is set, negative zero included, so that a
    near-identity result never reports a "negative" scalar part because of
    floating-point sign noise.
    """
    if np.signbit(q.scalar):
        return -q
    return q


def exp_map(v):
    """
    Convert an axis-angle rotation vector to a unit quaternion.

        exp_map(v) = exp([0, v / 2])

    The half-vector goes straight through the quaternion exponential, so
    there is no sin(theta/2) / theta division to guard at v = 0 and
    exp_map(0) is exactly the identity.

    Parameters
    ----------
    v : array_like
        A single 3-vector, a (3, N) array whose columns are rotation vectors,
        or a list of 3-vectors.

    Returns
    -------
    Quaternion or list of Quaternion
        Unit quaternion(s) of the same precision as v, with a non-negative
        scalar sign bit.
    """
    if is_vector_collection(v):
        return [exp_map(u) for u in rotation_vectors(v)]

    v = as_rotation_vector(v)
    half = v / 2
    return nonzero_sign(Quaternion(0, *half, dtype=v.dtype).exp())


def log_map(q):
    """
    Convert a unit quaternion to an axis-angle rotation vector.

        log_map(q) = 2 * imag(log(q))

    The rotation angle comes from atan2(|imag|, scalar), so the identity maps
    to the exact zero vector and the result stays bounded as the scalar part
    approaches -1. Close to -1 the axis is ill-conditioned and a
    NumericDomainWarning is issued.

    Parameters
    ----------
    q : Quaternion or sequence of Quaternion

    Returns
    -------
    np.ndarray or list of np.ndarray
        Rotation vector(s) of shape (3,) in the precision of q.
    """
    if not isinstance(q, Quaternion):
        return [log_map(p) for p in q]

    if q.scalar < ANTIPODAL_TOLERANCE - 1:
        warnings.warn(
            f"log_map of a quaternion with scalar part {float(q.scalar):.8f}: "
            "the rotation axis is ill-conditioned close to -1.",
            NumericDomainWarning,
            stacklevel=2,
        )
    return 2 * q.log().vector


# =============================================================================
# PLUS / MINUS OPERATORS
# =============================================================================

def compose(reference, perturbation):
    """
    The "plus" operator: apply a (small) rotation to a reference orientation.

    - Quaternion (+) rotation vector -> compose(reference, exp_map(vector))
    - Quaternion (+) Quaternion      -> nonzero_sign(reference * perturbation)
    - anything else                  -> reference + perturbation

    Quaternion multiplication is not commutative; the perturbation is applied
    on the right, i.e. expressed in the reference frame.

    A collection on either side (list of quaternions, list of vectors or a
    (3, N) matrix of columns) is handed to compose_each(), which returns a
    list and raises ShapeMismatchError for collections of different lengths.
    """
    references_many = is_quaternion_collection(reference)
    if references_many or (isinstance(reference, Quaternion) and (
            is_quaternion_collection(perturbation) or is_vector_collection(perturbation))):
        from kernel_distributions.broadcast import compose_each
        return compose_each(reference, perturbation)

    if isinstance(reference, Quaternion):
        if isinstance(perturbation, Quaternion):
            return nonzero_sign(reference * perturbation)
        return compose(reference, exp_map(as_rotation_vector(perturbation)))
    if isinstance(perturbation, Quaternion) or is_quaternion_collection(perturbation):
        raise TypeError("Cannot compose a non-quaternion reference with a quaternion.")
    return reference + perturbation


def difference(sample, reference):
    """
    The "minus" operator, inverse of compose().

        difference(qs, qr) = log_map(qr^-1 * qs)

    returns the rotation vector from the reference to the sample, expressed in
    the tangent space of the reference. The relative rotation qr^-1 * qs is
    taken on the short arc (non-negative scalar sign bit), so that

        difference(compose(q, theta), q) == theta   for |theta| < pi

    holds for every unit quaternion q. Operand order matters.

    Collections of quaternions on either side are handed to
    difference_each(). Non-quaternion operands fall back to
    sample - reference.
    """
    if is_quaternion_collection(sample) or is_quaternion_collection(reference):
        from kernel_distributions.broadcast import difference_each
        return difference_each(sample, reference)

    sample_is_quat = isinstance(sample, Quaternion)
    reference_is_quat = isinstance(reference, Quaternion)
    if sample_is_quat and reference_is_quat:
        return log_map(nonzero_sign(reference.inverse() * sample))
    if sample_is_quat or reference_is_quat:
        raise TypeError("Both operands of a quaternion difference must be quaternions.")
    return sample - reference


def outer_product(x) -> np.ndarray:
    """
    Interpret x as a column vector and return x * x^T.

    A quaternion is read as [w, x, y, z], giving a symmetric 4x4 matrix.
    """
    if isinstance(x, Quaternion):
        x = x.components
    x = np.asarray(x)
    return np.outer(x, x)
