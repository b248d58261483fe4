"""
===============================================================================
KERNEL DISTRIBUTIONS - Quaternion Type
===============================================================================

Fixed-size quaternion type used by the rotation perturbation and statistics
code. Unit quaternions represent rotations; the exponential and logarithm
defined here are the building blocks of the exponential/logarithmic maps
between rotation vectors and orientations.

Convention
----------
We use the scalar-first convention:

    q = [q_w, q_x, q_y, q_z] = q_w + q_x*i + q_y*j + q_z*k

where q_w is the scalar (real) part and [q_x, q_y, q_z] is the vector
(imaginary) part.

Precision
---------
Every quaternion carries exactly one floating-point precision (float16,
float32 or float64). The precision is selected when the quaternion is
created and every operation returns a result of the same precision, so a
float32 particle filter never silently computes in float64.

Unlike a general attitude library, the constructor does NOT normalize: the
quaternion exponential and logarithm act on arbitrary quaternions, and the
perturbation operators rely on bit-exact products (identity * q == q).

References
----------
    [1] Sola, "Quaternion kinematics for the error-state Kalman filter",
        LAAS-CNRS, 2012.
    [2] Markley & Crassidis, "Fundamentals of Spacecraft Attitude
        Determination and Control", Springer, 2014.
===============================================================================
"""

import numpy as np
from typing import Union

from kernel_distributions.core.constants import (
    NORM_TOLERANCE, QUATERNION_SIZE, UNIT_NORM_TOLERANCE,
)
from kernel_distributions.core.exceptions import ShapeMismatchError


def _infer_dtype(*values) -> np.dtype:
    """Floating dtype shared by the given components (integers -> float64)."""
    dtype = np.result_type(*[np.asarray(v) for v in values])
    if not np.issubdtype(dtype, np.floating):
        return np.dtype(np.float64)
    return dtype


class Quaternion:
    """
    Quaternion with a fixed floating-point precision.

    A unit quaternion q = [w, x, y, z] parameterizes a rotation by angle theta
    about unit axis n as:

        q = [cos(theta/2), sin(theta/2) * n_x, sin(theta/2) * n_y, sin(theta/2) * n_z]

    Attributes
    ----------
    w : numpy scalar
        Scalar (real) component of the quaternion.
    x, y, z : numpy scalar
        Imaginary components (i, j, k axes).

    Examples
    --------
    >>> q = Quaternion(1.0, 0.0, 0.0, 0.0)                   # float64 identity
    >>> q32 = Quaternion.identity(np.float32)                # float32 identity
    >>> p = Quaternion.from_components(np.array([0.5, 0.5, 0.5, 0.5], np.float32))
    """

    def __init__(self, w, x, y, z, dtype=None) -> None:
        """
        Initialize a quaternion with scalar-first convention.

        Parameters
        ----------
        w : float
            Scalar part (cos(theta/2) for a rotation by angle theta).
        x, y, z : float
            Components of the vector part.
        dtype : numpy dtype, optional
            Precision of the quaternion. Inferred from the components when
            omitted: numpy scalars keep their precision, Python floats and
            integers give float64.
        """
        if dtype is None:
            dtype = _infer_dtype(w, x, y, z)
        self._q = np.array([w, x, y, z], dtype=dtype)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def w(self):
        """Scalar (real) part of the quaternion."""
        return self._q[0]

    @property
    def x(self):
        """First imaginary component (i-axis)."""
        return self._q[1]

    @property
    def y(self):
        """Second imaginary component (j-axis)."""
        return self._q[2]

    @property
    def z(self):
        """Third imaginary component (k-axis)."""
        return self._q[3]

    @property
    def scalar(self):
        """Scalar part of the quaternion (alias for w)."""
        return self._q[0]

    @property
    def vector(self) -> np.ndarray:
        """Vector (imaginary) part [x, y, z] as a new array."""
        return self._q[1:4].copy()

    @property
    def components(self) -> np.ndarray:
        """Full quaternion as a new 4-element array [w, x, y, z]."""
        return self._q.copy()

    @property
    def dtype(self) -> np.dtype:
        """Floating-point precision of the components."""
        return self._q.dtype

    @property
    def norm(self):
        """
        L2 norm (magnitude) of the quaternion, in the quaternion's precision.

        For a valid rotation quaternion this is 1 within floating-point
        tolerance.
        """
        return np.sqrt(np.dot(self._q, self._q))

    # =========================================================================
    # FACTORY METHODS
    # =========================================================================

    @staticmethod
    def identity(dtype=np.float64) -> 'Quaternion':
        """
        Create the identity quaternion [1, 0, 0, 0] of the given precision.

        The identity quaternion represents zero rotation and is the
        multiplicative identity: q * identity = identity * q = q.
        """
        return Quaternion(1, 0, 0, 0, dtype=dtype)

    @staticmethod
    def from_components(components) -> 'Quaternion':
        """
        Create a quaternion from a 4-element array [w, x, y, z].

        Parameters
        ----------
        components : array_like
            Four components, scalar first. A floating array keeps its
            precision, anything else becomes float64.

        Raises
        ------
        ShapeMismatchError
            If the input does not hold exactly four components.
        """
        components = np.asarray(components)
        if components.shape != (QUATERNION_SIZE,):
            raise ShapeMismatchError(
                f"A quaternion has {QUATERNION_SIZE} components, "
                f"got shape {components.shape}"
            )
        dtype = _infer_dtype(components)
        return Quaternion(*components, dtype=dtype)

    # =========================================================================
    # QUATERNION ARITHMETIC
    # =========================================================================

    def conjugate(self) -> 'Quaternion':
        """
        Return the quaternion conjugate [w, -x, -y, -z].

        For unit quaternions the conjugate equals the inverse and represents
        the reverse rotation.
        """
        return Quaternion(self.w, -self.x, -self.y, -self.z, dtype=self.dtype)

    def inverse(self) -> 'Quaternion':
        """
        Return the multiplicative inverse q* / |q|^2.

        Raises
        ------
        ValueError
            If the quaternion is zero.
        """
        norm_sq = np.dot(self._q, self._q)
        if norm_sq < NORM_TOLERANCE ** 2:
            raise ValueError("The zero quaternion has no inverse.")
        conj = self.conjugate()._q
        return Quaternion(*(conj / norm_sq), dtype=self.dtype)

    def multiply(self, other: 'Quaternion') -> 'Quaternion':
        """
        Multiply this quaternion by another (Hamilton product).

        Quaternion multiplication is NOT commutative: q1 * q2 != q2 * q1
        in general. The product self * other rotates a vector first by
        'other' and then by 'self'.

            (a1 + b1*i + c1*j + d1*k) * (a2 + b2*i + c2*j + d2*k) =

            (a1*a2 - b1*b2 - c1*c2 - d1*d2) +
            (a1*b2 + b1*a2 + c1*d2 - d1*c2) i +
            (a1*c2 - b1*d2 + c1*a2 + d1*b2) j +
            (a1*d2 + b1*c2 - c1*b2 + d1*a2) k

        Parameters
        ----------
        other : Quaternion
            The right-hand quaternion in the product.

        Returns
        -------
        Quaternion
            The Hamilton product self * other, in the common precision.
        """
        a1, b1, c1, d1 = self._q
        a2, b2, c2, d2 = other._q

        w = a1 * a2 - b1 * b2 - c1 * c2 - d1 * d2
        x = a1 * b2 + b1 * a2 + c1 * d2 - d1 * c2
        y = a1 * c2 - b1 * d2 + c1 * a2 + d1 * b2
        z = a1 * d2 + b1 * c2 - c1 * b2 + d1 * a2

        return Quaternion(w, x, y, z,
                          dtype=np.result_type(self.dtype, other.dtype))

    def normalize(self) -> 'Quaternion':
        """
        Return a new quaternion with |q| = 1.

        Raises
        ------
        ValueError
            If the quaternion has near-zero norm (degenerate case).
        """
        n = self.norm
        if n < NORM_TOLERANCE:
            raise ValueError(
                f"Cannot normalize near-zero quaternion (norm = {float(n):.2e})."
            )
        return Quaternion(*(self._q / n), dtype=self.dtype)

    def sign(self) -> 'Quaternion':
        """
        Return q / |q|, mapping the zero quaternion to the identity.

        Used when a unit quaternion is drawn by normalizing a random
        4-vector: the (measure zero) zero draw must still yield a rotation.
        """
        if self.norm < NORM_TOLERANCE:
            return Quaternion.identity(self.dtype)
        return self.normalize()

    def exp(self) -> 'Quaternion':
        """
        Quaternion exponential.

        For q = [s, v] with theta = |v|:

            exp(q) = e^s * [cos(theta), sin(theta) / theta * v]

        sin(theta) / theta is evaluated with numpy's normalized sinc, which
        is finite at theta = 0, so exp of the zero quaternion is exactly the
        identity without a separate zero branch.
        """
        s = self._q[0]
        v = self._q[1:4]
        theta = np.sqrt(np.dot(v, v))
        es = np.exp(s)
        scale = es * np.sinc(theta / np.pi)
        return Quaternion(es * np.cos(theta), *(scale * v), dtype=self.dtype)

    def log(self) -> 'Quaternion':
        """
        Quaternion logarithm.

        For q = |q| * [cos(theta), sin(theta) * n]:

            log(q) = [log|q|, theta * n]

        theta = atan2(|v|, s) stays well conditioned near theta = 0 and
        theta = pi, where arccos would lose precision. The identity maps to
        the zero quaternion exactly.
        """
        a = self.norm
        q = self._q / a
        s = q[0]
        v = q[1:4]
        m = np.sqrt(np.dot(v, v))
        theta = np.arctan2(m, s)
        scale = theta / np.where(m == 0, np.ones_like(m), m)
        return Quaternion(np.log(a), *(scale * v), dtype=self.dtype)

    # =========================================================================
    # COMPARISON
    # =========================================================================

    def is_unit(self, tolerance: float = UNIT_NORM_TOLERANCE) -> bool:
        """True if |q| is within tolerance of 1."""
        return bool(abs(float(self.norm) - 1.0) < tolerance)

    def isclose(self, other: 'Quaternion', rtol: float = 1e-5,
                atol: float = 1e-6) -> bool:
        """Component-wise closeness (q and -q are NOT considered close)."""
        return bool(np.allclose(self._q, other._q, rtol=rtol, atol=atol))

    def same_rotation(self, other: 'Quaternion', atol: float = 1e-6) -> bool:
        """
        True if both quaternions represent the same rotation.

        q and -q describe the same orientation, so both signs are checked.
        """
        diff_pos = np.linalg.norm((self._q - other._q).astype(np.float64))
        diff_neg = np.linalg.norm((self._q + other._q).astype(np.float64))
        return bool(min(diff_pos, diff_neg) < atol)

    # =========================================================================
    # OPERATOR OVERLOADS
    # =========================================================================

    def __mul__(self, other: Union['Quaternion', float, int]) -> 'Quaternion':
        """
        - Quaternion * Quaternion -> Hamilton product
        - Quaternion * scalar -> component-wise scaling (not a unit quaternion)
        """
        if isinstance(other, Quaternion):
            return self.multiply(other)
        if isinstance(other, (int, float, np.number)):
            return Quaternion(*(self._q * other), dtype=self.dtype)
        return NotImplemented

    def __rmul__(self, other: Union[float, int]) -> 'Quaternion':
        """Right-multiplication by a scalar: scalar * Quaternion."""
        if isinstance(other, (int, float, np.number)):
            return Quaternion(*(self._q * other), dtype=self.dtype)
        return NotImplemented

    def __neg__(self) -> 'Quaternion':
        """Negate all components. -q represents the same rotation as q."""
        return Quaternion(*(-self._q), dtype=self.dtype)

    def __eq__(self, other: object) -> bool:
        """
        Exact equality of precision and components.

        Use isclose() or same_rotation() for tolerance-based comparisons.
        """
        if not isinstance(other, Quaternion):
            return NotImplemented
        return self.dtype == other.dtype and bool(np.array_equal(self._q, other._q))

    def __hash__(self) -> int:
        return hash((self.dtype.str,) + tuple(self._q.tolist()))

    def __repr__(self) -> str:
        return (f"Quaternion(w={float(self.w):+.8f}, x={float(self.x):+.8f}, "
                f"y={float(self.y):+.8f}, z={float(self.z):+.8f}, "
                f"dtype={self.dtype.name})")
