"""
===============================================================================
KERNEL DISTRIBUTIONS - Quaternion Type Test Suite
===============================================================================
Tests for the Quaternion class covering identity, precision handling,
conjugate, Hamilton product, inverse, normalization, exponential and
logarithm, and comparisons.

All floating-point comparisons use numpy.testing.assert_allclose with
explicit tolerances appropriate for the precision under test.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from kernel_distributions.core.exceptions import ShapeMismatchError
from kernel_distributions.core.quaternion import Quaternion


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def identity_quat():
    """Return the identity quaternion [1, 0, 0, 0]."""
    return Quaternion.identity()


@pytest.fixture
def quat_90z():
    """Return a quaternion representing 90-degree rotation about Z axis."""
    return Quaternion(np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4))


@pytest.fixture
def unit_quat():
    """Return a general unit quaternion."""
    return Quaternion(1.0, 2.0, 3.0, 4.0).normalize()


# =============================================================================
# Test: Identity and construction
# =============================================================================

class TestConstruction:
    """Tests for factories and precision inference."""

    def test_identity(self, identity_quat):
        """Quaternion.identity() should be [1, 0, 0, 0] in float64."""
        assert_allclose(identity_quat.components, [1.0, 0.0, 0.0, 0.0], atol=0)
        assert identity_quat.dtype == np.float64

    @pytest.mark.parametrize("dtype", [np.float16, np.float32, np.float64])
    def test_identity_dtype(self, dtype):
        """The identity carries the requested precision."""
        assert Quaternion.identity(dtype).dtype == dtype

    def test_integer_components_become_float64(self):
        q = Quaternion(1, 2, 3, 4)
        assert q.dtype == np.float64
        assert_allclose(q.components, [1.0, 2.0, 3.0, 4.0])

    def test_numpy_scalars_keep_precision(self):
        q = Quaternion(np.float32(1), np.float32(0), np.float32(0), np.float32(0))
        assert q.dtype == np.float32

    def test_constructor_does_not_normalize(self):
        q = Quaternion(2.0, 0.0, 0.0, 0.0)
        assert_allclose(q.norm, 2.0)

    def test_from_components(self):
        q = Quaternion.from_components(np.array([0.5, 0.5, 0.5, 0.5], dtype=np.float32))
        assert q.dtype == np.float32
        assert_allclose(q.vector, [0.5, 0.5, 0.5])

    def test_from_components_wrong_size_raises(self):
        with pytest.raises(ShapeMismatchError):
            Quaternion.from_components([1.0, 0.0, 0.0])

    def test_accessors_return_copies(self, unit_quat):
        components = unit_quat.components
        components[0] = 42.0
        assert unit_quat.w != 42.0


# =============================================================================
# Test: Conjugate and inverse
# =============================================================================

class TestConjugateInverse:
    """Tests for quaternion conjugate and inverse."""

    def test_conjugate(self, quat_90z):
        """q.conjugate() should flip the vector part signs."""
        qc = quat_90z.conjugate()
        assert_allclose(qc.components, quat_90z.components * [1, -1, -1, -1], atol=0)

    def test_double_conjugate(self, unit_quat):
        assert unit_quat.conjugate().conjugate() == unit_quat

    def test_multiply_inverse(self, unit_quat):
        """q * q.inverse() should yield the identity quaternion."""
        result = unit_quat * unit_quat.inverse()
        assert_allclose(result.components, [1.0, 0.0, 0.0, 0.0], atol=1e-14)

    def test_inverse_of_non_unit(self):
        q = Quaternion(1.0, 1.0, 0.0, 0.0)
        result = q.inverse() * q
        assert_allclose(result.components, [1.0, 0.0, 0.0, 0.0], atol=1e-15)

    def test_inverse_of_zero_raises(self):
        with pytest.raises(ValueError):
            Quaternion(0.0, 0.0, 0.0, 0.0).inverse()


# =============================================================================
# Test: Hamilton product
# =============================================================================

class TestMultiply:
    """Tests for the Hamilton product."""

    def test_multiply_identity_exact(self, unit_quat, identity_quat):
        """q * identity and identity * q reproduce q bit for bit."""
        assert unit_quat * identity_quat == unit_quat
        assert identity_quat * unit_quat == unit_quat

    def test_basis_products(self):
        """i * j = k, j * i = -k."""
        i = Quaternion(0.0, 1.0, 0.0, 0.0)
        j = Quaternion(0.0, 0.0, 1.0, 0.0)
        assert_allclose((i * j).components, [0.0, 0.0, 0.0, 1.0], atol=0)
        assert_allclose((j * i).components, [0.0, 0.0, 0.0, -1.0], atol=0)

    def test_composition_of_rotations(self, quat_90z):
        """Two 90-degree rotations about Z give a 180-degree rotation."""
        result = quat_90z * quat_90z
        assert_allclose(result.components, [0.0, 0.0, 0.0, 1.0], atol=1e-15)

    def test_multiply_keeps_precision(self):
        q = Quaternion.identity(np.float32)
        p = Quaternion(*np.array([0.5, 0.5, 0.5, 0.5], dtype=np.float32))
        assert (q * p).dtype == np.float32

    def test_scalar_multiplication(self, unit_quat):
        assert_allclose((2.0 * unit_quat).components, 2.0 * unit_quat.components)
        assert_allclose((unit_quat * 2.0).components, 2.0 * unit_quat.components)


# =============================================================================
# Test: Normalization
# =============================================================================

class TestNormalize:
    """Tests for quaternion normalization."""

    def test_normalize(self):
        q = Quaternion(2.0, 0.0, 0.0, 0.0).normalize()
        assert_allclose(q.components, [1.0, 0.0, 0.0, 0.0], atol=1e-15)

    @pytest.mark.parametrize("w,x,y,z", [
        (3.0, 4.0, 0.0, 0.0),
        (0.0, 0.0, 1.0, 1.0),
        (-1.0, 2.0, 3.0, 4.0),
    ])
    def test_normalize_parametrized(self, w, x, y, z):
        """After normalization, norm must be 1 for various inputs."""
        q = Quaternion(w, x, y, z).normalize()
        assert_allclose(q.norm, 1.0, atol=1e-14)
        assert q.is_unit()

    def test_normalize_zero_raises(self):
        with pytest.raises(ValueError):
            Quaternion(0.0, 0.0, 0.0, 0.0).normalize()

    def test_sign_of_zero_is_identity(self):
        q = Quaternion(0.0, 0.0, 0.0, 0.0, dtype=np.float32).sign()
        assert q == Quaternion.identity(np.float32)


# =============================================================================
# Test: Exponential and logarithm
# =============================================================================

class TestExpLog:
    """Tests for the quaternion exponential and logarithm."""

    def test_exp_of_zero_is_identity(self):
        assert Quaternion(0.0, 0.0, 0.0, 0.0).exp() == Quaternion.identity()

    def test_log_of_identity_is_zero(self, identity_quat):
        assert np.array_equal(identity_quat.log().components, np.zeros(4))

    def test_exp_pure_quaternion(self):
        """exp([0, theta * n]) = [cos(theta), sin(theta) * n]."""
        q = Quaternion(0.0, 0.0, 0.0, np.pi / 4).exp()
        assert_allclose(q.components, [np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)],
                        atol=1e-15)

    def test_exp_real_part(self):
        q = Quaternion(1.0, 0.0, 0.0, 0.0).exp()
        assert_allclose(q.components, [np.e, 0.0, 0.0, 0.0], atol=1e-15)

    def test_exp_log_roundtrip(self, unit_quat):
        assert unit_quat.log().exp().isclose(unit_quat, rtol=0, atol=1e-14)

    def test_log_of_non_unit(self):
        """The scalar part of log(q) is log|q|."""
        q = Quaternion(2.0, 0.0, 0.0, 0.0)
        assert_allclose(q.log().components, [np.log(2.0), 0.0, 0.0, 0.0], atol=1e-15)

    @pytest.mark.parametrize("dtype", [np.float16, np.float32, np.float64])
    def test_exp_log_keep_precision(self, dtype):
        q = Quaternion(0.0, 0.1, -0.2, 0.3, dtype=dtype)
        assert q.exp().dtype == dtype
        assert q.exp().log().dtype == dtype


# =============================================================================
# Test: Comparisons
# =============================================================================

class TestComparison:
    """Tests for equality, closeness and rotation equivalence."""

    def test_equality_is_exact(self, unit_quat):
        perturbed = Quaternion(*(unit_quat.components + [1e-12, 0, 0, 0]))
        assert unit_quat != perturbed
        assert unit_quat.isclose(perturbed)

    def test_equality_requires_same_precision(self):
        assert Quaternion.identity(np.float32) != Quaternion.identity(np.float64)

    def test_same_rotation_accounts_for_sign(self, unit_quat):
        assert unit_quat.same_rotation(-unit_quat)
        assert not unit_quat.isclose(-unit_quat)

    def test_equal_quaternions_hash_equal(self, unit_quat):
        assert hash(unit_quat) == hash(Quaternion(*unit_quat.components))

    def test_repr_shows_precision(self):
        assert 'float32' in repr(Quaternion.identity(np.float32))
