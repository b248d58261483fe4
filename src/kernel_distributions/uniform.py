"""
Uniform distribution over rotations and the identity transform of the
quaternion domain.

Unit quaternions already occupy the whole domain of the distribution, so no
reparametrization is needed before sampling or optimizing: the transform
attached to QuaternionUniform is ZeroIdentity, the identity map with a zero
log-Jacobian.
"""

from dataclasses import dataclass

import numpy as np

from kernel_distributions.core.constants import (
    LOG_UNIFORM_QUATERNION_DENSITY, QUATERNION_SIZE, SUPPORTED_DTYPES,
)
from kernel_distributions.core.quaternion import Quaternion


@dataclass(frozen=True)
class ZeroIdentity:
    """
    Identity transform whose log|det J| is zero everywhere.

    Usable wherever a domain transform (bijector) is expected; signals that
    the values already live in the unconstrained domain.
    """

    def __call__(self, x):
        return x

    def inverse(self, y):
        return y

    def log_abs_det_jacobian(self, x):
        """Zero, or an array of zeros matching a collection of values."""
        if isinstance(x, Quaternion):
            return x.dtype.type(0)
        if isinstance(x, (list, tuple)):
            return np.zeros(len(x))
        x = np.asarray(x)
        if np.issubdtype(x.dtype, np.floating):
            return np.zeros_like(x)
        return np.zeros(x.shape)


class QuaternionUniform:
    """
    Uniform distribution over unit quaternions.

    A standard-normal 4-vector has a rotationally symmetric density, so its
    normalization is uniformly distributed on the unit 3-sphere.

    Parameters
    ----------
    dtype : numpy dtype
        Precision of the samples and of the log-density.
    """

    def __init__(self, dtype=np.float64) -> None:
        self.dtype = np.dtype(dtype)
        if self.dtype.name not in SUPPORTED_DTYPES:
            raise ValueError(
                f"Unsupported precision {self.dtype.name}, "
                f"expected one of {sorted(SUPPORTED_DTYPES)}"
            )

    def __repr__(self) -> str:
        return f"QuaternionUniform(dtype={self.dtype.name})"

    def _draw(self, rng: np.random.Generator) -> Quaternion:
        # Generator.standard_normal only produces float32 / float64
        sample_dtype = np.promote_types(self.dtype, np.float32)
        components = rng.standard_normal(QUATERNION_SIZE, dtype=sample_dtype)
        return Quaternion(*components.astype(self.dtype), dtype=self.dtype).sign()

    def rand(self, rng=None, size=None):
        """
        Draw random unit quaternions.

        Parameters
        ----------
        rng : np.random.Generator or int, optional
            Random source (or a seed for one). A fresh generator when omitted.
        size : int, optional
            Number of samples. None returns a single Quaternion.

        Returns
        -------
        Quaternion or list of Quaternion
        """
        rng = np.random.default_rng(rng)
        if size is None:
            return self._draw(rng)
        return [self._draw(rng) for _ in range(size)]

    def logdensity(self, x):
        """
        Log-density -log(pi^2) of any quaternion, or an array of it for a
        collection of quaternions.

        q and -q are the same rotation, so the density on SO(3) is twice the
        density 1 / (2 pi^2) of the unit 3-sphere.
        """
        value = self.dtype.type(LOG_UNIFORM_QUATERNION_DENSITY)
        if isinstance(x, Quaternion):
            return value
        return np.full(len(x), value, dtype=self.dtype)

    def bijector(self) -> ZeroIdentity:
        """Transform to the unconstrained domain: the identity."""
        return ZeroIdentity()
