"""
Element-wise lifting of compose() and difference() over collections.

A quaternion and a rotation vector are both small fixed-size aggregates, so
implicit array broadcasting would mistake them for collections of their own
components. The entry points below therefore distinguish the four cases
explicitly:

    single     x single      -> single result
    single     x collection  -> one result per collection element
    collection x single      -> one result per collection element
    collection x collection  -> element-wise, lengths must match

Collections of quaternions are lists, tuples or object arrays of Quaternion.
Collections of rotation vectors are lists of 3-vectors or (3, N) arrays whose
columns are the vectors. Operands that are not quaternions fall back to
ordinary numpy broadcasting of + and -.
"""

import numpy as np

from kernel_distributions.core.exceptions import ShapeMismatchError
from kernel_distributions.core.quaternion import Quaternion
from kernel_distributions.perturbation import (
    as_rotation_vector, compose, difference, exp_map, is_quaternion_collection,
    is_vector_collection, rotation_vectors,
)


def _check_lengths(n_left: int, n_right: int) -> None:
    if n_left != n_right:
        raise ShapeMismatchError(
            f"Cannot combine collections of {n_left} and {n_right} elements "
            "element-wise."
        )


def _perturbation_items(perturbations):
    """List of perturbations for a collection, None for a single one."""
    if isinstance(perturbations, Quaternion):
        return None
    if is_quaternion_collection(perturbations) and len(perturbations) > 0:
        return list(perturbations)
    if is_vector_collection(perturbations):
        return rotation_vectors(perturbations)
    return None


def compose_each(references, perturbations):
    """
    Apply compose() element-wise.

    Parameters
    ----------
    references : Quaternion or collection of Quaternion
        Reference orientation(s).
    perturbations : rotation vector, Quaternion, or a collection of either
        A (3, N) array is read column by column.

    Returns
    -------
    Quaternion or list of Quaternion
        A single quaternion only when both operands are single.

    Raises
    ------
    ShapeMismatchError
        If both operands are collections of different lengths, or a
        perturbation is not a rotation vector.
    """
    references_many = is_quaternion_collection(references)
    if not references_many and not isinstance(references, Quaternion):
        return np.asarray(references) + np.asarray(perturbations)

    items = _perturbation_items(perturbations)
    if items is None and not isinstance(perturbations, Quaternion):
        # Exponentiate a shared rotation vector once
        perturbations = exp_map(as_rotation_vector(perturbations))

    if not references_many:
        if items is None:
            return compose(references, perturbations)
        return [compose(references, p) for p in items]

    if items is None:
        return [compose(r, perturbations) for r in references]
    _check_lengths(len(references), len(items))
    return [compose(r, p) for r, p in zip(references, items)]


def difference_each(samples, references):
    """
    Apply difference() element-wise.

    Parameters
    ----------
    samples : Quaternion or collection of Quaternion
    references : Quaternion or collection of Quaternion

    Returns
    -------
    np.ndarray or list of np.ndarray
        A single rotation vector only when both operands are single.

    Raises
    ------
    ShapeMismatchError
        If both operands are collections of different lengths.
    """
    samples_many = is_quaternion_collection(samples)
    references_many = is_quaternion_collection(references)
    if not (samples_many or references_many or isinstance(samples, Quaternion)
            or isinstance(references, Quaternion)):
        return np.asarray(samples) - np.asarray(references)

    if samples_many and references_many:
        _check_lengths(len(samples), len(references))
        return [difference(s, r) for s, r in zip(samples, references)]
    if samples_many:
        return [difference(s, references) for s in samples]
    if references_many:
        return [difference(samples, r) for r in references]
    return difference(samples, references)
