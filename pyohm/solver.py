"""Dense Gauss-Jordan elimination with partial pivoting."""

from __future__ import annotations
import logging
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax import Array, lax

from .config import SimConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


class LinearSolution(NamedTuple):
    """Outcome of solve_linear. x is None when the system is singular."""
    x: Array | None
    singular: bool


@jax.jit
def _eliminate(A: Array, z: Array, tol: Array) -> tuple[Array, Array]:
    """
    Reduce [A | z] to [I | x] in one traced loop.

    Returns (x, smallest pivot magnitude seen). A pivot below tol is replaced
    by 1.0 so the loop stays finite; the caller discards x in that case.
    """
    n = A.shape[0]
    M = jnp.concatenate([A, z.reshape((n, 1))], axis=1)
    rows = jnp.arange(n)

    def body(i, carry):
        M, smallest = carry
        # Largest magnitude at or below the diagonal (first one on ties)
        candidates = jnp.where(rows >= i, jnp.abs(M[:, i]), -1.0)
        piv = jnp.argmax(candidates)
        swap = jnp.stack([i, piv])
        M = M.at[swap].set(M[swap[::-1]])

        pivot = M[i, i]
        magnitude = jnp.abs(pivot)
        smallest = jnp.minimum(smallest, magnitude)
        pivot = jnp.where(magnitude < tol, 1.0, pivot)

        # Normalize pivot row, then clear column i from every other row
        row = M[i] / pivot
        factors = M[:, i].at[i].set(0.0)
        M = M - factors[:, None] * row[None, :]
        M = M.at[i].set(row)
        return M, smallest

    M, smallest = lax.fori_loop(0, n, body, (M, jnp.asarray(jnp.inf, dtype=M.dtype)))
    return M[:, n], smallest


def solve_linear(A: Array, z: Array, config: SimConfig = DEFAULT_CONFIG) -> LinearSolution:
    """
    Solve A x = z on the augmented matrix [A | z].

    For each column the row with the largest magnitude at or below the
    diagonal is swapped into place. A pivot smaller than
    config.pivot_tolerance marks the system singular; no NaNs are produced
    and nothing is raised.

    The elimination runs as one compiled loop per matrix size, and the
    singular check happens once on the host afterwards.

    Args:
        A: (n, n) matrix
        z: (n,) right-hand side

    Returns:
        LinearSolution(x, singular)
    """
    n = A.shape[0]
    if n == 0:
        return LinearSolution(x=jnp.zeros(0, dtype=jnp.float64), singular=False)

    x, smallest = _eliminate(
        jnp.asarray(A, dtype=jnp.float64),
        jnp.asarray(z, dtype=jnp.float64),
        jnp.asarray(config.pivot_tolerance, dtype=jnp.float64),
    )
    smallest = float(smallest)
    if smallest < config.pivot_tolerance:
        logger.debug("Singular system: smallest pivot %.3e in %d unknowns", smallest, n)
        return LinearSolution(x=None, singular=True)

    return LinearSolution(x=x, singular=False)
