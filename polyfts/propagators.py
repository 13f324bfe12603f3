"""Chain propagators for discrete chains and ground-state-dominant homopolymers."""

from __future__ import annotations

import cmath
from dataclasses import dataclass

import numpy as np

from polyfts.grid import Grid

__all__ = [
    "GSDResult",
    "diblock_discrete",
    "homopolymer_discrete",
    "homopolymer_continuous_gsd",
]


def _bond_step(grid: Grid, q_prev: np.ndarray, bond, weight: np.ndarray) -> np.ndarray:
    return grid.fft_backward(grid.fft_forward(q_prev) * bond) * weight


def diblock_discrete(
    grid: Grid, w_a, w_b, bond, n_segments: int, n_a: int
) -> tuple[complex, np.ndarray, np.ndarray]:
    """Propagate a discrete A-B diblock of ``n_segments`` beads, ``n_a`` of them A.

    Returns the single-chain partition function with the forward propagator
    ``q`` and the complementary propagator ``qdag``, each ``(n_segments, m)``.
    """
    if n_segments < 1:
        raise ValueError("a chain needs at least one segment")
    if not 0 <= n_a <= n_segments:
        raise ValueError("number of A segments must lie in 0..n_segments")
    exp_a = np.exp(-np.asarray(w_a, dtype=complex))
    exp_b = np.exp(-np.asarray(w_b, dtype=complex))

    q = np.empty((n_segments, grid.m), dtype=complex)
    qdag = np.empty_like(q)
    q[0] = exp_a if n_a != 0 else exp_b
    qdag[0] = exp_b if n_a != n_segments else exp_a

    two_sided = n_a not in (0, n_segments)
    for n in range(1, n_segments):
        weight = exp_a if n_a > 0 and n < n_a else exp_b
        q[n] = _bond_step(grid, q[n - 1], bond, weight)
        if two_sided:
            weight = exp_b if n <= n_segments - n_a - 1 else exp_a
            qdag[n] = _bond_step(grid, qdag[n - 1], bond, weight)
        else:
            qdag[n] = q[n]

    partition = grid.integrate(q[n_segments - 1]) / grid.volume
    return partition, q, qdag


def homopolymer_discrete(
    grid: Grid, w, bond, n_segments: int
) -> tuple[complex, np.ndarray]:
    """Propagate a discrete homopolymer; returns its partition function and ``q``."""
    if n_segments < 1:
        raise ValueError("a chain needs at least one segment")
    weight = np.exp(-np.asarray(w, dtype=complex))
    q = np.empty((n_segments, grid.m), dtype=complex)
    q[0] = weight
    for n in range(1, n_segments):
        q[n] = _bond_step(grid, q[n - 1], bond, weight)
    partition = grid.integrate(q[n_segments - 1]) / grid.volume
    return partition, q


@dataclass
class GSDResult:
    """Outcome of a ground-state-dominance calculation."""

    q: np.ndarray
    rho: np.ndarray
    partition: complex
    avg_lambda: complex
    iterations: int


def homopolymer_continuous_gsd(
    grid: Grid,
    w,
    q_init,
    bond,
    n_h: float,
    chain_length: float,
    n_ref: float,
    ds: float,
    tol: float,
    it_max: int,
) -> GSDResult:
    """Ground-state propagator of a long homopolymer by power iteration.

    ``q_init`` is the previous ground state, or ``None`` to start from ones.
    The ground state is normalised so that the integral of ``q**2`` equals the
    box volume; ``n_h`` chains of length ``chain_length`` (in units of
    ``n_ref``) give the returned density.
    """
    if it_max < 1:
        raise ValueError("at least one iteration is required")
    volume = grid.volume
    half_step = np.exp(-0.5 * np.asarray(w, dtype=complex) * ds)
    if q_init is None:
        q_old = np.ones(grid.m, dtype=complex)
    else:
        q_old = np.array(q_init, dtype=complex).ravel()

    error = 1.0
    iterations = it_max
    q = q_old
    lam = q_old
    for it in range(it_max):
        q = q_old * half_step
        q = grid.fft_backward(grid.fft_forward(q) * bond)
        q = q * half_step
        norm = grid.integrate(q * q)
        lam = q_old / q
        q = q * cmath.sqrt(volume / norm)

        if error < tol and it > 3:
            iterations = it
            break
        error = grid.integrate(np.abs(q - q_old)).real
        q_old = q

    avg_lambda = grid.average(lam)
    partition = cmath.exp(-avg_lambda * chain_length / n_ref)
    rho = n_h * chain_length / volume * q * q
    return GSDResult(
        q=q,
        rho=rho,
        partition=partition,
        avg_lambda=avg_lambda,
        iterations=iterations,
    )