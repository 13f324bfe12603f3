"""Debye functions for Gaussian chains, evaluated on squared wave vectors."""

from __future__ import annotations

import numpy as np

__all__ = [
    "calc_gaa",
    "calc_gbb",
    "calc_gab",
    "calc_gd",
    "calc_discrete_debye",
]


def _k2(k2) -> np.ndarray:
    return np.asarray(k2, dtype=float)


def calc_gaa(k2, f_d: float) -> np.ndarray:
    """A-A block correlation of a diblock with A fraction ``f_d``."""
    k2 = _k2(k2)
    with np.errstate(divide="ignore", invalid="ignore"):
        g = 2.0 * (np.exp(-k2 * f_d) + f_d * k2 - 1.0) / k2 / k2
    return np.where(k2 == 0.0, f_d * f_d, g)


def calc_gbb(k2, f_d: float) -> np.ndarray:
    """B-B block correlation of a diblock with A fraction ``f_d``."""
    k2 = _k2(k2)
    f_b = 1.0 - f_d
    with np.errstate(divide="ignore", invalid="ignore"):
        g = 2.0 * (np.exp(-k2 * f_b) + f_b * k2 - 1.0) / k2 / k2
    return np.where(k2 == 0.0, f_b * f_b, g)


def calc_gab(k2, f_d: float) -> np.ndarray:
    """A-B cross correlation of a diblock with A fraction ``f_d``."""
    k2 = _k2(k2)
    with np.errstate(divide="ignore", invalid="ignore"):
        g = (1.0 - np.exp(-k2 * f_d)) * (1.0 - np.exp(-k2 * (1.0 - f_d))) / k2 / k2
    return np.where(k2 == 0.0, f_d * (1.0 - f_d), g)


def calc_gd(k2, alpha: float) -> np.ndarray:
    """Debye function of a homopolymer of relative length ``alpha``."""
    x = _k2(k2) * alpha
    with np.errstate(divide="ignore", invalid="ignore"):
        g = 2.0 * (np.exp(-x) + x - 1.0) / x / x
    return np.where(x == 0.0, 1.0, g)


def calc_discrete_debye(k2, n: int) -> np.ndarray:
    """Debye function of a discrete Gaussian chain of ``n`` beads."""
    if n < 2:
        raise ValueError("a discrete chain needs at least two beads")
    k2 = _k2(k2)
    dm1 = k2 * (n / 6.0) / (n - 1)
    separations = np.arange(n)
    multiplicity = np.where(separations == 0, n, 2 * (n - separations)).astype(float)
    terms = np.exp(-np.multiply.outer(dm1, separations) / (n - 1))
    return terms @ multiplicity / float(n * n)