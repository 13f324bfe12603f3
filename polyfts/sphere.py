"""Quadrature over orientations on the unit sphere."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from polyfts.grid import Grid

__all__ = ["SphereQuadrature", "gauss_legendre_init", "sphere_init"]

ABSCISSA_FILE = "lgvalues-abscissa.txt"
WEIGHTS_FILE = "lgvalues-weights.txt"


def _table_directory(directory: str | Path | None) -> Path:
    return Path.home() / "bin" if directory is None else Path(directory)


def _read_table(path: Path, n: int) -> np.ndarray:
    """Read the ``n`` entries of order ``n`` from a tabulated Gauss-Legendre file.

    Each order m has a header line, m value lines and a separating line.
    """
    lines = path.read_text().splitlines()
    pos = sum(i + 3 for i in range(1, n - 1)) + 1
    values: list[float] = []
    while len(values) < n:
        while pos < len(lines) and not lines[pos].strip():
            pos += 1
        if pos >= len(lines):
            raise ValueError(f"{path} holds too few entries for order {n}")
        token = lines[pos].split()[0]
        try:
            values.append(float(token))
        except ValueError as exc:
            raise ValueError(f"{path} line {pos + 1}: bad value {token!r}") from exc
        pos += 1
    return np.array(values)


def gauss_legendre_init(
    a: float, b: float, n: int, directory: str | Path | None = None
) -> tuple[np.ndarray, np.ndarray]:
    """Gauss-Legendre abscissae and weights of order ``n`` mapped to ``[a, b]``.

    The tables are read from ``directory`` (``~/bin`` by default).
    """
    if n < 1:
        raise ValueError("quadrature order must be positive")
    folder = _table_directory(directory)
    x = _read_table(folder / ABSCISSA_FILE, n)
    x = (b - a) * x / 2.0 + (a + b) / 2.0
    if np.any(np.isnan(x)):
        raise ValueError("abscissa table produced NaN values")
    w = (b - a) / 2.0 * _read_table(folder / WEIGHTS_FILE, n)
    return x, w


@dataclass(frozen=True, eq=False)
class SphereQuadrature:
    """Product rule over polar angle ``theta`` and azimuth ``phi``.

    ``theta_weights`` already include the ``sin(theta)`` Jacobian.
    """

    theta: np.ndarray
    theta_weights: np.ndarray
    phi: np.ndarray
    phi_weights: np.ndarray

    @property
    def nu(self) -> int:
        return len(self.theta)

    def _check(self, data: np.ndarray, ndim: int) -> np.ndarray:
        if data.ndim != ndim or data.shape[:2] != (len(self.theta), len(self.phi)):
            raise ValueError(
                f"orientation data must have leading shape "
                f"({len(self.theta)}, {len(self.phi)})"
            )
        return data

    def integrate(self, data) -> complex:
        """Integral over orientations of values given at each ``(theta, phi)``."""
        values = self._check(np.asarray(data, dtype=complex), 2)
        return complex(
            np.einsum("ij,i,j->", values, self.theta_weights, self.phi_weights)
        )

    def integrate_positions(self, data) -> np.ndarray:
        """Orientation integral at every position; ``data`` is ``(nu, 2nu, m)``."""
        values = self._check(np.asarray(data, dtype=complex), 3)
        return np.einsum("ijk,i,j->k", values, self.theta_weights, self.phi_weights)

    def integrate_fields(self, data, grid: Grid) -> complex:
        """Integral over orientations and over the box of ``(nu, 2nu, m)`` fields."""
        values = self._check(np.asarray(data, dtype=complex), 3)
        spatial = np.array([[grid.integrate(field) for field in row] for row in values])
        return self.integrate(spatial)


def sphere_init(nu: int, directory: str | Path | None = None) -> SphereQuadrature:
    """Quadrature with ``nu`` polar and ``2 * nu`` azimuthal points."""
    theta, theta_weights = gauss_legendre_init(0.0, math.pi, nu, directory)
    phi, phi_weights = gauss_legendre_init(0.0, 2.0 * math.pi, 2 * nu, directory)
    return SphereQuadrature(
        theta=theta,
        theta_weights=theta_weights * np.sin(theta),
        phi=phi,
        phi_weights=phi_weights,
    )