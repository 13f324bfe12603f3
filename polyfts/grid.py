"""Periodic simulation grid: index stacking, wave vectors, FFTs and integrals.

Fields are stored as flat complex arrays whose first coordinate varies
fastest, i.e. ``flat = x0 + (x1 + x2 * Nx1) * Nx0``.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

__all__ = [
    "Grid",
    "stack_index",
    "unstack_index",
    "integ_simpson",
    "dot_prod",
    "cross_prod",
]


def _check_dim(dim: int) -> None:
    if dim not in (1, 2, 3):
        raise ValueError(f"grid dimension must be 1, 2 or 3, got {dim}")


def stack_index(x: Sequence[int], shape: Sequence[int]) -> int:
    """Stack a multi-index ``x`` on a grid of ``shape`` into a flat index."""
    _check_dim(len(shape))
    if len(x) != len(shape):
        raise ValueError("index and shape must have the same length")
    flat = 0
    for coord, extent in zip(reversed(x), reversed(shape)):
        flat = flat * extent + coord
    return int(flat)


def unstack_index(flat: int, shape: Sequence[int]) -> tuple[int, ...]:
    """Turn a flat index on a grid of ``shape`` back into a multi-index."""
    _check_dim(len(shape))
    coords = []
    for extent in shape:
        flat, coord = divmod(int(flat), extent)
        coords.append(coord)
    return tuple(coords)


def integ_simpson(data: Sequence[complex], h: float) -> complex:
    """Extended Simpson-type rule over equally spaced samples with spacing ``h``."""
    values = np.asarray(data, dtype=complex)
    n = len(values)
    if n < 3:
        raise ValueError("at least three samples are required")
    total = (
        3.0 * values[0] / 8.0
        + 7.0 * values[1] / 6.0
        + 23.0 * values[2] / 24.0
    )
    total += values[3 : n - 3].sum() if n > 6 else 0.0
    total += (
        23.0 * values[n - 3] / 24.0
        + 7.0 * values[n - 2] / 6.0
        + 3.0 * values[n - 1] / 8.0
    )
    return complex(total * h)


def dot_prod(u: Sequence[float], r: Sequence[float]) -> float:
    """Dot product of two Cartesian vectors."""
    return float(sum(a * b for a, b in zip(u, r, strict=True)))


def cross_prod(u: Sequence[float], r: Sequence[float]) -> float:
    """Magnitude of the cross product of two 2D or 3D Cartesian vectors."""
    if len(u) != len(r):
        raise ValueError("vectors must have the same length")
    if len(u) == 2:
        return abs(u[0] * r[1] - u[1] * r[0])
    if len(u) == 3:
        cx = u[1] * r[2] - u[2] * r[1]
        cy = u[2] * r[0] - u[0] * r[2]
        cz = u[0] * r[1] - u[1] * r[0]
        return math.sqrt(cx * cx + cy * cy + cz * cz)
    raise ValueError("cross product needs 2D or 3D vectors")


class Grid:
    """A periodic box of ``nx`` points spanning ``lengths``."""

    def __init__(self, nx: Sequence[int], lengths: Sequence[float]) -> None:
        if len(nx) != len(lengths):
            raise ValueError("nx and lengths must have the same length")
        _check_dim(len(nx))
        if any(int(n) <= 0 for n in nx):
            raise ValueError("grid sizes must be positive")
        if any(float(length) <= 0.0 for length in lengths):
            raise ValueError("box lengths must be positive")
        self.nx = tuple(int(n) for n in nx)
        self.lengths = tuple(float(length) for length in lengths)
        self.dim = len(self.nx)
        self.m = math.prod(self.nx)
        self.dx = np.array(self.lengths) / np.array(self.nx)
        self.volume = math.prod(self.lengths)
        self._shape = tuple(reversed(self.nx))
        unravelled = np.unravel_index(np.arange(self.m), self._shape)
        self._indices = np.stack(list(reversed(unravelled)), axis=1)
        self._k = self._wave_vectors(alias=False)
        self._k_alias = self._wave_vectors(alias=True)

    def _wave_vectors(self, alias: bool) -> np.ndarray:
        nx = np.array(self.nx)
        lengths = np.array(self.lengths)
        n = self._indices
        shifted = np.where(n < nx / 2.0, n, n - nx)
        k = 2.0 * math.pi * shifted / lengths
        if alias:
            even = nx % 2 == 0
            k[(n == nx // 2) & even] = 0.0
            if even.any():
                killed = np.any(k == 0.0, axis=1)
                killed[0] = False
                k[killed] = 0.0
        return k

    def _check_flat(self, flat: int) -> int:
        flat = int(flat)
        if not 0 <= flat < self.m:
            raise IndexError(f"flat index {flat} outside grid of {self.m} points")
        return flat

    def stack(self, index: Sequence[int]) -> int:
        """Flat index of the grid point with multi-index ``index``."""
        return stack_index(index, self.nx)

    def unstack(self, flat: int) -> tuple[int, ...]:
        """Multi-index of the grid point with flat index ``flat``."""
        return unstack_index(self._check_flat(flat), self.nx)

    def positions(self) -> np.ndarray:
        """Positions ``n * dx`` of every grid point, shape ``(m, dim)``."""
        return self._indices * self.dx

    def get_r(self, flat: int) -> tuple[np.ndarray, float]:
        """Minimum-image position of a point relative to the origin, and its square."""
        r = self._indices[self._check_flat(flat)] * self.dx
        lengths = np.array(self.lengths)
        r = np.where(r > lengths / 2.0, r - lengths, r)
        r = np.where(r <= -lengths / 2.0, r + lengths, r)
        return r, float(np.dot(r, r))

    def k_vector(self, flat: int) -> np.ndarray:
        """Wave vector of the Fourier mode stored at ``flat``."""
        return self._k[self._check_flat(flat)].copy()

    def k_squared(self) -> np.ndarray:
        """Squared wave-vector magnitude of every Fourier mode."""
        return np.sum(self._k**2, axis=1)

    def k_alias(self, flat: int) -> np.ndarray:
        """Wave vector with Nyquist modes removed, as used for spectral derivatives."""
        return self._k_alias[self._check_flat(flat)].copy()

    def minimum_image(
        self, x1: Sequence[float], x2: Sequence[float]
    ) -> tuple[np.ndarray, float]:
        """Periodic separation ``x1 - x2`` and its squared length."""
        lengths = np.array(self.lengths)
        dr = np.asarray(x1, dtype=float) - np.asarray(x2, dtype=float)
        if dr.shape != (self.dim,):
            raise ValueError("positions must match the grid dimension")
        dr = np.where(dr >= 0.5 * lengths, dr - lengths, dr)
        dr = np.where(dr < -0.5 * lengths, dr + lengths, dr)
        return dr, float(np.dot(dr, dr))

    def _as_field(self, field) -> np.ndarray:
        data = np.asarray(field, dtype=complex)
        if data.size != self.m:
            raise ValueError(f"field has {data.size} values, grid has {self.m}")
        return data.reshape(self._shape)

    def fft_forward(self, field) -> np.ndarray:
        """Forward transform, normalised by ``1 / m``."""
        return np.fft.fftn(self._as_field(field), norm="forward").ravel()

    def fft_backward(self, field) -> np.ndarray:
        """Unnormalised backward transform, inverse of :meth:`fft_forward`."""
        return np.fft.ifftn(self._as_field(field), norm="forward").ravel()

    def integrate(self, field) -> complex:
        """Trapezoid integral of a periodic field over the box."""
        return complex(self._as_field(field).sum() * float(np.prod(self.dx)))

    def average(self, field) -> complex:
        """Mean value of a field over all grid points."""
        return complex(self._as_field(field).sum() / self.m)

    def zero_average(self, field) -> np.ndarray:
        """Copy of ``field`` shifted so that its integral vanishes."""
        data = self._as_field(field).ravel()
        return data - self.integrate(data) / self.volume

    def gradient(self, field, direction: int) -> np.ndarray:
        """Spectral derivative of ``field`` along axis ``direction``."""
        if not 0 <= direction < self.dim:
            raise ValueError(f"direction {direction} outside 0..{self.dim - 1}")
        transformed = self.fft_forward(field) * (1j * self._k_alias[:, direction])
        return self.fft_backward(transformed)