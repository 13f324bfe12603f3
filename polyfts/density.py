"""Chain and nanoparticle densities from the current fields."""

from __future__ import annotations

import math

import numpy as np

from polyfts.grid import Grid
from polyfts.propagators import diblock_discrete, homopolymer_discrete
from polyfts.sphere import SphereQuadrature
from polyfts.state import FieldState

__all__ = [
    "calc_poly_density",
    "integrate_diblock_discrete",
    "integrate_homopoly_discrete",
    "generate_smwp_iso",
    "generate_smwp_aniso",
    "np_density_sphere",
    "np_density_rod",
]

# Starting value of the minimum search; the shift never exceeds it.
_SMWP_MIN_CAP = 1000.0


def _convolve(grid: Grid, field, kernel_hat) -> np.ndarray:
    return grid.fft_backward(grid.fft_forward(field) * kernel_hat)


def integrate_diblock_discrete(
    grid: Grid, q, qdag, big_q: complex, n_k: complex, w_a, w_b, n_a: int
) -> tuple[np.ndarray, np.ndarray]:
    """A and B segment densities of ``n_k`` diblocks with ``n_a`` A beads."""
    q = np.asarray(q, dtype=complex)
    qdag = np.asarray(qdag, dtype=complex)
    factor = n_k / big_q / grid.volume
    products = q * qdag[::-1]
    split = max(n_a, 0)
    rda = products[:split].sum(axis=0) * np.exp(np.asarray(w_a, dtype=complex)) * factor
    rdb = products[split:].sum(axis=0) * np.exp(np.asarray(w_b, dtype=complex)) * factor
    return rda, rdb


def integrate_homopoly_discrete(
    grid: Grid, q, big_q: complex, n_k: complex, w
) -> np.ndarray:
    """Segment density of ``n_k`` discrete homopolymers."""
    q = np.asarray(q, dtype=complex)
    factor = n_k / big_q / grid.volume
    return (q * q[::-1]).sum(axis=0) * np.exp(np.asarray(w, dtype=complex)) * factor


def _shift_to_minimum(smwp: np.ndarray) -> tuple[np.ndarray, np.ndarray, float]:
    smwp_min = min(_SMWP_MIN_CAP, float(np.min(smwp.real)))
    shifted = smwp - smwp_min
    return shifted, np.exp(-shifted), smwp_min


def generate_smwp_iso(
    grid: Grid, w, gamma_hat
) -> tuple[np.ndarray, np.ndarray, float]:
    """Field ``w`` smeared by an isotropic particle shape given in k-space.

    ``gamma_hat`` already carries the factor of the box volume. Returns the
    smeared field shifted so its real minimum is zero, ``exp(-smwp)`` and
    the shift.
    """
    return _shift_to_minimum(_convolve(grid, w, gamma_hat))


def generate_smwp_aniso(
    grid: Grid, w, gamma_hat
) -> tuple[np.ndarray, np.ndarray, float]:
    """Field ``w`` smeared by every orientation of an anisotropic particle.

    ``gamma_hat`` has shape ``(nu, 2 * nu, m)``; the results share that shape.
    """
    gamma = np.asarray(gamma_hat, dtype=complex)
    w_hat = grid.fft_forward(w)
    smwp = np.array(
        [[grid.fft_backward(w_hat * kernel) for kernel in row] for row in gamma]
    ).reshape(gamma.shape)
    return _shift_to_minimum(smwp)


def np_density_sphere(
    grid: Grid, gamma_hat, exp_neg_smwp, n_fp: float
) -> tuple[complex, np.ndarray, np.ndarray]:
    """Partition function, centre density and segment density of nanospheres."""
    exp_neg = np.asarray(exp_neg_smwp, dtype=complex)
    q_sphere = grid.integrate(exp_neg)
    rho_c = exp_neg * n_fp / q_sphere
    rho = _convolve(grid, rho_c, gamma_hat)
    return q_sphere / grid.volume, rho_c, rho


def np_density_rod(
    grid: Grid, quadrature: SphereQuadrature, gamma_hat, exp_neg_smwp, n_fp: float
) -> tuple[complex, np.ndarray, np.ndarray]:
    """Partition function, centre density and segment density of nanorods."""
    exp_neg = np.asarray(exp_neg_smwp, dtype=complex)
    gamma = np.asarray(gamma_hat, dtype=complex)
    rho_c = quadrature.integrate_positions(exp_neg)
    q_rod = grid.integrate(rho_c)
    rho_c = rho_c * (n_fp / q_rod)
    transformed = np.array(
        [[grid.fft_forward(values) for values in row] for row in exp_neg]
    ).reshape(exp_neg.shape)
    rho_hat = quadrature.integrate_positions(transformed * gamma) * (n_fp / q_rod)
    rho = grid.fft_backward(rho_hat)
    return q_rod / (4.0 * math.pi * grid.volume), rho_c, rho


def _build_fields(state: FieldState) -> None:
    grid = state.grid
    params = state.params
    n = float(state.n)
    wa = (1j * (state.wpl + state.wabp + state.wacp) - state.wabm - state.wacm) / n
    wb = (1j * (state.wpl + state.wabp + state.wbcp) + state.wabm - state.wbcm) / n
    wc = (1j * (state.wpl + state.wacp + state.wbcp) + state.wacm + state.wbcm) / n

    if params.do_film:
        z = grid.positions()[:, -1]
        top = z > grid.lengths[-1] / 2.0
        lam_a, lam_b, lam_c = (
            np.where(top, t, b)
            for t, b in zip(params.top_wall_lam, params.bot_wall_lam)
        )
        wa = wa + lam_a * state.rho_surf
        wb = wb + lam_b * state.rho_surf
        wc = wc + lam_c * state.rho_surf

    if params.n_exp_nr > 0:
        wa = wa + params.exp_nr_chi_apn * state.rho_exp_nr * state.c
        wb = wb + params.exp_nr_chi_bpn * state.rho_exp_nr * state.c
        wc = wc + params.exp_nr_chi_cpn * state.rho_exp_nr * state.c

    state.wa, state.wb, state.wc = wa, wb, wc
    state.smwa = _convolve(grid, wa, state.hhat)
    state.smwb = _convolve(grid, wb, state.hhat)
    state.smwc = _convolve(grid, wc, state.hhat)


def _chain_densities(state: FieldState) -> None:
    grid = state.grid
    params = state.params
    bond = state.poly_bond_fft

    if state.n_d != 0.0:
        state.qd, state.q_d, state.qdag_d = diblock_discrete(
            grid, state.smwa, state.smwb, bond, state.n, state.n_a
        )
        state.rhoda, state.rhodb = integrate_diblock_discrete(
            grid, state.q_d, state.qdag_d, state.qd, state.n_d,
            state.smwa, state.smwb, state.n_a,
        )
    else:
        state.qd = 1.0 + 0.0j

    if state.n_ah != 0.0:
        state.qha, state.q_ha = homopolymer_discrete(grid, state.smwa, bond, params.nah)
        state.rhoha = integrate_homopoly_discrete(
            grid, state.q_ha, state.qha, state.n_ah, state.smwa
        )
    else:
        state.qha = 1.0 + 0.0j
        state.n_ah = 0.0

    if params.c_type == 0 and params.nch_discrete > 0:
        state.qhc, state.q_hc = homopolymer_discrete(
            grid, state.smwc, bond, params.nch_discrete
        )
        state.rhohc = integrate_homopoly_discrete(
            grid, state.q_hc, state.qhc, state.n_ch, state.smwc
        )
        state.n_ch = grid.integrate(state.rhohc).real / params.nch_discrete
    elif params.c_type == 1 and state.n_ch > 0.0:
        raise ValueError("ground-state-dominant C homopolymers are not supported here")
    else:
        state.qhc = 1.0 + 0.0j


def _particle_densities(state: FieldState) -> None:
    grid = state.grid
    params = state.params
    if not params.do_fld_np:
        state.qp = 1.0 + 0.0j
        state.smwp_min = 0.0
        return
    if params.np_type == 1:
        if state.gamma_iso is None:
            raise ValueError("nanosphere shape function has not been initialised")
        state.smwp_iso, state.exp_neg_smwp_iso, state.smwp_min = generate_smwp_iso(
            grid, state.wa, state.gamma_iso
        )
        state.qp, state.rho_fld_np_c, state.rho_fld_np = np_density_sphere(
            grid, state.gamma_iso, state.exp_neg_smwp_iso, state.n_fp
        )
    elif params.np_type == 2:
        if state.gamma_aniso is None or state.quadrature is None:
            raise ValueError("nanorod shape function has not been initialised")
        state.smwp_aniso, state.exp_neg_smwp_aniso, state.smwp_min = (
            generate_smwp_aniso(grid, state.wa, state.gamma_aniso)
        )
        state.qp, state.rho_fld_np_c, state.rho_fld_np = np_density_rod(
            grid, state.quadrature, state.gamma_aniso,
            state.exp_neg_smwp_aniso, state.n_fp,
        )
    else:
        raise ValueError(f"np_type={params.np_type} must be 1 (spheres) or 2 (rods)")


def calc_poly_density(state: FieldState) -> None:
    """Recompute species fields, partition functions and densities in ``state``."""
    _build_fields(state)
    _chain_densities(state)
    _particle_densities(state)