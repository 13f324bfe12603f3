"""The effective Hamiltonian of the field theory."""

from __future__ import annotations

import cmath

import numpy as np

from polyfts.state import FieldState

__all__ = [
    "NaNHamiltonianError",
    "calc_h",
    "wpl_part",
    "wab_part",
    "wac_part",
    "wbc_part",
]


class NaNHamiltonianError(ArithmeticError):
    """The Hamiltonian evaluated to NaN, usually because the fields diverged."""


def _log(value: complex) -> complex:
    with np.errstate(divide="ignore", invalid="ignore"):
        return complex(np.log(complex(value)))


def wpl_part(state: FieldState) -> complex:
    """Contribution of the pressure-like field ``w+``."""
    c = state.c
    kappa = state.params.kappa_n
    wpl = state.wpl
    quadratic = wpl * wpl * c / kappa / 2.0 if kappa > 0.0 else 0.0
    linear = 1j * c * (1.0 - state.rho_surf - state.rho_exp_nr) * wpl
    return state.grid.integrate(quadratic - linear)


def _exchange_part(state: FieldState, plus, minus, chi: float) -> complex:
    if chi == 0.0:
        return 0.0j
    return state.grid.integrate((plus * plus + minus * minus) * state.c / chi)


def wab_part(state: FieldState) -> complex:
    """Contribution of the A-B exchange fields."""
    return _exchange_part(state, state.wabp, state.wabm, state.params.chi_ab_n)


def wac_part(state: FieldState) -> complex:
    """Contribution of the A-C exchange fields."""
    return _exchange_part(state, state.wacp, state.wacm, state.params.chi_ac_n)


def wbc_part(state: FieldState) -> complex:
    """Contribution of the B-C exchange fields."""
    return _exchange_part(state, state.wbcp, state.wbcm, state.params.chi_bc_n)


def calc_h(state: FieldState) -> complex:
    """Evaluate the Hamiltonian, store it in ``state.hcur`` and return it."""
    parts = {
        "wpl": wpl_part(state),
        "wab": wab_part(state),
        "wac": wac_part(state),
        "wbc": wbc_part(state),
    }
    if state.n_d > 0.0:
        parts["diblock"] = -state.n_d * _log(state.qd)
    if state.n_ah > 0.0:
        parts["A homopolymer"] = -state.n_ah * _log(state.qha)
    if state.n_ch > 0.0:
        parts["C homopolymer"] = -state.n_ch * _log(state.qhc)
    if state.params.do_fld_np:
        # The stored Qp carries a factor exp(smwp_min) from the shifted field.
        parts["nanoparticles"] = -state.n_p * (_log(state.qp) - state.smwp_min)

    total = complex(sum(parts.values()))
    if cmath.isnan(total):
        detail = ", ".join(f"{name}={value.real}" for name, value in parts.items())
        raise NaNHamiltonianError(f"Hamiltonian is NaN ({detail})")
    state.hcur = total
    return total