import math

import numpy as np
import pytest

from polyfts.config import Parameters
from polyfts.grid import Grid
from polyfts.hamiltonian import (
    NaNHamiltonianError,
    calc_h,
    wab_part,
    wac_part,
    wbc_part,
    wpl_part,
)
from polyfts.state import create_state


@pytest.fixture
def grid():
    return Grid((8, 6), (4.0, 3.0))


def _state(grid, **kwargs):
    return create_state(grid, Parameters(nda=2, ndb=2, c=2.0, **kwargs))


def test_zero_fields_give_zero(grid):
    state = _state(grid)
    state.hcur = 7.0
    assert calc_h(state) == 0
    assert state.hcur == 0


def test_wpl_part_constant_field(grid):
    state = _state(grid, kappa_n=4.0)
    state.wpl[:] = 3.0
    expected = (3.0 * 3.0 * 2.0 / 4.0 / 2.0 - 1j * 2.0 * 3.0) * grid.volume
    assert wpl_part(state) == pytest.approx(expected)


def test_wpl_part_without_compressibility(grid):
    state = _state(grid, kappa_n=0.0)
    state.wpl[:] = 3.0
    state.rho_surf[:] = 1.0
    assert wpl_part(state) == pytest.approx(0.0)


def test_exchange_parts(grid):
    state = _state(grid, chi_ab_n=4.0, chi_ac_n=0.0, chi_bc_n=2.0)
    state.wabp[:] = 1.0
    state.wabm[:] = 1.0
    state.wacp[:] = 5.0
    state.wbcm[:] = 1.0
    assert wab_part(state) == pytest.approx(2.0 * 2.0 / 4.0 * grid.volume)
    assert wac_part(state) == 0
    assert wbc_part(state) == pytest.approx(2.0 / 2.0 * grid.volume)


def test_chain_terms(grid):
    state = _state(grid)
    state.n_d = 2.0
    state.qd = math.e
    assert calc_h(state) == pytest.approx(-2.0)
    state.n_ah = 3.0
    state.qha = math.e
    assert calc_h(state) == pytest.approx(-5.0)


def test_nanoparticle_term_corrects_shift(grid):
    state = _state(grid, do_fld_np=True)
    state.n_p = 2.0
    state.qp = 1.0
    state.smwp_min = 0.5
    assert calc_h(state) == pytest.approx(1.0)


def test_nan_raises(grid):
    state = _state(grid)
    state.wpl[0] = np.nan
    with pytest.raises(NaNHamiltonianError):
        calc_h(state)