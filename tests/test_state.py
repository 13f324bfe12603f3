import numpy as np
import pytest

from polyfts.config import Parameters
from polyfts.grid import Grid
from polyfts.state import AVERAGED_FIELDS, FIELD_NAMES, Averages, create_state


@pytest.fixture
def grid():
    return Grid((8, 6), (4.0, 3.0))


def test_fields_start_zero_with_identity_kernels(grid):
    state = create_state(grid, Parameters(nda=4, ndb=6, c=2.0))
    for name in FIELD_NAMES:
        values = getattr(state, name)
        assert values.shape == (grid.m,)
    assert np.all(state.wpl == 0)
    assert np.all(state.rhoda == 0)
    assert np.all(state.hhat == 1)
    assert np.all(state.poly_bond_fft == 1)


def test_fields_are_independent_arrays(grid):
    state = create_state(grid, Parameters(nda=2, ndb=2))
    state.wa[0] = 5.0
    assert state.wb[0] == 0
    assert state.wpl[0] == 0


def test_chain_quantities(grid):
    state = create_state(grid, Parameters(nda=4, ndb=6, c=2.0, a_smear=0.5))
    assert state.n == 10
    assert state.n_a == 4
    assert state.f_d == pytest.approx(0.4)
    assert state.rho0 == pytest.approx(20.0)
    assert state.a_squared == pytest.approx(0.25)


def test_automatic_smearing(grid):
    state = create_state(grid, Parameters(nda=5, ndb=15, a_smear=-1.0))
    assert state.a_squared == pytest.approx(1.0 / (state.n - 1))


def test_automatic_smearing_needs_long_chain(grid):
    with pytest.raises(ValueError):
        create_state(grid, Parameters(nda=1, ndb=0, a_smear=-1.0))


def test_averages_only_with_langevin(grid):
    assert create_state(grid, Parameters(nda=2, ndb=2)).averages is None
    state = create_state(grid, Parameters(nda=2, ndb=2, do_cl=True))
    assert state.averages.n_samples == 0
    assert set(state.averages.sums) == set(AVERAGED_FIELDS)


def test_accumulate_and_mean(grid):
    state = create_state(grid, Parameters(nda=2, ndb=2))
    averages = Averages(grid)
    state.rhoda = np.full(grid.m, 2.0 + 1.0j)
    averages.accumulate(state)
    state.rhoda = np.full(grid.m, 4.0 - 1.0j)
    averages.accumulate(state)
    assert averages.n_samples == 2
    assert np.allclose(averages.mean("rhoda"), 3.0)
    assert np.allclose(averages.mean("rhodb"), 0.0)


def test_accumulate_does_not_alias_state(grid):
    state = create_state(grid, Parameters(nda=2, ndb=2))
    averages = Averages(grid)
    state.rhoha[:] = 1.0
    averages.accumulate(state)
    averages.accumulate(state)
    assert np.allclose(state.rhoha, 1.0)
    assert np.allclose(averages.sums["rhoha"], 2.0)


def test_mean_errors(grid):
    averages = Averages(grid)
    with pytest.raises(ValueError):
        averages.mean("rhoda")
    with pytest.raises(KeyError):
        averages.mean("wpl")