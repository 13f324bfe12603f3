import numpy as np
import pytest

from polyfts.debye import (
    calc_discrete_debye,
    calc_gaa,
    calc_gab,
    calc_gbb,
    calc_gd,
)
from polyfts.grid import Grid

K2 = np.array([0.0, 0.01, 0.3, 1.0, 4.5, 20.0])


@pytest.mark.parametrize("f", [0.2, 0.5, 0.7])
def test_blocks_sum_to_whole_chain(f):
    total = calc_gaa(K2, f) + 2.0 * calc_gab(K2, f) + calc_gbb(K2, f)
    np.testing.assert_allclose(total, calc_gd(K2, 1.0), rtol=1e-6)


@pytest.mark.parametrize("f", [0.25, 0.6])
def test_zero_wavevector_limits(f):
    assert calc_gaa(0.0, f) == pytest.approx(f * f)
    assert calc_gbb(0.0, f) == pytest.approx((1.0 - f) ** 2)
    assert calc_gab(0.0, f) == pytest.approx(f * (1.0 - f))


def test_a_b_symmetry():
    np.testing.assert_allclose(calc_gaa(K2, 0.3), calc_gbb(K2, 0.7))
    np.testing.assert_allclose(calc_gab(K2, 0.3), calc_gab(K2, 0.7))


def test_gd_at_zero_and_decreasing():
    g = calc_gd(K2, 0.5)
    assert g[0] == 1.0
    assert np.all(np.diff(g) < 0.0)


def test_gd_on_grid_is_finite():
    grid = Grid((8, 8), (5.0, 5.0))
    g = calc_gd(grid.k_squared(), 0.8)
    assert np.all(np.isfinite(g))
    assert g[0] == 1.0


def test_discrete_debye_normalised_and_decreasing():
    g = calc_discrete_debye(K2, 10)
    assert g[0] == pytest.approx(1.0)
    assert np.all(np.diff(g) < 0.0)
    assert np.all(g > 0.0)


def test_discrete_debye_scalar():
    assert calc_discrete_debye(0.0, 4) == pytest.approx(1.0)


def test_discrete_debye_needs_two_beads():
    with pytest.raises(ValueError):
        calc_discrete_debye(K2, 1)