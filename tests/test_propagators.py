import numpy as np
import pytest

from polyfts.grid import Grid
from polyfts.propagators import (
    diblock_discrete,
    homopolymer_continuous_gsd,
    homopolymer_discrete,
)


@pytest.fixture
def grid():
    return Grid((8, 6), (4.0, 3.0))


def _bond(grid, n):
    return np.exp(-grid.k_squared() / (n - 1))


def _fields(grid, seed):
    rng = np.random.default_rng(seed)
    return 0.3 * rng.standard_normal(grid.m) + 0.1j * rng.standard_normal(grid.m)


def test_zero_field_partition_is_one(grid):
    zero = np.zeros(grid.m)
    q_h, _ = homopolymer_discrete(grid, zero, _bond(grid, 10), 10)
    q_d, _, _ = diblock_discrete(grid, zero, zero, _bond(grid, 10), 10, 4)
    assert q_h == pytest.approx(1.0)
    assert q_d == pytest.approx(1.0)


def test_uniform_fields(grid):
    a, b, ns, na = 0.2, -0.1, 9, 3
    partition, _, _ = diblock_discrete(
        grid, np.full(grid.m, a), np.full(grid.m, b), _bond(grid, ns), ns, na
    )
    assert partition == pytest.approx(np.exp(-(na * a + (ns - na) * b)))


@pytest.mark.parametrize("na", [1, 2, 4])
def test_partition_same_from_every_contour_point(grid, na):
    ns = 6
    w_a, w_b = _fields(grid, 1), _fields(grid, 2)
    partition, q, qdag = diblock_discrete(grid, w_a, w_b, _bond(grid, ns), ns, na)
    for j in range(ns):
        w = w_a if j < na else w_b
        value = grid.integrate(q[j] * qdag[ns - 1 - j] * np.exp(w)) / grid.volume
        assert value == pytest.approx(partition, rel=1e-10)


def test_all_a_matches_homopolymer(grid):
    ns = 7
    w_a, w_b = _fields(grid, 3), _fields(grid, 4)
    bond = _bond(grid, ns)
    q_d, q, qdag = diblock_discrete(grid, w_a, w_b, bond, ns, ns)
    q_h, q_hom = homopolymer_discrete(grid, w_a, bond, ns)
    assert q_d == pytest.approx(q_h)
    np.testing.assert_allclose(q, q_hom)
    np.testing.assert_allclose(qdag, q)


def test_all_b_matches_homopolymer(grid):
    ns = 5
    w_a, w_b = _fields(grid, 5), _fields(grid, 6)
    bond = _bond(grid, ns)
    q_d, q, _ = diblock_discrete(grid, w_a, w_b, bond, ns, 0)
    q_h, q_hom = homopolymer_discrete(grid, w_b, bond, ns)
    assert q_d == pytest.approx(q_h)
    np.testing.assert_allclose(q, q_hom)


def test_invalid_a_count(grid):
    zero = np.zeros(grid.m)
    with pytest.raises(ValueError):
        diblock_discrete(grid, zero, zero, _bond(grid, 4), 4, 5)


def test_gsd_zero_field(grid):
    bond = np.exp(-0.5 * grid.k_squared())
    result = homopolymer_continuous_gsd(
        grid, np.zeros(grid.m), None, bond, 3.0, 20.0, 20.0, 0.1, 1e-10, 50
    )
    assert result.avg_lambda == pytest.approx(1.0)
    np.testing.assert_allclose(result.q, np.ones(grid.m), atol=1e-12)


def test_gsd_normalisation_and_density(grid):
    rng = np.random.default_rng(7)
    w = 0.5 * rng.standard_normal(grid.m)
    bond = np.exp(-0.5 * grid.k_squared())
    n_h, length = 2.5, 30.0
    result = homopolymer_continuous_gsd(
        grid, w, None, bond, n_h, length, 20.0, 0.1, 1e-10, 500
    )
    assert grid.integrate(result.q * result.q) == pytest.approx(grid.volume)
    assert grid.integrate(result.rho) == pytest.approx(n_h * length)
    assert 3 < result.iterations < 500


def test_gsd_restart_from_ground_state(grid):
    rng = np.random.default_rng(8)
    w = 0.4 * rng.standard_normal(grid.m)
    bond = np.exp(-0.5 * grid.k_squared())
    first = homopolymer_continuous_gsd(
        grid, w, None, bond, 1.0, 10.0, 10.0, 0.1, 1e-12, 1000
    )
    second = homopolymer_continuous_gsd(
        grid, w, first.q, bond, 1.0, 10.0, 10.0, 0.1, 1e-12, 1000
    )
    np.testing.assert_allclose(second.q, first.q, atol=1e-8)
    assert second.avg_lambda == pytest.approx(first.avg_lambda, rel=1e-8)


def test_gsd_needs_iterations(grid):
    with pytest.raises(ValueError):
        homopolymer_continuous_gsd(
            grid, np.zeros(grid.m), None, np.ones(grid.m), 1.0, 1.0, 1.0, 0.1, 1e-6, 0
        )