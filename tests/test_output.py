import struct

import numpy as np
import pytest

from polyfts.config import Parameters
from polyfts.grid import Grid
from polyfts.output import (
    append_data,
    read_data_bin,
    read_one_resume_file,
    read_resume_files,
    save_averages,
    write_avg_data,
    write_avg_data_bin,
    write_avg_kdata,
    write_data,
    write_data_bin,
    write_kdata,
    write_outputs,
)
from polyfts.state import create_state


@pytest.fixture
def grid():
    return Grid((3, 2), (1.5, 1.0))


@pytest.fixture
def data(grid):
    rng = np.random.default_rng(4)
    return rng.normal(size=grid.m) + 1j * rng.normal(size=grid.m)


def make_state(**overrides):
    values = dict(nda=2, ndb=2, c=1.0, nx=(3, 2), lengths=(1.5, 1.0))
    values.update(overrides)
    params = Parameters(**values)
    return create_state(Grid(params.nx, params.lengths), params)


def test_binary_round_trip(tmp_path, grid, data):
    path = tmp_path / "f.bin"
    write_data_bin(path, grid, data, nprocs=3)
    nx, lengths, nprocs, back = read_data_bin(path)
    assert nx == grid.nx
    assert lengths == grid.lengths
    assert nprocs == 3
    assert np.array_equal(back, data)


def test_binary_header_layout(tmp_path, grid, data):
    path = tmp_path / "f.bin"
    write_data_bin(path, grid, data)
    raw = path.read_bytes()
    assert raw[:4] == struct.pack("=i", 2)
    assert len(raw) == 4 + 4 * 2 + 8 * 2 + 4 + 4 + 16 * grid.m


def test_truncated_binary_rejected(tmp_path, grid, data):
    path = tmp_path / "f.bin"
    write_data_bin(path, grid, data)
    path.write_bytes(path.read_bytes()[:-8])
    with pytest.raises(ValueError):
        read_data_bin(path)


def test_average_binary_divides(tmp_path, grid, data):
    path = tmp_path / "avg.bin"
    write_avg_data_bin(path, grid, data, 4)
    assert np.allclose(read_data_bin(path)[3], data / 4)


def test_text_round_trip_and_blank_lines(tmp_path, grid, data):
    path = tmp_path / "f.dat"
    write_data(path, grid, data)
    lines = path.read_text().splitlines()
    assert len(lines) == grid.m + grid.nx[1]
    assert lines[3] == ""
    with open(path) as stream:
        assert np.allclose(read_one_resume_file(stream, grid), data)


def test_append_doubles_file(tmp_path, grid, data):
    path = tmp_path / "f.dat"
    append_data(path, grid, data)
    first = path.read_text()
    append_data(path, grid, data)
    assert path.read_text() == first + first


def test_avg_text_divides(tmp_path, grid, data):
    path = tmp_path / "avg.dat"
    write_avg_data(path, grid, data, 2.0)
    with open(path) as stream:
        assert np.allclose(read_one_resume_file(stream, grid), data / 2.0)


def test_kdata_columns(tmp_path, grid, data):
    path = tmp_path / "k.dat"
    write_kdata(path, grid, data)
    rows = np.array([line.split() for line in path.read_text().splitlines() if line],
                    dtype=float)
    assert rows.shape == (grid.m, grid.dim + 4)
    assert np.allclose(rows[:, 2], np.abs(data))
    assert np.allclose(rows[:, 3], np.sqrt(grid.k_squared()))


def test_avg_kdata_divides(tmp_path, grid, data):
    path = tmp_path / "k.dat"
    write_avg_kdata(path, grid, data, 5.0)
    rows = np.array([line.split() for line in path.read_text().splitlines() if line],
                    dtype=float)
    assert np.allclose(rows[:, 4] + 1j * rows[:, 5], data / 5.0)


def test_short_resume_file_rejected(tmp_path, grid):
    path = tmp_path / "short.res"
    path.write_text("0.0 0.0 1.0 2.0\n")
    with open(path) as stream, pytest.raises(ValueError):
        read_one_resume_file(stream, grid)


def test_read_resume_files(tmp_path, data):
    state = make_state()
    write_data(tmp_path / "wabm.res", state.grid, data)
    loaded = read_resume_files(state, tmp_path)
    assert loaded == ["wabm"]
    assert np.allclose(state.wabm, data)


def test_write_outputs(tmp_path, data):
    state = make_state()
    state.n_d = 1.0
    state.rhoda = data.copy()
    state.wpl = 2.0 * data
    write_outputs(state, tmp_path)
    assert np.allclose(read_data_bin(tmp_path / "rhoda.p0.bin")[3], data)
    assert np.array_equal(read_data_bin(tmp_path / "rhoda_c.p0.bin")[3], data)
    assert np.allclose(read_data_bin(tmp_path / "rho_tot.p0.bin")[3], data)
    assert np.array_equal(read_data_bin(tmp_path / "wpl.p0.bin")[3], 2.0 * data)
    assert not (tmp_path / "rhoha.p0.bin").exists()


def test_save_averages(tmp_path, data):
    state = make_state(do_cl=True)
    state.n_d = 1.0
    state.rhoda = data.copy()
    state.averages.accumulate(state)
    state.averages.accumulate(state)
    state.iteration = 5
    save_averages(state, tmp_path)
    assert np.allclose(read_data_bin(tmp_path / "avg_rhoda_5.p0.bin")[3], data)


def test_save_averages_without_samples(tmp_path):
    state = make_state(do_cl=True)
    with pytest.raises(ValueError):
        save_averages(state, tmp_path)