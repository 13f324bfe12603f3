"""Writing fields and densities to disk, and reading resume files back."""

from __future__ import annotations

import struct
from pathlib import Path
from typing import TextIO

import numpy as np

from polyfts.grid import Grid
from polyfts.state import FieldState

__all__ = [
    "write_data_bin",
    "read_data_bin",
    "write_avg_data_bin",
    "write_data",
    "append_data",
    "write_avg_data",
    "write_kdata",
    "write_avg_kdata",
    "read_one_resume_file",
    "read_resume_files",
    "write_outputs",
    "save_averages",
]

RESUME_FIELDS = ("wpl", "wabp", "wabm", "wacp", "wacm", "wbcp", "wbcm")
RANK = 0


def _as_data(grid: Grid, data) -> np.ndarray:
    values = np.asarray(data, dtype=np.complex128).ravel()
    if values.size != grid.m:
        raise ValueError(f"data has {values.size} values, grid has {grid.m}")
    return values


def write_data_bin(path, grid: Grid, data, nprocs: int = 1) -> None:
    """Binary dump: dimension, grid sizes, box lengths, process count, then data."""
    values = _as_data(grid, data)
    header = struct.pack(f"=i{grid.dim}i", grid.dim, *grid.nx)
    header += struct.pack(f"={grid.dim}d", *grid.lengths)
    header += struct.pack("=ii", int(nprocs), grid.m)
    with open(path, "wb") as stream:
        stream.write(header)
        stream.write(values.tobytes())


def read_data_bin(path) -> tuple[tuple[int, ...], tuple[float, ...], int, np.ndarray]:
    """Read a binary dump; returns grid sizes, box lengths, process count and data."""
    raw = Path(path).read_bytes()
    try:
        (dim,) = struct.unpack_from("=i", raw, 0)
        offset = 4
        nx = struct.unpack_from(f"={dim}i", raw, offset)
        offset += 4 * dim
        lengths = struct.unpack_from(f"={dim}d", raw, offset)
        offset += 8 * dim
        nprocs, count = struct.unpack_from("=ii", raw, offset)
        offset += 8
    except struct.error as exc:
        raise ValueError(f"{path}: truncated header") from exc
    if len(raw) - offset != 16 * count:
        raise ValueError(f"{path}: expected {count} complex values")
    data = np.frombuffer(raw, dtype=np.complex128, count=count, offset=offset).copy()
    return tuple(nx), tuple(lengths), nprocs, data


def write_avg_data_bin(path, grid: Grid, data, n_samples: float, nprocs: int = 1) -> None:
    """Binary dump of accumulated sums divided by the number of samples."""
    write_data_bin(path, grid, _as_data(grid, data) / n_samples, nprocs)


def _write_rows(path, grid: Grid, leading: np.ndarray, values: np.ndarray,
                digits: int, mode: str) -> None:
    with open(path, mode) as stream:
        for flat, (coords, row) in enumerate(zip(leading, values)):
            line = "".join(f"{x:f} " for x in coords)
            line += " ".join(f"{v:.{digits}e}" for v in row)
            stream.write(line + "\n")
            if grid.dim == 2 and (flat + 1) % grid.nx[0] == 0:
                stream.write("\n")


def _complex_columns(values: np.ndarray) -> np.ndarray:
    return np.column_stack([values.real, values.imag])


def write_data(path, grid: Grid, data) -> None:
    """Text dump of positions followed by real and imaginary parts."""
    values = _as_data(grid, data)
    _write_rows(path, grid, grid.positions(), _complex_columns(values), 16, "w")


def append_data(path, grid: Grid, data) -> None:
    """Append a text dump of ``data`` to ``path``."""
    values = _as_data(grid, data)
    _write_rows(path, grid, grid.positions(), _complex_columns(values), 12, "a")


def write_avg_data(path, grid: Grid, data, n_samples: float) -> None:
    """Text dump of accumulated sums divided by the number of samples."""
    values = _as_data(grid, data) / n_samples
    _write_rows(path, grid, grid.positions(), _complex_columns(values), 16, "w")


def _k_rows(grid: Grid, values: np.ndarray, n_samples: float) -> tuple[np.ndarray, np.ndarray]:
    k = np.array([grid.k_vector(flat) for flat in range(grid.m)])
    columns = np.column_stack([
        np.abs(values) / n_samples,
        np.sqrt(grid.k_squared()),
        values.real / n_samples,
        values.imag / n_samples,
    ])
    return k, columns


def write_kdata(path, grid: Grid, data) -> None:
    """Text dump of a k-space field: wave vector, modulus, |k|, real and imaginary parts."""
    k, columns = _k_rows(grid, _as_data(grid, data), 1.0)
    _write_rows(path, grid, k, columns, 16, "w")


def write_avg_kdata(path, grid: Grid, data, n_samples: float) -> None:
    """Like :func:`write_kdata` for accumulated sums divided by the sample count."""
    k, columns = _k_rows(grid, _as_data(grid, data), n_samples)
    _write_rows(path, grid, k, columns, 16, "w")


def read_one_resume_file(stream: TextIO, grid: Grid) -> np.ndarray:
    """Read a field written by :func:`write_data` back from an open text stream."""
    tokens = stream.read().split()
    width = grid.dim + 2
    needed = grid.m * width
    if len(tokens) < needed:
        raise ValueError(f"resume data holds {len(tokens)} values, {needed} needed")
    try:
        table = np.array(tokens[:needed], dtype=float).reshape(grid.m, width)
    except ValueError as exc:
        raise ValueError(f"bad value in resume data: {exc}") from exc
    return table[:, -2] + 1j * table[:, -1]


def read_resume_files(state: FieldState, directory=".") -> list[str]:
    """Load every ``<field>.res`` found in ``directory``; returns the fields read."""
    loaded = []
    for name in RESUME_FIELDS:
        path = Path(directory) / f"{name}.res"
        if not path.is_file():
            continue
        with open(path) as stream:
            setattr(state, name, read_one_resume_file(stream, state.grid))
        loaded.append(name)
    return loaded


def _bin_path(directory, name: str) -> Path:
    return Path(directory) / f"{name}.p{RANK}.bin"


def _smeared(state: FieldState, rho) -> np.ndarray:
    grid = state.grid
    return grid.fft_backward(grid.fft_forward(rho) * state.hhat)


def write_outputs(state: FieldState, directory=".") -> None:
    """Write densities, averages and fields of the current state as binary dumps."""
    grid = state.grid
    p = state.params

    def dump(name: str, data) -> None:
        write_data_bin(_bin_path(directory, name), grid, data)

    if state.n_d != 0.0:
        dump("rhoda", _smeared(state, state.rhoda))
        dump("rhoda_c", state.rhoda)
        dump("rhodb", _smeared(state, state.rhodb))
        dump("rhodb_c", state.rhodb)
    if state.n_ah != 0.0:
        dump("rhoha", _smeared(state, state.rhoha))
        dump("rhoha_c", state.rhoha)
    if state.n_ch > 0.0:
        dump("rhohc", _smeared(state, state.rhohc))
        dump("rhohc_c", state.rhohc)
    if p.n_exp_nr > 0 and state.iteration == 1:
        dump("rho_exp_nr", state.rho_exp_nr)

    rho_tot = (
        state.rhoda + state.rhodb + state.rhoha + state.rhohc
        + state.rho0 * state.rho_surf + state.rho0 * state.rho_exp_nr
        + state.rho_fld_np
    )
    dump("rho_tot", rho_tot)

    if p.do_fld_np:
        dump("rho_fld_np", state.rho_fld_np)
        dump("rho_fld_np_c", state.rho_fld_np_c)

    averages = state.averages
    if (p.do_cl and state.iteration >= p.sample_wait
            and averages is not None and averages.n_samples > 0):
        def dump_avg(name: str, key: str) -> None:
            write_avg_data_bin(_bin_path(directory, name), grid,
                               averages.sums[key], averages.n_samples)

        if state.n_d != 0.0:
            dump_avg("avg_rhoda", "rhoda")
            dump_avg("avg_rhodb", "rhodb")
        if state.n_ah != 0.0:
            dump_avg("avg_rhoha", "rhoha")
        if p.do_fld_np:
            dump_avg("avg_rho_fld_np", "rho_fld_np")
            dump_avg("avg_rho_fld_np_c", "rho_fld_np_c")

    for name in RESUME_FIELDS:
        dump(name, getattr(state, name))


def save_averages(state: FieldState, directory=".") -> None:
    """Write the running averages with the iteration number in their names."""
    averages = state.averages
    if averages is None or averages.n_samples == 0:
        raise ValueError("no averages have been accumulated")
    it = state.iteration

    def dump_avg(name: str, key: str) -> None:
        write_avg_data_bin(_bin_path(directory, f"{name}_{it}"), state.grid,
                           averages.sums[key], averages.n_samples)

    if state.n_d != 0.0:
        dump_avg("avg_rhoda", "rhoda")
        dump_avg("avg_rhodb", "rhodb")
    if state.n_ah != 0.0:
        dump_avg("avg_rhoha", "rhoha")
    if state.params.do_fld_np:
        dump_avg("avg_rho_fld_np", "rho_fld_np")
        dump_avg("avg_rho_fld_np_c", "rho_fld_np_c")