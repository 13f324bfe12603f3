"""The mutable state of a field-theoretic simulation: fields, densities and scalars."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from polyfts.config import Parameters
from polyfts.grid import Grid
from polyfts.sphere import SphereQuadrature

__all__ = ["FIELD_NAMES", "AVERAGED_FIELDS", "FieldState", "Averages", "create_state"]

FIELD_NAMES = (
    "wpl",
    "wa",
    "wb",
    "wc",
    "wabp",
    "wabm",
    "wacp",
    "wacm",
    "wbcp",
    "wbcm",
    "smwa",
    "smwb",
    "smwc",
    "rhoda",
    "rhodb",
    "rhoha",
    "rhohc",
    "rho_surf",
    "surf_h",
    "rho_exp_nr",
    "exp_nr_h",
    "rho_fld_np",
    "rho_fld_np_c",
    "hhat",
    "poly_bond_fft",
    "gaa",
    "gab",
    "gbb",
    "gha",
    "ghc",
)

AVERAGED_FIELDS = ("rhoda", "rhodb", "rhoha", "rho_fld_np", "rho_fld_np_c")


class Averages:
    """Running sums of densities sampled during a complex Langevin run."""

    def __init__(self, grid: Grid) -> None:
        self.grid = grid
        self.n_samples = 0
        self.sums = {name: np.zeros(grid.m, dtype=complex) for name in AVERAGED_FIELDS}

    def accumulate(self, state: FieldState) -> None:
        """Add the current densities of ``state`` to the running sums."""
        for name, total in self.sums.items():
            total += getattr(state, name)
        self.n_samples += 1

    def mean(self, name: str) -> np.ndarray:
        """Average of the density ``name`` over all samples taken so far."""
        if name not in self.sums:
            raise KeyError(f"no running average for {name!r}")
        if self.n_samples == 0:
            raise ValueError("no samples have been accumulated")
        return self.sums[name] / self.n_samples


@dataclass(eq=False)
class FieldState:
    """Fields, densities and derived scalars of one simulation.

    Every field in :data:`FIELD_NAMES` is a flat complex array over the grid.
    ``hhat`` and ``poly_bond_fft`` start as identity kernels (all ones).
    """

    grid: Grid
    params: Parameters
    n: int = 0
    n_a: int = 0
    f_d: float = 0.0
    a_squared: float = 0.0
    c: float = 0.0
    rho0: float = 0.0
    n_d: float = 0.0
    n_ah: float = 0.0
    n_ch: float = 0.0
    nch: float = 0.0
    n_p: float = 0.0
    n_fp: float = 0.0
    v_free: float = 0.0
    v_ab: float = 0.0
    v_1_fld_np: float = 0.0
    np_frac: float = 0.0
    qd: complex = 1.0 + 0.0j
    qha: complex = 1.0 + 0.0j
    qhc: complex = 1.0 + 0.0j
    qp: complex = 1.0 + 0.0j
    smwp_min: float = 0.0
    hcur: complex = 0.0j
    iteration: int = 0
    gamma_iso: np.ndarray | None = None
    gamma_aniso: np.ndarray | None = None
    smwp_iso: np.ndarray | None = None
    exp_neg_smwp_iso: np.ndarray | None = None
    smwp_aniso: np.ndarray | None = None
    exp_neg_smwp_aniso: np.ndarray | None = None
    quadrature: SphereQuadrature | None = None
    q_d: np.ndarray | None = None
    qdag_d: np.ndarray | None = None
    q_ha: np.ndarray | None = None
    q_hc: np.ndarray | None = None
    averages: Averages | None = None

    wpl: np.ndarray = field(init=False, repr=False)
    wa: np.ndarray = field(init=False, repr=False)
    wb: np.ndarray = field(init=False, repr=False)
    wc: np.ndarray = field(init=False, repr=False)
    wabp: np.ndarray = field(init=False, repr=False)
    wabm: np.ndarray = field(init=False, repr=False)
    wacp: np.ndarray = field(init=False, repr=False)
    wacm: np.ndarray = field(init=False, repr=False)
    wbcp: np.ndarray = field(init=False, repr=False)
    wbcm: np.ndarray = field(init=False, repr=False)
    smwa: np.ndarray = field(init=False, repr=False)
    smwb: np.ndarray = field(init=False, repr=False)
    smwc: np.ndarray = field(init=False, repr=False)
    rhoda: np.ndarray = field(init=False, repr=False)
    rhodb: np.ndarray = field(init=False, repr=False)
    rhoha: np.ndarray = field(init=False, repr=False)
    rhohc: np.ndarray = field(init=False, repr=False)
    rho_surf: np.ndarray = field(init=False, repr=False)
    surf_h: np.ndarray = field(init=False, repr=False)
    rho_exp_nr: np.ndarray = field(init=False, repr=False)
    exp_nr_h: np.ndarray = field(init=False, repr=False)
    rho_fld_np: np.ndarray = field(init=False, repr=False)
    rho_fld_np_c: np.ndarray = field(init=False, repr=False)
    hhat: np.ndarray = field(init=False, repr=False)
    poly_bond_fft: np.ndarray = field(init=False, repr=False)
    gaa: np.ndarray = field(init=False, repr=False)
    gab: np.ndarray = field(init=False, repr=False)
    gbb: np.ndarray = field(init=False, repr=False)
    gha: np.ndarray = field(init=False, repr=False)
    ghc: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in FIELD_NAMES:
            setattr(self, name, np.zeros(self.grid.m, dtype=complex))
        self.hhat = np.ones(self.grid.m, dtype=complex)
        self.poly_bond_fft = np.ones(self.grid.m, dtype=complex)


def create_state(grid: Grid, params: Parameters) -> FieldState:
    """Fresh state for ``params`` on ``grid`` with all fields and densities zero."""
    n = params.nda + params.ndb
    f_d = params.nda / n if n > 0 else 0.0
    if params.a_smear == -1.0:
        if n <= 1:
            raise ValueError("automatic smearing length needs a chain of more than one bead")
        a_squared = 1.0 / (n - 1)
    else:
        a_squared = params.a_smear * params.a_smear
    return FieldState(
        grid=grid,
        params=params,
        n=n,
        n_a=params.nda,
        f_d=f_d,
        a_squared=a_squared,
        c=params.c,
        rho0=n * params.c,
        n_ch=params.n_ch,
        np_frac=params.np_frac,
        averages=Averages(grid) if params.do_cl else None,
    )