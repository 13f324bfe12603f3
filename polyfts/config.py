"""Reading the simulation input file."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

__all__ = ["DIM", "Parameters", "InputError", "parse_input", "read_input"]

DIM = 2
N_EXPLICIT_PARTICLES = 8


class InputError(ValueError):
    """The input file is missing, truncated or holds an invalid value."""


@dataclass
class Parameters:
    """All values read from the input file."""

    nda: int = 0
    ndb: int = 0
    phi_ah: float = 0.0
    nah: int = 0
    c_type: int = 0
    phi_ch: float = 0.0
    nch_discrete: int = 0
    n_ch: float = 0.0
    a_smear: float = 0.0
    c: float = 0.0
    chi_ab_n: float = 0.0
    chi_ac_n: float = 0.0
    chi_bc_n: float = 0.0
    kappa_n: float = 0.0
    ic_flag: tuple[int, int] = (0, 0)
    ic_pre: tuple[float, float] = (0.0, 0.0)
    ic_dir: tuple[int, int] = (0, 0)
    ic_period: tuple[float, float] = (0.0, 0.0)
    keep_fields: bool = False
    nx: tuple[int, ...] = (0,) * DIM
    lengths: tuple[float, ...] = (0.0,) * DIM
    do_brent: bool = False
    l_low: float = 0.0
    l_high: float = 0.0
    l_step: float = 0.0
    brent_tol: float = 0.0
    lam_pl: float = 0.0
    lam_mi: float = 0.0
    itermax: int = 0
    print_freq: int = 0
    sample_freq: int = 0
    sample_wait: int = 0
    save_avg_freq: int = 0
    error_tol: float = 0.0
    update_scheme: int = 0
    do_cl: bool = False
    gsd_ds: float = 0.0
    gsd_tol: float = 0.0
    gsd_it_max: int = 0
    do_film: bool = False
    wall_t: float = 0.0
    wall_xi: float = 0.0
    top_wall_lam: tuple[float, float, float] = (0.0, 0.0, 0.0)
    bot_wall_lam: tuple[float, float, float] = (0.0, 0.0, 0.0)
    n_exp_nr: int = 0
    do_fld_np: bool = False
    np_type: int = 0
    nu: int = 0
    np_frac: float = 0.0
    l_nr: float = 0.0
    r_nr: float = 0.0
    xi_nr: float = 0.0
    exp_nr_chi_apn: float = 0.0
    exp_nr_chi_bpn: float = 0.0
    exp_nr_chi_cpn: float = 0.0
    exp_nr_centers: tuple[tuple[float, ...], ...] = ()
    exp_nr_orientations: tuple[tuple[float, ...], ...] = ()


class _LineReader:
    """Reads leading values from successive lines; the rest of a line is ignored."""

    def __init__(self, text: str) -> None:
        self._lines = text.splitlines()
        self._pos = 0

    def skip(self, count: int = 1) -> None:
        self._pos = min(self._pos + count, len(self._lines))

    def read(self, *kinds: Callable[[str], object], what: str) -> tuple:
        if self._pos >= len(self._lines):
            raise InputError(f"input ended before {what}")
        line_no = self._pos + 1
        tokens = self._lines[self._pos].split()
        self._pos += 1
        if len(tokens) < len(kinds):
            raise InputError(
                f"line {line_no}: expected {len(kinds)} value(s) for {what}"
            )
        try:
            return tuple(kind(tok) for kind, tok in zip(kinds, tokens))
        except ValueError as exc:
            raise InputError(f"line {line_no}: bad value for {what}: {exc}") from exc


def _int_from_float(token: str) -> int:
    return int(float(token))


def parse_input(text: str) -> Parameters:
    """Parse the text of an input file into :class:`Parameters`."""
    r = _LineReader(text)
    r.skip()

    nda, ndb = r.read(int, int, what="Nda Ndb")
    phi_ah, nah = r.read(float, int, what="phiAH Nah")
    (c_type,) = r.read(int, what="c_type")
    phi_ch, nch_discrete, n_ch = r.read(float, int, float, what="phiCH Nch nCH")
    (a_smear,) = r.read(float, what="a_smear")
    (c,) = r.read(float, what="C")
    r.skip(2)

    (chi_ab_n,) = r.read(float, what="chiABN")
    (chi_ac_n,) = r.read(float, what="chiACN")
    (chi_bc_n,) = r.read(float, what="chiBCN")
    (kappa_n,) = r.read(float, what="kappaN")
    r.skip(2)

    ic = [
        r.read(int, float, _int_from_float, float, what=f"initial condition {j}")
        for j in range(2)
    ]
    (keep_fields,) = r.read(int, what="keep_fields")
    r.skip(2)

    nx = r.read(*([int] * DIM), what="Nx")
    lengths = r.read(*([float] * DIM), what="L")

    (do_brent,) = r.read(int, what="do_brent")
    l_low, l_high, l_step, brent_tol = r.read(
        float, float, float, float, what="Brent parameters"
    )
    (lam_pl,) = r.read(float, what="lam_pl")
    (lam_mi,) = r.read(float, what="lam_mi")

    (itermax,) = r.read(int, what="itermax")
    (print_freq,) = r.read(int, what="print_freq")
    sample_freq, sample_wait, save_avg_freq = r.read(
        int, int, int, what="sampling frequencies"
    )
    (error_tol,) = r.read(float, what="error_tol")
    (update_scheme,) = r.read(int, what="update_scheme")
    (do_cl,) = r.read(int, what="do_CL")
    r.skip(2)

    (gsd_ds,) = r.read(float, what="gsd_ds")
    (gsd_tol,) = r.read(float, what="gsd_tol")
    (gsd_it_max,) = r.read(int, what="gsd_it_max")
    r.skip(2)

    (do_film,) = r.read(int, what="do_film")
    wall_t, wall_xi = r.read(float, float, what="wallT wallXi")
    top_wall_lam = r.read(float, float, float, what="top wall lambdas")
    bot_wall_lam = r.read(float, float, float, what="bottom wall lambdas")
    r.skip(2)

    (n_exp_nr,) = r.read(int, what="n_exp_nr")
    (do_fld_np,) = r.read(int, what="do_fld_np")
    (np_type,) = r.read(int, what="np_type")
    (nu,) = r.read(int, what="Nu")
    (np_frac,) = r.read(float, what="np_frac")
    l_nr, r_nr, xi_nr = r.read(float, float, float, what="L_nr R_nr xi_nr")
    chi_apn, chi_bpn, chi_cpn = r.read(
        float, float, float, what="nanoparticle interactions"
    )

    centers = []
    orientations = []
    for j in range(N_EXPLICIT_PARTICLES):
        center = r.read(*([float] * DIM), what=f"nanoparticle center {j}")
        for i, value in enumerate(center):
            if value < 0.0 or value > 1.0:
                raise InputError(
                    f"nanoparticle center[{j}][{i}]={value} must lie between 0 and 1"
                )
        u = r.read(*([float] * DIM), what=f"nanoparticle orientation {j}")
        norm = math.sqrt(sum(v * v for v in u))
        if norm == 0.0:
            raise InputError("nanorod orientation vector must be nonzero")
        centers.append(tuple(center))
        orientations.append(tuple(v / norm for v in u))

    return Parameters(
        nda=nda,
        ndb=ndb,
        phi_ah=phi_ah,
        nah=nah,
        c_type=c_type,
        phi_ch=phi_ch,
        nch_discrete=nch_discrete,
        n_ch=n_ch,
        a_smear=a_smear,
        c=c,
        chi_ab_n=chi_ab_n,
        chi_ac_n=chi_ac_n,
        chi_bc_n=chi_bc_n,
        kappa_n=kappa_n,
        ic_flag=(ic[0][0], ic[1][0]),
        ic_pre=(ic[0][1], ic[1][1]),
        ic_dir=(ic[0][2], ic[1][2]),
        ic_period=(ic[0][3], ic[1][3]),
        keep_fields=bool(keep_fields),
        nx=tuple(nx),
        lengths=tuple(lengths),
        do_brent=bool(do_brent),
        l_low=l_low,
        l_high=l_high,
        l_step=l_step,
        brent_tol=brent_tol,
        lam_pl=lam_pl,
        lam_mi=lam_mi,
        itermax=itermax,
        print_freq=print_freq,
        sample_freq=sample_freq,
        sample_wait=sample_wait,
        save_avg_freq=save_avg_freq,
        error_tol=error_tol,
        update_scheme=update_scheme,
        do_cl=bool(do_cl),
        gsd_ds=gsd_ds,
        gsd_tol=gsd_tol,
        gsd_it_max=gsd_it_max,
        do_film=bool(do_film),
        wall_t=wall_t,
        wall_xi=wall_xi,
        top_wall_lam=tuple(top_wall_lam),
        bot_wall_lam=tuple(bot_wall_lam),
        n_exp_nr=n_exp_nr,
        do_fld_np=bool(do_fld_np),
        np_type=np_type,
        nu=nu,
        np_frac=np_frac,
        l_nr=l_nr,
        r_nr=r_nr,
        xi_nr=xi_nr,
        exp_nr_chi_apn=chi_apn,
        exp_nr_chi_bpn=chi_bpn,
        exp_nr_chi_cpn=chi_cpn,
        exp_nr_centers=tuple(centers),
        exp_nr_orientations=tuple(orientations),
    )


def read_input(path: str | Path = "bcp.input") -> Parameters:
    """Read and parse the input file at ``path``."""
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise InputError(f"failed to open {path}") from exc
    return parse_input(text)