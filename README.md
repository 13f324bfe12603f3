# polyfts

`polyfts` is a library of building blocks for field-theoretic simulations of
polymer blends on a periodic grid. It models:

- discrete Gaussian AB diblock copolymers,
- discrete A and C homopolymers, and ground-state-dominant homopolymers,
- explicit nanoparticles through a fixed density field,
- field-based nanospheres and nanorods (rods integrated over orientations),
- confining walls for thin-film geometries.

Given a set of fields it computes chain propagators, partition functions,
segment densities and the effective Hamiltonian, and writes the results to
disk.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `polyfts.grid` — `Grid(nx, lengths)` for a 1D, 2D or 3D periodic box:
  flat/multi-index stacking (`stack`, `unstack`), positions, minimum-image
  distances, wave vectors (`k_vector`, `k_squared`, and `k_alias` with
  Nyquist modes removed), FFTs (`fft_forward` normalised by `1/m`,
  `fft_backward` its inverse), integrals, averages, `zero_average` and a
  spectral `gradient`. Helpers `stack_index`, `unstack_index`,
  `integ_simpson`, `dot_prod` and `cross_prod`.
- `polyfts.config` — `parse_input(text)` and `read_input(path)` turn an input
  file into a `Parameters` dataclass; problems raise `InputError`. The input
  format is two-dimensional (`DIM = 2`).
- `polyfts.debye` — Debye functions `calc_gaa`, `calc_gbb`, `calc_gab`,
  `calc_gd` and `calc_discrete_debye`, evaluated on arrays of squared wave
  vectors.
- `polyfts.sphere` — `gauss_legendre_init` reads tabulated Gauss–Legendre
  abscissae and weights (`lgvalues-abscissa.txt`, `lgvalues-weights.txt`,
  from `~/bin` unless a directory is given); `sphere_init(nu, directory)`
  builds a `SphereQuadrature` with `integrate`, `integrate_positions` and
  `integrate_fields`.
- `polyfts.propagators` — `diblock_discrete`, `homopolymer_discrete` and
  `homopolymer_continuous_gsd` (power iteration, returning a `GSDResult`).
- `polyfts.state` — `FieldState` holds every field, density and scalar of a
  simulation; `create_state(grid, params)` makes one with zeroed fields and
  identity kernels `hhat` and `poly_bond_fft`. `Averages` keeps running sums
  of sampled densities.
- `polyfts.density` — `calc_poly_density(state)` rebuilds the species fields,
  smears them, and fills in partition functions and densities; the lower-level
  functions (`integrate_diblock_discrete`, `integrate_homopoly_discrete`,
  `generate_smwp_iso`, `generate_smwp_aniso`, `np_density_sphere`,
  `np_density_rod`) are usable on their own.
- `polyfts.hamiltonian` — `calc_h(state)` and its parts `wpl_part`,
  `wab_part`, `wac_part`, `wbc_part`; a NaN result raises
  `NaNHamiltonianError`.
- `polyfts.output` — binary dumps (`write_data_bin`, `read_data_bin`,
  `write_avg_data_bin`), text dumps in real and k-space (`write_data`,
  `append_data`, `write_avg_data`, `write_kdata`, `write_avg_kdata`),
  resume files (`read_one_resume_file`, `read_resume_files` for
  `wpl.res` … `wbcm.res`), and `write_outputs` / `save_averages`, which write
  `<name>.p0.bin` files for a state.

## Example

```python
import numpy as np

from polyfts.config import read_input
from polyfts.density import calc_poly_density
from polyfts.grid import Grid
from polyfts.hamiltonian import calc_h
from polyfts.output import write_outputs
from polyfts.state import create_state

params = read_input("bcp.input")
grid = Grid(params.nx, params.lengths)
state = create_state(grid, params)

k2 = grid.k_squared()
state.hhat = np.exp(-k2 * state.a_squared / 2.0)
state.poly_bond_fft = np.exp(-k2 / (state.n - 1))
state.n_d = state.c * grid.volume          # number of diblock chains

calc_poly_density(state)
print("Qd =", state.qd, "H =", calc_h(state))
write_outputs(state, ".")
```

Grid utilities on their own:

```python
import numpy as np
from polyfts.grid import Grid

grid = Grid((32, 32), (8.0, 8.0))
field = np.ones(grid.m, dtype=complex)
print(grid.integrate(field))                           # box volume
print(grid.fft_backward(grid.fft_forward(field))[0])   # round trip
```

## What the package does not do

`polyfts` provides the pieces of a simulation, not a complete run. It has no
command-line program, no field update step (neither a semi-implicit nor an
Euler step, and no complex Langevin noise), no random number generator, no
routine that sets up initial fields, wall profiles, explicit nanoparticle
densities or nanoparticle shape functions, no main iteration loop with
convergence checks, and no optimisation of the box length. The caller sets
the kernels, chain counts and shape functions on a `FieldState` and drives
the iteration.