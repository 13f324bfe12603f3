"""Building blocks for field-theoretic simulations of copolymer, homopolymer and nanoparticle blends."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "debye",
    "density",
    "grid",
    "hamiltonian",
    "output",
    "propagators",
    "sphere",
    "state",
]