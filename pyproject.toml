[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "polyfts"
version = "0.1.0"
description = "Building blocks for field-theoretic simulations of block copolymer, homopolymer and nanoparticle blends"
requires-python = ">=3.10"
keywords = [
    "polymer",
    "field theory",
    "self-consistent field",
    "block copolymer",
    "nanoparticles",
    "Debye function",
    "chain propagator",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["polyfts"]

[tool.hatch.build.targets.sdist]
include = [
    "polyfts",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
