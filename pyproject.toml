[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "magneto"
version = "0.1.0"
description = "Lattice image I/O, visual output writers and a small pattern-based logging toolkit for Ising-model simulations"
requires-python = ">=3.10"
keywords = ["ising", "lattice", "simulation", "png", "logging", "printf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["magneto"]

[tool.pytest.ini_options]
addopts = "-ra"
