"""Lattice image I/O, visual output writers, logging and printf formatting for Ising-model simulations."""

__version__ = "0.1.0"