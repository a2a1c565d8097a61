"""Utility functions for the tactical simulation."""

from tacsim.utils.rng import RandomSource, SeededRandom, generate_seed

__all__ = [
    "RandomSource",
    "SeededRandom",
    "generate_seed",
]
