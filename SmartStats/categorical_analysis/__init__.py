"""Categorical data analysis module."""

from .chi_square_tests import ChiSquareTests

__all__ = [
    'ChiSquareTests'
]
