"""Descriptive analysis of the selected variable."""

from .univariate_stats import UnivariateStats, format_descriptive_stats

__all__ = [
    'UnivariateStats',
    'format_descriptive_stats'
]
