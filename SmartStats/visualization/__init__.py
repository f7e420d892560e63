"""Diagnostic plots for the selected test."""

from .diagnostic_plots import DiagnosticPlots, PLOT_TITLES

__all__ = [
    'DiagnosticPlots',
    'PLOT_TITLES'
]
