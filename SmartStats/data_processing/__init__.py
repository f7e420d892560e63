"""Data processing module for the hypothesis testing explorer."""

from .data_loader import DataLoader
from .models import (
    VariableType,
    TestId,
    Arity,
    TestFamily,
    ChartFamily,
    Verdict,
    SessionState,
    CHART_FAMILIES,
    NO_GROUP,
    Column,
    DatasetHandle,
    TestSpec,
    AnalysisRequest,
    ValidationResult,
    TestResult,
    ChiSquareResult,
    DescriptiveStats,
    AnalysisReport
)

__all__ = [
    'DataLoader',
    'VariableType',
    'TestId',
    'Arity',
    'TestFamily',
    'ChartFamily',
    'Verdict',
    'SessionState',
    'CHART_FAMILIES',
    'NO_GROUP',
    'Column',
    'DatasetHandle',
    'TestSpec',
    'AnalysisRequest',
    'ValidationResult',
    'TestResult',
    'ChiSquareResult',
    'DescriptiveStats',
    'AnalysisReport'
]
