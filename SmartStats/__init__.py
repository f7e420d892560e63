"""
SmartStats

An interactive hypothesis testing explorer: load a tabular dataset, pick a
variable (and optionally a grouping variable), choose one of eight tests and
get a descriptive summary, a diagnostic plot, the raw test output and a
plain-language verdict.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .smart_stats import SmartStatsExplorer
from .exceptions import (
    SmartStatsError,
    UnknownTestError,
    ValidationError,
    TestExecutionError
)
from .data_processing.models import (
    VariableType,
    TestId,
    SessionState,
    DatasetHandle,
    AnalysisRequest,
    TestResult,
    AnalysisReport
)
from .hypothesis_testing import DEFAULT_CATALOG, describe, interpret

__all__ = [
    'SmartStatsExplorer',
    'SmartStatsError',
    'UnknownTestError',
    'ValidationError',
    'TestExecutionError',
    'VariableType',
    'TestId',
    'SessionState',
    'DatasetHandle',
    'AnalysisRequest',
    'TestResult',
    'AnalysisReport',
    'DEFAULT_CATALOG',
    'describe',
    'interpret'
]
