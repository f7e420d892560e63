"""Hypothesis test selection, dispatch and interpretation."""

from .catalog import TestCatalog, DEFAULT_CATALOG, describe, all_tests
from .validator import Validator, validate
from .dispatcher import TestDispatcher
from .interpreter import interpret, interpret_result, verdict, DEFAULT_ALPHA
from .result_formatter import format_result, format_p_value

__all__ = [
    'TestCatalog',
    'DEFAULT_CATALOG',
    'describe',
    'all_tests',
    'Validator',
    'validate',
    'TestDispatcher',
    'interpret',
    'interpret_result',
    'verdict',
    'DEFAULT_ALPHA',
    'format_result',
    'format_p_value'
]
