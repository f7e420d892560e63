"""
Natural-language verdicts for test results.

A verdict is a pure function of (test, p-value, alpha): the null hypothesis
is not rejected when p > alpha and rejected otherwise. Texts come from the
catalog entry of each test, so the wording always matches the hypothesis
the test actually checks (normality, equal means, independence).
"""

from typing import Optional, Union

from ..data_processing.models import TestId, TestResult, Verdict
from .catalog import DEFAULT_CATALOG, TestCatalog

DEFAULT_ALPHA = 0.05
NO_TEST_SELECTED_TEXT = "No se ha seleccionado una prueba"


def _check_levels(p_value: float, alpha: float) -> None:
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"alpha must lie in (0, 1), got {alpha}")
    if p_value is None or not 0.0 <= p_value <= 1.0:
        raise ValueError(f"p-value must lie in [0, 1], got {p_value}")


def verdict(test_id: Union[TestId, str],
            p_value: float,
            alpha: float = DEFAULT_ALPHA,
            catalog: Optional[TestCatalog] = None) -> Verdict:
    """Classify a p-value as rejecting the null hypothesis or not."""
    (catalog or DEFAULT_CATALOG).describe(test_id)
    _check_levels(p_value, alpha)
    return Verdict.FAIL_TO_REJECT if p_value > alpha else Verdict.REJECT


def interpret(test_id: Union[TestId, str],
              p_value: float,
              alpha: float = DEFAULT_ALPHA,
              catalog: Optional[TestCatalog] = None) -> str:
    """
    Textual verdict for a test's p-value.

    Parameters
    ----------
    test_id : TestId or str
        Test that produced the p-value
    p_value : float
        p-value in [0, 1]
    alpha : float, default 0.05
        Significance level

    Returns
    -------
    str
        The test's "fail to reject" text when p_value > alpha, its
        "reject" text otherwise

    Raises
    ------
    UnknownTestError
        If test_id is not in the catalog
    ValueError
        If p_value or alpha is out of range
    """
    spec = (catalog or DEFAULT_CATALOG).describe(test_id)
    outcome = verdict(spec.id, p_value, alpha, catalog)
    if outcome == Verdict.FAIL_TO_REJECT:
        return spec.fail_to_reject_text
    return spec.reject_text


def interpret_result(result: Optional[TestResult],
                     alpha: float = DEFAULT_ALPHA,
                     catalog: Optional[TestCatalog] = None) -> str:
    """Verdict text for a TestResult; placeholder text when there is none."""
    if result is None:
        return NO_TEST_SELECTED_TEXT
    return interpret(result.test_id, result.p_value, alpha, catalog)
