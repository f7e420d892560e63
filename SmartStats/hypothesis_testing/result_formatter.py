"""
Plain-text rendering of test results for verbatim display.

The layout follows the classic hypothesis-test printout: method heading,
the data the test was run on, the statistic line with the p-value, and
test-specific details (confidence interval, ANOVA table, contingency table).
"""

from typing import List, Optional

import numpy as np

from ..data_processing.models import TestFamily, TestId, TestResult
from .catalog import DEFAULT_CATALOG, TestCatalog

# Smallest p-value printed as a number (double precision machine epsilon)
P_VALUE_FLOOR = 2.2e-16


def format_p_value(p_value: float) -> str:
    if p_value < P_VALUE_FLOOR:
        return f"< {P_VALUE_FLOOR:g}"
    return f"{p_value:.4g}"


def _format_number(value) -> str:
    if isinstance(value, (int, np.integer)):
        return str(value)
    return f"{value:.5g}"


def format_result(result: TestResult, catalog: Optional[TestCatalog] = None) -> str:
    """
    Render a TestResult as the text shown in the results panel.

    Parameters
    ----------
    result : TestResult
        Result of a test run
    catalog : TestCatalog, optional
        Catalog providing the method heading

    Returns
    -------
    str
    """
    spec = (catalog or DEFAULT_CATALOG).describe(result.test_id)

    if spec.family == TestFamily.NORMALITY:
        data_name = result.variable
    elif spec.family == TestFamily.MEAN_COMPARISON:
        data_name = f"{result.variable} by {result.group}"
    else:
        data_name = f"{result.variable} and {result.group}"

    lines = ["", f"\t{spec.method}", "", f"data:  {data_name}"]

    if result.test_id == TestId.ANOVA:
        lines.extend(_anova_lines(result))
    else:
        lines.append(_statistic_line(result))

    if result.test_id == TestId.T_STUDENT:
        lines.extend(_t_student_lines(result))
    elif result.test_id == TestId.CHI_SQUARE:
        lines.extend(_chi_square_lines(result))
    elif result.test_id == TestId.KOLMOGOROV_SMIRNOV:
        lines.append("alternative hypothesis: two-sided")
        lines.append(
            f"reference: normal(mean = {_format_number(result.statistic['mean'])}, "
            f"sd = {_format_number(result.statistic['sd'])}) estimated from the sample"
        )

    if result.warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"  {message}" for message in result.warnings)

    lines.append("")
    return "\n".join(lines)


def _statistic_line(result: TestResult) -> str:
    scalar_keys = ['W', 'X-squared', 'D', 'A', 't', 'df']
    parts = [
        f"{key} = {_format_number(result.statistic[key])}"
        for key in scalar_keys if key in result.statistic
    ]
    parts.append(f"p-value = {format_p_value(result.p_value)}")
    return ", ".join(parts)


def _t_student_lines(result: TestResult) -> List[str]:
    level_a, level_b = result.statistic['levels']
    low, high = result.statistic['confidence_interval']
    means = result.statistic['group_means']
    return [
        "alternative hypothesis: true difference in means between group "
        f"{level_a} and group {level_b} is not equal to 0",
        "95 percent confidence interval:",
        f" {_format_number(low)} {_format_number(high)}",
        "sample estimates:",
        f"mean in group {level_a} = {_format_number(means[level_a])}, "
        f"mean in group {level_b} = {_format_number(means[level_b])}",
    ]


def _anova_lines(result: TestResult) -> List[str]:
    table = result.raw
    return [
        "",
        table.to_string(float_format=lambda v: f"{v:.5g}", na_rep=""),
        "",
        f"F = {_format_number(result.statistic['F'])}, "
        f"p-value = {format_p_value(result.p_value)}",
    ]


def _chi_square_lines(result: TestResult) -> List[str]:
    lines = ["", "Contingency table:", result.statistic['contingency_table'].to_string()]
    if result.statistic.get('correction_applied'):
        lines.append("(Yates' continuity correction applied)")
    lines.extend([
        "",
        "Pearson residuals:",
        result.statistic['residuals'].to_string(float_format=lambda v: f"{v:.3f}"),
        "",
        f"Cramer's V = {_format_number(result.statistic['cramers_v'])} "
        f"({result.statistic['effect_size_category']})",
        f"minimum expected frequency = "
        f"{_format_number(result.statistic['minimum_expected_frequency'])}",
    ])
    return lines
