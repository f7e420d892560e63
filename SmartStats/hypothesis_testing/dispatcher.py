"""
Dispatch of validated analysis requests to statistical procedures.

Each test identifier maps to exactly one procedure. A procedure shapes the
dataset columns into the arguments its library call expects (a clean
numeric sample, samples partitioned by group, or a contingency table),
calls the library, and reads the p-value out of whatever result object the
library returns. The dispatcher wraps that into one normalized TestResult.

Normality tests:
- Shapiro-Wilk (scipy.stats.shapiro)
- Jarque-Bera (scipy.stats.jarque_bera)
- Lilliefors (statsmodels.stats.diagnostic.lilliefors)
- Anderson-Darling (statsmodels.stats.diagnostic.normal_ad)
- Kolmogorov-Smirnov against a normal distribution whose mean and standard
  deviation are estimated from the tested sample itself (scipy.stats.kstest).
  The tabulated KS distribution assumes a fully specified reference, so the
  p-value is conservative; Lilliefors is the corrected variant.

Group comparison tests:
- t-Student, Welch two-sample t-test (scipy.stats.ttest_ind, equal_var=False)
- ANOVA, one-way table from an OLS fit (statsmodels anova_lm)

Association tests:
- Chi-cuadrado, Pearson's chi-square on the variable x group table
"""

import logging
import warnings
from typing import Any, Callable, Dict, NamedTuple, Optional
import pandas as pd
import numpy as np
from scipy import stats
from statsmodels.formula.api import ols
from statsmodels.stats.anova import anova_lm
from statsmodels.stats.diagnostic import lilliefors, normal_ad

from ..categorical_analysis import ChiSquareTests
from ..data_processing.models import (
    AnalysisRequest, DatasetHandle, TestId, TestResult, TestSpec
)
from ..exceptions import TestExecutionError
from .catalog import DEFAULT_CATALOG, TestCatalog
from .validator import Validator


class _Outcome(NamedTuple):
    p_value: float
    statistic: Dict[str, Any]
    raw: Any
    n_observations: int


class TestDispatcher:
    """
    Runs the procedure selected by a request and normalizes its result.

    Usage
    -----
    >>> dispatcher = TestDispatcher()
    >>> result = dispatcher.run(request, dataset)
    >>> result.p_value
    """
    __test__ = False

    def __init__(self, catalog: Optional[TestCatalog] = None):
        self.catalog = catalog or DEFAULT_CATALOG
        self.validator = Validator()
        self.chi_square_tests = ChiSquareTests()
        self.logger = logging.getLogger(__name__)

        self._procedures: Dict[TestId, Callable[[TestSpec, AnalysisRequest, DatasetHandle], _Outcome]] = {
            TestId.SHAPIRO_WILK: self._shapiro_wilk,
            TestId.JARQUE_BERA: self._jarque_bera,
            TestId.LILLIEFORS: self._lilliefors,
            TestId.ANDERSON_DARLING: self._anderson_darling,
            TestId.KOLMOGOROV_SMIRNOV: self._kolmogorov_smirnov,
            TestId.T_STUDENT: self._t_student,
            TestId.ANOVA: self._anova,
            TestId.CHI_SQUARE: self._chi_square,
        }

        missing = [test_id for test_id in self.catalog.ids() if test_id not in self._procedures]
        if missing:
            raise ValueError(f"No procedure registered for: {[t.value for t in missing]}")

    def run(self, request: AnalysisRequest, dataset: DatasetHandle) -> Optional[TestResult]:
        """
        Execute the requested test.

        Parameters
        ----------
        request : AnalysisRequest
            A request the Validator accepted
        dataset : DatasetHandle
            Data the request refers to

        Returns
        -------
        TestResult or None
            None when no test is selected

        Raises
        ------
        ValidationError
            If the request was not validated first and is invalid
        TestExecutionError
            If the procedure rejects the data
        """
        if request.test is None:
            self.logger.info("No test selected; nothing to run")
            return None

        spec = request.test
        self.validator.validate(request, dataset).raise_if_invalid()

        procedure = self._procedures[spec.id]
        self.logger.info(f"Running {spec.name} on '{request.variable}'"
                         + (f" grouped by '{request.group}'" if request.has_group else ""))

        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                outcome = procedure(spec, request, dataset)
        except TestExecutionError as e:
            self.logger.error(f"{spec.name} failed: {e.message}")
            raise
        except (ValueError, TypeError, ArithmeticError, np.linalg.LinAlgError) as e:
            self.logger.error(f"{spec.name} failed: {e}")
            raise TestExecutionError(spec.id, str(e)) from e

        p_value = self._checked_p_value(spec, outcome.p_value)
        self._check_statistic(spec, outcome.statistic)
        procedure_warnings = tuple(dict.fromkeys(str(w.message) for w in caught))

        result = TestResult(
            test_id=spec.id,
            p_value=p_value,
            statistic=outcome.statistic,
            raw=outcome.raw,
            variable=request.variable,
            group=request.group_column,
            n_observations=outcome.n_observations,
            warnings=procedure_warnings
        )

        self.logger.info(f"{spec.name} completed: p={p_value:.4g} (n={outcome.n_observations})")

        return result

    # Normality tests

    def _shapiro_wilk(self, spec, request, dataset) -> _Outcome:
        x = self._normality_sample(spec, request, dataset)
        res = stats.shapiro(x)
        return _Outcome(float(res.pvalue), {'W': float(res.statistic)}, res, len(x))

    def _jarque_bera(self, spec, request, dataset) -> _Outcome:
        x = self._normality_sample(spec, request, dataset)
        res = stats.jarque_bera(x)
        return _Outcome(float(res.pvalue), {'X-squared': float(res.statistic), 'df': 2}, res, len(x))

    def _lilliefors(self, spec, request, dataset) -> _Outcome:
        x = self._normality_sample(spec, request, dataset)
        res = lilliefors(x, dist='norm', pvalmethod='approx')
        ksstat, p_value = res
        return _Outcome(float(p_value), {'D': float(ksstat)}, res, len(x))

    def _anderson_darling(self, spec, request, dataset) -> _Outcome:
        x = self._normality_sample(spec, request, dataset)
        res = normal_ad(x)
        ad2, p_value = res
        return _Outcome(float(p_value), {'A': float(ad2)}, res, len(x))

    def _kolmogorov_smirnov(self, spec, request, dataset) -> _Outcome:
        x = self._normality_sample(spec, request, dataset)
        # Reference parameters come from the same sample (see module docstring)
        mean = float(np.mean(x))
        sd = float(np.std(x, ddof=1))
        res = stats.kstest(x, 'norm', args=(mean, sd))
        statistic = {'D': float(res.statistic), 'mean': mean, 'sd': sd}
        return _Outcome(float(res.pvalue), statistic, res, len(x))

    # Group comparison tests

    def _t_student(self, spec, request, dataset) -> _Outcome:
        samples, n = self._grouped_samples(spec, request, dataset)
        if len(samples) != 2:
            raise TestExecutionError(
                spec.id,
                f"grouping factor must have exactly 2 levels, '{request.group}' has {len(samples)}"
            )

        (level_a, a), (level_b, b) = samples.items()
        res = stats.ttest_ind(a, b, equal_var=False)
        ci = res.confidence_interval(confidence_level=0.95)

        statistic = {
            't': float(res.statistic),
            'df': float(res.df),
            'levels': [level_a, level_b],
            'group_means': {level_a: float(np.mean(a)), level_b: float(np.mean(b))},
            'confidence_interval': (float(ci.low), float(ci.high)),
        }
        return _Outcome(float(res.pvalue), statistic, res, n)

    def _anova(self, spec, request, dataset) -> _Outcome:
        samples, n = self._grouped_samples(spec, request, dataset)

        frame = pd.DataFrame({
            'value': np.concatenate(list(samples.values())),
            'group': np.repeat(list(samples.keys()), [len(v) for v in samples.values()])
        })
        model = ols('value ~ C(group)', data=frame).fit()
        table = anova_lm(model)

        factor_row = table.loc['C(group)']
        statistic = {
            'F': float(factor_row['F']),
            'df_between': int(factor_row['df']),
            'df_within': int(table.loc['Residual', 'df']),
            'sum_sq_between': float(factor_row['sum_sq']),
            'sum_sq_within': float(table.loc['Residual', 'sum_sq']),
            'levels': list(samples.keys()),
            'group_means': {level: float(np.mean(v)) for level, v in samples.items()},
        }
        raw = table.rename(index={'C(group)': request.group})
        return _Outcome(float(factor_row['PR(>F)']), statistic, raw, n)

    # Association tests

    def _chi_square(self, spec, request, dataset) -> _Outcome:
        frame = pd.DataFrame({
            'variable': dataset.column(request.variable).values,
            'group': dataset.column(request.group).values,
        })
        n_complete = int(frame.notna().all(axis=1).sum())
        if n_complete < spec.min_observations:
            raise TestExecutionError(
                spec.id,
                f"need at least {spec.min_observations} complete observations, got {n_complete}"
            )
        res = self.chi_square_tests.test_independence(frame, 'variable', 'group')

        axes = {'index': request.variable, 'columns': request.group}
        res.contingency_table = res.contingency_table.rename_axis(**axes)
        res.expected_frequencies = res.expected_frequencies.rename_axis(**axes)
        res.standardized_residuals = res.standardized_residuals.rename_axis(**axes)
        for message in res.warnings:
            warnings.warn(message, RuntimeWarning)

        statistic = {
            'X-squared': res.chi_square_statistic,
            'df': res.degrees_of_freedom,
            'p_value': res.p_value,
            'contingency_table': res.contingency_table,
            'expected_frequencies': res.expected_frequencies,
            'residuals': res.standardized_residuals,
            'cramers_v': res.effect_size,
            'effect_size_category': res.get_effect_size_category(),
            'minimum_expected_frequency': res.minimum_expected_frequency,
            'correction_applied': res.correction_applied,
        }
        n = int(res.contingency_table.values.sum())
        return _Outcome(res.p_value, statistic, res, n)

    # Argument shaping

    def _numeric_values(self, spec: TestSpec, dataset: DatasetHandle, name: str) -> pd.Series:
        values = dataset.column(name).values
        try:
            return pd.to_numeric(values, errors='raise')
        except (ValueError, TypeError) as e:
            raise TestExecutionError(spec.id, f"'{name}' contains non-numeric values ({e})") from e

    def _normality_sample(self, spec, request, dataset) -> np.ndarray:
        x = self._numeric_values(spec, dataset, request.variable).dropna().to_numpy(dtype=float)
        n = len(x)

        if not np.isfinite(x).all():
            raise TestExecutionError(spec.id, f"'{request.variable}' contains infinite values")

        if n < spec.min_observations:
            raise TestExecutionError(
                spec.id, f"sample size must be at least {spec.min_observations}, got {n}"
            )
        if spec.max_observations is not None and n > spec.max_observations:
            raise TestExecutionError(
                spec.id,
                f"sample size must be between {spec.min_observations} and {spec.max_observations}, got {n}"
            )
        if np.ptp(x) == 0:
            raise TestExecutionError(spec.id, f"all '{request.variable}' values are identical")

        return x

    def _grouped_samples(self, spec, request, dataset):
        """Partition the variable by group levels, dropping incomplete rows."""
        frame = pd.DataFrame({
            'value': self._numeric_values(spec, dataset, request.variable),
            'group': dataset.column(request.group).values,
        }).dropna()

        if not np.isfinite(frame['value'].to_numpy(dtype=float)).all():
            raise TestExecutionError(spec.id, f"'{request.variable}' contains infinite values")

        samples = {
            level: grp['value'].to_numpy(dtype=float)
            for level, grp in frame.groupby('group', sort=True)
        }

        if len(samples) < 2:
            raise TestExecutionError(
                spec.id,
                f"grouping factor must have at least 2 levels, '{request.group}' has {len(samples)}"
            )

        for level, values in samples.items():
            if len(values) < spec.min_observations:
                raise TestExecutionError(
                    spec.id,
                    f"not enough observations in group '{level}' "
                    f"(need {spec.min_observations}, got {len(values)})"
                )

        return samples, len(frame)

    def _checked_p_value(self, spec: TestSpec, p_value: float) -> float:
        if p_value is None or not np.isfinite(p_value):
            self.logger.error(f"{spec.name} returned an undefined p-value")
            raise TestExecutionError(
                spec.id, "the procedure returned an undefined p-value (are the data constant?)"
            )
        # Absorb floating point overshoot from the libraries
        return float(min(max(p_value, 0.0), 1.0))

    def _check_statistic(self, spec: TestSpec, statistic: Dict[str, Any]) -> None:
        """A non-finite scalar statistic makes the p-value meaningless."""
        for key, value in statistic.items():
            if isinstance(value, (float, np.floating)) and not np.isfinite(value):
                self.logger.error(f"{spec.name} returned an undefined {key} statistic")
                raise TestExecutionError(
                    spec.id, f"the procedure returned an undefined {key} statistic"
                )
