"""
Univariate descriptive statistics for the selected variable.

Quantitative variables get a five-number summary with mean, spread and
shape; qualitative variables get a frequency table with percentages over
all rows and over non-missing rows.
"""

import logging
from typing import List, Optional
import pandas as pd
import numpy as np
from scipy import stats

from ..data_processing.models import Column, DescriptiveStats, VariableType


class UnivariateStats:
    """
    Descriptive statistics driven by the column's declared type.

    Features:
    - Min, quartiles, median, mean, max and missing count (quantitative)
    - Standard deviation, skewness and kurtosis (quantitative)
    - Frequency table with percent and valid percent (qualitative)
    """

    def __init__(self, max_categories: int = 50):
        """
        Initialize UnivariateStats calculator.

        Parameters
        ----------
        max_categories : int, default 50
            Frequency tables longer than this are truncated with a warning
        """
        self.max_categories = max_categories
        self.logger = logging.getLogger(__name__)

    def describe(self, column: Column) -> DescriptiveStats:
        """
        Summarize a single column according to its declared type.

        Parameters
        ----------
        column : Column
            Column to summarize

        Returns
        -------
        DescriptiveStats
        """
        self.logger.debug(f"Calculating descriptive statistics for {column.name}")

        if column.type == VariableType.QUANTITATIVE:
            return self._calculate_numeric_stats(column)
        return self._calculate_categorical_stats(column)

    def _calculate_numeric_stats(self, column: Column) -> DescriptiveStats:
        """Calculate statistics for quantitative variables."""
        numeric = pd.to_numeric(column.values, errors='coerce')
        coerced = int(numeric.isna().sum() - column.values.isna().sum())
        valid_data = numeric.dropna()

        stats_result = DescriptiveStats(
            variable=column.name,
            variable_type=column.type,
            count=len(valid_data),
            n_missing=int(numeric.isna().sum())
        )

        if coerced > 0:
            stats_result.warnings.append(
                f"{coerced} non-numeric values in '{column.name}' treated as missing"
            )

        if len(valid_data) == 0:
            return stats_result

        stats_result.mean = float(valid_data.mean())
        stats_result.median = float(valid_data.median())
        stats_result.minimum = float(valid_data.min())
        stats_result.maximum = float(valid_data.max())
        stats_result.first_quartile = float(valid_data.quantile(0.25))
        stats_result.third_quartile = float(valid_data.quantile(0.75))

        mode_result = valid_data.mode()
        if not mode_result.empty:
            stats_result.mode = float(mode_result.iloc[0])

        if len(valid_data) >= 2:
            stats_result.std = float(valid_data.std())

        # Shape is undefined for constant samples
        if len(valid_data) >= 3 and np.ptp(valid_data.to_numpy()) > 0:
            stats_result.skewness = float(stats.skew(valid_data))
            if len(valid_data) >= 4:
                stats_result.kurtosis = float(stats.kurtosis(valid_data))

        return stats_result

    def _calculate_categorical_stats(self, column: Column) -> DescriptiveStats:
        """Calculate statistics for qualitative variables."""
        values = column.values
        stats_result = DescriptiveStats(
            variable=column.name,
            variable_type=column.type,
            count=int(values.notna().sum()),
            n_missing=int(values.isna().sum())
        )

        mode_result = values.mode()
        if not mode_result.empty:
            stats_result.mode = mode_result.iloc[0]

        stats_result.frequency_table = self._create_frequency_table(values)

        if len(stats_result.frequency_table) > self.max_categories:
            stats_result.warnings.append(
                f"'{column.name}' has {len(stats_result.frequency_table)} categories; "
                f"showing the first {self.max_categories}"
            )
            stats_result.frequency_table = stats_result.frequency_table.head(self.max_categories)

        return stats_result

    def _create_frequency_table(self, data: pd.Series) -> pd.DataFrame:
        """Frequency table with percent over all rows and valid percent over non-missing rows."""
        value_counts = data.value_counts(dropna=False, sort=False)
        # Categories in label order, missing values last
        items = sorted(value_counts.items(), key=lambda item: (pd.isna(item[0]), str(item[0])))
        counts = np.array([count for _, count in items], dtype=int)

        total = len(data)
        valid_total = int(data.notna().sum())

        freq_table = pd.DataFrame({
            'Value': pd.Series([value for value, _ in items], dtype=object),
            'n': counts,
            'percent': counts / total * 100 if total else np.zeros(len(counts)),
        })

        if valid_total < total:
            is_valid = freq_table['Value'].notna()
            freq_table['valid_percent'] = np.where(
                is_valid, freq_table['n'] / valid_total * 100 if valid_total else np.nan, np.nan
            )

        return freq_table.reset_index(drop=True)


def format_descriptive_stats(stats_result: DescriptiveStats) -> str:
    """Render descriptive statistics as display text."""
    if stats_result.variable_type == VariableType.QUANTITATIVE:
        labels = ['Min.', '1st Qu.', 'Median', 'Mean', '3rd Qu.', 'Max.']
        values = [
            stats_result.minimum, stats_result.first_quartile, stats_result.median,
            stats_result.mean, stats_result.third_quartile, stats_result.maximum
        ]
        if stats_result.n_missing:
            labels.append("NA's")
            values.append(stats_result.n_missing)

        summary = pd.DataFrame(
            [[_cell(v) for v in values]], columns=labels, index=['']
        )
        lines: List[str] = [summary.to_string()]
        if stats_result.std is not None:
            lines.append(f"sd = {stats_result.std:.4g}")
    else:
        table = stats_result.frequency_table
        if table is None or table.empty:
            lines = [f"{stats_result.variable}: no values"]
        else:
            lines = [table.to_string(index=False, float_format=lambda v: f"{v:.1f}%", na_rep="-")]

    lines.extend(stats_result.warnings)
    return "\n".join(lines)


def _cell(value: Optional[float]) -> str:
    if value is None:
        return "NA"
    if isinstance(value, (int, np.integer)):
        return str(value)
    return f"{value:.4g}"
