"""
Diagnostic plots for the selected hypothesis test.

The chart is chosen from the test's family through the CHART_FAMILIES
lookup: a histogram for normality tests, a boxplot per group for mean
comparisons and a category bar chart for association tests.
"""

import logging
from typing import Dict, Optional
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from ..data_processing.models import (
    AnalysisRequest, ChartFamily, DatasetHandle, TestId
)
from ..exceptions import ValidationError
from ..hypothesis_testing.validator import GROUP_REQUIRED

HISTOGRAM_COLOR = '#b19cd9'
BOXPLOT_COLOR = '#9b59b6'
BAR_COLOR = '#b19cd9'

MISSING_GROUP_MESSAGE = "Debes seleccionar una variable de grupo"

PLOT_TITLES: Dict[ChartFamily, str] = {
    ChartFamily.HISTOGRAM: "Distribución de la Variable (Prueba de Normalidad)",
    ChartFamily.GROUPED_BOXPLOT: "Comparación de Grupos ({test})",
    ChartFamily.BAR_CHART: "Distribución de Categorías ({test})",
}


class DiagnosticPlots:
    """
    Static diagnostic charts drawn with matplotlib and seaborn.

    Features:
    - Histogram of the variable for normality tests
    - Boxplot of the variable by group for t-Student and ANOVA
    - Bar chart of category counts for Chi-cuadrado
    """

    def __init__(self, bins: int = 30, figsize=(8, 5)):
        """
        Initialize diagnostic plotting.

        Parameters
        ----------
        bins : int, default 30
            Number of histogram bins
        figsize : tuple, default (8, 5)
            Figure size in inches
        """
        self.bins = bins
        self.figsize = figsize
        self.logger = logging.getLogger(__name__)

    def plot(self, request: AnalysisRequest, dataset: DatasetHandle) -> Optional[plt.Figure]:
        """
        Draw the chart associated with the requested test.

        Parameters
        ----------
        request : AnalysisRequest
            Selected variable, group and test
        dataset : DatasetHandle
            Data to plot

        Returns
        -------
        matplotlib.figure.Figure or None
            None when no test is selected

        Raises
        ------
        ValidationError
            If a grouped boxplot is requested without a grouping variable
        """
        if request.test is None:
            self.logger.info("No test selected; no diagnostic plot")
            return None

        chart_family = request.test.chart_family
        title = PLOT_TITLES[chart_family].format(test=request.test.name)
        self.logger.debug(f"Drawing {chart_family.value} for '{request.variable}'")

        if chart_family == ChartFamily.HISTOGRAM:
            return self.histogram(dataset, request.variable, title)
        elif chart_family == ChartFamily.GROUPED_BOXPLOT:
            if not request.has_group:
                raise ValidationError(MISSING_GROUP_MESSAGE, code=GROUP_REQUIRED)
            return self.grouped_boxplot(dataset, request.variable, request.group, title)
        else:
            return self.bar_chart(dataset, request.variable, title)

    def histogram(self, dataset: DatasetHandle, variable: str,
                  title: str = PLOT_TITLES[ChartFamily.HISTOGRAM]) -> plt.Figure:
        """Histogram of a quantitative variable."""
        values = pd.to_numeric(dataset.column(variable).values, errors='coerce').dropna()

        fig, ax = plt.subplots(figsize=self.figsize)
        sns.histplot(x=values, bins=self.bins, color=HISTOGRAM_COLOR, ax=ax)

        ax.set_xlabel(variable)
        ax.set_ylabel('count')
        ax.set_title(title)
        plt.tight_layout()
        return fig

    def grouped_boxplot(self, dataset: DatasetHandle, variable: str, group: str,
                        title: Optional[str] = None) -> plt.Figure:
        """Boxplot of a quantitative variable for each level of a grouping variable."""
        frame = pd.DataFrame({
            variable: pd.to_numeric(dataset.column(variable).values, errors='coerce'),
            group: dataset.column(group).values.astype('object'),
        }).dropna()
        order = sorted(frame[group].unique(), key=str)

        fig, ax = plt.subplots(figsize=self.figsize)
        sns.boxplot(data=frame, x=group, y=variable, order=order, color=BOXPLOT_COLOR, ax=ax)

        ax.set_title(title or PLOT_TITLES[ChartFamily.GROUPED_BOXPLOT].format(test=TestId.ANOVA.value))
        plt.tight_layout()
        return fig

    def bar_chart(self, dataset: DatasetHandle, variable: str,
                  title: Optional[str] = None) -> plt.Figure:
        """Bar chart of category counts of a qualitative variable."""
        counts = dataset.column(variable).values.dropna().astype(str).value_counts().sort_index()

        fig, ax = plt.subplots(figsize=self.figsize)
        sns.barplot(x=counts.index, y=counts.values, color=BAR_COLOR, ax=ax)

        ax.set_xlabel(variable)
        ax.set_ylabel('count')
        ax.set_title(title or PLOT_TITLES[ChartFamily.BAR_CHART].format(test=TestId.CHI_SQUARE.value))
        plt.tight_layout()
        return fig

    @staticmethod
    def save(fig: plt.Figure, output_path: str, dpi: int = 100) -> None:
        """Write a figure to disk and release it."""
        fig.savefig(output_path, dpi=dpi)
        plt.close(fig)
