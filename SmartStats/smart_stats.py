"""
Main SmartStats explorer class.

This module provides the interactive session that ties ingestion, test
selection, validation, dispatch, interpretation, descriptive statistics and
diagnostic plots together behind a small state machine:

    IDLE --load--> LOADED --select--> CONFIGURED --run--> EVALUATED

Loading always returns to LOADED, selecting always returns to CONFIGURED and
discards any previous result. ``run`` recomputes; ``refresh`` re-renders the
last result without recomputation.
"""

import base64
import html
import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd
import matplotlib.pyplot as plt

from .data_processing import (
    DataLoader, DatasetHandle, AnalysisRequest, AnalysisReport,
    SessionState, TestResult, VariableType, NO_GROUP
)
from .descriptive_analysis import UnivariateStats, format_descriptive_stats
from .exceptions import TestExecutionError
from .hypothesis_testing import (
    DEFAULT_CATALOG, DEFAULT_ALPHA, TestCatalog, TestDispatcher, Validator,
    format_result, interpret_result
)
from .visualization import DiagnosticPlots

RUN_PROMPT = "Haz clic en Ejecutar"

DEFAULT_CONFIG: Dict[str, Any] = {
    'alpha': DEFAULT_ALPHA,
    'histogram_bins': 30,
    'preview_rows': 10,
}


class SmartStatsExplorer:
    """
    Interactive hypothesis testing session.

    Features:
    - CSV/TSV/Excel loading with declared variable types
    - Selection of a variable, an optional grouping variable and a test
    - Applicability checks before any computation
    - Raw test output and a natural-language verdict
    - Descriptive summary and a diagnostic plot of the selected variable
    - HTML report of the last evaluated analysis
    """

    def __init__(self,
                 config_path: Optional[str] = None,
                 alpha: float = DEFAULT_ALPHA,
                 log_level: str = 'INFO',
                 catalog: Optional[TestCatalog] = None):
        """
        Initialize the explorer.

        Parameters
        ----------
        config_path : str, optional
            Path to a JSON configuration file
        alpha : float, default 0.05
            Significance level; a value in the configuration file wins
        log_level : str, default 'INFO'
            Logging level
        catalog : TestCatalog, optional
            Test catalog, the built-in one by default
        """
        # Setup logging
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        self.logger = logging.getLogger(__name__)

        # Configuration
        self.config = dict(DEFAULT_CONFIG, alpha=alpha)
        if config_path:
            self.config.update(self._load_config(config_path))

        self.alpha = DEFAULT_ALPHA
        self.set_alpha(self.config['alpha'])

        # Initialize components
        self.catalog = catalog or DEFAULT_CATALOG
        self.data_loader = DataLoader()
        self.validator = Validator()
        self.dispatcher = TestDispatcher(self.catalog)
        self.univariate_stats = UnivariateStats()
        self.diagnostic_plots = DiagnosticPlots(bins=int(self.config['histogram_bins']))

        # Session state
        self.state = SessionState.IDLE
        self.dataset: Optional[DatasetHandle] = None
        self.request: Optional[AnalysisRequest] = None
        self.result: Optional[TestResult] = None
        self.message: Optional[str] = None
        self.run_count = 0

        self.logger.info("SmartStats explorer initialized successfully")

    # Loading

    def load_dataset(self,
                     file_path: Union[str, Path],
                     metadata_path: Optional[Union[str, Path]] = None,
                     **kwargs) -> DatasetHandle:
        """
        Load a dataset from file.

        Parameters
        ----------
        file_path : str or Path
            CSV, TSV, TXT or Excel file
        metadata_path : str or Path, optional
            JSON file declaring column types
        **kwargs
            Additional arguments for data loading

        Returns
        -------
        DatasetHandle
            The loaded dataset
        """
        self.logger.info(f"Loading dataset from {file_path}")

        try:
            dataset = self.data_loader.load_data(file_path, metadata_path, **kwargs)
        except Exception as e:
            self.logger.error(f"Failed to load dataset: {e}")
            raise

        self._set_dataset(dataset)
        return dataset

    def load_dataframe(self,
                       data: pd.DataFrame,
                       column_types: Optional[Dict[str, Union[str, VariableType]]] = None) -> DatasetHandle:
        """Use an in-memory DataFrame as the session's dataset."""
        dataset = DatasetHandle.from_dataframe(data, column_types=column_types)
        self._set_dataset(dataset)
        return dataset

    def _set_dataset(self, dataset: DatasetHandle) -> None:
        self.dataset = dataset
        self.request = None
        self.result = None
        self.message = None
        self.state = SessionState.LOADED
        self.logger.info(
            f"Dataset ready: {dataset.n_rows} records, {len(dataset.column_names)} variables"
        )

    def preview(self, n: Optional[int] = None) -> pd.DataFrame:
        """First rows of the loaded dataset."""
        self._require_dataset()
        return self.dataset.preview(n or int(self.config['preview_rows']))

    # Selection

    def select(self,
               variable: str,
               group: Optional[str] = NO_GROUP,
               test: Optional[str] = None,
               variable_type: Optional[Union[str, VariableType]] = None) -> AnalysisRequest:
        """
        Set the analysis request.

        Parameters
        ----------
        variable : str
            Column to analyze
        group : str, default "Ninguna"
            Grouping column; "Ninguna" or None for no grouping
        test : str or TestId, optional
            Test name as listed in the catalog
        variable_type : str or VariableType, optional
            Declared type of the variable ("Cualitativa" or "Cuantitativa")

        Returns
        -------
        AnalysisRequest

        Raises
        ------
        ValueError
            If no dataset is loaded
        UnknownTestError
            If the test is not in the catalog
        """
        self._require_dataset()

        request = AnalysisRequest.from_selection(variable, group, test, self.catalog)

        if variable_type is not None and self.dataset.has_column(variable):
            self.dataset = self.dataset.with_column_type(variable, variable_type)

        self.request = request
        self.result = None
        self.message = None
        self.state = SessionState.CONFIGURED

        self.logger.debug(
            f"Selected variable='{variable}', group='{group}', "
            f"test={request.test.name if request.test else None}"
        )
        return request

    def set_alpha(self, alpha: float) -> None:
        """Change the significance level used by later renders."""
        alpha = float(alpha)
        if not 0.0 < alpha < 1.0:
            raise ValueError(f"alpha must lie in (0, 1), got {alpha}")
        self.alpha = alpha

    # Events

    def run(self) -> AnalysisReport:
        """
        Validate the current request, execute the test and render the outcome.

        Invalid requests and procedure failures leave the session CONFIGURED
        with the reason in the report message.

        Returns
        -------
        AnalysisReport
        """
        self._require_dataset()
        if self.request is None:
            raise ValueError("No analysis selected. Call select() first.")

        self.result = None
        self.message = None
        self.run_count += 1

        validation = self.validator.validate(self.request, self.dataset)
        if not validation:
            self.message = validation.reason
            self.state = SessionState.CONFIGURED
            return self._render()

        try:
            result = self.dispatcher.run(self.request, self.dataset)
        except TestExecutionError as e:
            self.message = str(e)
            self.state = SessionState.CONFIGURED
            return self._render()

        self.result = result
        self.state = SessionState.EVALUATED
        return self._render()

    def refresh(self) -> AnalysisReport:
        """Re-render the current state without recomputation."""
        return self._render()

    def _render(self) -> AnalysisReport:
        request = self.request
        test_id = request.test.id if request is not None and request.test else None

        report = AnalysisReport(
            state=self.state,
            test_summary=self.catalog.summary_text(test_id),
            variable=request.variable if request else None,
            group=request.group_column if request else None,
            test_id=test_id,
            chart_family=request.test.chart_family if test_id else None,
            alpha=self.alpha
        )

        if request is not None and self.dataset.has_column(request.variable):
            report.descriptive_stats = self.univariate_stats.describe(
                self.dataset.column(request.variable)
            )

        if self.result is not None:
            report.raw_output = format_result(self.result, self.catalog)
            report.interpretation = interpret_result(self.result, self.alpha, self.catalog)
        else:
            report.message = self.message or RUN_PROMPT

        return report

    # Outputs

    def describe_variable(self) -> str:
        """Descriptive summary of the selected variable as text."""
        self._require_request()
        stats_result = self.univariate_stats.describe(self.dataset.column(self.request.variable))
        return format_descriptive_stats(stats_result)

    def plot(self) -> Optional[plt.Figure]:
        """Diagnostic plot for the selected test."""
        self._require_request()
        return self.diagnostic_plots.plot(self.request, self.dataset)

    def generate_report(self, output_path: Optional[str] = None) -> str:
        """
        Generate an HTML report of the last evaluated analysis.

        Parameters
        ----------
        output_path : str, optional
            Path to save report

        Returns
        -------
        str
            Report content, or the path to the saved file
        """
        if self.state != SessionState.EVALUATED:
            self.logger.warning("No analysis results available for reporting")
            return ""

        self.logger.info("Generating HTML report")

        try:
            report_content = self._generate_html_report(self._render())

            if output_path:
                with open(output_path, 'w', encoding='utf-8') as f:
                    f.write(report_content)
                self.logger.info(f"Report saved to {output_path}")
                return output_path
            else:
                return report_content

        except Exception as e:
            self.logger.error(f"Report generation failed: {e}")
            raise

    def get_analysis_summary(self) -> Dict[str, Any]:
        """
        Get summary of the session.

        Returns
        -------
        dict
            Session state, dataset shape, selection and last result
        """
        summary = {
            'state': self.state.value,
            'data_loaded': self.dataset is not None,
            'source': self.dataset.source if self.dataset is not None else None,
            'n_records': self.dataset.n_rows if self.dataset is not None else 0,
            'n_variables': len(self.dataset.column_names) if self.dataset is not None else 0,
            'alpha': self.alpha,
            'runs': self.run_count,
        }

        if self.request is not None:
            summary['variable'] = self.request.variable
            summary['group'] = self.request.group_column
            summary['test'] = self.request.test.name if self.request.test else None

        if self.result is not None:
            summary['p_value'] = self.result.p_value
            summary['significant'] = self.result.is_significant(self.alpha)
            summary['n_observations'] = self.result.n_observations

        if self.message:
            summary['message'] = self.message

        return summary

    # Helpers

    def _require_dataset(self) -> None:
        if self.dataset is None:
            raise ValueError("No dataset loaded. Call load_dataset() first.")

    def _require_request(self) -> None:
        self._require_dataset()
        if self.request is None:
            raise ValueError("No analysis selected. Call select() first.")

    def _load_config(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from file."""
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
            self.logger.info(f"Configuration loaded from {config_path}")
        except (OSError, ValueError) as e:
            self.logger.warning(f"Failed to load configuration: {e}")
            return {}

        unknown = set(config) - set(DEFAULT_CONFIG)
        if unknown:
            self.logger.warning(f"Ignoring unknown configuration keys: {sorted(unknown)}")
        return {key: value for key, value in config.items() if key in DEFAULT_CONFIG}

    def _plot_as_base64(self) -> Optional[str]:
        fig = self.plot()
        if fig is None:
            return None
        buffer = io.BytesIO()
        fig.savefig(buffer, format='png', dpi=100)
        plt.close(fig)
        return base64.b64encode(buffer.getvalue()).decode('ascii')

    def _generate_html_report(self, report: AnalysisReport) -> str:
        """Generate basic HTML report."""
        title = f"{report.test_id.value}: {report.variable}"
        if report.group:
            title += f" ~ {report.group}"

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <title>SmartStats Report</title>
            <style>
                body {{ font-family: Arial, sans-serif; margin: 40px; }}
                h1, h2, h3 {{ color: #2c3e50; }}
                pre {{ background-color: #f8f9fa; padding: 15px; border-radius: 5px; }}
                .summary {{ background-color: #f3eefb; padding: 15px; border-radius: 5px; }}
            </style>
        </head>
        <body>
            <h1>{html.escape(title)}</h1>
            <div class="summary">
                <p><b>Resumen de la prueba:</b> {html.escape(report.test_summary)}</p>
                <p><b>Nivel de significancia:</b> {report.alpha:g}</p>
            </div>
        """

        if report.descriptive_stats is not None:
            html_content += f"""
            <h2>Descriptivos</h2>
            <pre>{html.escape(format_descriptive_stats(report.descriptive_stats))}</pre>
            """

        image = self._plot_as_base64()
        if image is not None:
            html_content += f"""
            <h2>Gráfico</h2>
            <img src="data:image/png;base64,{image}" alt="diagnostic plot">
            """

        html_content += f"""
            <h2>Resultados</h2>
            <pre>{html.escape(report.raw_output)}</pre>
            <h2>Interpretación</h2>
            <p>{html.escape(report.interpretation)}</p>
        </body>
        </html>
        """

        return html_content
