"""
Tests for diagnostic plots.
"""

import os
import shutil
import tempfile
import unittest

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from SmartStats.data_processing.models import AnalysisRequest, DatasetHandle
from SmartStats.exceptions import ValidationError
from SmartStats.hypothesis_testing.catalog import DEFAULT_CATALOG
from SmartStats.visualization import DiagnosticPlots
from SmartStats.tests.sample_data import sample_frame


class TestDiagnosticPlots(unittest.TestCase):
    """Test cases for DiagnosticPlots."""

    def setUp(self):
        """Set up test fixtures."""
        self.dataset = DatasetHandle.from_dataframe(sample_frame())
        self.plots = DiagnosticPlots()

    def tearDown(self):
        """Clean up test fixtures."""
        plt.close('all')

    def draw(self, variable, group, test):
        request = AnalysisRequest.from_selection(variable, group, test, DEFAULT_CATALOG)
        return self.plots.plot(request, self.dataset)

    def test_histogram_for_normality_tests(self):
        """Test normality tests draw a 30-bin histogram."""
        fig = self.draw('x', "Ninguna", "Lilliefors")
        ax = fig.axes[0]

        self.assertEqual(ax.get_title(), "Distribución de la Variable (Prueba de Normalidad)")
        self.assertEqual(len(ax.patches), 30)
        self.assertEqual(ax.get_xlabel(), 'x')

    def test_histogram_bins_configurable(self):
        """Test the bin count."""
        plots = DiagnosticPlots(bins=12)
        request = AnalysisRequest.from_selection('x', None, "Shapiro-Wilk", DEFAULT_CATALOG)
        fig = plots.plot(request, self.dataset)
        self.assertEqual(len(fig.axes[0].patches), 12)

    def test_boxplot_for_group_comparisons(self):
        """Test t-Student and ANOVA draw grouped boxplots."""
        fig = self.draw('shifted', 'two_groups', "t-Student")
        fig.canvas.draw()
        ax = fig.axes[0]
        self.assertEqual(ax.get_title(), "Comparación de Grupos (t-Student)")
        self.assertEqual([tick.get_text() for tick in ax.get_xticklabels()], ['A', 'B'])

        fig = self.draw('score', 'three_groups', "ANOVA")
        fig.canvas.draw()
        self.assertEqual(fig.axes[0].get_title(), "Comparación de Grupos (ANOVA)")
        self.assertEqual(len(fig.axes[0].get_xticklabels()), 3)

    def test_boxplot_requires_group(self):
        """Test a grouped boxplot without a grouping variable."""
        with self.assertRaises(ValidationError) as context:
            self.draw('score', "Ninguna", "ANOVA")
        self.assertEqual(context.exception.reason, "Debes seleccionar una variable de grupo")

    def test_bar_chart_for_association(self):
        """Test Chi-cuadrado draws a bar chart of the variable's categories."""
        fig = self.draw('three_groups', 'color', "Chi-cuadrado")
        ax = fig.axes[0]

        self.assertEqual(ax.get_title(), "Distribución de Categorías (Chi-cuadrado)")
        self.assertEqual(len(ax.patches), 3)
        heights = sorted(patch.get_height() for patch in ax.patches)
        self.assertEqual(heights, [33, 33, 34])

    def test_no_test_selected(self):
        """Test nothing is drawn without a test."""
        self.assertIsNone(self.draw('x', None, None))

    def test_save(self):
        """Test writing a figure to disk."""
        temp_dir = tempfile.mkdtemp()
        try:
            output_path = os.path.join(temp_dir, 'grafico.png')
            DiagnosticPlots.save(self.draw('x', None, "Jarque-Bera"), output_path)
            self.assertTrue(os.path.getsize(output_path) > 0)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)


if __name__ == '__main__':
    unittest.main()
