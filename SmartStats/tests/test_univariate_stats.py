"""
Tests for descriptive statistics.
"""

import unittest
import numpy as np
import pandas as pd

from SmartStats.data_processing.models import Column, DatasetHandle, VariableType
from SmartStats.descriptive_analysis import UnivariateStats, format_descriptive_stats


class TestUnivariateStats(unittest.TestCase):
    """Test cases for UnivariateStats."""

    def setUp(self):
        """Set up test fixtures."""
        self.stats = UnivariateStats()
        self.dataset = DatasetHandle.from_dataframe(pd.DataFrame({
            'nota': [4.0, 6.0, 8.0, 10.0, np.nan],
            'curso': ['A', 'B', 'A', None, 'A'],
        }))

    def test_quantitative_summary(self):
        """Test the five-number summary with mean and missing count."""
        result = self.stats.describe(self.dataset.column('nota'))

        self.assertEqual(result.variable_type, VariableType.QUANTITATIVE)
        self.assertEqual(result.count, 4)
        self.assertEqual(result.n_missing, 1)
        self.assertAlmostEqual(result.mean, 7.0)
        self.assertAlmostEqual(result.median, 7.0)
        self.assertAlmostEqual(result.minimum, 4.0)
        self.assertAlmostEqual(result.maximum, 10.0)
        self.assertAlmostEqual(result.first_quartile, 5.5)
        self.assertAlmostEqual(result.third_quartile, 8.5)
        self.assertAlmostEqual(result.std, np.std([4, 6, 8, 10], ddof=1))
        self.assertAlmostEqual(result.skewness, 0.0)
        self.assertIsNone(result.frequency_table)

    def test_qualitative_frequency_table(self):
        """Test counts, percent and valid percent."""
        result = self.stats.describe(self.dataset.column('curso'))
        table = result.frequency_table

        self.assertEqual(result.count, 4)
        self.assertEqual(result.n_missing, 1)
        self.assertEqual(result.mode, 'A')
        self.assertEqual(list(table.columns), ['Value', 'n', 'percent', 'valid_percent'])
        self.assertEqual(table['n'].sum(), 5)

        row_a = table[table['Value'] == 'A'].iloc[0]
        self.assertEqual(row_a['n'], 3)
        self.assertAlmostEqual(row_a['percent'], 60.0)
        self.assertAlmostEqual(row_a['valid_percent'], 75.0)

        # Missing values are listed last without a valid percent
        self.assertTrue(pd.isna(table['Value'].iloc[-1]))
        self.assertTrue(pd.isna(table['valid_percent'].iloc[-1]))

    def test_complete_column_has_no_valid_percent(self):
        """Test valid percent is omitted when nothing is missing."""
        column = Column('g', VariableType.QUALITATIVE, pd.Series(['x', 'y', 'y', 'y']))
        table = self.stats.describe(column).frequency_table
        self.assertNotIn('valid_percent', table.columns)
        self.assertEqual(list(table['Value']), ['x', 'y'])
        self.assertAlmostEqual(table['percent'].sum(), 100.0)

    def test_declared_type_drives_summary(self):
        """Test a numeric column declared qualitative gets a frequency table."""
        column = self.dataset.with_column_type('nota', 'Cualitativa').column('nota')
        result = self.stats.describe(column)
        self.assertIsNotNone(result.frequency_table)
        self.assertIsNone(result.mean)

    def test_non_numeric_values_in_quantitative_column(self):
        """Test text in a quantitative column is counted as missing with a warning."""
        column = Column('x', VariableType.QUANTITATIVE, pd.Series(['1', '2', 'tres', '4']))
        result = self.stats.describe(column)
        self.assertEqual(result.count, 3)
        self.assertEqual(result.n_missing, 1)
        self.assertEqual(len(result.warnings), 1)

    def test_constant_and_empty_columns(self):
        """Test degenerate quantitative columns."""
        constant = self.stats.describe(Column('c', VariableType.QUANTITATIVE, pd.Series([2.0] * 5)))
        self.assertAlmostEqual(constant.std, 0.0)
        self.assertIsNone(constant.skewness)

        empty = self.stats.describe(Column('e', VariableType.QUANTITATIVE, pd.Series([np.nan] * 3)))
        self.assertEqual(empty.count, 0)
        self.assertIsNone(empty.mean)

    def test_category_limit(self):
        """Test long frequency tables are truncated with a warning."""
        stats = UnivariateStats(max_categories=3)
        column = Column('id', VariableType.QUALITATIVE, pd.Series([f"c{i}" for i in range(10)]))
        result = stats.describe(column)
        self.assertEqual(len(result.frequency_table), 3)
        self.assertTrue(result.warnings)

    def test_format(self):
        """Test the display text for both variable types."""
        text = format_descriptive_stats(self.stats.describe(self.dataset.column('nota')))
        for label in ['Min.', '1st Qu.', 'Median', 'Mean', '3rd Qu.', 'Max.', "NA's"]:
            self.assertIn(label, text)

        text = format_descriptive_stats(self.stats.describe(self.dataset.column('curso')))
        self.assertIn('valid_percent', text)
        self.assertIn('60.0%', text)


if __name__ == '__main__':
    unittest.main()
