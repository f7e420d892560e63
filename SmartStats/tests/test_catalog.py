"""
Tests for the test catalog.
"""

import unittest

from SmartStats.data_processing.models import (
    Arity, ChartFamily, TestFamily, TestId, VariableType
)
from SmartStats.exceptions import UnknownTestError
from SmartStats.hypothesis_testing.catalog import (
    DEFAULT_CATALOG, NO_TEST_SUMMARY, TestCatalog, all_tests, describe
)


class TestTestCatalog(unittest.TestCase):
    """Test cases for catalog lookups."""

    def test_describe_every_test(self):
        """Every identifier resolves, by enum member and by display name."""
        for test_id in TestId:
            spec = describe(test_id)
            self.assertEqual(spec.id, test_id)
            self.assertIs(describe(test_id.value), spec)

    def test_unknown_test(self):
        """Test lookups outside the closed set."""
        with self.assertRaises(UnknownTestError) as context:
            describe("not-a-test")
        self.assertEqual(context.exception.test_id, "not-a-test")

        # UnknownTestError is a LookupError
        with self.assertRaises(LookupError):
            describe("shapiro-wilk")

        with self.assertRaises(UnknownTestError):
            describe(None)

    def test_selector_order(self):
        """Test the display names in selector order."""
        self.assertEqual(DEFAULT_CATALOG.names(), [
            "Shapiro-Wilk", "Jarque-Bera", "Lilliefors", "Anderson-Darling",
            "Kolmogorov-Smirnov", "t-Student", "ANOVA", "Chi-cuadrado"
        ])
        self.assertEqual(len(DEFAULT_CATALOG), 8)
        self.assertEqual([spec.id for spec in all_tests()], list(TestId))

    def test_arity_and_types(self):
        """Test variable roles and accepted types."""
        grouped = {TestId.T_STUDENT, TestId.ANOVA, TestId.CHI_SQUARE}

        for spec in DEFAULT_CATALOG:
            if spec.id in grouped:
                self.assertEqual(spec.arity, Arity.TWO_PLUS_GROUPS)
                self.assertTrue(spec.requires_group)
            else:
                self.assertEqual(spec.arity, Arity.SINGLE)
                self.assertFalse(spec.requires_group)

        self.assertTrue(describe("Chi-cuadrado").accepts(VariableType.QUALITATIVE))
        self.assertFalse(describe("Chi-cuadrado").accepts(VariableType.QUANTITATIVE))
        self.assertTrue(describe("ANOVA").accepts(VariableType.QUANTITATIVE))
        self.assertFalse(describe("Shapiro-Wilk").accepts(VariableType.QUALITATIVE))

    def test_chart_families(self):
        """Test the chart drawn for each family."""
        expected = {
            TestFamily.NORMALITY: ChartFamily.HISTOGRAM,
            TestFamily.MEAN_COMPARISON: ChartFamily.GROUPED_BOXPLOT,
            TestFamily.ASSOCIATION: ChartFamily.BAR_CHART,
        }
        for spec in DEFAULT_CATALOG:
            self.assertEqual(spec.chart_family, expected[spec.family])

        self.assertEqual(describe("Kolmogorov-Smirnov").chart_family, ChartFamily.HISTOGRAM)
        self.assertEqual(describe("t-Student").chart_family, ChartFamily.GROUPED_BOXPLOT)

    def test_summary_text(self):
        """Test helper texts next to the test selector."""
        self.assertEqual(DEFAULT_CATALOG.summary_text(), NO_TEST_SUMMARY)
        self.assertEqual(DEFAULT_CATALOG.summary_text(""), NO_TEST_SUMMARY)
        self.assertEqual(
            DEFAULT_CATALOG.summary_text("t-Student"),
            "Compara las medias de dos grupos."
        )
        self.assertEqual(
            DEFAULT_CATALOG.summary_text(TestId.ANOVA),
            "Compara las medias de tres o más grupos."
        )

    def test_verdict_texts(self):
        """Each test carries two distinct verdict texts."""
        for spec in DEFAULT_CATALOG:
            self.assertTrue(spec.fail_to_reject_text)
            self.assertTrue(spec.reject_text)
            self.assertNotEqual(spec.fail_to_reject_text, spec.reject_text)

        shapiro = describe("Shapiro-Wilk")
        self.assertEqual(
            shapiro.fail_to_reject_text,
            "No se rechaza H0. La muestra sigue una distribución normal."
        )
        self.assertEqual(
            describe("Jarque-Bera").reject_text,
            "Se rechaza H0. La distribución no es normal."
        )

    def test_membership(self):
        """Test containment checks."""
        self.assertIn("ANOVA", DEFAULT_CATALOG)
        self.assertIn(TestId.LILLIEFORS, DEFAULT_CATALOG)
        self.assertNotIn("Wilcoxon", DEFAULT_CATALOG)
        self.assertNotIn(None, DEFAULT_CATALOG)

    def test_catalog_read_only(self):
        """Test the catalog cannot be altered after construction."""
        with self.assertRaises(TypeError):
            DEFAULT_CATALOG._by_id[TestId.ANOVA] = None

        specs = DEFAULT_CATALOG.all()
        specs.clear()
        self.assertEqual(len(DEFAULT_CATALOG), 8)

    def test_duplicate_identifiers(self):
        """Test a catalog rejects repeated identifiers."""
        spec = describe("ANOVA")
        with self.assertRaises(ValueError):
            TestCatalog([spec, spec])

        partial = TestCatalog([spec])
        with self.assertRaises(UnknownTestError):
            partial.describe("t-Student")


if __name__ == '__main__':
    unittest.main()
