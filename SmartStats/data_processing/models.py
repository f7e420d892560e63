"""
Core data models and structures for the hypothesis testing explorer.

This module defines the fundamental data structures used throughout the
tool: the immutable dataset view handed over by ingestion, the test catalog
entries, the analysis request assembled from the user's selection, and the
result containers produced by validation, dispatch and rendering.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Union, Tuple, Any
from enum import Enum
import pandas as pd

from ..exceptions import ValidationError


class VariableType(Enum):
    """Enumeration of user-declared variable types."""
    QUALITATIVE = "Cualitativa"
    QUANTITATIVE = "Cuantitativa"

    @classmethod
    def from_label(cls, label: Union[str, 'VariableType']) -> 'VariableType':
        """Resolve a variable type from its UI label, enum name or English name."""
        if isinstance(label, cls):
            return label

        normalized = str(label).strip().lower()
        aliases = {
            'cualitativa': cls.QUALITATIVE,
            'qualitative': cls.QUALITATIVE,
            'categorical': cls.QUALITATIVE,
            'cuantitativa': cls.QUANTITATIVE,
            'quantitative': cls.QUANTITATIVE,
            'numeric': cls.QUANTITATIVE,
        }
        if normalized not in aliases:
            raise ValueError(f"Unknown variable type: {label!r}")
        return aliases[normalized]


class TestId(Enum):
    """Identifiers of the eight supported hypothesis tests."""
    __test__ = False

    SHAPIRO_WILK = "Shapiro-Wilk"
    JARQUE_BERA = "Jarque-Bera"
    LILLIEFORS = "Lilliefors"
    ANDERSON_DARLING = "Anderson-Darling"
    KOLMOGOROV_SMIRNOV = "Kolmogorov-Smirnov"
    T_STUDENT = "t-Student"
    ANOVA = "ANOVA"
    CHI_SQUARE = "Chi-cuadrado"


class Arity(Enum):
    """Variable roles a test requires."""
    SINGLE = "single"
    TWO_PLUS_GROUPS = "two_plus_groups"


class TestFamily(Enum):
    """Families of tests sharing a null hypothesis shape."""
    __test__ = False

    NORMALITY = "normality"
    MEAN_COMPARISON = "mean_comparison"
    ASSOCIATION = "association"


class ChartFamily(Enum):
    """Diagnostic chart drawn for each test family."""
    HISTOGRAM = "histogram"
    GROUPED_BOXPLOT = "grouped_boxplot"
    BAR_CHART = "bar_chart"


class Verdict(Enum):
    """Outcome of comparing a p-value against the significance level."""
    FAIL_TO_REJECT = "fail_to_reject"
    REJECT = "reject"


class SessionState(Enum):
    """States of an interactive analysis session."""
    IDLE = "idle"
    LOADED = "loaded"
    CONFIGURED = "configured"
    EVALUATED = "evaluated"


# Fixed lookup consumed by the plotting layer
CHART_FAMILIES: Dict[TestFamily, ChartFamily] = {
    TestFamily.NORMALITY: ChartFamily.HISTOGRAM,
    TestFamily.MEAN_COMPARISON: ChartFamily.GROUPED_BOXPLOT,
    TestFamily.ASSOCIATION: ChartFamily.BAR_CHART,
}

# Group selector values meaning "no grouping variable"
NO_GROUP = "Ninguna"
GROUP_SENTINELS = frozenset({NO_GROUP, "None", ""})


@dataclass(frozen=True, eq=False)
class Column:
    """A named dataset column with its declared type and values."""
    name: str
    type: VariableType
    values: pd.Series

    def is_quantitative(self) -> bool:
        """Check if the column is declared quantitative."""
        return self.type == VariableType.QUANTITATIVE

    def is_qualitative(self) -> bool:
        """Check if the column is declared qualitative."""
        return self.type == VariableType.QUALITATIVE

    @property
    def n_missing(self) -> int:
        return int(self.values.isna().sum())


@dataclass(frozen=True, eq=False)
class DatasetHandle:
    """
    Immutable view over an uploaded table plus its column type declarations.

    The handle keeps a private copy of the data; every accessor returns
    copies, and type changes produce a new handle.
    """
    data: pd.DataFrame
    column_types: Dict[str, VariableType] = field(default_factory=dict)
    source: Optional[str] = None

    @classmethod
    def from_dataframe(cls,
                       data: pd.DataFrame,
                       column_types: Optional[Dict[str, Union[str, VariableType]]] = None,
                       source: Optional[str] = None) -> 'DatasetHandle':
        """
        Build a handle from a DataFrame.

        Parameters
        ----------
        data : pd.DataFrame
            Tabular data with unique column names
        column_types : dict, optional
            Declared types by column name. Columns without a declaration get
            a default proposed from their dtype.
        source : str, optional
            Where the data came from (file name), for display

        Returns
        -------
        DatasetHandle
        """
        # Rows are addressed by position; the caller's index labels are not kept
        frame = data.copy().reset_index(drop=True)
        frame.columns = [str(col) for col in frame.columns]

        duplicated = frame.columns[frame.columns.duplicated()].tolist()
        if duplicated:
            raise ValueError(f"Duplicate column names: {duplicated}")

        declared = {}
        for name, var_type in (column_types or {}).items():
            if name not in frame.columns:
                raise ValueError(f"Type declared for unknown column '{name}'")
            declared[name] = VariableType.from_label(var_type)

        types = {}
        for name in frame.columns:
            types[name] = declared.get(name, infer_variable_type(frame[name]))

        return cls(data=frame, column_types=types, source=source)

    @property
    def column_names(self) -> List[str]:
        return list(self.data.columns)

    @property
    def n_rows(self) -> int:
        return len(self.data)

    def has_column(self, name: Optional[str]) -> bool:
        return name is not None and name in self.column_types

    def column_type(self, name: str) -> VariableType:
        if not self.has_column(name):
            raise KeyError(f"Column '{name}' not found. Available: {self.column_names}")
        return self.column_types[name]

    def column(self, name: str) -> Column:
        """Return the named column with its declared type."""
        return Column(
            name=name,
            type=self.column_type(name),
            values=self.data[name].copy()
        )

    def preview(self, n: int = 10) -> pd.DataFrame:
        """First rows of the table, for display."""
        return self.data.head(n).copy()

    def with_column_type(self, name: str, var_type: Union[str, VariableType]) -> 'DatasetHandle':
        """Return a new handle with one column's declared type replaced."""
        self.column_type(name)
        types = dict(self.column_types)
        types[name] = VariableType.from_label(var_type)
        return DatasetHandle(data=self.data, column_types=types, source=self.source)


def infer_variable_type(series: pd.Series) -> VariableType:
    """Propose a default declared type from a column's dtype."""
    if pd.api.types.is_bool_dtype(series):
        return VariableType.QUALITATIVE
    if pd.api.types.is_numeric_dtype(series):
        return VariableType.QUANTITATIVE
    return VariableType.QUALITATIVE


@dataclass(frozen=True)
class TestSpec:
    """Catalog entry describing one supported hypothesis test."""
    __test__ = False

    id: TestId
    arity: Arity
    variable_type: Optional[VariableType]
    family: TestFamily
    description: str
    method: str
    null_hypothesis: str
    fail_to_reject_text: str
    reject_text: str
    min_observations: int = 2
    max_observations: Optional[int] = None

    @property
    def name(self) -> str:
        return self.id.value

    @property
    def requires_group(self) -> bool:
        return self.arity == Arity.TWO_PLUS_GROUPS

    @property
    def chart_family(self) -> ChartFamily:
        return CHART_FAMILIES[self.family]

    def accepts(self, var_type: VariableType) -> bool:
        """Check if the test applies to a variable of the given type."""
        return self.variable_type is None or self.variable_type == var_type


@dataclass(frozen=True)
class AnalysisRequest:
    """The user's selection: variable, optional grouping variable and test."""
    variable: str
    group: Optional[str] = None
    test: Optional[TestSpec] = None

    @classmethod
    def from_selection(cls,
                       variable: str,
                       group: Optional[str],
                       test: Optional[Union[str, TestId]],
                       catalog) -> 'AnalysisRequest':
        """Build a request from UI values, resolving the test in the catalog."""
        spec = None
        if test is not None and test != "":
            spec = catalog.describe(test)
        return cls(variable=variable, group=group, test=spec)

    @property
    def has_group(self) -> bool:
        return self.group is not None and self.group not in GROUP_SENTINELS

    @property
    def group_column(self) -> Optional[str]:
        return self.group if self.has_group else None


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of the validator on an analysis request."""
    is_valid: bool
    code: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, code: str, reason: str) -> 'ValidationResult':
        return cls(is_valid=False, code=code, reason=reason)

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_if_invalid(self) -> None:
        """Raise ValidationError carrying the reason when invalid."""
        if not self.is_valid:
            raise ValidationError(self.reason, code=self.code)


@dataclass(frozen=True, eq=False)
class TestResult:
    """Normalized outcome of one test run."""
    __test__ = False

    test_id: TestId
    p_value: float
    statistic: Dict[str, Any]
    raw: Any
    variable: str
    group: Optional[str] = None
    n_observations: int = 0
    warnings: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not 0.0 <= self.p_value <= 1.0:
            raise ValueError(f"p-value must lie in [0, 1], got {self.p_value}")

    def is_significant(self, alpha: float = 0.05) -> bool:
        """Check if the null hypothesis is rejected at level alpha."""
        return not self.p_value > alpha


@dataclass
class ChiSquareResult:
    """Container for chi-square test of independence results."""
    chi_square_statistic: float
    p_value: float
    degrees_of_freedom: int
    effect_size: float
    effect_size_measure: str
    contingency_table: pd.DataFrame
    expected_frequencies: pd.DataFrame
    standardized_residuals: pd.DataFrame
    assumptions_met: bool = True
    minimum_expected_frequency: float = 0.0
    correction_applied: bool = False
    warnings: List[str] = field(default_factory=list)

    def get_effect_size_category(self) -> str:
        """Categorize Cramer's V according to conventional benchmarks."""
        if self.effect_size < 0.1:
            return "negligible"
        elif self.effect_size < 0.3:
            return "small"
        elif self.effect_size < 0.5:
            return "medium"
        else:
            return "large"


@dataclass
class DescriptiveStats:
    """Container for descriptive statistics of one variable."""
    variable: str
    variable_type: VariableType
    count: int
    n_missing: int = 0
    mean: Optional[float] = None
    median: Optional[float] = None
    std: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    first_quartile: Optional[float] = None
    third_quartile: Optional[float] = None
    skewness: Optional[float] = None
    kurtosis: Optional[float] = None
    mode: Optional[Union[float, str]] = None
    frequency_table: Optional[pd.DataFrame] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class AnalysisReport:
    """Snapshot of everything a front end displays after run or refresh."""
    state: SessionState
    test_summary: str
    variable: Optional[str] = None
    group: Optional[str] = None
    test_id: Optional[TestId] = None
    chart_family: Optional[ChartFamily] = None
    descriptive_stats: Optional[DescriptiveStats] = None
    raw_output: Optional[str] = None
    interpretation: Optional[str] = None
    message: Optional[str] = None
    alpha: float = 0.05

    @property
    def has_result(self) -> bool:
        return self.state == SessionState.EVALUATED and self.raw_output is not None

