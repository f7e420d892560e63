"""
Registry of the supported hypothesis tests.

The catalog is the single source of truth for the eight test identities:
dispatch, interpretation, the helper text shown next to the test selector
and the choice of diagnostic chart all read the same TestSpec entries.
It is built once at import time and never modified.
"""

from types import MappingProxyType
from typing import Iterator, List, Optional, Sequence, Union

from ..data_processing.models import (
    TestSpec, TestId, Arity, TestFamily, VariableType
)
from ..exceptions import UnknownTestError

NO_TEST_SUMMARY = "Elige una prueba para ver el resumen."

_NORMAL_SAMPLE = "La muestra sigue una distribución normal."
_NORMAL_SAMPLE_REJECTED = "La muestra no sigue una distribución normal."
_NORMAL_DISTRIBUTION = "La distribución es normal."
_NORMAL_DISTRIBUTION_REJECTED = "La distribución no es normal."


def _normality_spec(test_id: TestId,
                    description: str,
                    method: str,
                    accepted: str,
                    rejected: str,
                    min_observations: int,
                    max_observations: Optional[int] = None) -> TestSpec:
    return TestSpec(
        id=test_id,
        arity=Arity.SINGLE,
        variable_type=VariableType.QUANTITATIVE,
        family=TestFamily.NORMALITY,
        description=description,
        method=method,
        null_hypothesis="La muestra proviene de una distribución normal.",
        fail_to_reject_text=f"No se rechaza H0. {accepted}",
        reject_text=f"Se rechaza H0. {rejected}",
        min_observations=min_observations,
        max_observations=max_observations
    )


def _build_default_specs() -> List[TestSpec]:
    return [
        _normality_spec(
            TestId.SHAPIRO_WILK,
            "Prueba de normalidad para distribuciones pequeñas.",
            "Shapiro-Wilk normality test",
            _NORMAL_SAMPLE, _NORMAL_SAMPLE_REJECTED,
            min_observations=3, max_observations=5000
        ),
        _normality_spec(
            TestId.JARQUE_BERA,
            "Test de normalidad basado en asimetría y curtosis.",
            "Jarque Bera Test",
            _NORMAL_DISTRIBUTION, _NORMAL_DISTRIBUTION_REJECTED,
            min_observations=2
        ),
        _normality_spec(
            TestId.LILLIEFORS,
            "Prueba de normalidad cuando los parámetros son desconocidos.",
            "Lilliefors (Kolmogorov-Smirnov) normality test",
            _NORMAL_DISTRIBUTION, _NORMAL_DISTRIBUTION_REJECTED,
            min_observations=5
        ),
        _normality_spec(
            TestId.ANDERSON_DARLING,
            "Test de normalidad que da más peso a las colas.",
            "Anderson-Darling normality test",
            _NORMAL_SAMPLE, _NORMAL_SAMPLE_REJECTED,
            min_observations=8
        ),
        _normality_spec(
            TestId.KOLMOGOROV_SMIRNOV,
            "Compara la distribución empírica de la muestra con una distribución teórica.",
            "Asymptotic one-sample Kolmogorov-Smirnov test",
            _NORMAL_SAMPLE, _NORMAL_SAMPLE_REJECTED,
            min_observations=2
        ),
        TestSpec(
            id=TestId.T_STUDENT,
            arity=Arity.TWO_PLUS_GROUPS,
            variable_type=VariableType.QUANTITATIVE,
            family=TestFamily.MEAN_COMPARISON,
            description="Compara las medias de dos grupos.",
            method="Welch Two Sample t-test",
            null_hypothesis="Las medias de los dos grupos son iguales.",
            fail_to_reject_text="No hay diferencias significativas entre los grupos.",
            reject_text="Hay diferencias significativas entre los grupos.",
            min_observations=2
        ),
        TestSpec(
            id=TestId.ANOVA,
            arity=Arity.TWO_PLUS_GROUPS,
            variable_type=VariableType.QUANTITATIVE,
            family=TestFamily.MEAN_COMPARISON,
            description="Compara las medias de tres o más grupos.",
            method="One-way Analysis of Variance",
            null_hypothesis="Las medias de todos los grupos son iguales.",
            fail_to_reject_text="No hay diferencias significativas entre los grupos.",
            reject_text="Hay diferencias significativas entre los grupos.",
            min_observations=2
        ),
        TestSpec(
            id=TestId.CHI_SQUARE,
            arity=Arity.TWO_PLUS_GROUPS,
            variable_type=VariableType.QUALITATIVE,
            family=TestFamily.ASSOCIATION,
            description="Compara la distribución observada con la esperada en variables categóricas.",
            method="Pearson's Chi-squared test",
            null_hypothesis="Las variables son independientes.",
            fail_to_reject_text="No hay asociación entre las variables.",
            reject_text="Hay asociación entre las variables.",
            min_observations=2
        ),
    ]


class TestCatalog:
    """
    Read-only registry of TestSpec entries keyed by TestId.

    Lookups accept either a TestId member or its display name
    (e.g. "Chi-cuadrado").
    """
    __test__ = False

    def __init__(self, specs: Sequence[TestSpec]):
        ids = [spec.id for spec in specs]
        if len(set(ids)) != len(ids):
            raise ValueError("Test identifiers must be unique")

        self._specs = tuple(specs)
        self._by_id = MappingProxyType({spec.id: spec for spec in self._specs})

    def describe(self, test_id: Union[TestId, str, None]) -> TestSpec:
        """
        Look up the catalog entry of a test.

        Parameters
        ----------
        test_id : TestId or str
            Test identifier or its display name

        Returns
        -------
        TestSpec

        Raises
        ------
        UnknownTestError
            If the identifier is not one of the catalog entries
        """
        key = self._resolve(test_id)
        if key is None or key not in self._by_id:
            raise UnknownTestError(test_id)
        return self._by_id[key]

    def all(self) -> List[TestSpec]:
        """All entries in selector order."""
        return list(self._specs)

    def ids(self) -> List[TestId]:
        return [spec.id for spec in self._specs]

    def names(self) -> List[str]:
        """Display names for populating a test selector."""
        return [spec.name for spec in self._specs]

    def summary_text(self, test_id: Union[TestId, str, None] = None) -> str:
        """Helper text describing the selected test."""
        if test_id is None or test_id == "":
            return NO_TEST_SUMMARY
        return self.describe(test_id).description

    def __contains__(self, test_id) -> bool:
        key = self._resolve(test_id)
        return key is not None and key in self._by_id

    def __iter__(self) -> Iterator[TestSpec]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    @staticmethod
    def _resolve(test_id) -> Optional[TestId]:
        if isinstance(test_id, TestId):
            return test_id
        if isinstance(test_id, str):
            try:
                return TestId(test_id)
            except ValueError:
                return None
        return None


DEFAULT_CATALOG = TestCatalog(_build_default_specs())


def describe(test_id: Union[TestId, str, None]) -> TestSpec:
    """Look up a test in the default catalog."""
    return DEFAULT_CATALOG.describe(test_id)


def all_tests() -> List[TestSpec]:
    """All entries of the default catalog in selector order."""
    return DEFAULT_CATALOG.all()
