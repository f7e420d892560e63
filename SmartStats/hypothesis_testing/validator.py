"""
Applicability checks run before any statistical computation.

The validator compares an AnalysisRequest against the catalog entry of the
requested test and the dataset's declared column types. It never raises:
problems come back as an invalid ValidationResult whose reason is shown to
the user, and dispatch is only attempted on a valid result.
"""

import logging

from ..data_processing.models import (
    AnalysisRequest, DatasetHandle, ValidationResult
)

NO_TEST_SELECTED = "no_test_selected"
VARIABLE_NOT_FOUND = "variable_not_found"
GROUP_REQUIRED = "group_required"
GROUP_NOT_FOUND = "group_not_found"
TYPE_MISMATCH = "type_mismatch"


class Validator:
    """Gatekeeper between the user's selection and the dispatcher."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def validate(self, request: AnalysisRequest, dataset: DatasetHandle) -> ValidationResult:
        """
        Check a request against the dataset and the test's requirements.

        Checks, in order: a test is selected; the variable exists; a
        grouping variable is present (and exists) when the test needs one;
        the variable's declared type is one the test accepts.

        Parameters
        ----------
        request : AnalysisRequest
            Variable, optional group and test selected by the user
        dataset : DatasetHandle
            Loaded data with declared column types

        Returns
        -------
        ValidationResult
        """
        result = self._check(request, dataset)
        if not result.is_valid:
            self.logger.warning(f"Request rejected ({result.code}): {result.reason}")
        return result

    def _check(self, request: AnalysisRequest, dataset: DatasetHandle) -> ValidationResult:
        spec = request.test
        if spec is None:
            return ValidationResult.invalid(NO_TEST_SELECTED, "No se ha seleccionado una prueba")

        if not dataset.has_column(request.variable):
            return ValidationResult.invalid(
                VARIABLE_NOT_FOUND,
                f"La variable '{request.variable}' no existe en los datos"
            )

        if spec.requires_group:
            if not request.has_group:
                return ValidationResult.invalid(
                    GROUP_REQUIRED,
                    f"Selecciona una variable de grupo para {spec.name}"
                )
            if not dataset.has_column(request.group):
                return ValidationResult.invalid(
                    GROUP_NOT_FOUND,
                    f"La variable de grupo '{request.group}' no existe en los datos"
                )

        var_type = dataset.column_type(request.variable)
        if not spec.accepts(var_type):
            return ValidationResult.invalid(
                TYPE_MISMATCH,
                f"{spec.name} requiere una variable {spec.variable_type.value.lower()}; "
                f"'{request.variable}' está declarada como {var_type.value.lower()}"
            )

        return ValidationResult.ok()


def validate(request: AnalysisRequest, dataset: DatasetHandle) -> ValidationResult:
    """Validate a request with a default Validator."""
    return Validator().validate(request, dataset)
