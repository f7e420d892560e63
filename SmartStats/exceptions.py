"""
Error taxonomy for the hypothesis testing engine.

UnknownTestError signals a programmer error (a test identifier outside the
closed catalog). ValidationError and TestExecutionError are user-facing and
recoverable by changing the analysis request.
"""

from typing import Optional


class SmartStatsError(Exception):
    """Base class for all SmartStats errors."""


class UnknownTestError(SmartStatsError, LookupError):
    """Raised when a test identifier is not one of the catalog entries."""

    def __init__(self, test_id):
        self.test_id = test_id
        super().__init__(f"Unknown statistical test: {test_id!r}")


class ValidationError(SmartStatsError, ValueError):
    """Raised when an analysis request is not applicable to the dataset."""

    def __init__(self, reason: str, code: Optional[str] = None):
        self.reason = reason
        self.code = code
        super().__init__(reason)


class TestExecutionError(SmartStatsError, RuntimeError):
    """Raised when the underlying statistical procedure rejects the data."""

    __test__ = False

    def __init__(self, test_id, message: str):
        self.test_id = test_id
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        label = getattr(self.test_id, 'value', self.test_id)
        return f"{label}: {self.message}"
