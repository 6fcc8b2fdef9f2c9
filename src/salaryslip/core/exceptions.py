"""SalarySlip exception hierarchy."""

from __future__ import annotations


class SalarySlipError(Exception):
    """Base exception for all SalarySlip errors."""


class NotFoundError(SalarySlipError):
    """Source file, sheet, or batch id does not exist."""


class ValidationError(SalarySlipError):
    """Row or record failed validation. Non-fatal: the row is skipped."""

    def __init__(self, message: str, row_number: int | None = None) -> None:
        self.row_number = row_number
        super().__init__(message)


class ParseError(SalarySlipError):
    """Source workbook is unreadable or corrupt. Fatal to the run."""


class LoadError(ParseError):
    """Workbook could not be parsed while loading it into the source cache."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Error loading Excel file {path!r}: {message}")


class RenderError(SalarySlipError):
    """A single slip failed to render. Isolated to that record."""

    def __init__(self, employee_id: str, message: str) -> None:
        self.employee_id = employee_id
        super().__init__(f"Render failed for employee {employee_id!r}: {message}")


class RetryExhausted(SalarySlipError):
    """A batch kept failing after the configured number of attempts."""

    def __init__(self, attempts: int, last_error: BaseException | None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Batch failed after {attempts} attempts: {last_error}")


class DirectoryError(SalarySlipError):
    """Output directory could not be created. Aborts before rendering."""


class RunInterrupted(SalarySlipError):
    """Run was cancelled while waiting between retry attempts."""


class NotificationError(SalarySlipError):
    """Failure notification could not be delivered."""


class StatusStoreError(SalarySlipError):
    """Batch status store operation failed."""
