"""Positional mapping of workbook rows onto Employee records."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from dateutil import parser as date_parser

from salaryslip.core.exceptions import ValidationError
from salaryslip.core.types import RowValues
from salaryslip.models.employee import Employee, SalaryDetails

logger = logging.getLogger(__name__)

# Column contract (0-indexed)
COL_EMP_ID = 0
COL_NAME = 1
COL_DESIGNATION = 2
COL_BANK_ACCOUNT = 3
COL_IFSC = 4
COL_UAN = 5
COL_PAYABLE_DAYS = 6
COL_SALARY_DATE = 7
COL_PAN = 8
COL_AADHAR = 9

EARNING_COLUMNS = {
    "basic": 10,
    "hra": 11,
    "da": 12,
    "special_allowance": 13,
    "travelling_allowance": 14,
}
DEDUCTION_COLUMNS = {
    "income_tax": 15,
    "epf": 16,
    "leave_deduction": 17,
}

SALARY_DATE_FORMAT = "%d/%m/%Y"
MONTH_YEAR_FORMATS = ("%d %b %Y", "%d %B %Y")

# e.g. "Mon Jun 30 00:00:00 IST 2025"
_VERBOSE_DATE = re.compile(r"^[A-Za-z]{3} [A-Za-z]{3} \d{1,2} \d{2}:\d{2}:\d{2} [A-Za-z+\-0-9]+ \d{4}$")


def _cell(row: RowValues, index: int) -> Any:
    return row[index] if index < len(row) else None


def is_blank_row(row: RowValues | None) -> bool:
    """True when every cell is empty or whitespace."""
    if row is None:
        return True
    for value in row:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return False
    return True


def string_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return str(value).strip()


def numeric_value(value: Any) -> Decimal:
    """Parse a numeric cell; blanks and unparseable text read as zero."""
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        text = str(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
    else:
        return Decimal("0")

    try:
        number = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    return number if number.is_finite() else Decimal("0")


def parse_date_value(value: Any) -> date:
    """Resolve a date cell through the fallback chain.

    Order: native date, ``dd/mm/yyyy``, verbose ``Mon Jun 30 00:00:00 IST
    2025``, then ``Month YYYY`` read as the first of that month. Anything else
    resolves to today with a warning.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()

        try:
            return datetime.strptime(text, SALARY_DATE_FORMAT).date()
        except ValueError:
            pass

        if _VERBOSE_DATE.match(text):
            try:
                return date_parser.parse(text, ignoretz=True).date()
            except (ValueError, OverflowError):
                pass

        for fmt in MONTH_YEAR_FORMATS:
            try:
                return datetime.strptime("01 " + text, fmt).date()
            except ValueError:
                continue

        logger.warning("Could not parse date %r, using current date", text)
        return date.today()

    if value is not None:
        logger.warning("Unexpected date cell %r, using current date", value)
    return date.today()


def validate_employee(employee: Employee, row_number: int | None = None) -> Employee:
    """Reject records missing an id, a name, or salary details."""
    if not employee.emp_id:
        raise ValidationError("Invalid employee record: Missing employee ID", row_number)
    if not employee.employee_name:
        raise ValidationError(
            f"Invalid employee record for ID {employee.emp_id}: Missing name", row_number
        )
    if employee.salary_details is None:
        raise ValidationError(
            f"Invalid employee record for ID {employee.emp_id}: Missing salary details", row_number
        )
    return employee


def map_row(row: RowValues | None, row_number: int | None = None) -> Employee | None:
    """Convert one raw row into a validated Employee.

    Returns None for blank rows. Raises ValidationError for rows that map to
    an invalid record.
    """
    if is_blank_row(row):
        return None

    salary = SalaryDetails(
        **{name: numeric_value(_cell(row, col)) for name, col in EARNING_COLUMNS.items()},
        **{name: numeric_value(_cell(row, col)) for name, col in DEDUCTION_COLUMNS.items()},
    )

    employee = Employee(
        emp_id=string_value(_cell(row, COL_EMP_ID)),
        employee_name=string_value(_cell(row, COL_NAME)),
        designation=string_value(_cell(row, COL_DESIGNATION)),
        bank_account_no=string_value(_cell(row, COL_BANK_ACCOUNT)),
        ifsc_code=string_value(_cell(row, COL_IFSC)),
        uan_no=string_value(_cell(row, COL_UAN)),
        payable_days=int(numeric_value(_cell(row, COL_PAYABLE_DAYS))),
        salary_date=parse_date_value(_cell(row, COL_SALARY_DATE)),
        pan_no=string_value(_cell(row, COL_PAN)),
        aadhar_no=string_value(_cell(row, COL_AADHAR)),
        salary_details=salary,
    )
    return validate_employee(employee, row_number)
