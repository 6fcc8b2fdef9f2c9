"""Tests for row-to-Employee mapping, cell coercion and the date fallback chain."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from salaryslip.core.exceptions import ValidationError
from salaryslip.ingest.row_mapper import (
    is_blank_row,
    map_row,
    numeric_value,
    parse_date_value,
    string_value,
    validate_employee,
)
from salaryslip.models.employee import Employee
from tests.fakes import employee_row


class TestBlankRows:
    def test_none_row_is_blank(self):
        assert is_blank_row(None)

    def test_whitespace_cells_are_blank(self):
        assert is_blank_row([None, "  ", "", None])

    def test_zero_is_not_blank(self):
        assert not is_blank_row([None, 0])

    def test_map_row_returns_none_for_blank(self):
        assert map_row([None] * 18, 5) is None


class TestCellValues:
    def test_integral_float_loses_decimal_point(self):
        assert string_value(12345.0) == "12345"

    def test_non_integral_float_kept(self):
        assert string_value(12.5) == "12.5"

    def test_none_is_empty_string(self):
        assert string_value(None) == ""

    def test_numeric_strips_thousands_separators(self):
        assert numeric_value("1,250.50") == Decimal("1250.50")

    def test_numeric_native_number(self):
        assert numeric_value(1500.5) == Decimal("1500.5")

    @pytest.mark.parametrize("raw", [None, "", "n/a", "nan", "inf", True])
    def test_unusable_numeric_reads_as_zero(self, raw):
        assert numeric_value(raw) == Decimal("0")


class TestParseDateValue:
    def test_native_datetime(self):
        assert parse_date_value(datetime(2025, 6, 30, 9, 15)) == date(2025, 6, 30)

    def test_day_month_year(self):
        assert parse_date_value("30/06/2025") == date(2025, 6, 30)

    def test_verbose_timestamp(self):
        assert parse_date_value("Mon Jun 30 00:00:00 IST 2025") == date(2025, 6, 30)

    @pytest.mark.parametrize("raw", ["June 2025", "Jun 2025"])
    def test_month_year_is_first_of_month(self, raw):
        assert parse_date_value(raw) == date(2025, 6, 1)

    def test_garbage_falls_back_to_today(self, caplog):
        assert parse_date_value("next payday") == date.today()
        assert "Could not parse date" in caplog.text

    def test_missing_falls_back_to_today(self):
        assert parse_date_value(None) == date.today()


class TestMapRow:
    def test_maps_all_columns(self):
        employee = map_row(employee_row("E001", "Asha Verma"), 2)
        assert employee.emp_id == "E001"
        assert employee.employee_name == "Asha Verma"
        assert employee.ifsc_code == "SBIN0001234"
        assert employee.payable_days == 30
        assert employee.salary_date == date(2025, 6, 30)
        assert employee.salary_details.basic == Decimal("30000")
        assert employee.salary_details.total_earnings == Decimal("49000")
        assert employee.salary_details.total_deductions == Decimal("3800")

    def test_numeric_employee_id(self):
        assert map_row(employee_row(101.0, "Ravi"), 2).emp_id == "101"

    def test_short_row_reads_missing_amounts_as_zero(self):
        employee = map_row(["E9", "Short Row"], 7)
        assert employee.salary_details.net_salary == 0

    def test_missing_id_rejected_with_row_number(self):
        with pytest.raises(ValidationError, match="Missing employee ID") as exc_info:
            map_row(employee_row(None, "No Id"), 4)
        assert exc_info.value.row_number == 4

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError, match="Missing name"):
            map_row(employee_row("E5", "   "), 3)


class TestValidateEmployee:
    def test_missing_salary_details_rejected(self):
        with pytest.raises(ValidationError, match="Missing salary details"):
            validate_employee(Employee(emp_id="E1", employee_name="A"))
