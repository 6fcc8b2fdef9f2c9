"""Employee payroll record, the structured form of one workbook row."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class SalaryDetails(BaseModel):
    """Earning and deduction components for one pay period.

    Amounts are taken as-is from the workbook; no sign or range checks.
    """

    # --- Earnings ---
    basic: Decimal = Decimal("0")
    hra: Decimal = Decimal("0")  # House Rent Allowance
    da: Decimal = Decimal("0")  # Dearness Allowance
    special_allowance: Decimal = Decimal("0")
    travelling_allowance: Decimal = Decimal("0")

    # --- Deductions ---
    income_tax: Decimal = Decimal("0")
    epf: Decimal = Decimal("0")
    leave_deduction: Decimal = Decimal("0")

    @property
    def total_earnings(self) -> Decimal:
        """Sum of the five earning components."""
        return (
            self.basic + self.hra + self.da
            + self.special_allowance + self.travelling_allowance
        )

    @property
    def total_deductions(self) -> Decimal:
        """Sum of the three deduction components."""
        return self.income_tax + self.epf + self.leave_deduction

    @property
    def net_salary(self) -> Decimal:
        return self.total_earnings - self.total_deductions


class Employee(BaseModel):
    """Single employee payroll record."""

    # --- Identity Fields ---
    emp_id: str = ""
    employee_name: str = ""
    designation: str = ""

    # --- Bank & Statutory Fields ---
    bank_account_no: str = ""
    ifsc_code: str = ""
    uan_no: str = ""
    pan_no: str = ""
    aadhar_no: str = ""

    # --- Period Fields ---
    payable_days: int = 0
    salary_date: date = Field(default_factory=date.today)

    salary_details: Optional[SalaryDetails] = None

    model_config = {"str_strip_whitespace": True}

    @property
    def period(self) -> str:
        """Pay period key used in output file names, e.g. ``2025-06``."""
        return self.salary_date.strftime("%Y-%m")

    @property
    def month_year(self) -> str:
        """Pay period as printed on the slip, e.g. ``June 2025``."""
        return self.salary_date.strftime("%B %Y")
