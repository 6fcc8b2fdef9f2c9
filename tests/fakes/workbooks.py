"""Builders for payroll workbooks written with openpyxl."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import openpyxl

HEADER = [
    "Emp ID", "Employee Name", "Designation", "Bank A/C No", "IFSC", "UAN No",
    "Payable Days", "Salary Date", "PAN", "Aadhar",
    "Basic", "HRA", "DA", "Special Allowance", "Travelling Allowance",
    "Income Tax", "EPF", "Leave Deduction",
]


def employee_row(emp_id: Any = "E001", name: Any = "Asha Verma", **overrides: Any) -> list[Any]:
    """One data row in column order; keyword overrides replace single cells by header-free name."""
    values = {
        "designation": "Embryologist",
        "bank_account_no": "001122334455",
        "ifsc_code": "SBIN0001234",
        "uan_no": "100200300400",
        "payable_days": 30,
        "salary_date": "30/06/2025",
        "pan_no": "ABCDE1234F",
        "aadhar_no": "123412341234",
        "basic": 30000,
        "hra": 12000,
        "da": 3000,
        "special_allowance": 2500,
        "travelling_allowance": 1500,
        "income_tax": 2000,
        "epf": 1800,
        "leave_deduction": 0,
    }
    values.update(overrides)
    return [
        emp_id, name, values["designation"], values["bank_account_no"], values["ifsc_code"],
        values["uan_no"], values["payable_days"], values["salary_date"], values["pan_no"],
        values["aadhar_no"], values["basic"], values["hra"], values["da"],
        values["special_allowance"], values["travelling_allowance"], values["income_tax"],
        values["epf"], values["leave_deduction"],
    ]


def write_workbook(path: Path, sheets: dict[str, Sequence[Sequence[Any]]], header: bool = True) -> Path:
    """Write ``sheets`` (name -> data rows) to an xlsx file at ``path``."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(title=name)
        if header:
            sheet.append(HEADER)
        for row in rows:
            sheet.append(list(row))
    workbook.save(path)
    return path
