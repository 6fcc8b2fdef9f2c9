"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from tests.fakes import MemoryNotifier, MemoryStatusStore, employee_row, write_workbook


@pytest.fixture
def status_store():
    return MemoryStatusStore()


@pytest.fixture
def notifier():
    return MemoryNotifier()


@pytest.fixture
def payroll_workbook(tmp_path):
    """A workbook with a ``June 2025`` sheet holding three valid employees."""
    rows = [
        employee_row("E001", "Asha Verma"),
        employee_row("E002", "Ravi Kumar", basic=28000),
        employee_row("E003", "Neha Singh", basic=26000, salary_date="June 2025"),
    ]
    return write_workbook(tmp_path / "salary.xlsx", {"June 2025": rows})
