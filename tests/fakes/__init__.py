"""Shared test doubles. Re-exports memory backends and workbook builders."""

from __future__ import annotations

from salaryslip.persistence.memory_backend import MemoryNotifier, MemoryStatusStore
from tests.fakes.workbooks import HEADER, employee_row, write_workbook

__all__ = ["HEADER", "MemoryNotifier", "MemoryStatusStore", "employee_row", "write_workbook"]
