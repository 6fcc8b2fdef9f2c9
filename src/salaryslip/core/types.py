"""Type aliases used across the SalarySlip package."""

from __future__ import annotations

from typing import Any, Sequence

# One worksheet row as read with values_only=True.
RowValues = Sequence[Any]
