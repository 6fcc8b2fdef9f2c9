"""Protocol interfaces for SalarySlip collaborators.

Components depend on these Protocols rather than concrete backends, so the
in-memory doubles and the production backends are interchangeable.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from salaryslip.models.company import CompanyDetails
    from salaryslip.models.employee import Employee


# ---------------------------------------------------------------------------
# Status Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IStatusStore(Protocol):
    """Concurrency-safe associative store of serialized batch statuses."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@runtime_checkable
class INotifier(Protocol):
    """Delivers failure notifications. A missing target is a no-op."""

    def notify(self, subject: str, message: str) -> None: ...


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

@runtime_checkable
class IRenderer(Protocol):
    """Renders one employee record into one output document."""

    company: CompanyDetails

    def render(self, employee: Employee, output_dir: Path, *, include_period: bool = True) -> Path: ...
