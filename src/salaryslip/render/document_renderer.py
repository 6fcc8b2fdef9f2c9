"""PDF salary slip renderer built on PyMuPDF."""

from __future__ import annotations

import logging
import os
import re
import threading
from decimal import Decimal
from pathlib import Path

import fitz  # PyMuPDF

from salaryslip.core.exceptions import RenderError
from salaryslip.models.company import CompanyDetails
from salaryslip.models.employee import Employee, SalaryDetails

logger = logging.getLogger(__name__)

PDF_FILE_SUFFIX = "_SalarySlip.pdf"
PDF_TITLE = "Pay Slip"

PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size("a4")
PAGE_MARGIN = 20
ROW_HEIGHT = 18
CELL_PADDING = 4
FONT = "helv"
FONT_BOLD = "hebo"
FONT_SIZE_NORMAL = 9
FONT_SIZE_HEADER = 12
HEADER_FILL = (0.83, 0.83, 0.83)
LOGO_MAX_WIDTH = 100
LOGO_MAX_HEIGHT = 80

EARNING_LABELS = (
    ("Basic", "basic"),
    ("House Rent Allowance", "hra"),
    ("Dearness Allowance", "da"),
    ("Special Allowance", "special_allowance"),
    ("Travelling Allowance", "travelling_allowance"),
)
DEDUCTION_LABELS = (
    ("Income Tax (TDS)", "income_tax"),
    ("EPF", "epf"),
    ("Leave Deduction", "leave_deduction"),
)
LEFT_SIGNATURE = "SR. Manager Finance & Accounting"
RIGHT_SIGNATURE = "Director Finance"

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def slip_file_name(employee: Employee, *, include_period: bool = True) -> str:
    """Deterministic output file name for an employee's slip."""
    stem = f"{employee.emp_id}_{employee.period}" if include_period else employee.employee_name
    stem = _UNSAFE_CHARS.sub("_", stem).strip() or "unnamed"
    return f"{stem}{PDF_FILE_SUFFIX}"


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


class DocumentRenderer:
    """Renders one Employee into one PDF file.

    The logo is read once at construction. When it is missing or not a
    readable image the slip is rendered without it.
    """

    def __init__(self, company: CompanyDetails, logo_path: str | Path | None = None) -> None:
        self._company = company
        self._logo = self._load_logo(logo_path)

    @property
    def company(self) -> CompanyDetails:
        return self._company

    @company.setter
    def company(self, value: CompanyDetails) -> None:
        self._company = value

    @property
    def has_logo(self) -> bool:
        return self._logo is not None

    @staticmethod
    def _load_logo(logo_path: str | Path | None) -> bytes | None:
        if not logo_path:
            return None
        try:
            data = Path(logo_path).read_bytes()
            fitz.Pixmap(data)  # validates the image
        except Exception as exc:
            logger.warning("Could not load logo image from path: %s (%s). Using text header instead.", logo_path, exc)
            return None
        return data

    def render(self, employee: Employee, output_dir: Path, *, include_period: bool = True) -> Path:
        """Write the slip for ``employee`` into ``output_dir``, overwriting it.

        Raises:
            RenderError: the record is malformed or the file cannot be written.
        """
        emp_id = employee.emp_id or "<unknown>"
        if employee.salary_details is None:
            raise RenderError(emp_id, "missing salary details")

        target = Path(output_dir) / slip_file_name(employee, include_period=include_period)
        partial = target.with_name(f".{target.name}.{os.getpid()}.{threading.get_ident()}.tmp")
        try:
            doc = fitz.open()
            try:
                page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                self._draw(page, employee, employee.salary_details)
                doc.save(str(partial))
            finally:
                doc.close()
            os.replace(partial, target)
        except Exception as exc:
            partial.unlink(missing_ok=True)
            raise RenderError(emp_id, str(exc)) from exc

        logger.debug("Generated slip for %s at %s", employee.employee_name, target)
        return target

    # ---- layout ----

    def _draw(self, page, employee: Employee, salary: SalaryDetails) -> None:
        y = self._draw_header(page, PAGE_MARGIN)
        y = self._draw_company_lines(page, y + 10)
        y = self._draw_employee_table(page, employee, y + 6)
        y = self._draw_salary_table(page, salary, y + 10)
        self._draw_signatures(page, y + 50)

    def _draw_header(self, page, top: float) -> float:
        width = PAGE_WIDTH - 2 * PAGE_MARGIN
        text_rect = fitz.Rect(PAGE_MARGIN, top, PAGE_MARGIN + width * 0.8, top + LOGO_MAX_HEIGHT)
        lines = [self._company.name, self._company.address_line1, self._company.address_line2, PDF_TITLE]
        page.insert_textbox(
            text_rect, "\n".join(line for line in lines if line),
            fontsize=FONT_SIZE_HEADER, fontname=FONT_BOLD, align=fitz.TEXT_ALIGN_CENTER,
        )
        if self._logo is not None:
            right = PAGE_WIDTH - PAGE_MARGIN
            logo_rect = fitz.Rect(right - LOGO_MAX_WIDTH, top, right, top + LOGO_MAX_HEIGHT)
            page.insert_image(logo_rect, stream=self._logo, keep_proportion=True)
        return top + LOGO_MAX_HEIGHT

    def _draw_company_lines(self, page, top: float) -> float:
        y = top
        for line in (self._company.cin, self._company.level):
            if line:
                page.insert_text((PAGE_MARGIN, y + FONT_SIZE_NORMAL), line, fontsize=FONT_SIZE_NORMAL, fontname=FONT_BOLD)
                y += ROW_HEIGHT
        return y

    def _draw_employee_table(self, page, employee: Employee, top: float) -> float:
        rows = [
            ("Emp. - Id", employee.emp_id, "Payable Days", str(employee.payable_days)),
            ("Name", employee.employee_name, "Month/Year", employee.month_year),
            ("Designation", employee.designation, "Pan No.", employee.pan_no),
            ("Bank Account No", employee.bank_account_no, "Aadhar No", employee.aadhar_no),
            ("IFSC Code", employee.ifsc_code, "UAN No.", employee.uan_no),
        ]
        return self._draw_table(page, top, rows)

    def _draw_salary_table(self, page, salary: SalaryDetails, top: float) -> float:
        rows: list[tuple[str, ...]] = []
        for i in range(max(len(EARNING_LABELS), len(DEDUCTION_LABELS))):
            earning = EARNING_LABELS[i] if i < len(EARNING_LABELS) else None
            deduction = DEDUCTION_LABELS[i] if i < len(DEDUCTION_LABELS) else None
            rows.append((
                earning[0] if earning else "",
                _money(getattr(salary, earning[1])) if earning else "",
                deduction[0] if deduction else "",
                _money(getattr(salary, deduction[1])) if deduction else "",
            ))
        rows.append(("Total Earning", _money(salary.total_earnings),
                     "Total Deduction", _money(salary.total_deductions)))
        rows.append(("", "", "Net Salary", _money(salary.net_salary)))

        header = ("Earning (Rs.)", "", "Deductions (Rs.)", "")
        return self._draw_table(page, top, rows, header=header, bold_tail=2)

    def _draw_signatures(self, page, top: float) -> None:
        page.insert_text((PAGE_MARGIN, top), LEFT_SIGNATURE, fontsize=FONT_SIZE_NORMAL, fontname=FONT_BOLD)
        right_width = fitz.get_text_length(RIGHT_SIGNATURE, fontname=FONT_BOLD, fontsize=FONT_SIZE_NORMAL)
        page.insert_text(
            (PAGE_WIDTH - PAGE_MARGIN - right_width, top),
            RIGHT_SIGNATURE, fontsize=FONT_SIZE_NORMAL, fontname=FONT_BOLD,
        )

    @staticmethod
    def _draw_table(page, top: float, rows, header=None, bold_tail: int = 0) -> float:
        col_width = (PAGE_WIDTH - 2 * PAGE_MARGIN) / 4
        all_rows = ([header] if header else []) + list(rows)
        y = top
        for index, row in enumerate(all_rows):
            is_header = header is not None and index == 0
            is_bold = is_header or index >= len(all_rows) - bold_tail
            for col, text in enumerate(row):
                rect = fitz.Rect(
                    PAGE_MARGIN + col * col_width, y,
                    PAGE_MARGIN + (col + 1) * col_width, y + ROW_HEIGHT,
                )
                page.draw_rect(rect, color=(0, 0, 0), fill=HEADER_FILL if is_header else None, width=0.5)
                inner = rect + (CELL_PADDING, CELL_PADDING, -CELL_PADDING, -1)
                align = fitz.TEXT_ALIGN_RIGHT if col % 2 == 1 and not is_header else fitz.TEXT_ALIGN_LEFT
                page.insert_textbox(
                    inner, str(text), fontsize=FONT_SIZE_NORMAL,
                    fontname=FONT_BOLD if is_bold else FONT, align=align,
                )
            y += ROW_HEIGHT
        return y
