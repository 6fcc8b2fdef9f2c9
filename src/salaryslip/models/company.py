"""Company details printed in the salary slip header."""

from __future__ import annotations

from pydantic import BaseModel

from salaryslip.core.config import CompanyConfig


class CompanyDetails(BaseModel):
    name: str = ""
    address_line1: str = ""
    address_line2: str = ""
    cin: str = ""
    level: str = ""

    @classmethod
    def from_config(cls, config: CompanyConfig) -> CompanyDetails:
        return cls(
            name=config.name,
            address_line1=config.address_line1,
            address_line2=config.address_line2,
            cin=config.cin,
            level=config.level,
        )
