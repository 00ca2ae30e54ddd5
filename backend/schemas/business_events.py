from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import date
from decimal import Decimal


class InvoiceEvent(BaseModel):
    id: int
    total_amount: Decimal = Field(..., ge=0, decimal_places=2)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    tax_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    issue_date: date
    client_name: Optional[str] = None


class ExpenseEvent(BaseModel):
    id: int
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    tax_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    expense_date: date
    category_id: Optional[int] = None
    vendor_name: Optional[str] = None
    description: Optional[str] = None


class PayslipEvent(BaseModel):
    id: int
    gross_salary: Decimal = Field(..., ge=0, decimal_places=2)
    net_salary: Decimal = Field(..., ge=0, decimal_places=2)
    tax_deduction: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    provident_fund: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    other_deductions: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    # When omitted the entry is dated today
    pay_date: Optional[date] = None
    employee_name: Optional[str] = None

    @model_validator(mode='after')
    def check_net_not_above_gross(self):
        if self.net_salary > self.gross_salary:
            raise ValueError("net_salary cannot exceed gross_salary")
        return self
