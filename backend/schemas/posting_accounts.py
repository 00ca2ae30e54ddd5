from pydantic import BaseModel, Field
from typing import Dict


class PostingAccounts(BaseModel):
    """Semantic role -> account number table used by the entry generators."""
    trade_receivables: str = "1021"
    service_revenue: str = "4012"
    sales_tax_payable: str = "2042"
    cash_in_bank: str = "1011"
    tax_prepaid: str = "1051"
    staff_salaries: str = "5011"
    salaries_payable: str = "2031"
    payroll_tax_payable: str = "2043"
    employee_benefits_payable: str = "2044"
    other_deductions_payable: str = "2045"
    default_expense: str = "5099"
    # Expense category id -> account number
    expense_categories: Dict[int, str] = Field(default_factory=dict)

    def expense_account_for(self, category_id) -> str:
        if category_id is None:
            return self.default_expense
        return self.expense_categories.get(category_id, self.default_expense)
