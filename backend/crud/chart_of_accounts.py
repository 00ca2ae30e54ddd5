from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from decimal import Decimal
from typing import Dict, List, Optional
from models.chart_of_accounts import Account
from crud import ledger as crud_ledger
from schemas.chart_of_accounts import AccountCreate, AccountUpdate
from schemas.posting_accounts import PostingAccounts
from crud import account_type as crud_account_type
from crud.account_balance import get_balances, make_balance
from config import ACCOUNT_SEARCH_LIMIT
from exceptions import (
    AccountNotFoundError,
    AccountTypeNotFoundError,
    DuplicateAccountNumberError,
    HierarchyCycleError,
    ParentNotFoundError,
    TypeMismatchError,
)
import logging
import math

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def get_account(db: Session, account_id: int) -> Optional[Account]:
    return (
        db.query(Account)
        .options(joinedload(Account.type))
        .filter(Account.id == account_id)
        .first()
    )


def get_account_by_number(db: Session, account_number: str) -> Optional[Account]:
    return (
        db.query(Account)
        .options(joinedload(Account.type))
        .filter(Account.account_number == account_number)
        .first()
    )


def get_accounts(db: Session, page: int = 1, page_size: int = 50, type_id: Optional[int] = None):
    query = db.query(Account)
    if type_id:
        query = query.filter(Account.type_id == type_id)

    total = query.count()
    accounts = (
        query.options(joinedload(Account.type))
        .order_by(Account.account_number)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {
        "accounts": accounts,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if page_size else 0,
    }


def search_accounts(db: Session, query: str, limit: int = ACCOUNT_SEARCH_LIMIT) -> List[Account]:
    """Case-insensitive substring match over number and name of active accounts."""
    pattern = f"%{query.strip()}%"
    return (
        db.query(Account)
        .options(joinedload(Account.type))
        .filter(
            Account.is_active.is_(True),
            or_(Account.account_number.ilike(pattern), Account.name.ilike(pattern)),
        )
        .order_by(Account.account_number)
        .limit(limit)
        .all()
    )


def _require_type(db: Session, type_id: int):
    if not crud_account_type.get_account_type(db, type_id):
        raise AccountTypeNotFoundError(type_id)


def _is_descendant(db: Session, candidate_id: int, account_id: int) -> bool:
    """True when candidate_id sits somewhere below account_id."""
    frontier = [account_id]
    seen = set()
    while frontier:
        children = [
            row.id for row in db.query(Account.id).filter(Account.parent_account_id.in_(frontier)).all()
        ]
        if candidate_id in children:
            return True
        seen.update(frontier)
        frontier = [child for child in children if child not in seen]
    return False


def create_account(db: Session, account: AccountCreate, user_id: Optional[str] = None) -> Account:
    if get_account_by_number(db, account.account_number):
        raise DuplicateAccountNumberError(account.account_number)

    _require_type(db, account.type_id)

    if account.parent_account_id is not None:
        parent = get_account(db, account.parent_account_id)
        if not parent:
            raise ParentNotFoundError(account.parent_account_id)
        if parent.type_id != account.type_id:
            raise TypeMismatchError(account.type_id, parent.type_id)

    db_account = Account(**account.model_dump(), created_by=user_id)
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    logger.info(f"Created account {db_account.account_number} '{db_account.name}' (id={db_account.id})")
    return db_account


def update_account(db: Session, account_id: int, account_update: AccountUpdate, user_id: Optional[str] = None) -> Account:
    """
    Apply a partial update, re-validating the hierarchy rules enforced at creation.

    A parent given explicitly as null detaches the account to the root level.
    """
    db_account = get_account(db, account_id)
    if not db_account:
        raise AccountNotFoundError(account_id)

    update_data = account_update.model_dump(exclude_unset=True)
    if "account_number" in update_data and update_data["account_number"] is None:
        del update_data["account_number"]
    if "name" in update_data and update_data["name"] is None:
        del update_data["name"]
    if "is_active" in update_data and update_data["is_active"] is None:
        del update_data["is_active"]
    if "type_id" in update_data and update_data["type_id"] is None:
        del update_data["type_id"]

    new_number = update_data.get("account_number")
    if new_number and new_number != db_account.account_number:
        if get_account_by_number(db, new_number):
            raise DuplicateAccountNumberError(new_number)

    new_type_id = update_data.get("type_id", db_account.type_id)
    if new_type_id != db_account.type_id:
        _require_type(db, new_type_id)

    new_parent_id = update_data.get("parent_account_id", db_account.parent_account_id)
    if new_parent_id is not None:
        if new_parent_id == db_account.id or _is_descendant(db, new_parent_id, db_account.id):
            raise HierarchyCycleError(db_account.id, new_parent_id)
        parent = get_account(db, new_parent_id)
        if not parent:
            raise ParentNotFoundError(new_parent_id)
        if parent.type_id != new_type_id:
            raise TypeMismatchError(new_type_id, parent.type_id)

    if new_type_id != db_account.type_id:
        mismatched = [child for child in db_account.sub_accounts if child.type_id != new_type_id]
        if mismatched:
            raise TypeMismatchError(
                new_type_id,
                mismatched[0].type_id,
                reason=f"Cannot change type of account {db_account.account_number}: "
                       f"sub-account {mismatched[0].account_number} has a different type",
            )

    for key, value in update_data.items():
        setattr(db_account, key, value)
    db_account.updated_by = user_id

    db.commit()
    db.refresh(db_account)
    logger.info(f"Updated account {db_account.account_number} (id={db_account.id}): {sorted(update_data)}")
    return db_account


def delete_account(db: Session, account_id: int, user_id: Optional[str] = None) -> str:
    """
    Hard-delete an account without ledger lines or sub-accounts, otherwise deactivate it.

    The account row is locked while lines are counted so a concurrent posting
    cannot slip in between the check and the delete.
    """
    db_account = (
        db.query(Account)
        .filter(Account.id == account_id)
        .with_for_update()
        .first()
    )
    if not db_account:
        raise AccountNotFoundError(account_id)

    try:
        line_count = crud_ledger.count_lines_for_account(db, account_id)
        child_count = db.query(Account).filter(Account.parent_account_id == account_id).count()

        if line_count == 0 and child_count == 0:
            db.delete(db_account)
            outcome = "deleted"
        else:
            db_account.is_active = False
            db_account.updated_by = user_id
            outcome = "deactivated"
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Account {account_id} {outcome} (ledger lines: {line_count}, sub-accounts: {child_count})"
    )
    return outcome


def build_hierarchy(db: Session, type_id: int) -> List[Dict]:
    """
    Active accounts of one type as a forest.

    Each node carries its own posted balance and `subtree_balance`, the sum of
    its own and all descendants' balances. Accounts whose parent is inactive
    or of another type are promoted to roots.
    """
    _require_type(db, type_id)

    accounts = (
        db.query(Account)
        .filter(Account.type_id == type_id, Account.is_active.is_(True))
        .order_by(Account.account_number)
        .all()
    )
    balances = get_balances(db, [a.id for a in accounts])

    nodes = {}
    for account in accounts:
        balance = balances.get(account.id) or make_balance(account.id, ZERO, ZERO)
        nodes[account.id] = {
            "id": account.id,
            "account_number": account.account_number,
            "name": account.name,
            "type_id": account.type_id,
            "parent_account_id": account.parent_account_id,
            "debit_total": balance.debit_total,
            "credit_total": balance.credit_total,
            "balance": balance.balance,
            "subtree_balance": balance.balance,
            "children": [],
        }

    roots = []
    for account in accounts:
        node = nodes[account.id]
        parent = nodes.get(account.parent_account_id)
        if parent is None:
            roots.append(node)
        else:
            parent["children"].append(node)

    def roll_up(node):
        node["subtree_balance"] = node["balance"] + sum(
            (roll_up(child) for child in node["children"]), ZERO
        )
        return node["subtree_balance"]

    for root in roots:
        roll_up(root)

    return roots


DEFAULT_CHART = [
    # Roots
    {"account_number": "1000", "name": "Assets", "type": "Asset"},
    {"account_number": "2000", "name": "Liabilities", "type": "Liability"},
    {"account_number": "3000", "name": "Equity", "type": "Equity"},
    {"account_number": "4000", "name": "Revenue", "type": "Revenue"},
    {"account_number": "5000", "name": "Expenses", "type": "Expense"},
    # Assets
    {"account_number": "1011", "name": "Cash in Bank", "type": "Asset", "parent": "1000"},
    {"account_number": "1021", "name": "Trade Receivables", "type": "Asset", "parent": "1000"},
    {"account_number": "1051", "name": "Input Tax Prepaid", "type": "Asset", "parent": "1000"},
    # Liabilities
    {"account_number": "2031", "name": "Salaries Payable", "type": "Liability", "parent": "2000"},
    {"account_number": "2042", "name": "Sales Tax Payable", "type": "Liability", "parent": "2000"},
    {"account_number": "2043", "name": "Payroll Tax Payable", "type": "Liability", "parent": "2000"},
    {"account_number": "2044", "name": "Employee Benefits Payable", "type": "Liability", "parent": "2000"},
    {"account_number": "2045", "name": "Other Deductions Payable", "type": "Liability", "parent": "2000"},
    # Equity
    {"account_number": "3010", "name": "Retained Earnings", "type": "Equity", "parent": "3000"},
    # Revenue
    {"account_number": "4012", "name": "Service Revenue", "type": "Revenue", "parent": "4000"},
    # Expenses
    {"account_number": "5011", "name": "Staff Salaries", "type": "Expense", "parent": "5000"},
    {"account_number": "5021", "name": "Office Supplies", "type": "Expense", "parent": "5000"},
    {"account_number": "5022", "name": "Software & Subscriptions", "type": "Expense", "parent": "5000"},
    {"account_number": "5023", "name": "Hardware", "type": "Expense", "parent": "5000"},
    {"account_number": "5024", "name": "Travel", "type": "Expense", "parent": "5000"},
    {"account_number": "5025", "name": "Utilities", "type": "Expense", "parent": "5000"},
    {"account_number": "5026", "name": "Rent", "type": "Expense", "parent": "5000"},
    {"account_number": "5027", "name": "Marketing", "type": "Expense", "parent": "5000"},
    {"account_number": "5028", "name": "Professional Services", "type": "Expense", "parent": "5000"},
    {"account_number": "5099", "name": "Miscellaneous Expense", "type": "Expense", "parent": "5000"},
]


# Account type of each posting role, used when a role's account has to be created
POSTING_ROLE_TYPES = {
    "trade_receivables": "Asset",
    "cash_in_bank": "Asset",
    "tax_prepaid": "Asset",
    "sales_tax_payable": "Liability",
    "salaries_payable": "Liability",
    "payroll_tax_payable": "Liability",
    "employee_benefits_payable": "Liability",
    "other_deductions_payable": "Liability",
    "service_revenue": "Revenue",
    "staff_salaries": "Expense",
    "default_expense": "Expense",
}


def _posting_account_specs(posting_accounts: PostingAccounts) -> Dict[str, tuple]:
    """account number -> (name, type name) for every number the posting table references."""
    specs = {}
    for category_id, number in sorted(posting_accounts.expense_categories.items()):
        specs.setdefault(number, (f"Expense Category {category_id}", "Expense"))
    for role, type_name in POSTING_ROLE_TYPES.items():
        number = getattr(posting_accounts, role)
        specs[number] = (role.replace("_", " ").title(), type_name)
    return specs


def initialize_default_accounts(db: Session, posting_accounts: Optional[PostingAccounts] = None) -> List[Account]:
    """
    Seed account types and the default chart of accounts.

    Accounts that already exist (matched by number) are kept as they are. When
    a posting table is given, any number it references that is still missing
    is created under the root account of its role's type, so every generator
    can post once this returns.
    """
    types = {t.name: t for t in crud_account_type.seed_account_types(db)}

    created = []
    for account_data in DEFAULT_CHART:
        if get_account_by_number(db, account_data["account_number"]):
            continue
        parent = get_account_by_number(db, account_data["parent"]) if account_data.get("parent") else None
        created.append(create_account(db, AccountCreate(
            account_number=account_data["account_number"],
            name=account_data["name"],
            type_id=types[account_data["type"]].id,
            parent_account_id=parent.id if parent else None,
        )))

    if posting_accounts:
        roots = {data["type"]: data["account_number"] for data in DEFAULT_CHART if not data.get("parent")}
        for number, (name, type_name) in _posting_account_specs(posting_accounts).items():
            if get_account_by_number(db, number):
                continue
            account_type = types[type_name]
            parent = get_account_by_number(db, roots[type_name])
            if parent is not None and parent.type_id != account_type.id:
                parent = None
            created.append(create_account(db, AccountCreate(
                account_number=number,
                name=name,
                type_id=account_type.id,
                parent_account_id=parent.id if parent else None,
            )))
            logger.info(f"Created posting account {number} ({name}) for the posting table")

    if created:
        logger.info(f"Seeded {len(created)} default accounts")
    return created
