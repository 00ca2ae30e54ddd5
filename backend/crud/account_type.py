from sqlalchemy.orm import Session
from sqlalchemy import func
from models.account_type import AccountType
from models.chart_of_accounts import Account
import logging

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_TYPES = [
    {"name": "Asset", "description": "Assets owned by the company"},
    {"name": "Liability", "description": "Debts and obligations"},
    {"name": "Equity", "description": "Owner equity and retained earnings"},
    {"name": "Revenue", "description": "Income from business operations"},
    {"name": "Expense", "description": "Costs of doing business"},
]


def get_account_type(db: Session, type_id: int):
    return db.query(AccountType).filter(AccountType.id == type_id).first()


def get_account_type_by_name(db: Session, name: str):
    return db.query(AccountType).filter(AccountType.name == name).first()


def get_account_types(db: Session):
    """All account types with the number of accounts filed under each."""
    rows = (
        db.query(AccountType, func.count(Account.id))
        .outerjoin(Account, Account.type_id == AccountType.id)
        .group_by(AccountType.id)
        .order_by(AccountType.name)
        .all()
    )
    return [
        {"id": account_type.id, "name": account_type.name, "description": account_type.description, "account_count": count}
        for account_type, count in rows
    ]


def seed_account_types(db: Session):
    """Insert the fixed account types if missing. Existing rows are left untouched."""
    created = 0
    for type_data in DEFAULT_ACCOUNT_TYPES:
        if not get_account_type_by_name(db, type_data["name"]):
            db.add(AccountType(**type_data))
            created += 1
    if created:
        db.commit()
        logger.info(f"Seeded {created} account types")
    return db.query(AccountType).order_by(AccountType.id).all()
