from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class Account(Base, TimestampMixin):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    account_number = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    type_id = Column(Integer, ForeignKey("account_types.id"), nullable=False, index=True)
    parent_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    type = relationship("AccountType", back_populates="accounts")
    parent_account = relationship("Account", remote_side=[id], back_populates="sub_accounts")
    sub_accounts = relationship("Account", back_populates="parent_account")
    ledger_lines = relationship("LedgerLine", back_populates="account")
