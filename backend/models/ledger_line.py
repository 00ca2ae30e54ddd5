from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint, Text, DateTime
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import now_local


class LedgerLine(Base):
    __tablename__ = "ledger_lines"

    id = Column(Integer, primary_key=True, index=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    debit = Column(Numeric(15, 2), nullable=False, default=0)
    credit = Column(Numeric(15, 2), nullable=False, default=0)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_local)

    # Relationships
    journal_entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("Account", back_populates="ledger_lines")

    __table_args__ = (
        CheckConstraint('debit >= 0', name='check_ledger_line_debit_non_negative'),
        CheckConstraint('credit >= 0', name='check_ledger_line_credit_non_negative'),
    )
