from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class JournalEntry(Base, TimestampMixin):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, index=True)
    entry_number = Column(String(30), nullable=False, unique=True, index=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    reference = Column(String(50), nullable=True, index=True)  # e.g. INV-42
    is_posted = Column(Boolean, default=False, nullable=False, index=True)
    posted_at = Column(DateTime(timezone=True), nullable=True)

    # Lines die with their entry
    lines = relationship(
        "LedgerLine",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="LedgerLine.id",
    )
