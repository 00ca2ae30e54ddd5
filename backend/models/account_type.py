from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from database import Base


class AccountType(Base):
    __tablename__ = "account_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)  # Asset, Liability, Equity, Revenue, Expense
    description = Column(Text, nullable=True)

    accounts = relationship("Account", back_populates="type")
