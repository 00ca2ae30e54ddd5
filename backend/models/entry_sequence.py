from sqlalchemy import Column, Integer, String
from database import Base


class EntrySequence(Base):
    """Last issued journal entry sequence per prefix and month.

    Rows are locked with SELECT ... FOR UPDATE while a number is drawn so that
    concurrent writers in the same prefix/month are serialized.
    """
    __tablename__ = "entry_sequences"

    prefix = Column(String(10), primary_key=True)
    period = Column(String(6), primary_key=True)  # YYYYMM
    last_value = Column(Integer, nullable=False, default=0)
