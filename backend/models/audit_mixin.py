from sqlalchemy import Column, DateTime, String
from datetime import datetime
import pytz
from config import APP_TIMEZONE


def now_local() -> datetime:
    return datetime.now(pytz.timezone(APP_TIMEZONE))


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Ledger records are never soft-deleted through this mixin: accounts carry
    their own `is_active` flag and journal entries are immutable once posted.
    """
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=now_local)
    updated_at = Column(DateTime(timezone=True), onupdate=now_local)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
