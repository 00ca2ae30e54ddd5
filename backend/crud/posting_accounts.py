from functools import lru_cache
from pathlib import Path
from typing import Optional
import json
import logging
from config import POSTING_ACCOUNTS_FILE
from schemas.posting_accounts import PostingAccounts

logger = logging.getLogger(__name__)


def load_posting_accounts(path: Optional[str] = None) -> PostingAccounts:
    """Read the role -> account number table from JSON, falling back to built-in defaults."""
    path = Path(path or POSTING_ACCOUNTS_FILE)
    if not path.exists():
        logger.warning(f"Posting accounts file {path} not found. Using built-in defaults.")
        return PostingAccounts()
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    logger.info(f"Loaded posting accounts from {path}")
    return PostingAccounts.model_validate(data)


@lru_cache
def get_posting_accounts() -> PostingAccounts:
    return load_posting_accounts()
