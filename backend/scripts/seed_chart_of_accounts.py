"""
Seed account types and the default chart of accounts.

Usage:
    python scripts/seed_chart_of_accounts.py [--posting-accounts path/to/posting_accounts.json]

Safe to run repeatedly: existing account types and accounts are left as they are.
"""
import sys
import os
import argparse
import logging
from dotenv import load_dotenv

load_dotenv()

# Add the parent directory to sys.path to allow imports from backend
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, SessionLocal, engine
import models  # noqa: F401
from crud.chart_of_accounts import initialize_default_accounts
from crud.posting_accounts import load_posting_accounts

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger("seed")


def seed(posting_accounts_file=None):
    Base.metadata.create_all(bind=engine)
    posting_accounts = load_posting_accounts(posting_accounts_file)

    db = SessionLocal()
    try:
        created = initialize_default_accounts(db, posting_accounts=posting_accounts)
        for account in created:
            logger.info(f"  {account.account_number}  {account.name}")
        logger.info(f"Seeding finished, {len(created)} accounts created")
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the default chart of accounts")
    parser.add_argument("--posting-accounts", dest="posting_accounts", default=None,
                        help="Posting accounts JSON file (defaults to POSTING_ACCOUNTS_FILE)")
    args = parser.parse_args()
    seed(args.posting_accounts)
