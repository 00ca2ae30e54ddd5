"""
Application configuration.

All settings come from environment variables (optionally loaded from a .env
file). Defaults are suitable for a local PostgreSQL instance.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# Database connection settings
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_SERVER = os.getenv("POSTGRES_SERVER", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "ledger_db")

# DATABASE_URL wins when set (e.g. sqlite for local runs and tests)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_SERVER}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Kolkata")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

ACCOUNT_SEARCH_LIMIT = int(os.getenv("ACCOUNT_SEARCH_LIMIT", "20"))

POSTING_ACCOUNTS_FILE = os.getenv("POSTING_ACCOUNTS_FILE", str(BASE_DIR / "posting_accounts.json"))
