from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.openapi.utils import get_openapi
from datetime import datetime
from config import CORS_ALLOWED_ORIGINS, LOG_DIR, LOG_LEVEL
from database import Base, engine
from exceptions import LedgerError, LedgerValidationError, NotFoundError, PersistenceConflictError
import models  # noqa: F401  registers every table on Base.metadata
import routers.account_types as account_types
import routers.chart_of_accounts as chart_of_accounts
import routers.journal_entry as journal_entry
import routers.ledger_lines as ledger_lines
import routers.financial_reports as financial_reports
import routers.postings as postings
import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

if LOG_DIR:
    os.makedirs(LOG_DIR, exist_ok=True)
    # Create a unique log file name based on current date/time
    current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    logging.basicConfig(
        level=LOG_LEVEL,
        format=LOG_FORMAT,
        filename=os.path.join(LOG_DIR, f"app_{current_time_str}.log"),
        filemode='a'
    )
else:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

if LOG_DIR:
    # Mirror the file log on the console
    console_handler = logging.StreamHandler()
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(console_handler)

logger = logging.getLogger(__name__)
logger.info("Application starting up...")


# Create database tables
Base.metadata.create_all(bind=engine)


app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="General Ledger API",
        version="1.0.0",
        description="Double-entry general ledger: chart of accounts, journal entries and trial balance",
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


def _error_response(status_code: int, exc: LedgerError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(LedgerValidationError)
async def validation_error_handler(request: Request, exc: LedgerValidationError):
    logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(PersistenceConflictError)
async def conflict_handler(request: Request, exc: PersistenceConflictError):
    logger.error(f"{request.method} {request.url.path} conflicted: {exc.message}")
    return _error_response(status.HTTP_409_CONFLICT, exc)


app.include_router(account_types.router)
app.include_router(chart_of_accounts.router)
app.include_router(journal_entry.router)
app.include_router(ledger_lines.router)
app.include_router(financial_reports.router)
app.include_router(postings.router)


@app.get("/")
async def test_route():
    return {"message": "Welcome to the General Ledger API!"}
