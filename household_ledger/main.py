"""
Household Ledger - FastAPI Backend
Main entry point. Registers all routers and initializes the database.
"""

import logging
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from ~/HouseholdLedger/.env first, then fall back to CWD/.env.
# Second call is a no-op for vars already set by the first.
load_dotenv(dotenv_path=Path.home() / "HouseholdLedger" / ".env")
load_dotenv()

from .database import init_db
from .routers import holdings, import_csv, settings, templates, transactions

__version__ = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run on startup: create tables."""
    init_db()
    logger.info("Database ready")
    yield


app = FastAPI(
    title="Household Ledger",
    description="Household budgeting with smart statement and holdings import",
    version=__version__,
    lifespan=lifespan,
)

# CORS - allow the web UI dev servers to call the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(import_csv.router, prefix="/api/import", tags=["File Import"])
app.include_router(templates.router, prefix="/api/templates", tags=["Mapping Templates"])
app.include_router(transactions.router, prefix="/api/transactions", tags=["Transactions"])
app.include_router(holdings.router, prefix="/api/holdings", tags=["Holdings"])
app.include_router(settings.router, prefix="/api/settings", tags=["Settings"])


@app.get("/health")
def health_check():
    """Health check endpoint used by the UI to verify the backend is ready."""
    return {"status": "ok", "version": __version__}
