"""
Entry point for the Household Ledger backend.
Launches uvicorn with the FastAPI app object directly (not as a string).

    python -m household_ledger.run_app
"""

import logging
import os

import uvicorn

from household_ledger.main import app


def main():
    logging.basicConfig(
        level=os.environ.get("HOUSEHOLD_LEDGER_LOG_LEVEL", "INFO"),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    port = int(os.environ.get("HOUSEHOLD_LEDGER_PORT", 8000))
    uvicorn.run(app, host="127.0.0.1", port=port)


if __name__ == "__main__":
    main()
