#!/usr/bin/env python3
"""
Import a statement or holdings export into the ledger database.

Run from project root:
    python3 scripts/import_file.py statement.csv --owner-id household-1
    python3 scripts/import_file.py positions.tsv --kind holding --scope personal --owner-id alice

Without --mapping the columns are detected from the header row. Pass
--mapping '{"date": 0, "description": "Memo", "amount": 3}' to pick them.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure project root on path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
from pydantic import ValidationError
load_dotenv(project_root / ".env")

from household_ledger.database import SessionLocal, init_db
from household_ledger.routers.settings import get_setting
from household_ledger.services.ingestion.decoder import decode_bytes
from household_ledger.services.ingestion.errors import IngestionError
from household_ledger.services.ingestion.pipeline import ingest
from household_ledger.services.ingestion.records import OwnerScope
from household_ledger.services.repository import LedgerRepository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("path", type=Path, help="CSV or TSV file to import")
    parser.add_argument("--kind", choices=["transaction", "holding"], default="transaction")
    parser.add_argument("--scope", choices=["household", "personal"], default="household")
    parser.add_argument("--owner-id", required=True, help="Household id or user id")
    parser.add_argument("--skip-rows", type=int, default=None, help="Header line number (0 = no header)")
    parser.add_argument("--mapping", default=None, help="JSON object of field -> column")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if not args.path.exists():
        logger.error(f"Not found: {args.path}")
        return 1

    try:
        mapping = json.loads(args.mapping) if args.mapping else None
        scope = OwnerScope(kind=args.scope, owner_id=args.owner_id)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Bad arguments: {e}")
        return 2
    if mapping is not None and not isinstance(mapping, dict):
        logger.error("--mapping must be a JSON object")
        return 2

    init_db()
    db = SessionLocal()
    try:
        result = ingest(
            decode_bytes(args.path.read_bytes()),
            args.kind,
            scope,
            LedgerRepository(db),
            mapping=mapping,
            skip_rows=args.skip_rows,
            default_category=get_setting("default_category", db),
        )
    except IngestionError as e:
        logger.error(f"Import failed: {e}")
        return 2
    finally:
        db.close()

    logger.info("=" * 60)
    logger.info(f"{args.path.name}: {result.success_count} imported, {result.failure_count} rejected")
    for row in result.rejected:
        logger.info(f"  line {row.line_number}: {row.reason}  |  {row.raw_line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
