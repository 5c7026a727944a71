"""
Name: Database Schema Script

Responsibilities:
  - Apply app/infrastructure/db/schema.sql to DATABASE_URL (idempotent)
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from app.infrastructure.db import SCHEMA_PATH, apply_schema  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create tables if they do not exist.")
    parser.add_argument(
        "--database-url",
        default=os.getenv("DATABASE_URL"),
        help="PostgreSQL URL (default: $DATABASE_URL)",
    )
    parser.add_argument(
        "--schema",
        type=Path,
        default=SCHEMA_PATH,
        help="SQL file to apply (default: bundled schema.sql)",
    )
    args = parser.parse_args(argv)

    if not args.database_url:
        print("DATABASE_URL is required.", file=sys.stderr)
        return 1

    apply_schema(args.database_url, path=args.schema)
    print(f"Schema applied: {args.schema}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
