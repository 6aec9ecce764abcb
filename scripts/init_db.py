"""Create the database (if needed) and apply database/schema.sql.

The schema is idempotent, so running this against an existing database is safe.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.breakfast_club.breakfast_club.database.bootstrap import apply_schema, list_tables


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--schema", type=Path, default=REPO_ROOT / "database" / "schema.sql")
    args = parser.parse_args()

    settings_module = get_settings_module()
    db_config = dict(importlib.import_module(settings_module).DB_CONFIG)

    apply_schema(db_config, schema_path=args.schema)
    tables = ", ".join(sorted(list_tables(db_config)))
    print(f"OK: {args.schema.name} applied to {db_config.get('database')} [{settings_module}] tables: {tables}")


if __name__ == "__main__":
    main()
