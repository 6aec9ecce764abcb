"""Grant (or with --revoke, remove) the admin flag for a registered email.

Users appear in the database the first time they call the API with a valid token.
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

from src.breakfast_club.breakfast_club.database.bootstrap import set_admin_flag


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("--revoke", action="store_true")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    changed = set_admin_flag(dict(settings.DB_CONFIG), email=args.email, is_admin=not args.revoke)
    if not changed:
        print(f"No user registered with {args.email} (or already set)")
        sys.exit(1)
    print(f"OK: {'revoked' if args.revoke else 'granted'} admin for {args.email} ({changed} row(s))")


if __name__ == "__main__":
    main()
