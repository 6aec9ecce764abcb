"""Mint a bearer token for local testing, signed with AUTH_SECRET.

Example: python scripts/issue_token.py u-123 --email alice@example.com --name Alice
"""

from __future__ import annotations

import argparse
import importlib
import sys
import time
from pathlib import Path

from jose import jwt

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("uid")
    parser.add_argument("--email", default="")
    parser.add_argument("--name", default="")
    parser.add_argument("--hours", type=int, default=12)
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    now = int(time.time())
    claims = {"sub": args.uid, "iat": now, "exp": now + args.hours * 3600}
    if args.email:
        claims["email"] = args.email
    if args.name:
        claims["name"] = args.name
    if getattr(settings, "AUTH_AUDIENCE", ""):
        claims["aud"] = settings.AUTH_AUDIENCE

    algorithm = str(getattr(settings, "AUTH_ALGORITHM", "HS256")).split(",")[0].strip()
    print(jwt.encode(claims, settings.AUTH_SECRET, algorithm=algorithm))


if __name__ == "__main__":
    main()
