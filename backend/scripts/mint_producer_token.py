#!/usr/bin/env python3
"""
Mint a producer bearer token for an allow-listed e-mail address.

Producer tokens are issued out of band; there is no login endpoint.

Usage:
    python -m scripts.mint_producer_token producer@studio.com --hours 8
"""

import argparse
import os
import sys
from datetime import timedelta

# Add parent directory to path for imports when run as script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from portal.core.config import settings
from portal.core.security import create_access_token, is_allowed_admin_email


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("email", help="Producer e-mail (must be in ADMIN_EMAIL_ALLOWLIST)")
    parser.add_argument(
        "--hours",
        type=float,
        default=settings.ACCESS_TOKEN_EXPIRE_MINUTES / 60,
        help="Token lifetime in hours",
    )
    args = parser.parse_args(argv)

    if not is_allowed_admin_email(args.email):
        print(
            f"ERROR: {args.email} is not in ADMIN_EMAIL_ALLOWLIST; "
            "the API would reject this token.",
            file=sys.stderr,
        )
        return 1
    if args.hours <= 0:
        print("ERROR: --hours must be positive", file=sys.stderr)
        return 1

    print(create_access_token(args.email, expires_delta=timedelta(hours=args.hours)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
