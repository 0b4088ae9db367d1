#!/usr/bin/env python3
"""
Print a bcrypt hash of the studio PIN for ADMIN_PIN_HASH.

Usage:
    python -m scripts.hash_pin

    Or non-interactively (CI/automation):
        PORTAL_PIN=1234 python -m scripts.hash_pin
"""

import getpass
import os
import re
import sys

# Add parent directory to path for imports when run as script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from portal.core.pin_security import hash_pin

PIN_PATTERN = re.compile(r"^\d{1,4}$")


def read_pin() -> str:
    """Get the PIN from PORTAL_PIN or an interactive prompt (asked twice)."""
    pin = os.environ.get("PORTAL_PIN", "").strip()
    if pin:
        return pin

    pin = getpass.getpass("PIN (1-4 digits): ").strip()
    confirm = getpass.getpass("Confirm PIN: ").strip()
    if pin != confirm:
        print("ERROR: PINs do not match", file=sys.stderr)
        sys.exit(1)
    return pin


def main() -> None:
    pin = read_pin()
    if not PIN_PATTERN.fullmatch(pin):
        print("ERROR: PIN must be 1-4 digits", file=sys.stderr)
        sys.exit(1)

    print(hash_pin(pin))
    print("Set this value as ADMIN_PIN_HASH in the environment.", file=sys.stderr)


if __name__ == "__main__":
    main()
