"""Print an access token for an existing user id (uses SECRET_KEY from env/.env).

Usage:
    python -m scripts.issue_token <user_id> [expire_minutes]
"""

import sys
from datetime import timedelta

from audit_tracker.infrastructure.security.jwt import create_user_token


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.issue_token <user_id> [expire_minutes]", file=sys.stderr)
        sys.exit(1)
    expires = timedelta(minutes=int(sys.argv[2])) if len(sys.argv) > 2 else None
    print(create_user_token(sys.argv[1], expires))


if __name__ == "__main__":
    main()
