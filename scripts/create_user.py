"""Create a user directly in Postgres (e.g. the first admin) and print an access token.

Usage:
    python -m scripts.create_user <name> <email> <role> [extra_role ...]
Roles: admin, maker, checker1, checker2. Extra roles are stored in the user's
role set; admin cannot be combined with other roles.
"""

import asyncio
import sys

from audit_tracker.core.config import get_settings
from audit_tracker.domain.entities import UserEntity
from audit_tracker.domain.enums import UserRole
from audit_tracker.domain.exceptions import ValidationException
from audit_tracker.infrastructure.persistence.database import (
    SqlNotConfiguredError,
    dispose_engine,
    transactional_session,
)
from audit_tracker.infrastructure.persistence.repositories import UserRepository
from audit_tracker.infrastructure.security.jwt import create_user_token
from audit_tracker.shared.utils.generators import generate_cuid


async def main() -> None:
    """Create the user; exit 1 on bad input or when Postgres is not configured."""
    if len(sys.argv) < 4:
        print(
            "Usage: python -m scripts.create_user <name> <email> <role> [extra_role ...]",
            file=sys.stderr,
        )
        sys.exit(1)
    name, email, *role_args = sys.argv[1:]
    get_settings()
    try:
        role = UserRole(role_args[0])
        user = UserEntity(
            id=generate_cuid(),
            name=name,
            email=email.strip().lower(),
            role=role,
            roles=frozenset(UserRole(r) for r in role_args),
        )
    except (ValueError, ValidationException) as e:
        print(f"Invalid user: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        async with transactional_session() as session:
            await UserRepository(session).add(user)
    except SqlNotConfiguredError:
        print("Set DATABASE_BACKEND=postgres and DATABASE_URL first", file=sys.stderr)
        sys.exit(1)
    except ValidationException as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)
    finally:
        await dispose_engine()

    print(f"Created user: {user.id} ({user.email}, {role.value})")
    print(f"Access token: {create_user_token(user.id)}")


if __name__ == "__main__":
    asyncio.run(main())
