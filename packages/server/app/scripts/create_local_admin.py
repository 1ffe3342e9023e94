"""
Bootstrap an admin account.

Only admins can grant roles, so the first admin has to come from here.
Creates the user if the email is unknown, otherwise promotes the existing
user to admin.

    python -m app.scripts.create_local_admin --email admin@example.com --password ...
"""

import argparse
import asyncio

import structlog

from app.core.database import get_session_context, init_db
from app.services import membership
from app.services import users as user_service
from orgroles_shared.schemas.common import Role

log = structlog.get_logger()


async def ensure_admin(email: str, password: str, name: str, session) -> str:
    """Create or promote ``email`` to admin. Returns the user id."""
    user = await user_service.get_user_by_email(email, session)
    if user is None:
        user = await user_service.create_user(email, password, name, session, role=Role.ADMIN)
        print(f"Created admin user: {email}")
    elif user.role != Role.ADMIN.value:
        await membership.update_user_role(user.id, Role.ADMIN, session)
        print(f"Promoted {email} to admin.")
    else:
        print(f"User {email} is already an admin.")
    return user.id


async def main(email: str, password: str, name: str, create_tables: bool) -> None:
    if create_tables:
        await init_db()
    async with get_session_context() as session:
        await ensure_admin(email, password, name, session)
    print("Done. Existing sessions for this user must be refreshed to pick up the role.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote a local admin user.")
    parser.add_argument("--email", required=True, help="Email address for the user")
    parser.add_argument("--password", required=True, help="Password (new users only)")
    parser.add_argument("--name", default="Administrator", help="Display name (new users only)")
    parser.add_argument("--create-tables", action="store_true", help="Create tables first")

    args = parser.parse_args()

    asyncio.run(main(args.email, args.password, args.name, args.create_tables))
