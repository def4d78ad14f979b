"""Create an admin user, or grant the admin role to an existing one."""

from __future__ import annotations

import argparse
import asyncio
import getpass

from sqlalchemy import select

from app.config import settings
from app.core.database import close_db, get_session_context
from app.core.security import get_password_hash
from app.models.user import User, UserRole


async def _ensure_admin(email: str, password: str | None, full_name: str | None) -> str:
    async with get_session_context() as session:
        user = await session.scalar(select(User).where(User.email == email))
        if user is None:
            if not password:
                raise SystemExit(f"User {email} does not exist; a password is required")
            user = User(
                email=email,
                hashed_password=get_password_hash(password),
                full_name=full_name,
            )
            session.add(user)
            await session.flush()
        elif password:
            user.hashed_password = get_password_hash(password)

        role_id = await session.scalar(
            select(UserRole.id).where(
                UserRole.user_id == user.id,
                UserRole.role == settings.admin_role,
            )
        )
        if role_id is None:
            session.add(UserRole(user_id=user.id, role=settings.admin_role))
        return user.id


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("--full-name", default=None)
    parser.add_argument(
        "--no-password",
        action="store_true",
        help="Only grant the role; do not prompt for a password.",
    )
    args = parser.parse_args()

    password = None if args.no_password else getpass.getpass("Password: ")

    async def _run() -> str:
        try:
            return await _ensure_admin(args.email, password, args.full_name)
        finally:
            await close_db()

    user_id = asyncio.run(_run())
    print(f"Admin role granted to {args.email} ({user_id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
