"""Create (or re-key) a local user with a bearer API token.

Token issuance belongs to the external auth service; this is for development
and smoke tests only.

Usage:
    python scripts/create_user.py alice@example.com --name Alice
"""

from __future__ import annotations

import argparse
import asyncio
import secrets


async def _upsert(email: str, name: str, token: str) -> int:
    from notes_backend.db import dispose_engine, session_scope
    from notes_backend.models import User
    from notes_backend.repositories import users_repo

    try:
        async with session_scope() as session:
            user = await users_repo.get_user_by_email(session, email=email)
            if user is None:
                user = User(email=email.strip(), email_lower=email.strip().lower(), name=name)
            elif name:
                user.name = name
            user.api_token = token
            session.add(user)
            await session.commit()
            await session.refresh(user)
            assert user.id is not None
            return int(user.id)
    finally:
        await dispose_engine()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a user and print its API token.")
    parser.add_argument("email")
    parser.add_argument("--name", default="")
    parser.add_argument("--token", default=None, help="Use this token instead of a random one.")
    args = parser.parse_args()

    token = args.token or secrets.token_urlsafe(32)
    user_id = asyncio.run(_upsert(args.email, args.name, token))
    print(f"user_id={user_id} token={token}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
