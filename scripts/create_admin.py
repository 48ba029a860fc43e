"""Create or reset an admin console account.

Usage: python scripts/create_admin.py <username> [full name]
The password is read from ADMIN_PASSWORD or prompted for.
"""

from __future__ import annotations

import asyncio
import getpass
import os
import sys

from ndrop.domain.repo import NdropRepository
from ndrop.infra.password import hash_password
from ndrop.infra.postgres import close_pool, init_pool


async def create(username: str, full_name: str | None, password: str) -> None:
    await init_pool()
    try:
        admin = await NdropRepository().upsert_admin(
            username=username.strip().lower(),
            password_hash=hash_password(password),
            full_name=full_name,
        )
        print(f"Admin '{admin.username}' ready (id={admin.id}).")
    finally:
        await close_pool()


def main() -> None:
    if len(sys.argv) < 2:
        raise SystemExit("usage: create_admin.py <username> [full name]")
    username = sys.argv[1]
    full_name = " ".join(sys.argv[2:]) or None
    password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    if len(password) < 8:
        raise SystemExit("password must be at least 8 characters")
    asyncio.run(create(username, full_name, password))


if __name__ == "__main__":
    main()
