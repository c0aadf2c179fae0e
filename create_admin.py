"""Bootstrap the first console administrator.

Usage: python create_admin.py <username> <email>
The password is read from the ADMIN_PASSWORD environment variable, or
prompted for when unset.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys

from pydantic import ValidationError

from src.rs_common.database import async_session_factory, engine
from src.rs_common.errors import AppError
from src.rs_gateway.user.schemas import CreateAdminRequest
from src.rs_gateway.user.service import AdminUserService

logger = logging.getLogger("create_admin")


async def _create(username: str, email: str, password: str) -> None:
    async with async_session_factory() as db:
        try:
            admin = await AdminUserService().create_admin(username, email, password, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    logger.info("Created administrator %s (%s)", admin.username, admin.id)
    await engine.dispose()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("username")
    parser.add_argument("email")
    args = parser.parse_args()

    password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    try:
        body = CreateAdminRequest(username=args.username, email=args.email, password=password)
    except ValidationError as exc:
        logger.error("Invalid administrator: %s", exc.errors()[0]["msg"])
        return 2

    try:
        asyncio.run(_create(body.username, body.email, body.password))
    except AppError as exc:
        logger.error("%s", exc.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
