#!/usr/bin/env python3
"""
Provision an admin account for Hive Portal.

Creates the account, or promotes and resets an existing one, so it can
sign in to the CMS.
"""

import argparse
import asyncio
import getpass
import logging
import sys

from portal.core.database import AsyncSessionLocal, close_db, init_db
from portal.services.auth_service import create_admin

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


async def provision(email: str, password: str, display_name: str | None) -> None:
    await init_db()
    try:
        async with AsyncSessionLocal() as session:
            user = await create_admin(session, email, password, display_name)
            logger.info(f"Admin {user.email} has id {user.id}")
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description='Create or promote a Hive Portal admin')
    parser.add_argument('email', help='Admin email address')
    parser.add_argument('--name', dest='display_name', default=None, help='Display name')
    parser.add_argument('--password', default=None, help='Password (prompted if omitted)')
    args = parser.parse_args()

    password = args.password or getpass.getpass('Password: ')
    if len(password) < 8:
        logger.error("Password must be at least 8 characters")
        sys.exit(1)

    try:
        asyncio.run(provision(args.email.strip().lower(), password, args.display_name))
    except Exception as e:
        logger.error(f"Could not provision admin: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
