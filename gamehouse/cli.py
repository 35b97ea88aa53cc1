"""
Administrative command line

    gamehouse-admin create-admin --username admin --email admin@example.com --password secret
    gamehouse-admin find-admins
"""

import argparse
import asyncio
import sys

import structlog

from gamehouse.config import get_settings
from gamehouse.errors import GameHouseError
from gamehouse.services.operator_service import OperatorService
from gamehouse.utils.database import GameHouseDatabase
from gamehouse.utils.logger import setup_logging

logger = structlog.get_logger(__name__)


async def create_admin(args) -> int:
    db = GameHouseDatabase()
    await db.initialize()
    try:
        operator = await OperatorService(db).ensure_admin(
            args.username,
            args.email,
            args.password,
            first_name=args.first_name,
            last_name=args.last_name
        )
        print(f"Admin ready: {operator['username']} ({operator['_id']})")
        return 0
    except GameHouseError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await db.close()


async def find_admins(args) -> int:
    db = GameHouseDatabase()
    await db.initialize()
    try:
        admins = await OperatorService(db).find_admins()
        if not admins:
            print("No admin operators found")
            return 1
        for admin in admins:
            print(f"{admin['_id']}  {admin['username']}  {admin.get('email', '')}")
        return 0
    finally:
        await db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gamehouse-admin", description="Game house back office administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create-admin", help="Create an admin, or reset an existing one")
    create.add_argument("--username", default="admin", help="Login name")
    create.add_argument("--email", required=True, help="Admin email")
    create.add_argument("--password", required=True, help="Password, at least 6 characters")
    create.add_argument("--first-name", default="Admin")
    create.add_argument("--last-name", default="User")
    create.set_defaults(handler=create_admin)

    find = subparsers.add_parser("find-admins", help="List admin operators")
    find.set_defaults(handler=find_admins)

    return parser


def main(argv=None) -> int:
    settings = get_settings()
    setup_logging(log_level="WARNING", log_format=settings.log_format, config_path=settings.logging_config_path)

    args = build_parser().parse_args(argv)
    return asyncio.run(args.handler(args))


if __name__ == "__main__":
    sys.exit(main())
