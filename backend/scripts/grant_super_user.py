"""Grant, revoke or list super users.

Usage:
    python scripts/grant_super_user.py grant alice
    python scripts/grant_super_user.py revoke alice@example.com
    python scripts/grant_super_user.py list
"""
import argparse
import asyncio

from channel_access.core.logging import configure_logging
from channel_access.db.database import async_session, create_tables
from channel_access.permissions.exceptions import NotFound
from channel_access.services.super_users import (
    grant_super_user,
    revoke_super_user,
    list_super_users,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage global super users.")
    parser.add_argument("--create-tables", action="store_true", help="create the schema first")
    sub = parser.add_subparsers(dest="command", required=True)
    grant = sub.add_parser("grant", help="grant super user to a username or email")
    grant.add_argument("identifier")
    revoke = sub.add_parser("revoke", help="revoke super user from a username or email")
    revoke.add_argument("identifier")
    sub.add_parser("list", help="list super users")
    return parser


async def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    if args.create_tables:
        await create_tables()

    async with async_session() as db:
        try:
            if args.command == "grant":
                grant, created = await grant_super_user(db, args.identifier)
                if created:
                    print(f"Granted super user to {args.identifier} (grant id={grant.id})")
                else:
                    print(f"{args.identifier} is already a super user")
            elif args.command == "revoke":
                if await revoke_super_user(db, args.identifier):
                    print(f"Revoked super user from {args.identifier}")
                else:
                    print(f"{args.identifier} is not a super user")
            else:
                users = await list_super_users(db)
                for user in users:
                    print(f"  {user.id}\t{user.username}\t{user.email}")
                print(f"\n{len(users)} super user(s)")
        except NotFound:
            print(f"No user matches {args.identifier!r}")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
