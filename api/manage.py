"""
Management commands run out-of-band from the HTTP API.

Usage (from the api/ directory):
    python -m manage grant-admin ana@example.com
    python -m manage revoke-admin ana@example.com
    python -m manage init-db
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import SessionLocal, engine, init_db
from models.profile import Profile

logger = logging.getLogger(__name__)


async def set_admin(db: AsyncSession, email: str, is_admin: bool) -> Profile | None:
    """Set the administrator flag on the profile with this email."""
    result = await db.execute(select(Profile).where(Profile.email == email.strip().lower()))
    profile = result.scalar_one_or_none()
    if not profile:
        return None
    profile.is_admin = is_admin
    # Outstanding refresh tokens still carry the old role claim
    profile.token_version += 1
    await db.commit()
    logger.info("Admin flag set: email=%s, is_admin=%s", profile.email, is_admin)
    return profile


async def _run(args: argparse.Namespace) -> int:
    try:
        if args.command == "init-db":
            await init_db()
            return 0
        async with SessionLocal() as db:
            profile = await set_admin(db, args.email, args.command == "grant-admin")
        if profile is None:
            print(f"No profile registered with email {args.email}", file=sys.stderr)
            return 1
        print(f"{profile.email}: is_admin={profile.is_admin}")
        return 0
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="manage", description=__doc__.splitlines()[1])
    sub = parser.add_subparsers(dest="command", required=True)
    for name in ("grant-admin", "revoke-admin"):
        cmd = sub.add_parser(name)
        cmd.add_argument("email")
    sub.add_parser("init-db")

    logging.basicConfig(level=logging.INFO)
    return asyncio.run(_run(parser.parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
