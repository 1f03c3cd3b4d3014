#!/usr/bin/env python
"""CLI utility to mint a bearer token for an existing user (development only)."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from typing import Optional

from sqlalchemy import select

from access_core.core.database import session_scope
from access_core.core.security import create_access_token
from access_core.models.user import User
from access_core.services.seed import SeedService


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Issue an access token for a user.")
    parser.add_argument("email", help="Email address of the user.")
    parser.add_argument("--minutes", type=int, default=None, help="Token lifetime in minutes.")
    parser.add_argument(
        "--bootstrap",
        action="store_true",
        help="Seed defaults and create the user as Super Admin if it does not exist.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with session_scope() as session:
        if args.bootstrap:
            seeder = SeedService(session)
            seeder.seed_defaults()
            seeder.ensure_super_admin(args.email, args.email.split("@")[0])

        user = session.scalar(select(User).where(User.email == args.email.lower()))
        if user is None:
            logging.error("No user with email %s", args.email)
            return 1
        role_names = [link.role.name for link in user.role_links if link.role is not None]
        expires = timedelta(minutes=args.minutes) if args.minutes else None
        token = create_access_token(user.id, role_names=role_names, expires_delta=expires)

    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
