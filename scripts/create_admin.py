#!/usr/bin/env python3
"""Create the first administrator, or promote an existing account.

Usage:
    python scripts/create_admin.py --email admin@example.com --password 'Str0ng!Pass'

    # Or through the environment:
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD='Str0ng!Pass' python scripts/create_admin.py

The resulting account is active, email-verified and has role admin.
Run it from an environment where the service package is installed
(pip install -e .), pointed at the same DB_URI as the API.
"""

import argparse
import asyncio
import logging
import os
import sys

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.security_audit import record_security_event
from src.domain.entities import (
    SecurityEventType,
    SecurityOutcome,
    User,
    UserRole,
    UserStatus,
)
from src.domain.validation import normalize_email, password_policy_violations

logger = logging.getLogger("create_admin")


async def create_admin(
    email: str, password: str, first_name: str, last_name: str, dry_run: bool = False
) -> dict:
    """Create or promote an administrator.

    Returns:
        dict with user_id, email and status ('created', 'promoted',
        'already_admin' or 'dry_run')
    """
    email = normalize_email(email)
    engine = create_async_engine(ApplicationConfig.DB_URI)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with Session() as session:
            async with SqlAlchemyUnitOfWork(session) as uow:
                user = await uow.users.get_by_email(email)

                if user is not None and user.role == UserRole.admin and user.status == UserStatus.active:
                    logger.info("User %s is already an active admin (id: %s)", email, user.id)
                    return {"user_id": str(user.id), "email": email, "status": "already_admin"}

                if dry_run:
                    action = "promote" if user else "create"
                    logger.info("[DRY RUN] Would %s admin %s", action, email)
                    return {"user_id": str(user.id) if user else None, "email": email, "status": "dry_run"}

                if user is None:
                    user = User(
                        email=email,
                        password_hash="",
                        first_name=first_name,
                        last_name=last_name,
                    )
                    user.set_password(password)
                    status = "created"
                else:
                    status = "promoted"

                user.role = UserRole.admin
                user.status = UserStatus.active
                user.email_verified = True
                user.email_verification_token = None
                user.email_verification_expires_at = None
                user.reset_failed_logins()

                if status == "created":
                    user = await uow.users.create(user)
                else:
                    user = await uow.users.update(user)

                await record_security_event(
                    uow,
                    SecurityEventType.role_change,
                    SecurityOutcome.success,
                    user_id=user.id,
                    details={"new_role": UserRole.admin.value, "source": "create_admin", "status": status},
                )
                await uow.commit()

                logger.info("Admin %s %s (id: %s)", email, status, user.id)
                return {"user_id": str(user.id), "email": email, "status": status}
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="Create or promote a storefront administrator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--email",
        default=os.environ.get("ADMIN_EMAIL"),
        help="Admin email (or set ADMIN_EMAIL env var)",
    )
    parser.add_argument(
        "--password",
        default=os.environ.get("ADMIN_PASSWORD"),
        help="Admin password (or set ADMIN_PASSWORD env var)",
    )
    parser.add_argument("--first-name", default="Store", help="First name for a new account")
    parser.add_argument("--last-name", default="Admin", help="Last name for a new account")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if not args.email:
        parser.error("--email or ADMIN_EMAIL environment variable required")
    if not args.password:
        parser.error("--password or ADMIN_PASSWORD environment variable required")

    violations = password_policy_violations(args.password)
    if violations:
        parser.error("Password is too weak: " + "; ".join(violations))

    result = asyncio.run(
        create_admin(args.email, args.password, args.first_name, args.last_name, args.dry_run)
    )
    print(f"{result['status']}: {result['email']} (id: {result['user_id']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
