#!/usr/bin/env python3
"""Create an admin user, or promote an existing one.

Usage:
    python scripts/create_admin.py --email admin@example.com --name Admin --password 'S3cure-pass'

    # Or through the environment:
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=S3cure-pass python scripts/create_admin.py

Uses DATABASE_URL from the same settings as the API.
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


async def create_admin(email: str, name: str, password: str, dry_run: bool = False) -> dict:
    """Returns a dict with user_id, email and status."""
    from app.db.session import AsyncSessionLocal, close_db, init_db
    from app.models.user import UserRole
    from app.schemas.user import UserCreate
    from app.services.user_directory import UserDirectory

    await init_db()
    try:
        async with AsyncSessionLocal() as db:
            existing = await UserDirectory.get_by_email(db, email)

            if existing and existing.role == UserRole.ADMIN:
                return {"user_id": existing.id, "email": email, "status": "already_admin"}

            if dry_run:
                action = "promote" if existing else "create"
                return {"user_id": existing.id if existing else None, "email": email, "status": f"dry_run:{action}"}

            if existing:
                await UserDirectory.set_role(db, existing.id, UserRole.ADMIN)
                await db.commit()
                return {"user_id": existing.id, "email": email, "status": "promoted"}

            user = await UserDirectory.create_if_absent(
                db,
                UserCreate(name=name, email=email, password=password),
                role=UserRole.ADMIN,
            )
            await db.commit()
            return {"user_id": user.id, "email": email, "status": "created"}
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(
        description="Create or promote an admin user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL"), help="Admin email (or ADMIN_EMAIL)")
    parser.add_argument("--name", default=os.environ.get("ADMIN_NAME", "Administrator"), help="Display name")
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"), help="Password (or ADMIN_PASSWORD)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
    args = parser.parse_args()

    if not args.email:
        print("Error: --email or ADMIN_EMAIL environment variable required")
        sys.exit(1)

    if not args.password:
        print("Error: --password or ADMIN_PASSWORD environment variable required")
        sys.exit(1)

    try:
        result = asyncio.run(create_admin(args.email, args.name, args.password, args.dry_run))
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"{result['status']}: {result['email']} (id: {result['user_id']})")


if __name__ == "__main__":
    main()
