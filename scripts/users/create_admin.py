"""Create (or promote) an approved admin account.

Usage:
    ENV_FILE=.env python -m scripts.users.create_admin --email admin@example.com \
        --password 'change-me' --name "Portal Admin" --phone 9999999999
"""

import argparse
import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv

# MUST be done before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
load_dotenv(project_root / os.environ.get("ENV_FILE", ".env"), override=True)

from libs.auth.security import get_password_hash  # noqa: E402
from libs.common.datetime_utils import utc_now  # noqa: E402
from libs.db.session import session_scope  # noqa: E402
from sqlalchemy import select  # noqa: E402

from services.members_service.models import Account  # noqa: E402


async def create_admin(email: str, password: str, name: str, phone: str) -> None:
    email = email.lower()
    async with session_scope() as db:
        result = await db.execute(select(Account).where(Account.email == email))
        account = result.scalar_one_or_none()

        if account:
            print(f"Account {email} exists; promoting to admin")
        else:
            account = Account(
                name=name,
                email=email,
                phone=phone,
                password_hash=get_password_hash(password),
                email_verified=True,
            )
            db.add(account)

        account.is_admin = True
        account.is_approved = True
        account.approved_at = account.approved_at or utc_now()
        account.is_suspended = False

    print(f"✅ Admin ready: {email}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Portal Admin")
    parser.add_argument("--phone", default="0000000000")
    args = parser.parse_args()
    asyncio.run(create_admin(args.email, args.password, args.name, args.phone))


if __name__ == "__main__":
    main()
