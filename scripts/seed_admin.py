"""Script to create the default admin user and print an access token for it."""

import asyncio
import os
import sys
from datetime import timedelta

from dotenv import load_dotenv
from sqlalchemy import insert, select

load_dotenv()

from app.core.security import create_access_token  # noqa: E402
from app.database import AsyncSessionLocal, engine  # noqa: E402
from app.models.users import users  # noqa: E402
from app.schemas.users import Role  # noqa: E402


async def seed_admin(email: str) -> None:
    """Create the admin user if missing and print a one-day token."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(users).where(users.c.email == email))
        admin = result.mappings().first()

        if admin:
            print(f"ℹ️ Admin already exists: {email}")
        else:
            result = await session.execute(
                insert(users).values(email=email, role=Role.ADMIN.value).returning(users)
            )
            admin = result.mappings().one()
            await session.commit()
            print(f"✅ Default Admin created: {email}")

    token = create_access_token(
        {"sub": str(admin["id"]), "email": email, "role": Role.ADMIN.value},
        expires_delta=timedelta(days=1),
    )
    print(f"Access token (24h): {token}")

    await engine.dispose()


if __name__ == "__main__":
    try:
        asyncio.run(seed_admin(os.getenv("ADMIN_EMAIL", "admin@mediconnect.com")))
    except Exception as e:
        print(f"✗ Seeding failed: {e}", file=sys.stderr)
        sys.exit(1)
