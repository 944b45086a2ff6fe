"""
Creates an admin account for the owner portal.

    python -m resort.scripts.create_admin owner@amanpulo.com secret123 --name "Resort Owner"
"""
import argparse
import asyncio

from resort.database import AsyncSessionLocal, init_db
from resort.models import AdminRole
from resort.services.auth_service import AuthService


async def create_admin(email, password, name, role):
    await init_db()

    async with AsyncSessionLocal() as session:
        if await AuthService.get_by_email(session, email):
            print(f"❌ Admin '{email}' already exists.")
            return

        admin = await AuthService.create_admin(
            session, email=email, password=password, name=name, role=role
        )
        print(f"✅ Created admin: {admin.email} ({admin.role.value})")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("email", help="Admin email")
    parser.add_argument("password", help="Admin password")
    parser.add_argument("--name", default="Owner", help="Display name")
    parser.add_argument(
        "--role",
        default=AdminRole.OWNER.value,
        choices=[r.value for r in AdminRole],
    )
    args = parser.parse_args()

    asyncio.run(create_admin(args.email, args.password, args.name, AdminRole(args.role)))
