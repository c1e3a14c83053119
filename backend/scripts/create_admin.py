"""Create an admin account."""
import argparse
import asyncio
import getpass
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from certverify.database import AsyncSessionLocal
from certverify.models.admin import AdminRole
from certverify.services.auth_service import AuthService


def parse_args():
    parser = argparse.ArgumentParser(
        description="Create an admin account for the certificate verification service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/create_admin.py admin admin@example.org --role super_admin
  python scripts/create_admin.py editor editor@example.org --full-name "Jane Doe"
        """
    )
    parser.add_argument('username', help='Login name (3-30 characters of letters, digits, _ or -)')
    parser.add_argument('email', help='Admin email address')
    parser.add_argument(
        '--full-name',
        default='Administrator',
        help='Display name (default: Administrator)'
    )
    parser.add_argument(
        '--role',
        choices=[role.value for role in AdminRole],
        default=AdminRole.ADMIN.value,
        help='Admin role (default: admin)'
    )
    parser.add_argument(
        '--password',
        help='Password (prompted for when omitted)'
    )
    return parser.parse_args()


async def create_admin(args) -> int:
    password = args.password or getpass.getpass("Password: ")

    async with AsyncSessionLocal() as session:
        auth_service = AuthService(session)
        try:
            admin = await auth_service.create_admin(
                username=args.username,
                email=args.email,
                password=password,
                full_name=args.full_name,
                role=AdminRole(args.role),
                created_by="cli"
            )
        except ValueError as e:
            print(f"❌ {e}")
            return 1

    print("✅ Created admin account")
    print(f"   Username: {admin.username}")
    print(f"   Email: {admin.email}")
    print(f"   Role: {admin.role}")
    return 0


def main():
    """Main function."""
    print("🚀 Certificate Verification - Admin Creator")
    print("=" * 60)
    sys.exit(asyncio.run(create_admin(parse_args())))


if __name__ == "__main__":
    main()
