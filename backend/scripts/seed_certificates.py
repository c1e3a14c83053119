"""Seed the database with sample certificates for local development."""
import asyncio
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from certverify.config import get_settings
from certverify.database import engine, Base, AsyncSessionLocal
from certverify.models import Certificate, Program, ProgramCategory
from certverify.services.certificate_service import make_verification_hash

SAMPLE_CERTIFICATES = [
    ("2501001", "Ahmed Hassan", "ahmed.hassan@example.org", Program.WEB_DEVELOPMENT, ProgramCategory.ONLINE_CHAPTER, date(2025, 1, 15)),
    ("2501002", "Fatima Ahmed", "fatima.ahmed@example.org", Program.MACHINE_LEARNING, ProgramCategory.ONLINE_CHAPTER, date(2025, 1, 20)),
    ("2502001", "Mohamed Ali", "mohamed.ali@example.org", Program.FULL_STACK, ProgramCategory.BOOTCAMP, date(2025, 2, 10)),
    ("2500001", "Sarah Ibrahim", "sarah.ibrahim@example.org", Program.PROGRAMMING_FUNDAMENTALS, ProgramCategory.MAIN_CLUB, date(2025, 3, 5)),
    ("2501003", "Omar Khalid", "omar.khalid@example.org", Program.MOBILE_DEVELOPMENT, ProgramCategory.ONLINE_CHAPTER, date(2025, 1, 25)),
]


async def seed():
    settings = get_settings()

    print("📦 Ensuring database tables exist...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    created = 0
    async with AsyncSessionLocal() as session:
        for certificate_id, name, email, program, category, award_date in SAMPLE_CERTIFICATES:
            result = await session.execute(
                select(Certificate).where(Certificate.certificate_id == certificate_id)
            )
            if result.scalar_one_or_none():
                print(f"⚠️  {certificate_id} already exists, skipping")
                continue

            session.add(Certificate(
                certificate_id=certificate_id,
                recipient_name=name,
                recipient_email=email,
                program=program.value,
                program_category=category.value,
                award_date=award_date,
                verification_hash=make_verification_hash(certificate_id, email),
                issued_by=settings.ISSUER_NAME,
                ip_addresses=[],
                created_by="seed"
            ))
            created += 1

        await session.commit()

    print(f"✅ Seeded {created} certificate(s)")


if __name__ == "__main__":
    asyncio.run(seed())
