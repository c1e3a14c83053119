"""Data access for certificate records."""
from datetime import datetime, timezone
from typing import Optional, List, Tuple

from sqlalchemy import select, update, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from certverify.models.certificate import Certificate
from certverify.utils.certificate_id import track_ip

SEARCH_LIMIT = 20
LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """LIKE pattern matching text anywhere, with wildcards in text taken literally."""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return f"%{text}%"


class CertificateRepository:
    """
    Queries over the certificates table.

    The repository never commits; the calling service owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, certificate_pk: int) -> Optional[Certificate]:
        return await self.session.get(Certificate, certificate_pk)

    async def find_by_certificate_id(
        self,
        certificate_id: str,
        refresh: bool = False
    ) -> Optional[Certificate]:
        """Look up a record by its public 7-digit ID."""
        stmt = select(Certificate).where(Certificate.certificate_id == certificate_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_active(self, certificate_id: str) -> bool:
        result = await self.session.execute(
            select(func.count(Certificate.id)).where(
                and_(
                    Certificate.certificate_id == certificate_id,
                    Certificate.is_revoked == False
                )
            )
        )
        return (result.scalar() or 0) > 0

    async def add(self, certificate: Certificate) -> Certificate:
        self.session.add(certificate)
        await self.session.flush()
        return certificate

    async def delete(self, certificate: Certificate) -> None:
        await self.session.delete(certificate)
        await self.session.flush()

    async def apply_verification(
        self,
        certificate_id: str,
        ip: Optional[str],
        now: Optional[datetime] = None
    ) -> Optional[int]:
        """
        Record one successful verification.

        The counter is incremented by a single UPDATE that only matches a
        verifiable (not revoked) record. The IP history is rewritten in the
        same transaction while that UPDATE holds the row lock.

        Returns:
            The post-increment verification count, or None when no verifiable
            record matched
        """
        now = now or datetime.now(timezone.utc)

        stmt = (
            update(Certificate)
            .where(
                and_(
                    Certificate.certificate_id == certificate_id,
                    Certificate.is_revoked == False,
                    Certificate.is_verified == True
                )
            )
            .values(
                verification_count=Certificate.verification_count + 1,
                last_verified_at=now
            )
            .returning(Certificate.verification_count, Certificate.ip_addresses)
            .execution_options(synchronize_session=False)
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None

        count, history = row
        if ip:
            await self.session.execute(
                update(Certificate)
                .where(Certificate.certificate_id == certificate_id)
                .values(ip_addresses=track_ip(history, ip, now=now))
                .execution_options(synchronize_session=False)
            )
        return count

    async def mark_revoked(
        self,
        certificate_pk: int,
        reason: str,
        revoked_by: str,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Revoke a record unless it is already revoked.

        Returns:
            True if this call revoked the record, False if it was already revoked
        """
        now = now or datetime.now(timezone.utc)

        stmt = (
            update(Certificate)
            .where(
                and_(
                    Certificate.id == certificate_pk,
                    Certificate.is_revoked == False
                )
            )
            .values(
                is_revoked=True,
                revoked_at=now,
                revocation_reason=reason,
                updated_by=revoked_by
            )
            .returning(Certificate.id)
            .execution_options(synchronize_session=False)
        )
        return (await self.session.execute(stmt)).first() is not None

    async def list_page(self, offset: int, limit: int) -> Tuple[int, List[Certificate]]:
        """Newest first page of certificates plus the total count."""
        total = (await self.session.execute(select(func.count(Certificate.id)))).scalar() or 0
        result = await self.session.execute(
            select(Certificate)
            .order_by(Certificate.created_at.desc(), Certificate.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return total, list(result.scalars().all())

    async def count_summary(self) -> dict:
        """Totals for the analytics dashboard."""
        result = await self.session.execute(
            select(
                func.count(Certificate.id),
                func.count(Certificate.id).filter(Certificate.is_revoked == False),
                func.count(Certificate.id).filter(Certificate.is_verified == True),
                func.count(Certificate.id).filter(Certificate.is_revoked == True),
            )
        )
        total, active, verified, revoked = result.one()
        return {
            "total": total or 0,
            "active": active or 0,
            "verified": verified or 0,
            "revoked": revoked or 0,
        }

    async def count_by_program(self) -> List[Tuple[str, int]]:
        """Active certificates per program, largest first."""
        count = func.count(Certificate.id).label("count")
        result = await self.session.execute(
            select(Certificate.program, count)
            .where(Certificate.is_revoked == False)
            .group_by(Certificate.program)
            .order_by(count.desc(), Certificate.program)
        )
        return [(program, total) for program, total in result.all()]

    async def search(
        self,
        recipient: Optional[str] = None,
        program: Optional[str] = None,
        limit: int = SEARCH_LIMIT
    ) -> List[Certificate]:
        """Non-revoked certificates filtered by recipient name and/or program."""
        stmt = select(Certificate).where(Certificate.is_revoked == False)
        if recipient:
            stmt = stmt.where(Certificate.recipient_name.ilike(contains_pattern(recipient), escape=LIKE_ESCAPE))
        if program:
            stmt = stmt.where(Certificate.program == program)
        stmt = stmt.order_by(Certificate.award_date.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
