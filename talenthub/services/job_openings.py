from collections.abc import Iterable
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from talenthub.core.database import utcnow
from talenthub.core.errors import NotFoundError, ValidationError
from talenthub.models.job_opening import JobOpening, Wave
from talenthub.services.waves import implicit_wave

logger = structlog.get_logger()


class JobOpeningStore:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self):
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    async def _load(self, session: AsyncSession, opening_id: UUID) -> JobOpening:
        opening = await session.get(JobOpening, opening_id)
        if opening is None:
            raise NotFoundError("Job opening not found", job_opening_id=str(opening_id))
        return opening

    async def get(self, opening_id: UUID) -> JobOpening:
        async with self._session_factory() as session:
            return await self._load(session, opening_id)

    async def list_all(self, status: str | None = None) -> list[JobOpening]:
        query = select(JobOpening)
        if status:
            query = query.where(JobOpening.status == status)
        query = query.order_by(JobOpening.created_at.desc())
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def add(self, opening: JobOpening) -> JobOpening:
        async with self._transaction() as session:
            session.add(opening)
        logger.info("job_opening_created", job_opening_id=str(opening.id), title=opening.title)
        return await self.get(opening.id)

    async def transfer_targets(self, exclude_ids: Iterable[UUID] = ()) -> list[JobOpening]:
        """Open job openings a candidate can be moved to."""
        excluded = set(exclude_ids)
        return [o for o in await self.list_all(status="open") if o.id not in excluded]

    async def close(self, opening_id: UUID, now: datetime | None = None) -> JobOpening:
        now = now or utcnow()
        async with self._transaction() as session:
            opening = await self._load(session, opening_id)
            if opening.status == "closed":
                raise ValidationError("Job opening is already closed")
            if not opening.waves:
                opening.waves.append(implicit_wave(opening, now))
            current = opening.waves[-1]
            if current.closed_at is None:
                current.closed_at = now
            opening.status = "closed"
            wave_number = current.wave_number
        logger.info("job_opening_closed", job_opening_id=str(opening_id), wave_number=wave_number)
        return await self.get(opening_id)

    async def reopen(
        self,
        opening_id: UUID,
        due_date: datetime | None = None,
        now: datetime | None = None,
    ) -> JobOpening:
        """Open a new wave, keeping the previous ones as history."""
        now = now or utcnow()
        if due_date is not None and due_date.date() < now.date():
            raise ValidationError("Due date cannot be in the past")
        async with self._transaction() as session:
            opening = await self._load(session, opening_id)
            if opening.status == "open":
                raise ValidationError("Job opening is already open")
            if not opening.waves:
                # History was implicit: the first wave ran from creation until now.
                first = implicit_wave(opening, now)
                first.closed_at = now
                opening.waves.append(first)
            last = opening.waves[-1]
            if last.closed_at is None:
                last.closed_at = now
            opening.waves.append(Wave(wave_number=last.wave_number + 1, opened_at=now))
            opening.status = "open"
            opening.due_date = due_date
            wave_number = last.wave_number + 1
        logger.info(
            "job_opening_reopened",
            job_opening_id=str(opening_id),
            wave_number=wave_number,
            due_date=due_date.isoformat() if due_date else None,
        )
        return await self.get(opening_id)
