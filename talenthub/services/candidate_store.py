"""Candidate store: the single owner of candidate records.

Every public method runs in its own transaction and hands back detached
objects, so callers never share a live session.
"""

from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from contextlib import asynccontextmanager
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from talenthub.core.errors import NotFoundError
from talenthub.models.candidate import Candidate

logger = structlog.get_logger()


class CandidateStore:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    async def find(self, candidate_id: UUID) -> Candidate | None:
        async with self._session_factory() as session:
            return await session.get(Candidate, candidate_id)

    async def get(self, candidate_id: UUID) -> Candidate:
        candidate = await self.find(candidate_id)
        if candidate is None:
            raise NotFoundError("Candidate not found", candidate_id=str(candidate_id))
        return candidate

    async def list_all(self, job_opening_id: UUID | None = None) -> list[Candidate]:
        query = select(Candidate)
        if job_opening_id is not None:
            query = query.where(Candidate.job_opening_id == job_opening_id)
        query = query.order_by(Candidate.applied_at.desc(), Candidate.name)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.unique().scalars().all())

    async def add(self, candidate: Candidate) -> Candidate:
        async with self._transaction() as session:
            session.add(candidate)
        logger.info("candidate_added", candidate_id=str(candidate.id))
        return await self.get(candidate.id)

    async def update(self, candidate_id: UUID, **changes) -> Candidate:
        async with self._transaction() as session:
            candidate = await session.get(Candidate, candidate_id)
            if candidate is None:
                raise NotFoundError("Candidate not found", candidate_id=str(candidate_id))
            for field, value in changes.items():
                setattr(candidate, field, value)
        logger.info(
            "candidate_updated",
            candidate_id=str(candidate_id),
            fields=sorted(changes),
        )
        return candidate

    async def apply(
        self,
        candidate_ids: Iterable[UUID],
        mutate: Callable[[AsyncSession, Candidate], Awaitable[None]],
    ) -> list[Candidate]:
        """Run ``mutate`` on every candidate in one transaction.

        A missing id aborts the whole transaction with NotFoundError.
        """
        async with self._transaction() as session:
            candidates = []
            for candidate_id in candidate_ids:
                candidate = await session.get(Candidate, candidate_id)
                if candidate is None:
                    raise NotFoundError("Candidate not found", candidate_id=str(candidate_id))
                await mutate(session, candidate)
                candidates.append(candidate)
        return candidates

    async def delete(self, candidate_id: UUID) -> None:
        async with self._transaction() as session:
            candidate = await session.get(Candidate, candidate_id)
            if candidate is None:
                raise NotFoundError("Candidate not found", candidate_id=str(candidate_id))
            await session.delete(candidate)
        logger.info("candidate_deleted", candidate_id=str(candidate_id))
