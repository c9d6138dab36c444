from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from talenthub.core.config import get_settings
from talenthub.core.database import Base, build_engine, init_db
from talenthub.core.dependencies import build_pipeline
from talenthub.main import app
from talenthub.models.candidate import Candidate
from talenthub.models.feedback_template import FeedbackTemplate
from talenthub.models.job_opening import JobOpening, Wave
from talenthub.services.feedback import SimulatedFeedbackSender


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest_asyncio.fixture()
async def session_factory():
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
def pipeline(session_factory):
    return build_pipeline(session_factory, get_settings(), sender=SimulatedFeedbackSender(0))


@pytest_asyncio.fixture()
async def backend_opening(pipeline):
    return await pipeline.openings.add(
        JobOpening(
            title="Backend Engineer",
            company_name="TechCorp",
            status="open",
            created_at=utc(2024, 1, 1),
            waves=[
                Wave(wave_number=1, opened_at=utc(2024, 1, 1), closed_at=utc(2024, 1, 15)),
                Wave(wave_number=2, opened_at=utc(2024, 1, 15)),
            ],
        )
    )


@pytest_asyncio.fixture()
async def frontend_opening(pipeline):
    return await pipeline.openings.add(
        JobOpening(
            title="Frontend Developer",
            company_name="TechCorp",
            status="open",
            created_at=utc(2024, 2, 1),
        )
    )


@pytest_asyncio.fixture()
async def templates(pipeline):
    rows = [
        ("Acceptance - General", "acceptance", None, "Dear {candidate_name}, welcome aboard as {position}."),
        ("Rejection - General", "rejection", None, "Dear {candidate_name}, thank you for applying to {position}."),
        ("Interview Invitation", "interview", None, "Dear {candidate_name}, let's talk."),
        ("Acceptance - Offer", "acceptance", "Offer for {position}", "Dear {candidate_name}, here is your offer."),
        ("Rejection - Overqualified", "rejection", None, "Dear {candidate_name}, you are overqualified."),
        ("Rejection - Not Selected", "rejection", None, "Dear {candidate_name}, not selected."),
        ("Rejection - Position Filled", "rejection", None, "Dear {candidate_name}, position filled."),
    ]
    created = []
    for minute, (title, type_, subject, content) in enumerate(rows):
        created.append(
            await pipeline.templates.add(
                FeedbackTemplate(
                    title=title,
                    type=type_,
                    subject=subject,
                    content=content,
                    created_by="John Doe",
                    created_at=utc(2024, 1, 1, 9, minute),
                    updated_at=utc(2024, 1, 1, 9, minute),
                )
            )
        )
    return {t.title: t for t in created}


@pytest.fixture()
def make_candidate(pipeline):
    async def _make(name, opening=None, applied_at=None, **fields):
        fields.setdefault("role", opening.title if opening else "")
        return await pipeline.store.add(
            Candidate(
                name=name,
                email=f"{name.split()[0].lower()}@example.com",
                job_opening_id=opening.id if opening else None,
                applied_at=applied_at or utc(2024, 1, 10),
                **fields,
            )
        )

    return _make


@pytest_asyncio.fixture()
async def client(pipeline, session_factory):
    app.state.session_factory = session_factory
    app.state.pipeline = pipeline
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
