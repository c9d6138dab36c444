"""Demo data: job openings with wave history, applicants and feedback templates."""

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from talenthub.models.candidate import Candidate
from talenthub.models.feedback_template import FeedbackTemplate
from talenthub.models.job_opening import JobOpening, Wave

logger = structlog.get_logger()


def _dt(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


TEMPLATES = [
    {
        "title": "Acceptance - Full Stack Developer",
        "type": "acceptance",
        "created_by": "John Doe",
        "created_at": "2024-01-15T10:00:00",
        "content": (
            "Dear {candidate_name},\n\nCongratulations! We are pleased to inform you that you "
            "have been selected for the Full Stack Developer position at our company.\n\n"
            "Please let us know your availability for the next steps.\n\n"
            "Best regards,\nRecruitment Team"
        ),
    },
    {
        "title": "Rejection - General",
        "type": "rejection",
        "created_by": "John Doe",
        "created_at": "2024-01-20T14:30:00",
        "content": (
            "Dear {candidate_name},\n\nThank you for your interest in the {position} position "
            "at our company.\n\nAfter careful consideration, we have decided to move forward "
            "with other candidates whose qualifications more closely match our current needs."
            "\n\nBest regards,\nRecruitment Team"
        ),
    },
    {
        "title": "Interview Invitation",
        "type": "interview",
        "created_by": "John Doe",
        "created_at": "2024-02-01T09:15:00",
        "content": (
            "Dear {candidate_name},\n\nWe are pleased to invite you for an interview for the "
            "{position} position.\n\nBest regards,\nRecruitment Team"
        ),
    },
    {
        "title": "Follow-up - Additional Information",
        "type": "other",
        "created_by": "John Doe",
        "created_at": "2024-02-05T11:20:00",
        "content": (
            "Dear {candidate_name},\n\nThank you for your application for the {position} "
            "position.\n\nWe would like to request some additional information from you."
            "\n\nBest regards,\nRecruitment Team"
        ),
    },
    {
        "title": "Rejection - Overqualified",
        "type": "rejection",
        "created_by": "John Doe",
        "created_at": "2024-02-10T16:45:00",
        "content": (
            "Dear {candidate_name},\n\nThank you for your interest in the {position} position."
            "\n\nWhile we were impressed with your qualifications, we feel that your experience "
            "level exceeds the requirements for this role.\n\nBest regards,\nRecruitment Team"
        ),
    },
    {
        "title": "Acceptance - Frontend Developer",
        "type": "acceptance",
        "subject": "Offer: {position} at our company",
        "created_by": "Jane Smith",
        "created_at": "2024-02-12T09:00:00",
        "content": (
            "Dear {candidate_name},\n\nCongratulations! We are pleased to offer you the "
            "Frontend Developer position.\n\nBest regards,\nRecruitment Team"
        ),
    },
    {
        "title": "Rejection - Not Selected",
        "type": "rejection",
        "created_by": "John Doe",
        "created_at": "2024-02-15T13:20:00",
        "content": (
            "Dear {candidate_name},\n\nThank you for applying for the {position} position."
            "\n\nAfter reviewing all applications, we have selected candidates whose "
            "qualifications better match our requirements.\n\nBest regards,\nRecruitment Team"
        ),
    },
    {
        "title": "Rejection - Position Filled",
        "type": "rejection",
        "created_by": "Jane Smith",
        "created_at": "2024-02-20T10:00:00",
        "content": (
            "Dear {candidate_name},\n\nThe {position} position has now been filled. "
            "We will keep your profile for future openings.\n\nBest regards,\nRecruitment Team"
        ),
    },
]

OPENINGS = [
    {
        "title": "Backend Engineer",
        "company_name": "TechCorp Indonesia",
        "status": "open",
        "created_at": "2024-01-01T00:00:00",
        "waves": [("2024-01-01T00:00:00", "2024-01-15T00:00:00"), ("2024-01-15T00:00:00", None)],
    },
    {
        "title": "Frontend Developer",
        "company_name": "TechCorp Indonesia",
        "status": "open",
        "created_at": "2024-02-01T00:00:00",
        "waves": [],
    },
    {
        "title": "Data Analyst",
        "company_name": "DataWorks",
        "status": "closed",
        "created_at": "2024-01-05T00:00:00",
        "waves": [("2024-01-05T00:00:00", "2024-02-05T00:00:00")],
    },
    {
        "title": "UI/UX Designer",
        "company_name": "Creative Studio",
        "status": "open",
        "created_at": "2024-03-01T00:00:00",
        "waves": [],
    },
]

# name, job opening, applied at, stage, status, skills
CANDIDATES = [
    ("Andi Pratama", "Backend Engineer", "2024-01-10T09:00:00", "cv_review", None, ["Python", "PostgreSQL"]),
    ("Siti Rahma", "Backend Engineer", "2024-01-12T14:30:00", "applied", "qualified", ["Go", "Kubernetes"]),
    ("Budi Santoso", "Backend Engineer", "2024-01-20T08:15:00", "applied", None, ["Java", "Spring"]),
    ("Dewi Lestari", "Frontend Developer", "2024-02-03T11:00:00", "ready_for_interview", "qualified", ["React", "TypeScript"]),
    ("Rizky Hidayat", "Frontend Developer", "2024-02-07T16:45:00", "applied", "not_qualified", ["Vue", "CSS"]),
    ("Putri Anggraini", "Data Analyst", "2024-01-18T10:20:00", "cv_review", None, ["SQL", "Tableau"]),
    ("Fajar Nugroho", "Data Analyst", "2024-02-01T13:00:00", "applied", None, ["Python", "Excel"]),
    ("Maya Sari", "UI/UX Designer", "2024-03-04T09:30:00", "applied", None, ["Figma", "User Research"]),
]


async def seed_demo_data(session_factory: async_sessionmaker, force: bool = False) -> bool:
    """Load the demo catalog. Returns False when data already exists."""
    async with session_factory() as session, session.begin():
        existing = (await session.execute(select(JobOpening).limit(1))).scalar_one_or_none()
        if existing and not force:
            logger.info("seed_skipped", reason="data_exists")
            return False
        if existing:
            for model in (Candidate, FeedbackTemplate, JobOpening):
                for row in (await session.execute(select(model))).scalars().all():
                    await session.delete(row)
            await session.flush()

        for entry in TEMPLATES:
            created_at = _dt(entry["created_at"])
            session.add(
                FeedbackTemplate(
                    title=entry["title"],
                    type=entry["type"],
                    subject=entry.get("subject"),
                    content=entry["content"],
                    created_by=entry["created_by"],
                    created_at=created_at,
                    updated_at=created_at,
                )
            )

        openings = {}
        for entry in OPENINGS:
            opening = JobOpening(
                title=entry["title"],
                company_name=entry["company_name"],
                status=entry["status"],
                created_at=_dt(entry["created_at"]),
                waves=[
                    Wave(
                        wave_number=number,
                        opened_at=_dt(opened),
                        closed_at=_dt(closed) if closed else None,
                    )
                    for number, (opened, closed) in enumerate(entry["waves"], start=1)
                ],
            )
            session.add(opening)
            openings[opening.title] = opening

        for name, title, applied_at, stage, status, skills in CANDIDATES:
            session.add(
                Candidate(
                    name=name,
                    email=name.lower().replace(" ", ".") + "@example.com",
                    role=title,
                    job_opening=openings[title],
                    applied_at=_dt(applied_at),
                    stage=stage,
                    status=status,
                    skills=skills,
                    experience="3 years",
                )
            )

    logger.info(
        "seed_done",
        job_openings=len(OPENINGS),
        candidates=len(CANDIDATES),
        templates=len(TEMPLATES),
    )
    return True
