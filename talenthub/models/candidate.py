import uuid
from datetime import datetime

from sqlalchemy import JSON, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from talenthub.core.database import Base, UTCDateTime, utcnow

STAGES = ("applied", "cv_review", "ready_for_interview")


class Candidate(Base):
    __tablename__ = "candidates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    job_opening_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("job_openings.id"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), default="")
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(String(255), default="")
    skills: Mapped[list] = mapped_column(JSON, default=list)
    experience: Mapped[str] = mapped_column(String(100), default="")
    ready_for: Mapped[str | None] = mapped_column(String(20), nullable=True)
    employment_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    cv_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    stage: Mapped[str] = mapped_column(String(50), default="applied")
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    applied_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    archived_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    job_opening = relationship("JobOpening", lazy="joined")
    application_history: Mapped[list["ApplicationHistory"]] = relationship(
        back_populates="candidate",
        order_by="ApplicationHistory.recorded_at",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    feedback_history: Mapped[list["FeedbackHistory"]] = relationship(
        back_populates="candidate",
        order_by="FeedbackHistory.sent_at",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def form_title(self) -> str | None:
        return self.job_opening.title if self.job_opening is not None else None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None


class ApplicationHistory(Base):
    """Snapshot of a job opening the candidate was transferred away from."""

    __tablename__ = "application_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    candidate_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("candidates.id"))
    job_opening_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    job_title: Mapped[str] = mapped_column(String(255))
    company_name: Mapped[str] = mapped_column(String(255), default="")
    applied_at: Mapped[datetime] = mapped_column(UTCDateTime)
    stage: Mapped[str] = mapped_column(String(50))
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    candidate = relationship("Candidate", back_populates="application_history")


class FeedbackHistory(Base):
    __tablename__ = "feedback_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    candidate_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("candidates.id"))
    template_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    template_title: Mapped[str] = mapped_column(String(255))
    action: Mapped[str] = mapped_column(String(20))
    subject: Mapped[str] = mapped_column(String(500))
    content: Mapped[str] = mapped_column(Text)
    attachment_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sent_by: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default="sent")
    sent_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    candidate = relationship("Candidate", back_populates="feedback_history")
