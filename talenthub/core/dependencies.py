from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from talenthub.core.config import Settings
from talenthub.services.bulk_actions import BatchRegistry
from talenthub.services.candidate_store import CandidateStore
from talenthub.services.feedback import SimulatedFeedbackSender, TemplateCatalog
from talenthub.services.job_openings import JobOpeningStore
from talenthub.services.pipeline import CandidatePipeline


def build_pipeline(session_factory: async_sessionmaker, settings: Settings, sender=None) -> CandidatePipeline:
    return CandidatePipeline(
        store=CandidateStore(session_factory),
        openings=JobOpeningStore(session_factory),
        templates=TemplateCatalog(session_factory),
        sender=sender or SimulatedFeedbackSender(settings.FEEDBACK_SEND_DELAY_SECONDS),
        templates_per_action=settings.FEEDBACK_TEMPLATES_PER_ACTION,
        sent_by=settings.FEEDBACK_SENT_BY,
        batch_idle_timeout=settings.BATCH_IDLE_TIMEOUT_SECONDS,
    )


def get_pipeline(request: Request) -> CandidatePipeline:
    return request.app.state.pipeline


def get_store(pipeline: CandidatePipeline = Depends(get_pipeline)) -> CandidateStore:
    return pipeline.store


def get_openings(pipeline: CandidatePipeline = Depends(get_pipeline)) -> JobOpeningStore:
    return pipeline.openings


def get_templates(pipeline: CandidatePipeline = Depends(get_pipeline)) -> TemplateCatalog:
    return pipeline.templates


def get_batches(pipeline: CandidatePipeline = Depends(get_pipeline)) -> BatchRegistry:
    return pipeline.batches
