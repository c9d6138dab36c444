from typing import Literal

from fastapi import APIRouter, Depends

from talenthub.core.dependencies import get_pipeline, get_templates
from talenthub.schemas.feedback import FeedbackTemplateResponse
from talenthub.services.feedback import TemplateCatalog
from talenthub.services.pipeline import CandidatePipeline

router = APIRouter(prefix="/feedback-templates", tags=["feedback-templates"])


@router.get("", response_model=list[FeedbackTemplateResponse])
async def list_templates(
    type: Literal["acceptance", "rejection", "interview", "other"] | None = None,
    templates: TemplateCatalog = Depends(get_templates),
):
    return [FeedbackTemplateResponse.model_validate(t) for t in await templates.list_all(type=type)]


@router.get("/actions/{action}", response_model=list[FeedbackTemplateResponse])
async def templates_for_action(
    action: Literal["approve", "reject"],
    pipeline: CandidatePipeline = Depends(get_pipeline),
):
    """Templates offered in the approve/reject feedback dialog."""
    return [
        FeedbackTemplateResponse.model_validate(t)
        for t in await pipeline.offered_templates(action)
    ]
