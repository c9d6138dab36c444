from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from talenthub.core.config import get_settings
from talenthub.core.database import async_session, engine, init_db
from talenthub.core.dependencies import build_pipeline
from talenthub.core.errors import NotFoundError, TransientSendError, ValidationError

logger = structlog.get_logger()
settings = get_settings()

# --- Sentry ---
if settings.SENTRY_DSN:
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info("sentry_initialized", environment=settings.SENTRY_ENVIRONMENT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db(engine)
    if settings.SEED_DEMO_DATA:
        from talenthub.services.seed import seed_demo_data

        await seed_demo_data(async_session)
    app.state.session_factory = async_session
    app.state.pipeline = build_pipeline(async_session, settings)
    logger.info("app_startup", version="0.1.0")
    yield
    logger.info("app_shutdown")


app = FastAPI(
    title="Talent Hub API",
    description="Recruiting pipeline: candidates, job opening waves and feedback batches",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Error handlers ---
async def _validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message, **exc.context})


async def _not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message, **exc.context})


async def _transient_send_handler(request: Request, exc: TransientSendError):
    return JSONResponse(status_code=503, content={"detail": exc.message, **exc.context})


app.add_exception_handler(ValidationError, _validation_error_handler)
app.add_exception_handler(NotFoundError, _not_found_handler)
app.add_exception_handler(TransientSendError, _transient_send_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
from talenthub.api.v1.batches import router as batches_router  # noqa: E402
from talenthub.api.v1.candidates import router as candidates_router  # noqa: E402
from talenthub.api.v1.feedback_templates import router as templates_router  # noqa: E402
from talenthub.api.v1.job_openings import router as job_openings_router  # noqa: E402

app.include_router(candidates_router, prefix=settings.API_V1_PREFIX)
app.include_router(job_openings_router, prefix=settings.API_V1_PREFIX)
app.include_router(templates_router, prefix=settings.API_V1_PREFIX)
app.include_router(batches_router, prefix=settings.API_V1_PREFIX)


@app.get("/health")
async def health(request: Request):
    checks = {"version": "0.1.0"}

    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    batches = request.app.state.pipeline.batches
    expired = batches.expire_idle()
    if expired:
        logger.warning("idle_batches_expired", count=expired)
    checks["batches_in_progress"] = len(batches)
    checks["status"] = "ok" if checks["database"] == "ok" else "degraded"
    return checks
