"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from prometheus_fastapi_instrumentator import Instrumentator

from studyquiz.core.config import settings
from studyquiz.core.database import init_db
from studyquiz.core.errors import StudyQuizError
from studyquiz.core.logging_config import configure_logging
from studyquiz.api.analytics import router as analytics_router
from studyquiz.api.auth import router as auth_router
from studyquiz.api.dashboard import router as dashboard_router
from studyquiz.api.documents import router as documents_router
from studyquiz.api.export import router as export_router
from studyquiz.api.feedback import router as feedback_router
from studyquiz.api.questions import router as questions_router
from studyquiz.api.quizzes import router as quizzes_router

configure_logging(settings)
logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s...", settings.APP_NAME)
    init_db()
    yield
    logger.info("Shutting down %s...", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url=None if settings.is_production() else "/docs",
    redoc_url=None if settings.is_production() else "/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method, request.url.path, response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


def _error(status_code: int, message: str, error_type: str, **extra) -> JSONResponse:
    body = {"message": message, "type": error_type, "status_code": status_code}
    body.update(extra)
    return JSONResponse(status_code=status_code, content={"error": body})


@app.exception_handler(StudyQuizError)
async def domain_exception_handler(request: Request, exc: StudyQuizError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message, exc.error_type)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, exc.detail, "http_error")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(
        422,
        "Validation error",
        "validation_error",
        details=jsonable_errors(exc),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    message = "An internal error occurred" if settings.is_production() else str(exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message, "internal_error")


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances that JSON cannot encode
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok", "version": settings.APP_VERSION}


app.include_router(auth_router, prefix=f"{settings.API_PREFIX}/auth", tags=["auth"])
app.include_router(quizzes_router, prefix=f"{settings.API_PREFIX}/quiz", tags=["quiz"])
app.include_router(analytics_router, prefix=f"{settings.API_PREFIX}/analytics", tags=["analytics"])
app.include_router(dashboard_router, prefix=f"{settings.API_PREFIX}/dashboard", tags=["dashboard"])
app.include_router(documents_router, prefix=f"{settings.API_PREFIX}/documents", tags=["documents"])
app.include_router(questions_router, prefix=f"{settings.API_PREFIX}/questions", tags=["questions"])
app.include_router(feedback_router, prefix=f"{settings.API_PREFIX}/feedback", tags=["feedback"])
app.include_router(export_router, prefix=f"{settings.API_PREFIX}/export", tags=["export"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "studyquiz.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
