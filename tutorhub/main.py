import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tutorhub.core.config import LOG_LEVEL
from tutorhub.core.errors import TutorHubError
from tutorhub.core.logging_middleware import LoggingMiddleware
from tutorhub.db.init_db import init_db

# Import routers directly (bulletproof way)
from tutorhub.routers.assignments import router as assignments_router
from tutorhub.routers.auth import router as auth_router
from tutorhub.routers.dashboard import router as dashboard_router
from tutorhub.routers.groups import router as groups_router
from tutorhub.routers.submissions import router as submissions_router

logging.basicConfig(level=LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(title="TutorHub")

# Middleware
app.add_middleware(LoggingMiddleware)


@app.exception_handler(TutorHubError)
async def tutorhub_error_handler(request: Request, exc: TutorHubError):
    logger.info(
        "%s %s rejected: %s (%s)",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(groups_router, prefix="/groups", tags=["groups"])
app.include_router(assignments_router, prefix="/assignments", tags=["assignments"])
app.include_router(submissions_router, tags=["submissions"])

# Dashboard (no prefix, route defines the full path)
app.include_router(dashboard_router)
