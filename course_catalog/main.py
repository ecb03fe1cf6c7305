import datetime
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from course_catalog.core.config import Settings, get_settings
from course_catalog.core.exceptions import CatalogError
from course_catalog.core.logging import configure_logging, get_logger
from course_catalog.db.deps import get_repository
from course_catalog.middleware.logging import logging_middleware
from course_catalog.modules.courses.repository import CourseRepository
from course_catalog.modules.courses.routes import pages_router, router as courses_router

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"

NOT_FOUND_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>404 - Page not found</title>
</head>
<body>
  <div style="text-align: center; padding: 50px;">
    <h1>404</h1>
    <h2>Page not found</h2>
    <p>The page you are looking for does not exist.</p>
    <a href="/courses">Back to the course list</a>
  </div>
</body>
</html>
"""


def _error_body(message: str) -> dict:
    return {"success": False, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and not request.url.path.startswith("/api"):
            return HTMLResponse(NOT_FOUND_PAGE, status_code=404)
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=_error_body("Invalid request"))

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        logger.error("catalog error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content=_error_body(GENERIC_ERROR_MESSAGE))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled error", path=request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=_error_body(GENERIC_ERROR_MESSAGE))


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[CourseRepository] = None,
) -> FastAPI:
    """Build the catalog application.

    The storage gateway is opened when the application starts and closed
    when it stops. Pass ``repository`` to use an already built one.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo = repository or CourseRepository(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        repo.ensure_schema()
        app.state.course_repository = repo
        app.state.started_at = time.time()
        logger.info(
            "course catalog started",
            app=settings.APP_NAME,
            routes=sorted({path for path in (getattr(route, "path", None) for route in app.routes) if path}),
        )
        try:
            yield
        finally:
            repo.close()
            logger.info("course catalog stopped")

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.middleware("http")(logging_middleware)
    register_exception_handlers(app)

    app.include_router(pages_router)
    app.include_router(courses_router)

    @app.get("/health")
    async def health(request: Request):
        """Simple health endpoint returning status, uptime, and timestamp."""
        uptime = time.time() - request.app.state.started_at
        payload = {
            "status": "ok",
            "uptime_seconds": round(uptime, 2),
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }
        return JSONResponse(content=payload)

    @app.get("/db/health")
    def db_health(repo: CourseRepository = Depends(get_repository)):
        repo.ping()
        return {"db": "ok"}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
