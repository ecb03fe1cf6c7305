# course_catalog/modules/courses/routes.py
import json
import re
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from pydantic import ValidationError

from course_catalog.core.logging import get_logger
from course_catalog.db.deps import get_course_service
from course_catalog.modules.courses.schemas import (
    CatalogResponse,
    CoursePayload,
    CourseRead,
    FieldErrorRead,
)
from course_catalog.modules.courses.service import CourseService, ResultStatus, ServiceResult

logger = get_logger(__name__)

VIEWS_DIR = Path(__file__).resolve().parent.parent.parent / "views"

# SQLite INTEGER is a signed 64-bit value
MAX_COURSE_ID = 2**63 - 1

# ASCII digits only; int() alone also takes "+7", " 7 ", "0_1" and non-ASCII digits
COURSE_ID_PATTERN = re.compile(r"-?[0-9]+")

STATUS_CODES = {
    ResultStatus.ok: status.HTTP_200_OK,
    ResultStatus.invalid: status.HTTP_400_BAD_REQUEST,
    ResultStatus.not_found: status.HTTP_404_NOT_FOUND,
    ResultStatus.failed: status.HTTP_400_BAD_REQUEST,
    ResultStatus.error: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

pages_router = APIRouter(tags=["pages"])
router = APIRouter(prefix="/api", tags=["courses"])


def parse_course_id(course_id: str) -> int:
    """Path identifier as an int; anything else is a 400 before any storage access."""
    if not COURSE_ID_PATTERN.fullmatch(course_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid course id")
    value = int(course_id)
    if abs(value) > MAX_COURSE_ID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid course id")
    return value


async def read_course_payload(request: Request) -> dict[str, Any]:
    """Extract the course fields from a JSON or form-encoded body."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            body = await request.json()
        else:
            body = dict(await request.form())
        payload = CoursePayload.model_validate(body)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request body")
    return payload.model_dump()


def to_response(result: ServiceResult) -> JSONResponse:
    body = CatalogResponse(success=result.success, message=result.message or None)
    if result.errors:
        body.errors = [FieldErrorRead(field=error.field, message=error.message) for error in result.errors]
    if result.course is not None:
        body.course = CourseRead.model_validate(result.course)
    if result.courses is not None:
        body.courses = [CourseRead.model_validate(course) for course in result.courses]
    return JSONResponse(
        status_code=STATUS_CODES[result.status],
        content=body.model_dump(mode="json", exclude_none=True),
    )


def _page(filename: str) -> FileResponse:
    path = VIEWS_DIR / filename
    if not path.is_file():
        logger.error("page not found on disk", path=str(path))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load page",
        )
    return FileResponse(path, media_type="text/html")


# ---------- PAGES ----------


@pages_router.get("/", include_in_schema=False)
def index():
    return RedirectResponse(url="/courses")


@pages_router.get("/courses", include_in_schema=False)
def course_list_page():
    """Listing page; the browser loads rows from /api/courses."""
    return _page("course_list.html")


@pages_router.get("/courses/new", include_in_schema=False)
def course_form_page():
    return _page("course_form.html")


@pages_router.post("/courses", response_model=CatalogResponse)
def register_course(
    data: dict[str, Any] = Depends(read_course_payload),
    service: CourseService = Depends(get_course_service),
):
    """Create a course from a JSON or HTML form submission."""
    logger.info("course submitted", fields=sorted(k for k, v in data.items() if v is not None))
    return to_response(service.register(data))


# ---------- API ----------


@router.get("/categories", response_model=CatalogResponse, response_model_exclude_none=True)
def list_categories(service: CourseService = Depends(get_course_service)):
    return CatalogResponse(success=True, categories=service.categories())


@router.get("/courses", response_model=CatalogResponse)
def list_courses(service: CourseService = Depends(get_course_service)):
    return to_response(service.list())


@router.get("/courses/{course_id}", response_model=CatalogResponse)
def get_course(
    course_id: int = Depends(parse_course_id),
    service: CourseService = Depends(get_course_service),
):
    return to_response(service.get_by_id(course_id))


@router.put("/courses/{course_id}", response_model=CatalogResponse)
def update_course(
    course_id: int = Depends(parse_course_id),
    data: dict[str, Any] = Depends(read_course_payload),
    service: CourseService = Depends(get_course_service),
):
    """Replace every editable field of a course."""
    return to_response(service.update(course_id, data))


@router.delete("/courses/{course_id}", response_model=CatalogResponse)
def deactivate_course(
    course_id: int = Depends(parse_course_id),
    service: CourseService = Depends(get_course_service),
):
    """Soft delete: the course is marked inactive and stays in storage."""
    return to_response(service.deactivate(course_id))
