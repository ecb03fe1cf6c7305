from __future__ import annotations

from fastapi import Depends, Request

from course_catalog.modules.courses.repository import CourseRepository
from course_catalog.modules.courses.service import CourseService


def get_repository(request: Request) -> CourseRepository:
    """The storage gateway opened by the application lifespan."""
    return request.app.state.course_repository


def get_course_service(
    repository: CourseRepository = Depends(get_repository),
) -> CourseService:
    return CourseService(repository)
