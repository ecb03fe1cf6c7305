from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from course_catalog.core.exceptions import StorageError
from course_catalog.core.logging import get_logger
from course_catalog.modules.courses.domain import CourseCategory, CourseEntity, FieldError
from course_catalog.modules.courses.models import Course
from course_catalog.modules.courses.repository import CourseRepository

logger = get_logger(__name__)

INVALID_DATA_MESSAGE = "Invalid data. Check the fields and try again."
NOT_FOUND_MESSAGE = "Course not found"


class ResultStatus(str, enum.Enum):
    ok = "ok"
    invalid = "invalid"        # field errors the client can correct
    not_found = "not_found"
    failed = "failed"          # benign refusal, e.g. deactivating an unknown id
    error = "error"            # storage fault, detail stays in the logs


@dataclass
class ServiceResult:
    status: ResultStatus
    message: str = ""
    errors: list[FieldError] = field(default_factory=list)
    course: Optional[Course] = None
    courses: Optional[list[Course]] = None

    @property
    def success(self) -> bool:
        return self.status is ResultStatus.ok


class CourseService:
    """Business rules for the course catalog.

    The only layer that combines validation, sanitization and storage
    calls. Outcomes, including storage faults, come back as a
    ``ServiceResult`` rather than an exception.
    """

    def __init__(self, course_repo: CourseRepository):
        self.course_repo = course_repo

    def register(self, data: Optional[Mapping[str, Any]]) -> ServiceResult:
        """Validate, clean and store a new course."""
        entity = CourseEntity.from_mapping(data)

        errors = entity.validate()
        if errors:
            logger.info("course rejected", fields=[e.field for e in errors])
            return ServiceResult(ResultStatus.invalid, INVALID_DATA_MESSAGE, errors=errors)

        entity = entity.sanitize()
        try:
            course = self.course_repo.insert(entity.serialize())
        except StorageError as exc:
            logger.error("failed to register course", operation=exc.operation)
            return ServiceResult(ResultStatus.error, "Failed to register course. Please try again.")

        logger.info("registered course", course_id=course.id, name=course.name)
        return ServiceResult(
            ResultStatus.ok,
            f'Course "{entity.name}" registered successfully!',
            course=course,
        )

    def list(self) -> ServiceResult:
        try:
            courses = self.course_repo.find_all()
        except StorageError as exc:
            logger.error("failed to list courses", operation=exc.operation)
            return ServiceResult(ResultStatus.error, "Failed to list courses.")

        return ServiceResult(
            ResultStatus.ok,
            f"{len(courses)} course(s) found",
            courses=courses,
        )

    def get_by_id(self, course_id: int) -> ServiceResult:
        try:
            course = self.course_repo.find_by_id(course_id)
        except StorageError as exc:
            logger.error("failed to fetch course", course_id=course_id, operation=exc.operation)
            return ServiceResult(ResultStatus.error, "Failed to fetch course.")

        if course is None:
            return ServiceResult(ResultStatus.not_found, NOT_FOUND_MESSAGE)
        return ServiceResult(ResultStatus.ok, course=course)

    def update(self, course_id: int, data: Optional[Mapping[str, Any]]) -> ServiceResult:
        """Replace the editable fields of an existing course.

        The existence check and the write are separate statements; a
        concurrent writer can land between them.
        """
        try:
            existing = self.course_repo.find_by_id(course_id)
        except StorageError as exc:
            logger.error("failed to fetch course for update", course_id=course_id, operation=exc.operation)
            return ServiceResult(ResultStatus.error, "Failed to update course.")

        if existing is None:
            return ServiceResult(ResultStatus.not_found, NOT_FOUND_MESSAGE)

        entity = CourseEntity.from_mapping(data)
        errors = entity.validate()
        if errors:
            logger.info("course update rejected", course_id=course_id, fields=[e.field for e in errors])
            return ServiceResult(ResultStatus.invalid, INVALID_DATA_MESSAGE, errors=errors)

        entity = entity.sanitize()
        try:
            course = self.course_repo.update(course_id, entity.serialize())
        except StorageError as exc:
            logger.error("failed to update course", course_id=course_id, operation=exc.operation)
            return ServiceResult(ResultStatus.error, "Failed to update course.")

        if course is None:
            # removed between the existence check and the write
            return ServiceResult(ResultStatus.not_found, NOT_FOUND_MESSAGE)
        return ServiceResult(ResultStatus.ok, "Course updated successfully!", course=course)

    def deactivate(self, course_id: int) -> ServiceResult:
        try:
            deactivated = self.course_repo.deactivate(course_id)
        except StorageError as exc:
            logger.error("failed to deactivate course", course_id=course_id, operation=exc.operation)
            return ServiceResult(ResultStatus.error, "Failed to deactivate course.")

        if not deactivated:
            return ServiceResult(ResultStatus.failed, "Course could not be deactivated.")
        return ServiceResult(ResultStatus.ok, "Course deactivated successfully!")

    def categories(self) -> list[str]:
        return CourseCategory.values()
