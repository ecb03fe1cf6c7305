from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import create_engine, func, select, text, update
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from course_catalog.core.exceptions import StorageError
from course_catalog.core.logging import get_logger
from course_catalog.db.base import Base
from course_catalog.modules.courses.models import Course

logger = get_logger(__name__)

MUTABLE_FIELDS = ("name", "description", "price", "duration_hours", "category", "active")


def _engine_options(database_url: str) -> dict[str, Any]:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # an in-memory database lives and dies with its one connection
        options["poolclass"] = StaticPool
    return options


def _writable(record: Mapping[str, Any]) -> dict[str, Any]:
    values = {key: record[key] for key in MUTABLE_FIELDS if key in record}
    if "active" in values:
        values["active"] = bool(values["active"])
    return values


class CourseRepository:
    """Storage gateway for the courses table.

    Owns the engine for its whole lifetime: build one at startup, call
    ``ensure_schema`` once, and ``close`` it at shutdown. Driver errors are
    logged here and re-raised as ``StorageError``.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = create_engine(
            database_url,
            echo=echo,
            future=True,
            **_engine_options(database_url),
        )
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info(
            "database engine created",
            database=self.engine.url.render_as_string(hide_password=True),
        )

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except (SQLAlchemyError, OverflowError, ValueError) as exc:
            # the driver raises OverflowError/ValueError while binding out-of-range values
            session.rollback()
            logger.error("storage operation failed", operation=operation, error=str(exc), exc_info=True)
            raise StorageError(operation, str(exc)) from exc
        finally:
            session.close()

    def ensure_schema(self) -> None:
        """Create the courses table if it does not exist yet."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            logger.error("failed to create schema", error=str(exc), exc_info=True)
            raise StorageError("ensure_schema", str(exc)) from exc
        logger.info("courses table ready")

    def insert(self, record: Mapping[str, Any]) -> Course:
        """Persist a new course; the returned row carries its assigned id."""
        with self._session("insert") as session:
            course = Course(**_writable(record))
            session.add(course)
            session.commit()
            session.refresh(course)
        logger.info("course inserted", course_id=course.id)
        return course

    def find_all(self) -> list[Course]:
        """All courses, newest first."""
        with self._session("find_all") as session:
            courses = session.scalars(
                select(Course).order_by(Course.created_at.desc(), Course.id.desc())
            ).all()
        logger.debug("courses fetched", count=len(courses))
        return list(courses)

    def find_by_id(self, course_id: int) -> Optional[Course]:
        with self._session("find_by_id") as session:
            return session.get(Course, course_id)

    def update(self, course_id: int, record: Mapping[str, Any]) -> Optional[Course]:
        """Overwrite the mutable fields of a course and stamp updated_at.

        Callers check existence first; a missing row is not reported here
        beyond the ``None`` read back after the write.
        """
        with self._session("update") as session:
            session.execute(
                update(Course)
                .where(Course.id == course_id)
                .values(**_writable(record), updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            session.commit()
            course = session.get(Course, course_id)
        logger.info("course updated", course_id=course_id)
        return course

    def deactivate(self, course_id: int) -> bool:
        """Soft-delete a course. Returns False when no row matched."""
        with self._session("deactivate") as session:
            result = session.execute(
                update(Course)
                .where(Course.id == course_id)
                .values(active=False, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            session.commit()
        deactivated = result.rowcount > 0
        logger.info("course deactivated", course_id=course_id, matched=deactivated)
        return deactivated

    def ping(self) -> None:
        with self._session("ping") as session:
            session.execute(text("SELECT 1"))

    def close(self) -> None:
        """Release the engine. Failures are logged, never raised."""
        try:
            self.engine.dispose()
        except Exception as exc:
            logger.warning("failed to close database engine", error=str(exc))
        else:
            logger.info("database engine disposed")
