"""
Pytest configuration and fixtures for testing.
"""
import pytest
from fastapi.testclient import TestClient

from course_catalog.core.config import Settings
from course_catalog.main import create_app
from course_catalog.modules.courses.repository import CourseRepository
from course_catalog.modules.courses.service import CourseService


# Test database URL
SQLALCHEMY_TEST_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def repository():
    """A storage gateway over a fresh in-memory database for each test."""
    repo = CourseRepository(SQLALCHEMY_TEST_DATABASE_URL)
    repo.ensure_schema()
    try:
        yield repo
    finally:
        repo.close()


@pytest.fixture
def service(repository):
    return CourseService(repository)


@pytest.fixture(scope="function")
def client(repository):
    """FastAPI test client bound to the test database."""
    settings = Settings(DATABASE_URL=SQLALCHEMY_TEST_DATABASE_URL, LOG_LEVEL="WARNING")
    app = create_app(settings=settings, repository=repository)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def course_data():
    """A valid course payload."""
    return {
        "name": "Intro to Testing",
        "description": "Writing tests that matter",
        "price": 99.90,
        "duration_hours": 10,
        "category": "Other",
    }


@pytest.fixture
def stored_course(service, course_data):
    """A course already registered through the service."""
    result = service.register(course_data)
    assert result.success
    return result.course
