"""Tests for course workflow business logic."""

from course_catalog.core.exceptions import StorageError
from course_catalog.modules.courses.domain import CourseCategory
from course_catalog.modules.courses.service import ResultStatus


class TestRegister:
    """Course registration."""

    def test_register_stores_course(self, service, course_data):
        result = service.register(course_data)

        assert result.status == ResultStatus.ok
        assert result.success
        assert result.course.id is not None
        assert result.course.active is True
        assert result.course.price == 99.9
        assert result.message == 'Course "Intro to Testing" registered successfully!'

    def test_register_sanitizes_text(self, service, course_data):
        course_data["name"] = "  Intro   to <b>Testing</b> "
        course_data["description"] = "line one\n\nline   two"

        result = service.register(course_data)

        assert result.course.name == "Intro to bTesting/b"
        assert result.course.description == "line one line two"

    def test_register_canonicalizes_numbers(self, service, course_data):
        course_data.update(price="10", duration_hours="4")

        course = service.register(course_data).course

        assert course.price == 10.0
        assert course.duration_hours == 4

    def test_invalid_input_returns_field_errors(self, service, course_data, repository):
        course_data.update(name="ab", category="Cooking")

        result = service.register(course_data)

        assert result.status == ResultStatus.invalid
        assert not result.success
        assert [e.field for e in result.errors] == ["name", "category"]
        assert result.course is None
        assert repository.find_all() == []

    def test_storage_fault_is_generic(self, service, course_data, monkeypatch):
        def broken_insert(record):
            raise StorageError("insert", "disk I/O error")

        monkeypatch.setattr(service.course_repo, "insert", broken_insert)

        result = service.register(course_data)

        assert result.status == ResultStatus.error
        assert "disk" not in result.message


class TestList:
    def test_empty_catalog(self, service):
        result = service.list()

        assert result.success
        assert result.courses == []
        assert result.message == "0 course(s) found"

    def test_lists_newest_first(self, service, course_data):
        names = ["First course", "Second course", "Third course"]
        for name in names:
            service.register(dict(course_data, name=name))

        result = service.list()

        assert result.message == "3 course(s) found"
        assert [c.name for c in result.courses] == list(reversed(names))

    def test_storage_fault_returns_no_partial_results(self, service, monkeypatch):
        def broken_find_all():
            raise StorageError("find_all", "no such table")

        monkeypatch.setattr(service.course_repo, "find_all", broken_find_all)

        result = service.list()

        assert result.status == ResultStatus.error
        assert result.courses is None
        assert result.message == "Failed to list courses."


class TestGetById:
    def test_found(self, service, stored_course):
        result = service.get_by_id(stored_course.id)

        assert result.success
        assert result.course.name == "Intro to Testing"

    def test_not_found_is_not_an_error(self, service):
        result = service.get_by_id(999)

        assert result.status == ResultStatus.not_found
        assert result.message == "Course not found"

    def test_storage_fault(self, service, monkeypatch):
        def broken_find(course_id):
            raise StorageError("find_by_id", "locked")

        monkeypatch.setattr(service.course_repo, "find_by_id", broken_find)

        assert service.get_by_id(1).status == ResultStatus.error


class TestUpdate:
    def test_update_replaces_fields(self, service, stored_course, course_data):
        course_data.update(name="Advanced Testing", price="150", category="Programming")

        result = service.update(stored_course.id, course_data)

        assert result.success
        assert result.course.id == stored_course.id
        assert result.course.name == "Advanced Testing"
        assert result.course.price == 150.0
        assert result.course.updated_at is not None

    def test_missing_course_short_circuits_before_validation(self, service):
        result = service.update(999, {"name": "x"})

        assert result.status == ResultStatus.not_found
        assert result.errors == []

    def test_invalid_category_leaves_row_unchanged(self, service, repository, stored_course, course_data):
        course_data.update(name="Changed name", category="Cooking")

        result = service.update(stored_course.id, course_data)

        assert result.status == ResultStatus.invalid
        assert [e.field for e in result.errors] == ["category"]
        stored = repository.find_by_id(stored_course.id)
        assert stored.name == "Intro to Testing"
        assert stored.category == "Other"
        assert stored.updated_at is None

    def test_update_can_reactivate(self, service, stored_course, course_data):
        service.deactivate(stored_course.id)

        result = service.update(stored_course.id, dict(course_data, active=True))

        assert result.course.active is True

    def test_row_removed_during_update_reports_not_found(self, service, stored_course, course_data, monkeypatch):
        monkeypatch.setattr(service.course_repo, "update", lambda course_id, record: None)

        assert service.update(stored_course.id, course_data).status == ResultStatus.not_found


class TestDeactivate:
    def test_deactivate_marks_inactive(self, service, repository, stored_course):
        result = service.deactivate(stored_course.id)

        assert result.success
        assert result.message == "Course deactivated successfully!"
        assert repository.find_by_id(stored_course.id).active is False

    def test_deactivate_twice_succeeds(self, service, stored_course):
        service.deactivate(stored_course.id)

        assert service.deactivate(stored_course.id).success

    def test_unknown_id_is_a_benign_failure(self, service):
        result = service.deactivate(404)

        assert result.status == ResultStatus.failed
        assert not result.success

    def test_storage_fault(self, service, monkeypatch):
        def broken_deactivate(course_id):
            raise StorageError("deactivate", "readonly database")

        monkeypatch.setattr(service.course_repo, "deactivate", broken_deactivate)

        assert service.deactivate(1).status == ResultStatus.error


def test_categories(service):
    assert service.categories() == ["Programming", "Database", "Networking", "UX/UI", "Other"]
    assert service.categories() == [c.value for c in CourseCategory]
