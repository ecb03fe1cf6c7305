"""Course entity: field rules, sanitization and storage serialization."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping, Optional

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 120

PRICE_QUANTUM = Decimal("0.01")
# largest value the Numeric(10, 2) price column holds
MAX_PRICE = Decimal("99999999.99")

MAX_DURATION_HOURS = 10_000

_TRUE_STRINGS = {"true", "1", "on", "yes"}

_ANGLE_BRACKETS = re.compile(r"[<>]")
_WHITESPACE_RUN = re.compile(r"\s+")


class CourseCategory(str, enum.Enum):
    programming = "Programming"
    database = "Database"
    networking = "Networking"
    ux_ui = "UX/UI"
    other = "Other"

    @classmethod
    def values(cls) -> list[str]:
        return [category.value for category in cls]


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def sanitize_text(text: Any) -> str:
    """Strip angle brackets, collapse whitespace runs and trim.

    Applying it twice gives the same result as applying it once.
    """
    if text is None:
        return ""
    text = _ANGLE_BRACKETS.sub("", str(text))
    return _WHITESPACE_RUN.sub(" ", text).strip()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a number from user input, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _as_flag(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def canonical_price(value: Any) -> Decimal:
    number = _to_decimal(value)
    if number is None:
        raise ValueError(f"not a price: {value!r}")
    return number.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def canonical_duration(value: Any) -> int:
    number = _to_decimal(value)
    if number is None or number != number.to_integral_value():
        raise ValueError(f"not a whole number of hours: {value!r}")
    return int(number)


@dataclass
class CourseEntity:
    """A course as received from a client, before and after validation.

    Field values are kept exactly as given until ``sanitize`` puts them in
    canonical form, so ``validate`` can report malformed input instead of
    failing on it.
    """

    name: Any = ""
    description: Any = ""
    price: Any = 0
    duration_hours: Any = 0
    category: Any = ""
    active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "CourseEntity":
        """Build an entity from any mapping, defaulting missing fields."""
        data = data or {}

        def pick(key: str, default: Any) -> Any:
            value = data.get(key)
            return default if value is None else value

        return cls(
            id=data.get("id"),
            name=pick("name", ""),
            description=pick("description", ""),
            price=pick("price", 0),
            duration_hours=pick("duration_hours", 0),
            category=pick("category", ""),
            active=_as_flag(data.get("active"), default=True),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    @classmethod
    def from_record(cls, record: Any) -> "CourseEntity":
        """Rebuild an entity from a stored row."""
        fields = (
            "id", "name", "description", "price", "duration_hours",
            "category", "active", "created_at", "updated_at",
        )
        return cls.from_mapping({key: getattr(record, key, None) for key in fields})

    def validate(self) -> list[FieldError]:
        """Return every rule violation, in field order. Empty means valid."""
        checks = (
            self._check_name,
            self._check_price,
            self._check_duration,
            self._check_category,
        )
        errors = []
        for check in checks:
            error = check()
            if error is not None:
                errors.append(error)
        return errors

    def _check_name(self) -> Optional[FieldError]:
        if not isinstance(self.name, str) or _is_blank(self.name):
            return FieldError("name", "Name is required")
        # Length is measured on the stored form so the bounds hold after sanitizing.
        length = len(sanitize_text(self.name))
        if length < NAME_MIN_LENGTH:
            return FieldError("name", f"Name must be at least {NAME_MIN_LENGTH} characters")
        if length > NAME_MAX_LENGTH:
            return FieldError("name", f"Name must be at most {NAME_MAX_LENGTH} characters")
        return None

    def _check_price(self) -> Optional[FieldError]:
        if _is_blank(self.price):
            return FieldError("price", "Price is required")
        number = _to_decimal(self.price)
        if number is None:
            return FieldError("price", "Price must be a valid number")
        if number < 0:
            return FieldError("price", "Price must be greater than or equal to 0")
        if number > MAX_PRICE:
            return FieldError("price", f"Price must be at most {MAX_PRICE}")
        return None

    def _check_duration(self) -> Optional[FieldError]:
        if _is_blank(self.duration_hours):
            return FieldError("duration_hours", "Duration is required")
        number = _to_decimal(self.duration_hours)
        if number is None:
            return FieldError("duration_hours", "Duration must be a whole number of hours")
        # bounds first: converting a huge exponent to int is slow
        if number < 1:
            return FieldError("duration_hours", "Duration must be at least 1 hour")
        if number > MAX_DURATION_HOURS:
            return FieldError("duration_hours", f"Duration must be at most {MAX_DURATION_HOURS} hours")
        if number != number.to_integral_value():
            return FieldError("duration_hours", "Duration must be a whole number of hours")
        return None

    def _check_category(self) -> Optional[FieldError]:
        if not isinstance(self.category, str) or _is_blank(self.category):
            return FieldError("category", "Category is required")
        if self.category not in CourseCategory.values():
            allowed = ", ".join(CourseCategory.values())
            return FieldError("category", f"Category must be one of: {allowed}")
        return None

    def sanitize(self) -> "CourseEntity":
        """Return a copy with clean text and canonical numbers.

        Only valid entities can be sanitized; call ``validate`` first.
        """
        return replace(
            self,
            name=sanitize_text(self.name),
            description=sanitize_text(self.description),
            price=canonical_price(self.price),
            duration_hours=canonical_duration(self.duration_hours),
            category=CourseCategory(self.category).value,
        )

    def serialize(self) -> dict[str, Any]:
        """Plain field mapping in the shape the courses table stores."""
        category = self.category
        if isinstance(category, CourseCategory):
            category = category.value
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or None,
            "price": float(canonical_price(self.price)),
            "duration_hours": canonical_duration(self.duration_hours),
            "category": category,
            "active": 1 if self.active else 0,
        }
