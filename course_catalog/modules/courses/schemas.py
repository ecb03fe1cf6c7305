from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class CoursePayload(BaseModel):
    """Fields read from a create/update request body.

    Values stay loosely typed so malformed input reaches the course rules
    and comes back as field errors rather than a parsing failure.
    """
    name: Any = None
    description: Any = None
    price: Any = None
    duration_hours: Any = None
    category: Any = None
    active: Any = None

    model_config = ConfigDict(extra="ignore")


class CourseRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    duration_hours: int
    category: str
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FieldErrorRead(BaseModel):
    field: str
    message: str


class CatalogResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    errors: Optional[List[FieldErrorRead]] = None
    course: Optional[CourseRead] = None
    courses: Optional[List[CourseRead]] = None
    categories: Optional[List[str]] = None
