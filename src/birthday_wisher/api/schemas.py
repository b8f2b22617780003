"""Pydantic models for form input and helpers for JSON output."""

import base64
import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from birthday_wisher.models import Employee, Template


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class EmployeeForm(BaseModel):
    name: str = Field(min_length=1)
    designation: str = Field(min_length=1)
    team: str = Field(min_length=1)
    email: EmailStr
    dob: datetime.date
    message: Optional[str] = None
    template_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("name", "designation", "team", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("message", "template_id", mode="before")
    @classmethod
    def _optional(cls, value):
        return _blank_to_none(value)


class TemplateForm(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    message: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("description", "message", mode="before")
    @classmethod
    def _optional(cls, value):
        return _blank_to_none(value)


def flatten_errors(exc) -> dict:
    """Group the messages of a pydantic or FastAPI validation error by field."""
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        field_errors.setdefault(field, []).append(error["msg"])
    return {"field_errors": field_errors}


def _b64(data: Optional[bytes]) -> Optional[str]:
    if data is None:
        return None
    return base64.b64encode(data).decode("ascii")


def employee_to_dict(employee: Employee) -> dict:
    return {
        "id": employee.id,
        "name": employee.name,
        "designation": employee.designation,
        "team": employee.team,
        "email": employee.email,
        "dob": employee.dob.isoformat(),
        "message": employee.message,
        "template_id": employee.template_id,
        "photo_base64": _b64(employee.photo),
        "photo_content_type": employee.photo_content_type,
    }


def template_to_dict(template: Template) -> dict:
    return {
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "message": template.message,
        "file_base64": _b64(template.file),
        "content_type": template.content_type,
        "filename": template.filename,
    }
