"""Employee CRUD endpoints."""

import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from birthday_wisher.api.deps import get_db
from birthday_wisher.api.schemas import EmployeeForm, employee_to_dict, flatten_errors
from birthday_wisher.db import manager

router = APIRouter(prefix="/employees", tags=["employees"])


def read_upload(upload: Optional[UploadFile]) -> Optional[tuple[bytes, str]]:
    """Return ``(content, content_type)`` for a non-empty upload."""
    if upload is None or not upload.filename:
        return None
    content = upload.file.read()
    if not content:
        return None
    return content, upload.content_type or "application/octet-stream"


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Not found"})


def _validate(conn: sqlite3.Connection, raw: dict):
    """Return ``(form, None)`` or ``(None, error_response)``."""
    try:
        form = EmployeeForm(**raw)
    except ValidationError as exc:
        return None, JSONResponse(
            status_code=400, content={"error": flatten_errors(exc)}
        )

    if form.template_id is not None and (
        manager.get_template_by_id(conn, form.template_id) is None
    ):
        return None, JSONResponse(
            status_code=400,
            content={"error": {"field_errors": {
                "template_id": ["Template not found"],
            }}},
        )
    return form, None


@router.get("")
def list_employees(conn: sqlite3.Connection = Depends(get_db)):
    employees = manager.get_employees(conn)
    return {"data": [employee_to_dict(e) for e in employees]}


@router.post("", status_code=201)
def create_employee(
    name: Optional[str] = Form(None),
    designation: Optional[str] = Form(None),
    team: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    dob: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    template_id: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    conn: sqlite3.Connection = Depends(get_db),
):
    form, error = _validate(conn, {
        "name": name,
        "designation": designation,
        "team": team,
        "email": email,
        "dob": dob,
        "message": message,
        "template_id": template_id,
    })
    if error is not None:
        return error

    upload = read_upload(photo)
    employee = manager.create_employee(
        conn,
        **form.model_dump(),
        photo=upload[0] if upload else None,
        photo_content_type=upload[1] if upload else None,
    )
    return {"data": employee_to_dict(employee)}


@router.get("/{employee_id}")
def get_employee(
    employee_id: int = Path(gt=0),
    conn: sqlite3.Connection = Depends(get_db),
):
    employee = manager.get_employee_by_id(conn, employee_id)
    if employee is None:
        return _not_found()
    return {"data": employee_to_dict(employee)}


@router.put("/{employee_id}")
def update_employee(
    employee_id: int = Path(gt=0),
    name: Optional[str] = Form(None),
    designation: Optional[str] = Form(None),
    team: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    dob: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    template_id: Optional[str] = Form(None),
    remove_photo: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    conn: sqlite3.Connection = Depends(get_db),
):
    """Replace an employee.

    The stored photo is replaced by a new upload, cleared when
    ``remove_photo=true``, and kept otherwise.
    """
    form, error = _validate(conn, {
        "name": name,
        "designation": designation,
        "team": team,
        "email": email,
        "dob": dob,
        "message": message,
        "template_id": template_id,
    })
    if error is not None:
        return error

    existing = manager.get_employee_by_id(conn, employee_id)
    if existing is None:
        return _not_found()

    upload = read_upload(photo)
    if upload is not None:
        photo_content, photo_type = upload
    elif remove_photo == "true":
        photo_content, photo_type = None, None
    else:
        photo_content = existing.photo
        photo_type = existing.photo_content_type

    updated = manager.update_employee(
        conn,
        employee_id,
        **form.model_dump(),
        photo=photo_content,
        photo_content_type=photo_type,
    )
    if updated is None:
        return _not_found()
    return {"data": employee_to_dict(updated)}


@router.delete("/{employee_id}")
def delete_employee(
    employee_id: int = Path(gt=0),
    conn: sqlite3.Connection = Depends(get_db),
):
    manager.delete_employee(conn, employee_id)
    return {"success": True}
