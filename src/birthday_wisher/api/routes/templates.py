"""Template upload and removal endpoints."""

import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from birthday_wisher.api.deps import get_db
from birthday_wisher.api.routes.employees import read_upload
from birthday_wisher.api.schemas import TemplateForm, flatten_errors, template_to_dict
from birthday_wisher.db import manager

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("")
def list_templates(conn: sqlite3.Connection = Depends(get_db)):
    templates = manager.get_templates(conn)
    return {"data": [template_to_dict(t) for t in templates]}


@router.post("", status_code=201)
def create_template(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    conn: sqlite3.Connection = Depends(get_db),
):
    try:
        form = TemplateForm(name=name, description=description, message=message)
    except ValidationError as exc:
        return JSONResponse(
            status_code=400, content={"error": flatten_errors(exc)}
        )

    upload = read_upload(file)
    if upload is None:
        return JSONResponse(
            status_code=400, content={"error": "Missing file upload"}
        )

    content, content_type = upload
    template = manager.create_template(
        conn,
        name=form.name,
        description=form.description,
        message=form.message,
        file=content,
        content_type=content_type,
        filename=file.filename,
    )
    return {"data": template_to_dict(template)}


@router.delete("/{template_id}")
def delete_template(
    template_id: int = Path(gt=0),
    conn: sqlite3.Connection = Depends(get_db),
):
    """Delete a template; employees that used it fall back to no template."""
    if not manager.delete_template(conn, template_id):
        return JSONResponse(status_code=404, content={"error": "Not found"})
    return {"success": True}
