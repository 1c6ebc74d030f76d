from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, TypeVar

from fastapi import HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Query

from jobnest.config import settings
from jobnest.schemas.common import Pagination


ModelT = TypeVar("ModelT", bound=BaseModel)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes


@dataclass
class RequestPayload:
    fields: dict[str, Any] = field(default_factory=dict)
    files: dict[str, IncomingFile] = field(default_factory=dict)


async def read_payload(request: Request) -> RequestPayload:
    """Read a JSON or form body, keeping uploaded files in memory."""
    content_type = request.headers.get("content-type", "").lower()
    payload = RequestPayload()

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, str):
                if value != "":
                    payload.fields[key] = value
                continue
            data = await value.read()
            if data:
                payload.files[key] = IncomingFile(
                    filename=value.filename or key,
                    content_type=value.content_type or "application/octet-stream",
                    data=data,
                )
        return payload

    raw = await request.body()
    if not raw:
        return payload
    try:
        body = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    payload.fields = body
    return payload


def without_blanks(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value != ""}


def parse_model(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())


def apply_partial_update(instance: Any, changes: BaseModel, keep_existing_on_none: bool = False) -> list[str]:
    """Copy only client-supplied fields onto an ORM row.

    With ``keep_existing_on_none`` a supplied ``None`` leaves the column alone,
    matching ``COALESCE(new, old)`` semantics.
    """
    updated: list[str] = []
    for key, value in changes.model_dump(exclude_unset=True).items():
        if not hasattr(instance, key):
            continue
        if value is None and keep_existing_on_none:
            continue
        setattr(instance, key, value)
        updated.append(key)
    return updated


def clamp_page(page: int, limit: int, max_limit: int = 100) -> tuple[int, int]:
    return max(page, 1), min(max(limit, 1), max_limit)


def paginate(query: Query, page: int, limit: int) -> tuple[list, Pagination]:
    page, limit = clamp_page(page, limit)
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, Pagination.build(page, limit, total)


def check_file(incoming: IncomingFile, images_only: bool = False) -> IncomingFile:
    if not incoming.data:
        raise HTTPException(status_code=400, detail="No file uploaded.")
    if len(incoming.data) > settings.max_upload_bytes:
        raise HTTPException(status_code=400, detail=f"File exceeds {settings.max_upload_size_mb}MB")
    if images_only and not incoming.content_type.lower().startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed!")
    return incoming


def read_upload(file: UploadFile | None, images_only: bool = False) -> IncomingFile:
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded.")
    incoming = IncomingFile(
        filename=file.filename or "upload",
        content_type=file.content_type or "application/octet-stream",
        data=file.file.read(),
    )
    return check_file(incoming, images_only=images_only)
