"""Crop attachment upload, download and delete."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from farmdesk.application.services import AttachmentService
from farmdesk.domain.exceptions import NotFoundError, ValidationError
from farmdesk.infrastructure.auth import get_current_user_id
from farmdesk.infrastructure.dependencies import get_attachment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attachments", tags=["Attachments"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_attachment(
    file: UploadFile = File(...),
    crop_id: str | None = Form(None),
    description: str | None = Form(None),
    user_id: str = Depends(get_current_user_id),
    service: AttachmentService = Depends(get_attachment_service),
) -> dict[str, Any]:
    """Store the file and return its ``crop_attachments`` metadata row."""
    content = await file.read()
    try:
        record = await service.upload(
            user_id,
            content,
            file.filename or "upload",
            content_type=file.content_type,
            crop_id=crop_id,
            description=description,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)
    return record.to_dict()


@router.get("/{attachment_id}/content")
async def download_attachment(
    attachment_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AttachmentService = Depends(get_attachment_service),
) -> Response:
    try:
        record, content = await service.download(user_id, attachment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    filename = str(record.data.get("file_name") or "attachment").replace('"', "")
    return Response(
        content=content,
        media_type=str(record.data.get("file_type") or "application/octet-stream"),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attachment(
    attachment_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AttachmentService = Depends(get_attachment_service),
) -> Response:
    """Remove metadata and stored content. Missing attachments also answer 204."""
    await service.delete(user_id, attachment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
