import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..application.services.creative_service import CreativeService
from ..deps import CurrentUser, get_creative_service
from ..schemas import CreativeResponse, ScheduledCreativesResponse, UploadCreativeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["Creatives"])


@router.post("/upload-creative", response_model=UploadCreativeResponse)
def upload_creative(
    current_user: CurrentUser,
    scheduled_at: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    creative_service: CreativeService = Depends(get_creative_service),
):
    filename = None
    data = None
    if file is not None:
        filename = file.filename
        # One byte past the limit is enough to reject oversized uploads.
        data = file.file.read(creative_service.max_file_size + 1)

    creative = creative_service.upload(current_user.id, scheduled_at, filename, data)
    return UploadCreativeResponse(creative=CreativeResponse.model_validate(creative))


@router.get("/creatives/scheduled", response_model=ScheduledCreativesResponse)
def get_scheduled_creatives(
    current_user: CurrentUser,
    creative_service: CreativeService = Depends(get_creative_service),
):
    grouped = creative_service.scheduled()
    return ScheduledCreativesResponse(
        scheduled_creatives={
            day: [CreativeResponse.model_validate(c) for c in creatives]
            for day, creatives in grouped.items()
        }
    )
