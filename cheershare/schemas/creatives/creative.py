# cheershare/schemas/creatives/creative.py
from pydantic import BaseModel, ConfigDict
from typing import Dict, List
from datetime import date, datetime

class CreativeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    creative_url: str
    scheduled_at: date
    created_at: datetime

class UploadCreativeResponse(BaseModel):
    creative: CreativeResponse

class ScheduledCreativesResponse(BaseModel):
    scheduled_creatives: Dict[str, List[CreativeResponse]]
