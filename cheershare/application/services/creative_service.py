import io
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from PIL import Image

from ..ports.creative_repo import CreativeRepository, CreativeDto
from ..ports.storage_repo import StorageRepository
from ...exceptions import StorageError, ValidationError
from ...utils import utc_today

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")


def is_image(data: bytes) -> bool:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
        return True
    except (OSError, SyntaxError, ValueError):
        return False


@dataclass
class CreativeService:
    repo: CreativeRepository
    storage: StorageRepository
    max_file_size: int = 10 * 1024 * 1024
    allowed_extensions: Sequence[str] = field(default=DEFAULT_IMAGE_EXTENSIONS)
    today: Callable[[], date] = utc_today

    def upload(self, user_id: int, scheduled_at: Optional[str], filename: Optional[str], data: Optional[bytes]) -> CreativeDto:
        if not scheduled_at:
            raise ValidationError("scheduled_at is required")
        try:
            scheduled_date = datetime.strptime(scheduled_at, "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError("invalid date format for scheduled_at")
        if scheduled_date < self.today():
            raise ValidationError("cannot set scheduled_at before today")

        if not filename or data is None:
            raise ValidationError("file is required")
        ext = os.path.splitext(filename)[1].lower()
        if ext not in self.allowed_extensions:
            raise ValidationError("invalid file type: only images are allowed")
        if len(data) > self.max_file_size:
            raise ValidationError("file exceeds the maximum upload size")
        if not is_image(data):
            raise ValidationError("invalid file type: only images are allowed")

        try:
            path = self.storage.save_bytes("", f"{uuid.uuid4()}{ext}", data)
        except OSError as e:
            raise StorageError("failed to save creative") from e

        creative = self.repo.create(user_id, path, scheduled_date)
        logger.info(f"Saved creative {creative.id} for user {user_id}, scheduled {scheduled_date.isoformat()}")
        return creative

    def scheduled(self) -> Dict[str, List[CreativeDto]]:
        today = self.today()
        tomorrow = today + timedelta(days=1)
        grouped: Dict[str, List[CreativeDto]] = {"today": [], "tomorrow": []}
        for creative in self.repo.list_scheduled_on([today, tomorrow]):
            if creative.scheduled_at == today:
                grouped["today"].append(creative)
            elif creative.scheduled_at == tomorrow:
                grouped["tomorrow"].append(creative)
        return grouped
