import os
from datetime import date, timedelta

import pytest

from cheershare.application.services.creative_service import CreativeService, is_image
from cheershare.exceptions import ValidationError
from cheershare.infrastructure.persistence.sqlalchemy.repositories.creative_repository_sql import SqlCreativeRepository
from cheershare.infrastructure.storage.local_storage import LocalStorageRepository
from cheershare.utils import utc_today
from conftest import png_bytes

TODAY = date(2024, 6, 1)


@pytest.fixture
def creative_service(engine, tmp_path):
    return CreativeService(
        SqlCreativeRepository(engine),
        LocalStorageRepository(str(tmp_path)),
        max_file_size=1024,
        today=lambda: TODAY,
    )


def test_default_today_is_utc(engine, tmp_path):
    service = CreativeService(SqlCreativeRepository(engine), LocalStorageRepository(str(tmp_path)))
    assert service.today is utc_today


def test_is_image():
    assert is_image(png_bytes())
    assert not is_image(b"definitely not a picture")


def test_upload_saves_file_and_row(creative_service):
    creative = creative_service.upload(1, "2024-06-02", "banner.PNG", png_bytes())
    assert creative.id > 0
    assert creative.user_id == 1
    assert creative.scheduled_at == date(2024, 6, 2)
    assert creative.creative_url.endswith(".png")
    assert os.path.exists(creative.creative_url)


def test_upload_today_is_allowed(creative_service):
    assert creative_service.upload(1, "2024-06-01", "a.png", png_bytes()).scheduled_at == TODAY


@pytest.mark.parametrize(
    "scheduled_at,filename,data,message",
    [
        (None, "a.png", b"x", "scheduled_at is required"),
        ("06/02/2024", "a.png", b"x", "invalid date format for scheduled_at"),
        ("2024-05-31", "a.png", b"x", "cannot set scheduled_at before today"),
        ("2024-06-02", None, None, "file is required"),
        ("2024-06-02", "a.pdf", b"x", "invalid file type: only images are allowed"),
        ("2024-06-02", "a.png", b"x" * 2048, "file exceeds the maximum upload size"),
        ("2024-06-02", "a.png", b"not an image", "invalid file type: only images are allowed"),
    ],
)
def test_upload_validation(creative_service, scheduled_at, filename, data, message):
    with pytest.raises(ValidationError) as exc:
        creative_service.upload(1, scheduled_at, filename, data)
    assert exc.value.message == message


def test_scheduled_groups_today_and_tomorrow(creative_service):
    creative_service.upload(1, "2024-06-01", "a.png", png_bytes())
    creative_service.upload(2, "2024-06-02", "b.png", png_bytes())
    creative_service.upload(1, "2024-06-10", "c.png", png_bytes())
    grouped = creative_service.scheduled()
    assert [c.user_id for c in grouped["today"]] == [1]
    assert [c.user_id for c in grouped["tomorrow"]] == [2]


def test_upload_requires_auth(client):
    res = client.post(
        "/upload-creative",
        data={"scheduled_at": utc_today().isoformat()},
        files={"file": ("a.png", png_bytes(), "image/png")},
    )
    assert res.status_code == 401


def test_upload_and_list_via_api(client, signed_up):
    _, token = signed_up
    auth = {"Authorization": f"Bearer {token}"}
    tomorrow = (utc_today() + timedelta(days=1)).isoformat()

    res = client.post(
        "/upload-creative",
        headers=auth,
        data={"scheduled_at": tomorrow},
        files={"file": ("banner.png", png_bytes(), "image/png")},
    )
    assert res.status_code == 200
    creative = res.json()["creative"]
    assert creative["scheduled_at"] == tomorrow

    res = client.get("/creatives/scheduled", headers=auth)
    assert res.status_code == 200
    scheduled = res.json()["scheduled_creatives"]
    assert scheduled["today"] == []
    assert [c["id"] for c in scheduled["tomorrow"]] == [creative["id"]]


def test_upload_rejects_non_image_via_api(client, signed_up):
    _, token = signed_up
    res = client.post(
        "/upload-creative",
        headers={"Authorization": f"Bearer {token}"},
        data={"scheduled_at": utc_today().isoformat()},
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert res.status_code == 400
    assert res.json()["error"] == "invalid file type: only images are allowed"
