import io
from typing import Dict, List, Optional, Tuple

import pytest
import redis
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from cheershare.application.services.auth_service import AuthService
from cheershare.application.services.creative_service import CreativeService
from cheershare.application.services.notification_service import NotificationService
from cheershare.application.services.token_service import TokenService
from cheershare.application.services.user_service import UserService
from cheershare.background import TaskTracker
from cheershare.database import create_db_and_tables
from cheershare.deps import Services
from cheershare.exceptions import DispatchError
from cheershare.infrastructure.otp.redis_otp_store import RedisOTPStore
from cheershare.infrastructure.persistence.sqlalchemy.repositories.creative_repository_sql import SqlCreativeRepository
from cheershare.infrastructure.persistence.sqlalchemy.repositories.token_repository_sql import SqlTokenRepository
from cheershare.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from cheershare.infrastructure.storage.local_storage import LocalStorageRepository
from cheershare.main import create_app


class FakeRedis:
    """Just enough of redis.Redis (decode_responses=True) for the OTP store."""

    def __init__(self):
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.ttls: Dict[str, int] = {}
        self.fail_on: set = set()
        self.calls: List[str] = []

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if op in self.fail_on:
            raise redis.ConnectionError(f"{op} failed")

    def hset(self, key, mapping=None):
        self._check("hset")
        self.hashes.setdefault(key, {}).update(mapping or {})
        return len(mapping or {})

    def expire(self, key, seconds):
        self._check("expire")
        if key not in self.hashes:
            return False
        self.ttls[key] = seconds
        return True

    def hgetall(self, key):
        self._check("hgetall")
        return dict(self.hashes.get(key, {}))

    def delete(self, *keys):
        self._check("delete")
        removed = 0
        for key in keys:
            if self.hashes.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def ping(self):
        self._check("ping")
        return True

    def close(self):
        pass

    def expire_now(self, key):
        """Simulate the TTL running out."""
        self.hashes.pop(key, None)
        self.ttls.pop(key, None)


class FakeSmsSender:
    def __init__(self, failures: int = 0):
        self.failures = failures
        self.sent: List[Tuple[str, str]] = []
        self.attempts = 0

    def send(self, phone_number: str, body: str) -> str:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise DispatchError("Failed to send SMS via Twilio")
        self.sent.append((phone_number, body))
        return f"SM{self.attempts:04d}"


class SpyTokenRepository:
    def __init__(self, inner: SqlTokenRepository):
        self.inner = inner
        self.lookups = 0
        self.error: Optional[Exception] = None

    def insert(self, token):
        return self.inner.insert(token)

    def get_user_for_token(self, token_hash, scope, now):
        self.lookups += 1
        if self.error is not None:
            raise self.error
        return self.inner.get_user_for_token(token_hash, scope, now)

    def delete_all_for_user(self, scope, user_id):
        return self.inner.delete_all_for_user(scope, user_id)


def png_bytes(size: Tuple[int, int] = (4, 4)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def sms_sender():
    return FakeSmsSender()


@pytest.fixture
def tasks():
    tracker = TaskTracker(max_workers=2)
    yield tracker
    tracker.shutdown()


@pytest.fixture
def token_repo(engine):
    return SpyTokenRepository(SqlTokenRepository(engine))


@pytest.fixture
def services(engine, fake_redis, sms_sender, tasks, token_repo, tmp_path):
    users = UserService(SqlUserRepository(engine))
    tokens = TokenService(token_repo)
    notifier = NotificationService(sms_sender, sleep=lambda _: None)
    auth = AuthService(
        otp_store=RedisOTPStore(fake_redis),
        users=users,
        tokens=tokens,
        notifier=notifier,
        tasks=tasks,
    )
    creatives = CreativeService(
        SqlCreativeRepository(engine),
        LocalStorageRepository(str(tmp_path / "uploads")),
    )
    return Services(users=users, tokens=tokens, auth=auth, creatives=creatives, tasks=tasks)


@pytest.fixture
def client(services):
    with TestClient(create_app(services)) as c:
        yield c


@pytest.fixture
def signed_up(client, services, fake_redis):
    """Sign up Ann and return (user_json, token)."""
    res = client.post("/signup", json={"name": "Ann", "phone_number": "9998887777"})
    assert res.status_code == 200
    otp = fake_redis.hgetall("otp:9998887777")["otp"]
    res = client.post("/signup", json={"phone_number": "9998887777", "otp": otp})
    assert res.status_code == 200
    body = res.json()
    return body["data"], body["token"]
