import pytest

from cheershare.exceptions import OTPExpiredOrMissingError, OTPMismatchError, StorageError
from cheershare.infrastructure.otp.redis_otp_store import RedisOTPStore
from conftest import FakeRedis


def test_put_stores_name_and_code_with_ttl():
    r = FakeRedis()
    store = RedisOTPStore(r, ttl_seconds=300)
    store.put("9998887777", "Ann", "0420")
    assert r.hashes["otp:9998887777"] == {"name": "Ann", "otp": "0420"}
    assert r.ttls["otp:9998887777"] == 300
    assert r.calls == ["hset", "expire"]


def test_put_overwrites_pending_code():
    r = FakeRedis()
    store = RedisOTPStore(r)
    store.put("9998887777", "Ann", "1111")
    store.put("9998887777", "Ann B", "2222")
    assert store.verify("9998887777", "2222") == "Ann B"
    with pytest.raises(OTPMismatchError):
        store.verify("9998887777", "1111")


def test_verify_returns_stored_name():
    store = RedisOTPStore(FakeRedis())
    store.put("9998887777", "Ann", "0420")
    assert store.verify("9998887777", "0420") == "Ann"


def test_verify_missing_record():
    store = RedisOTPStore(FakeRedis())
    with pytest.raises(OTPExpiredOrMissingError):
        store.verify("9998887777", "0420")


def test_verify_after_ttl_expired():
    r = FakeRedis()
    store = RedisOTPStore(r)
    store.put("9998887777", "Ann", "0420")
    r.expire_now("otp:9998887777")
    with pytest.raises(OTPExpiredOrMissingError):
        store.verify("9998887777", "0420")


def test_wrong_and_expired_share_message():
    r = FakeRedis()
    store = RedisOTPStore(r)
    store.put("9998887777", "Ann", "0420")
    with pytest.raises(OTPMismatchError) as wrong:
        store.verify("9998887777", "9999")
    with pytest.raises(OTPExpiredOrMissingError) as missing:
        store.verify("1112223333", "0420")
    assert wrong.value.message == missing.value.message
    assert wrong.value.status_code == missing.value.status_code == 401


def test_read_failure_is_reported_as_expired():
    r = FakeRedis()
    r.fail_on.add("hgetall")
    store = RedisOTPStore(r)
    with pytest.raises(OTPExpiredOrMissingError):
        store.verify("9998887777", "0420")


@pytest.mark.parametrize("op", ["hset", "expire"])
def test_write_failure_raises_storage_error(op):
    r = FakeRedis()
    r.fail_on.add(op)
    store = RedisOTPStore(r)
    with pytest.raises(StorageError):
        store.put("9998887777", "Ann", "0420")


def test_claim_returns_name_and_removes_record():
    r = FakeRedis()
    store = RedisOTPStore(r)
    store.put("9998887777", "Ann", "0420")
    assert store.claim("9998887777", "0420") == "Ann"
    assert "otp:9998887777" not in r.hashes
    with pytest.raises(OTPExpiredOrMissingError):
        store.claim("9998887777", "0420")


def test_claim_wrong_code_keeps_record():
    r = FakeRedis()
    store = RedisOTPStore(r)
    store.put("9998887777", "Ann", "0420")
    with pytest.raises(OTPMismatchError):
        store.claim("9998887777", "9999")
    assert store.claim("9998887777", "0420") == "Ann"


def test_claim_loses_race_when_key_already_deleted():
    class RacingRedis(FakeRedis):
        """Another request deletes the key right after our read."""

        def hgetall(self, key):
            record = super().hgetall(key)
            self.hashes.pop(key, None)
            return record

    r = RacingRedis()
    store = RedisOTPStore(r)
    store.put("9998887777", "Ann", "0420")
    with pytest.raises(OTPExpiredOrMissingError):
        store.claim("9998887777", "0420")


def test_claim_delete_failure_is_storage_error():
    r = FakeRedis()
    store = RedisOTPStore(r)
    store.put("9998887777", "Ann", "0420")
    r.fail_on.add("delete")
    with pytest.raises(StorageError):
        store.claim("9998887777", "0420")
