import hashlib
import secrets
from datetime import date, datetime, timezone


# =========================
# Time
# =========================
def utcnow() -> datetime:
    """Timezone-aware UTC timestamp, the form every table column stores."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utcnow().date()


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =========================
# OTP Generation
# =========================
def generate_otp() -> str:
    """Generate a 4-digit OTP ("0000"-"9999") from the OS CSPRNG."""
    return f"{secrets.randbelow(10000):04d}"


def hash_phone_number(phone: str) -> str:
    """Hash phone number for logs (one-way hash)"""
    return hashlib.sha256(phone.encode()).hexdigest()
