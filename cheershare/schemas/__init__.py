# Schemas package (re-export feature modules for stable imports)
from .auth.auth import SignupRequest, SignupResponse
from .users.user import UserResponse
from .creatives.creative import CreativeResponse, UploadCreativeResponse, ScheduledCreativesResponse
from .common.common import ErrorResponse, HealthResponse

__all__ = [
    "SignupRequest",
    "SignupResponse",
    "UserResponse",
    "CreativeResponse",
    "UploadCreativeResponse",
    "ScheduledCreativesResponse",
    "ErrorResponse",
    "HealthResponse",
]
