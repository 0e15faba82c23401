# cheershare/schemas/auth/auth.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from ..users.user import UserResponse

class SignupRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=100, description="Display name, required when requesting an OTP")
    phone_number: Optional[str] = Field(None, max_length=20, description="Phone number, always required")
    otp: Optional[str] = Field(None, max_length=10, description="OTP received by SMS; omit to request one")

    @field_validator('name', 'phone_number', 'otp')
    @classmethod
    def strip_whitespace(cls, v):
        if v is None:
            return v
        return v.strip()

class SignupResponse(BaseModel):
    success: bool
    message: str
    data: Optional[UserResponse] = None
    token: Optional[str] = None
