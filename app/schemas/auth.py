from pydantic import BaseModel, field_validator
from typing import Any, Optional


class LoginRequest(BaseModel):
    """Schema for requesting a login OTP"""
    email: Optional[str] = None


class OtpVerifyRequest(BaseModel):
    """Schema for verifying a login OTP"""
    email: Optional[str] = None
    otp: Optional[str] = None

    @field_validator("otp", mode="before")
    @classmethod
    def _otp_as_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value).strip()


class LoginRequestResult(BaseModel):
    """Outcome of a login request"""
    email_exists: bool
    is_privileged: bool = False
    otp_sent: bool = False
