from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from app.api.deps import get_login_service
from app.schemas.auth import LoginRequest, OtpVerifyRequest
from app.services.login_service import LoginService
from app.services.otp_service import OtpStatus

router = APIRouter()

# status code and message for every failed verification outcome
VERIFY_FAILURES = {
    OtpStatus.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "OTP not found or already used."),
    OtpStatus.EXPIRED: (status.HTTP_410_GONE, "OTP has expired."),
    OtpStatus.INVALID: (status.HTTP_401_UNAUTHORIZED, "Invalid OTP."),
}


@router.post("/login/request")
async def request_login(request: LoginRequest, service: LoginService = Depends(get_login_service)):
    """Send a login OTP to a member's email"""
    result = await service.request_login(request.email)
    data = {
        "emailExists": result.email_exists,
        "isPrivileged": result.is_privileged,
        "otpSent": result.otp_sent
    }
    if not result.email_exists:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"status": "fail", "message": "Email does not exist.", "data": data}
        )
    return {"status": "success", "message": "OTP sent to email.", "data": data}


@router.post("/login/verify")
async def verify_login(request: OtpVerifyRequest, service: LoginService = Depends(get_login_service)):
    """Check a login OTP; it can be used once"""
    outcome = service.verify_otp(request.email, request.otp)
    if outcome is not OtpStatus.VERIFIED:
        status_code, message = VERIFY_FAILURES[outcome]
        return JSONResponse(
            status_code=status_code,
            content={"status": "fail", "message": message, "data": {"result": outcome.value}}
        )
    return {"status": "success", "message": "OTP verified.", "data": {"result": outcome.value}}
