import logging
from fastapi import APIRouter, Depends

from ..application.services.auth_service import AuthService
from ..deps import get_auth_service
from ..schemas import ErrorResponse, SignupRequest, SignupResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["Authentication"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def signup(payload: SignupRequest, auth_service: AuthService = Depends(get_auth_service)):
    """
    Signup and login in one endpoint.

    Without ``otp`` a code is generated, stored for five minutes and sent by
    SMS in the background. With ``otp`` the code is checked, the user is
    created on first login and a bearer token is returned.
    """
    if not payload.otp:
        auth_service.send_signup_otp(payload.phone_number, payload.name)
        return SignupResponse(success=True, message="OTP sent successfully")

    user, token = auth_service.verify_otp_and_issue(payload.phone_number, payload.otp)
    return SignupResponse(
        success=True,
        message="User registered successfully",
        data=UserResponse.model_validate(user),
        token=token,
    )
