from typing import Tuple

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.models.auth import Auth
from app.schemas.user_schemas import ForgotPassword, SignIn, SignUp, UpdatePassword, VerifyOtp
from app.services import auth_service
from app.utils.token import (
    TokenType,
    auth_with_token,
    decode_access_token,
    get_auth_for_token,
    get_current_auth,
    oauth2_scheme,
)

router = APIRouter()


def otp_context(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session)
) -> Tuple[Auth, str]:
    """The account behind a VERIFY or RESET token, and which of the two it is."""
    auth = get_auth_for_token(token, session, TokenType.VERIFY, TokenType.RESET)
    return auth, decode_access_token(token)["type"]


# -------- AUTH ROUTES --------

@router.post("/sign-up")
def sign_up(payload: SignUp, session: Session = Depends(get_session)):
    data = auth_service.sign_up(session, payload.email, payload.password)
    return {"message": "Signed up successfully, check your email for the code", "data": data}


@router.post("/sign-in")
def sign_in(payload: SignIn, session: Session = Depends(get_session)):
    data = auth_service.sign_in(session, payload.email, payload.password)
    message = "Signed in successfully" if data["user"] else "Account not verified, check your email for the code"
    return {"message": message, "data": data}


@router.post("/forgot-password")
def forgot_password(payload: ForgotPassword, session: Session = Depends(get_session)):
    data = auth_service.forgot_password(session, payload.email)
    return {"message": "Reset code sent", "data": data}


# -------- OTP ROUTES --------

@router.post("/verify-otp")
def verify_otp(
    payload: VerifyOtp,
    context: Tuple[Auth, str] = Depends(otp_context),
    session: Session = Depends(get_session)
):
    auth, otp_type = context
    data = auth_service.verify_otp(session, auth, payload.code, otp_type)
    return {"message": "OTP verified successfully", "data": data}


@router.post("/resend-otp")
def resend_otp(
    context: Tuple[Auth, str] = Depends(otp_context),
    session: Session = Depends(get_session)
):
    auth, otp_type = context
    auth_service.resend_otp(session, auth, otp_type)
    return {"message": "OTP sent", "data": {}}


@router.post("/update-password")
def update_password(
    payload: UpdatePassword,
    auth: Auth = Depends(auth_with_token(TokenType.RESET)),
    session: Session = Depends(get_session)
):
    auth_service.update_password(session, auth, payload.password)
    return {"message": "Password updated successfully", "data": {}}


@router.post("/refresh-token")
def refresh_token(auth: Auth = Depends(get_current_auth)):
    return {"message": "Token refreshed", "data": auth_service.refresh_token(auth)}
