from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select
from app.config import settings
from app.database import get_session
from app.models.auth import Auth


class TokenType:
    VERIFY = "VERIFY"
    RESET = "RESET"
    ACCESS = "ACCESS"


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/sign-in")


def create_access_token(email: str, token_type: str = TokenType.ACCESS, expires_delta: Optional[timedelta] = None):
    if expires_delta is None:
        minutes = (
            settings.access_token_expire_minutes
            if token_type == TokenType.ACCESS
            else settings.otp_token_expire_minutes
        )
        expires_delta = timedelta(minutes=minutes)

    to_encode = {
        "sub": email,
        "type": token_type,
        "exp": datetime.utcnow() + expires_delta,
    }

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm
    )


def decode_access_token(token: str):
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError:
        return None


def get_auth_for_token(token: str, session: Session, *token_types: str) -> Auth:
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") not in token_types:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    email = payload.get("sub")
    auth = session.exec(
        select(Auth).where(Auth.email == email).where(Auth.is_deleted == False)  # noqa: E712
    ).first()

    if auth is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found"
        )

    return auth


def auth_with_token(*token_types: str):
    """Dependency resolving the Auth row for a bearer token of one of ``token_types``."""

    def dependency(
        token: str = Depends(oauth2_scheme),
        session: Session = Depends(get_session)
    ) -> Auth:
        return get_auth_for_token(token, session, *token_types)

    return dependency


get_current_auth = auth_with_token(TokenType.ACCESS)
