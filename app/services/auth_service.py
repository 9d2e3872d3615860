import logging
import secrets
import string
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.config import settings
from app.constants.order_status import ADMIN_ROLES, Role
from app.errors import BadRequestError, NotFoundError
from app.models.auth import Auth, Otp, OtpType
from app.models.user import Admin, User
from app.models.vendor import Vendor
from app.schemas.user_schemas import ProfileCreate
from app.services.email_service import send_otp_email
from app.utils.hash import hash_password, verify_password
from app.utils.token import TokenType, create_access_token

logger = logging.getLogger(__name__)

OTP_ALPHABET = string.digits + string.ascii_uppercase
OTP_LENGTH = 6


def generate_otp() -> str:
    return "".join(secrets.choice(OTP_ALPHABET) for _ in range(OTP_LENGTH))


def issue_otp(session: Session, auth: Auth, otp_type: str) -> Otp:
    """Replace whatever OTP the account had with a fresh one and mail it."""
    otp = session.exec(select(Otp).where(Otp.auth_id == auth.id)).first()
    if otp is None:
        otp = Otp(auth_id=auth.id)

    otp.code = generate_otp()
    otp.type = otp_type
    otp.created_at = datetime.utcnow()
    session.add(otp)
    session.commit()
    session.refresh(otp)

    # delivery failures are logged by the mailer, never raised
    send_otp_email(auth.email, otp.code, otp_type)
    return otp


def find_auth_by_email(session: Session, email: str):
    return session.exec(
        select(Auth)
        .where(Auth.email == email.lower())
        .where(Auth.is_deleted == False)  # noqa: E712
    ).first()


def sign_up(session: Session, email: str, password: str) -> dict:
    email = email.lower()

    if find_auth_by_email(session, email):
        raise BadRequestError("User already exists")

    auth = Auth(email=email, password=hash_password(password))
    session.add(auth)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BadRequestError("User already exists")
    session.refresh(auth)

    issue_otp(session, auth, OtpType.VERIFY)
    logger.info(f"Account {auth.id} signed up")

    return {"token": create_access_token(auth.email, TokenType.VERIFY)}


def sign_in(session: Session, email: str, password: str) -> dict:
    auth = find_auth_by_email(session, email)
    if not auth:
        raise NotFoundError("User not found")

    if not verify_password(password, auth.password):
        raise BadRequestError("Invalid password")

    if not auth.is_verified:
        issue_otp(session, auth, OtpType.VERIFY)
        return {"token": create_access_token(auth.email, TokenType.VERIFY), "user": None}

    return {"token": create_access_token(auth.email, TokenType.ACCESS), "user": auth_to_dict(auth)}


def forgot_password(session: Session, email: str) -> dict:
    auth = find_auth_by_email(session, email)
    if not auth:
        raise NotFoundError("User not found")

    issue_otp(session, auth, OtpType.RESET)
    return {"token": create_access_token(auth.email, TokenType.RESET)}


def resend_otp(session: Session, auth: Auth, otp_type: str):
    issue_otp(session, auth, otp_type)


def verify_otp(session: Session, auth: Auth, code: str, otp_type: str) -> dict:
    otp = session.exec(
        select(Otp).where(Otp.auth_id == auth.id).where(Otp.type == otp_type)
    ).first()

    if not otp or not secrets.compare_digest(otp.code, code.upper()):
        raise BadRequestError("Invalid OTP")

    if otp.created_at + timedelta(minutes=settings.otp_token_expire_minutes) < datetime.utcnow():
        raise BadRequestError("OTP expired")

    if otp_type == OtpType.VERIFY:
        auth.is_verified = True
        auth.updated_at = datetime.utcnow()
        session.add(auth)

    session.delete(otp)
    session.commit()
    session.refresh(auth)

    if otp_type == OtpType.VERIFY:
        logger.info(f"Account {auth.id} verified")
        return {
            "token": create_access_token(auth.email, TokenType.ACCESS),
            "user": auth_to_dict(auth),
        }

    return {"token": create_access_token(auth.email, TokenType.RESET)}


def update_password(session: Session, auth: Auth, password: str):
    auth.password = hash_password(password)
    auth.updated_at = datetime.utcnow()
    session.add(auth)
    session.commit()
    logger.info(f"Password updated for account {auth.id}")


def refresh_token(auth: Auth) -> dict:
    return {"token": create_access_token(auth.email, TokenType.ACCESS), "user": auth_to_dict(auth)}


def has_profile(auth: Auth) -> bool:
    return any((auth.user, auth.vendor, auth.admin))


def create_profile(session: Session, auth: Auth, data: ProfileCreate):
    """
    Provision the one profile row an account gets and set its role to match.

    Anyone can become a USER or a VENDOR. An ADMIN profile needs an account
    an operator already promoted to an admin role.
    """
    if has_profile(auth):
        raise BadRequestError("Profile already exists")

    if data.role == Role.SUPER_ADMIN:
        raise BadRequestError("Invalid role")

    if data.role == Role.ADMIN:
        if auth.role not in ADMIN_ROLES:
            raise BadRequestError("Invalid role")
        profile = Admin(auth_id=auth.id, name=data.name, phone=data.phone)
    elif data.role == Role.VENDOR:
        profile = Vendor(
            auth_id=auth.id,
            name=data.name,
            description=data.description,
            phone=data.phone,
            postal_code=data.postal_code,
            city=data.city,
            pickup_address=data.pickup_address,
        )
    else:
        profile = User(
            auth_id=auth.id,
            name=data.name,
            phone=data.phone,
            postal_code=data.postal_code,
            city=data.city,
            delivery_address=data.delivery_address,
        )

    try:
        session.add(profile)
        if auth.role not in ADMIN_ROLES:
            auth.role = data.role
        auth.updated_at = datetime.utcnow()
        session.add(auth)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BadRequestError("Profile already exists")

    session.refresh(profile)
    logger.info(f"{data.role.value} profile {profile.id} created for account {auth.id}")
    return profile


def auth_to_dict(auth: Auth) -> dict:
    return {
        "id": auth.id,
        "email": auth.email,
        "role": auth.role,
        "status": auth.status,
        "is_verified": auth.is_verified,
        "created_at": auth.created_at,
    }
