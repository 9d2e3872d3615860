from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlmodel import select

from app.constants.order_status import Role
from app.errors import BadRequestError, NotFoundError
from app.models.auth import Auth, Otp, OtpType
from app.schemas.user_schemas import ProfileCreate
from app.services import auth_service
from app.services.auth_service import OTP_ALPHABET
from app.utils.token import TokenType, decode_access_token


@pytest.fixture(autouse=True)
def mailer():
    with patch("app.services.auth_service.send_otp_email", return_value=True) as send:
        yield send


def otp_for(session, auth):
    return session.exec(select(Otp).where(Otp.auth_id == auth.id)).first()


def auth_for(session, email):
    return session.exec(select(Auth).where(Auth.email == email)).one()


@pytest.fixture
def signed_up(session):
    auth_service.sign_up(session, "New@Example.com", "s3cret-pass")
    return auth_for(session, "new@example.com")


def test_sign_up_creates_unverified_account(session, mailer):
    result = auth_service.sign_up(session, "New@Example.com", "s3cret-pass")

    auth = auth_for(session, "new@example.com")
    assert auth.role == Role.USER
    assert auth.is_verified is False
    assert auth.password != "s3cret-pass"

    otp = otp_for(session, auth)
    assert otp.type == OtpType.VERIFY
    assert len(otp.code) == 6
    assert set(otp.code) <= set(OTP_ALPHABET)
    mailer.assert_called_once_with("new@example.com", otp.code, OtpType.VERIFY)

    payload = decode_access_token(result["token"])
    assert payload["sub"] == "new@example.com"
    assert payload["type"] == TokenType.VERIFY


def test_sign_up_duplicate_email(session, signed_up):
    with pytest.raises(BadRequestError):
        auth_service.sign_up(session, "NEW@example.com", "another-pass")


def test_sign_up_survives_mail_failure(session, mailer):
    mailer.return_value = False

    result = auth_service.sign_up(session, "quiet@example.com", "s3cret-pass")

    assert result["token"]


def test_sign_in_unverified_gets_fresh_verify_otp(session, signed_up, mailer):
    result = auth_service.sign_in(session, "new@example.com", "s3cret-pass")

    assert result["user"] is None
    assert decode_access_token(result["token"])["type"] == TokenType.VERIFY
    session.expire_all()
    assert len(session.exec(select(Otp).where(Otp.auth_id == signed_up.id)).all()) == 1
    assert otp_for(session, signed_up).type == OtpType.VERIFY
    assert mailer.call_count == 2


def test_sign_in_wrong_password(session, signed_up):
    with pytest.raises(BadRequestError):
        auth_service.sign_in(session, "new@example.com", "wrong-pass")


def test_sign_in_unknown_email(session):
    with pytest.raises(NotFoundError):
        auth_service.sign_in(session, "ghost@example.com", "whatever")


def test_verify_otp_marks_verified_and_returns_access(session, signed_up):
    code = otp_for(session, signed_up).code

    result = auth_service.verify_otp(session, signed_up, code.lower(), OtpType.VERIFY)

    assert decode_access_token(result["token"])["type"] == TokenType.ACCESS
    assert result["user"]["is_verified"] is True
    assert otp_for(session, signed_up) is None

    signed_in = auth_service.sign_in(session, "new@example.com", "s3cret-pass")
    assert decode_access_token(signed_in["token"])["type"] == TokenType.ACCESS


def test_verify_otp_wrong_code(session, signed_up):
    code = otp_for(session, signed_up).code
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(BadRequestError):
        auth_service.verify_otp(session, signed_up, wrong, OtpType.VERIFY)


def test_verify_otp_wrong_type(session, signed_up):
    code = otp_for(session, signed_up).code

    with pytest.raises(BadRequestError):
        auth_service.verify_otp(session, signed_up, code, OtpType.RESET)


def test_verify_otp_expired(session, signed_up):
    otp = otp_for(session, signed_up)
    otp.created_at = datetime.utcnow() - timedelta(hours=1)
    session.add(otp)
    session.commit()

    with pytest.raises(BadRequestError):
        auth_service.verify_otp(session, signed_up, otp.code, OtpType.VERIFY)


def test_password_reset_flow(session, signed_up):
    result = auth_service.forgot_password(session, "new@example.com")
    assert decode_access_token(result["token"])["type"] == TokenType.RESET

    otp = otp_for(session, signed_up)
    assert otp.type == OtpType.RESET

    verified = auth_service.verify_otp(session, signed_up, otp.code, OtpType.RESET)
    assert decode_access_token(verified["token"])["type"] == TokenType.RESET

    auth_service.update_password(session, signed_up, "brand-new-pass")

    with pytest.raises(BadRequestError):
        auth_service.sign_in(session, "new@example.com", "s3cret-pass")
    auth_service.sign_in(session, "new@example.com", "brand-new-pass")


def test_forgot_password_unknown_email(session):
    with pytest.raises(NotFoundError):
        auth_service.forgot_password(session, "ghost@example.com")


def test_create_user_profile(session, signed_up):
    profile = auth_service.create_profile(
        session, signed_up, ProfileCreate(role=Role.USER, name="New Buyer", delivery_address="1 Main Rd"),
    )

    assert profile.auth_id == signed_up.id
    assert profile.delivery_address == "1 Main Rd"
    session.refresh(signed_up)
    assert signed_up.role == Role.USER


def test_create_vendor_profile_sets_role(session, signed_up):
    profile = auth_service.create_profile(
        session, signed_up, ProfileCreate(role=Role.VENDOR, name="Shop", pickup_address="Dock 4"),
    )

    assert profile.pickup_address == "Dock 4"
    session.refresh(signed_up)
    assert signed_up.role == Role.VENDOR


def test_second_profile_is_rejected(session, signed_up):
    auth_service.create_profile(session, signed_up, ProfileCreate(role=Role.USER, name="Once"))
    session.refresh(signed_up)

    with pytest.raises(BadRequestError):
        auth_service.create_profile(session, signed_up, ProfileCreate(role=Role.VENDOR, name="Twice"))


@pytest.mark.parametrize("role", [Role.ADMIN, Role.SUPER_ADMIN])
def test_plain_account_cannot_become_admin(session, signed_up, role):
    with pytest.raises(BadRequestError):
        auth_service.create_profile(session, signed_up, ProfileCreate(role=role, name="Sneaky"))
