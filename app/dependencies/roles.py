from fastapi import Depends, HTTPException

from app.constants.order_status import ADMIN_ROLES, AccountStatus, Role
from app.models.auth import Auth
from app.models.user import Admin, User
from app.models.vendor import Vendor
from app.services.order_status_service import Actor
from app.utils.token import get_current_auth


def get_active_auth(auth: Auth = Depends(get_current_auth)) -> Auth:
    if not auth.is_verified:
        raise HTTPException(status_code=403, detail="Account not verified")
    if auth.status != AccountStatus.APPROVED:
        raise HTTPException(status_code=403, detail="Account not approved")
    return auth


def require_user(auth: Auth = Depends(get_active_auth)) -> User:
    if auth.role != Role.USER or not auth.user:
        raise HTTPException(status_code=403, detail="User access required")
    return auth.user


def require_vendor(auth: Auth = Depends(get_active_auth)) -> Vendor:
    if auth.role != Role.VENDOR or not auth.vendor:
        raise HTTPException(status_code=403, detail="Vendor access required")
    return auth.vendor


def require_admin(auth: Auth = Depends(get_active_auth)) -> Admin:
    if auth.role not in ADMIN_ROLES or not auth.admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return auth.admin


def user_actor(user: User = Depends(require_user)) -> Actor:
    return Actor(role=Role.USER, profile_id=user.id)


def vendor_actor(vendor: Vendor = Depends(require_vendor)) -> Actor:
    return Actor(role=Role.VENDOR, profile_id=vendor.id)


def admin_actor(
    admin: Admin = Depends(require_admin),
    auth: Auth = Depends(get_active_auth),
) -> Actor:
    return Actor(role=auth.role, profile_id=admin.id)
