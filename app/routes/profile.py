from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.models.auth import Auth
from app.schemas.user_schemas import ProfileCreate
from app.services.auth_service import create_profile
from app.utils.token import get_current_auth

router = APIRouter()


@router.post("")
def create_my_profile(
    payload: ProfileCreate,
    auth: Auth = Depends(get_current_auth),
    session: Session = Depends(get_session)
):
    profile = create_profile(session, auth, payload)
    return {
        "message": "Profile created successfully",
        "data": {"profile": profile.model_dump(), "role": payload.role},
    }
