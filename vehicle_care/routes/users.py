"""Owner profile and notification preference routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vehicle_care.db.models import User
from vehicle_care.db.session import get_db
from vehicle_care.intelligence.preferences import NotificationPreferences
from vehicle_care.routes.deps import get_current_user
from vehicle_care.schemas.common import APIResponse
from vehicle_care.schemas.user import (
    PreferencesPayload,
    PreferencesResponse,
    UserCreate,
    UserResponse,
)
from vehicle_care.services.user_service import create_user, update_notification_preferences

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", status_code=201, response_model=APIResponse[UserResponse])
def register_user(payload: UserCreate, db: Session = Depends(get_db)):
    preferences = (
        payload.notification_preferences.model_dump(exclude_none=True)
        if payload.notification_preferences
        else None
    )
    user = create_user(
        db=db,
        username=payload.username,
        email=payload.email,
        phone=payload.phone,
        role=payload.role,
        notification_preferences=preferences,
    )
    return APIResponse(success=True, data=UserResponse.model_validate(user))


@router.get("/me", response_model=APIResponse[UserResponse])
def get_me(user: User = Depends(get_current_user)):
    return APIResponse(success=True, data=UserResponse.model_validate(user))


@router.get("/me/preferences", response_model=APIResponse[PreferencesResponse])
def get_preferences(user: User = Depends(get_current_user)):
    preferences = NotificationPreferences.from_mapping(user.notification_preferences)
    return APIResponse(success=True, data=PreferencesResponse(**preferences.to_dict()))


@router.put("/me/preferences", response_model=APIResponse[PreferencesResponse])
def put_preferences(
    payload: PreferencesPayload,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    preferences = update_notification_preferences(
        db=db,
        user=user,
        changes=payload.model_dump(exclude_none=True),
    )
    return APIResponse(success=True, data=PreferencesResponse(**preferences.to_dict()))
