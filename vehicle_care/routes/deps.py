"""Shared route dependencies."""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from vehicle_care.core.domain_exceptions import DomainException
from vehicle_care.core.error_codes import ErrorCode
from vehicle_care.db.models import User
from vehicle_care.db.session import get_db
from vehicle_care.services.user_service import get_user


def get_current_user(
    x_user_id: int = Header(..., description="Authenticated user id set by the gateway"),
    db: Session = Depends(get_db),
) -> User:
    try:
        return get_user(db=db, user_id=x_user_id)
    except DomainException:
        raise DomainException(
            code=ErrorCode.NOT_AUTHORIZED,
            message="Unknown user."
        ) from None
