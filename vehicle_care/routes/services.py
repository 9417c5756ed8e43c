"""Service record API routes."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vehicle_care.db.models import User
from vehicle_care.db.session import get_db
from vehicle_care.routes.deps import get_current_user
from vehicle_care.schemas.common import APIResponse
from vehicle_care.schemas.service_record import (
    ServiceRecordCreate,
    ServiceRecordResponse,
    ServiceStatusUpdate,
)
from vehicle_care.services.service_record_service import (
    create_service_record,
    delete_service_record,
    get_service_record,
    list_service_records,
    update_service_status,
)

router = APIRouter(prefix="/services", tags=["services"])


@router.get("/", response_model=APIResponse[List[ServiceRecordResponse]])
def api_list_services(
    vehicle_id: int | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    records = list_service_records(db=db, user=user, vehicle_id=vehicle_id)
    return APIResponse(
        success=True,
        count=len(records),
        data=[ServiceRecordResponse.model_validate(record) for record in records],
    )


@router.get("/{record_id}", response_model=APIResponse[ServiceRecordResponse])
def api_get_service(
    record_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = get_service_record(db=db, record_id=record_id, user=user)
    return APIResponse(success=True, data=ServiceRecordResponse.model_validate(record))


@router.post("/", status_code=201, response_model=APIResponse[ServiceRecordResponse])
def api_create_service(
    payload: ServiceRecordCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = create_service_record(db=db, user=user, **payload.model_dump())
    return APIResponse(success=True, data=ServiceRecordResponse.model_validate(record))


@router.patch("/{record_id}/status", response_model=APIResponse[ServiceRecordResponse])
def api_update_service_status(
    record_id: int,
    payload: ServiceStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = update_service_status(
        db=db,
        record_id=record_id,
        user=user,
        new_status=payload.status,
    )
    return APIResponse(success=True, data=ServiceRecordResponse.model_validate(record))


@router.delete("/{record_id}", response_model=APIResponse[None])
def api_delete_service(
    record_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_service_record(db=db, record_id=record_id, user=user)
    return APIResponse(success=True, message="Service record deleted")
