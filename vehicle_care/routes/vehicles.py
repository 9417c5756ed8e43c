"""Vehicle API routes."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vehicle_care.db.models import User
from vehicle_care.db.session import get_db
from vehicle_care.routes.deps import get_current_user
from vehicle_care.schemas.common import APIResponse
from vehicle_care.schemas.vehicle import (
    DueVehicleItem,
    VehicleCreate,
    VehicleResponse,
    VehicleUpdate,
)
from vehicle_care.services.vehicle_service import (
    create_vehicle,
    delete_vehicle,
    get_vehicle,
    list_due_vehicles,
    list_vehicles,
    update_vehicle,
)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("/", response_model=APIResponse[List[VehicleResponse]])
def api_list_vehicles(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    vehicles = list_vehicles(db=db, user=user)
    return APIResponse(
        success=True,
        count=len(vehicles),
        data=[VehicleResponse.model_validate(vehicle) for vehicle in vehicles],
    )


# Declared before /{vehicle_id} so "due" is not parsed as an id.
@router.get("/due", response_model=APIResponse[List[DueVehicleItem]])
def api_due_for_service(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    due = list_due_vehicles(db=db, user=user)
    return APIResponse(
        success=True,
        count=len(due),
        data=[
            DueVehicleItem(
                **VehicleResponse.model_validate(vehicle).model_dump(),
                due_status=status.value,
            )
            for vehicle, status in due
        ],
    )


@router.get("/{vehicle_id}", response_model=APIResponse[VehicleResponse])
def api_get_vehicle(
    vehicle_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    vehicle = get_vehicle(db=db, vehicle_id=vehicle_id, user=user)
    return APIResponse(success=True, data=VehicleResponse.model_validate(vehicle))


@router.post("/", status_code=201, response_model=APIResponse[VehicleResponse])
def api_create_vehicle(
    payload: VehicleCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    vehicle = create_vehicle(db=db, owner=user, **payload.model_dump())
    return APIResponse(success=True, data=VehicleResponse.model_validate(vehicle))


@router.put("/{vehicle_id}", response_model=APIResponse[VehicleResponse])
def api_update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    vehicle = update_vehicle(
        db=db,
        vehicle_id=vehicle_id,
        user=user,
        changes=payload.model_dump(exclude_unset=True),
    )
    return APIResponse(success=True, data=VehicleResponse.model_validate(vehicle))


@router.delete("/{vehicle_id}", response_model=APIResponse[None])
def api_delete_vehicle(
    vehicle_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_vehicle(db=db, vehicle_id=vehicle_id, user=user)
    return APIResponse(success=True, message="Vehicle deleted successfully")
