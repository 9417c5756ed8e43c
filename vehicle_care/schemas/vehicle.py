from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class VehicleCreate(BaseModel):
    plate_number: str = Field(min_length=1, max_length=32)
    chassis_number: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    color: str | None = None
    current_mileage: int = Field(default=0, ge=0)
    next_service_due: int | None = Field(default=None, ge=0)


class VehicleUpdate(BaseModel):
    chassis_number: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    color: str | None = None
    current_mileage: int | None = Field(default=None, ge=0)
    next_service_due: int | None = Field(default=None, ge=0)
    next_service_date: date | None = None


class VehicleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    plate_number: str
    chassis_number: str | None
    make: str | None
    model: str | None
    year: int | None
    color: str | None
    current_mileage: int
    next_service_due: int
    next_service_date: date | None
    last_service_date: date | None


class DueVehicleItem(VehicleResponse):
    due_status: str
