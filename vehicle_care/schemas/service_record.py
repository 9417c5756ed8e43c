from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class ServiceRecordCreate(BaseModel):
    vehicle_id: int
    service_date: date
    mileage_at_service: int = Field(ge=0)
    total_cost: float = Field(ge=0)
    notes: str | None = None
    status: str = "pending"


class ServiceStatusUpdate(BaseModel):
    status: str


class ServiceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vehicle_id: int
    service_date: date
    mileage_at_service: int
    total_cost: float
    invoice_number: str | None
    notes: str | None
    status: str
