from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vehicle_id: int | None
    type: str
    title: str
    message: str
    is_read: bool
    sent_via: str
    created_at: datetime
