from pydantic import BaseModel, ConfigDict, Field


class PreferencesPayload(BaseModel):
    email: bool | None = None
    sms: bool | None = None
    in_app: bool | None = Field(default=None, alias="inApp")

    model_config = ConfigDict(populate_by_name=True)


class PreferencesResponse(BaseModel):
    email: bool
    sms: bool
    in_app: bool


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str | None = None
    role: str = "user"
    notification_preferences: PreferencesPayload | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    phone: str | None
    role: str
