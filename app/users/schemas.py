from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class LoginSchema(BaseModel):
    username: str
    password: str

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return (v or "").strip()


class UserDisplaySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    created_at: datetime
