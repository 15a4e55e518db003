from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.users.schemas import UserDisplaySchema


class SessionInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user: UserDisplaySchema
    last_activity: datetime
    expires_at: datetime
