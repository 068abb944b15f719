import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.admin_log import AdminAction


class AdminLogResponse(BaseModel):
    id: uuid.UUID
    actor_id: uuid.UUID
    action: AdminAction
    target_user_id: uuid.UUID | None
    target_gym_id: uuid.UUID | None
    before_status: str | None
    after_status: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
