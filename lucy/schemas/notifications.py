from pydantic import BaseModel
from datetime import datetime

from lucy.models.notifications import NotificationType, NotificationPriority


class NotificationRead(BaseModel):
    id: int
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
