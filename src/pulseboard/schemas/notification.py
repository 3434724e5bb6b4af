"""Notification Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pulseboard.core.enums import PostStatus


class NotificationPostOut(BaseModel):
    """Minimal projection of the post a notification refers to."""

    id: int
    status: PostStatus

    model_config = ConfigDict(from_attributes=True)


class NotificationOut(BaseModel):
    id: int
    message: str
    sender_id: int | None
    to: int = Field(..., description="Recipient user id")
    post: NotificationPostOut | None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def _map_recipient(cls, data: object) -> object:
        if isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "message": data.message,
            "sender_id": data.sender_id,
            "to": data.recipient_id,
            "post": (
                {"id": data.post.id, "status": data.post.status} if data.post is not None else None
            ),
            "is_read": data.is_read,
            "created_at": data.created_at,
        }


class MarkReadResponse(BaseModel):
    updated: int
