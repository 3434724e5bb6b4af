"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    """Schema for adding or editing a comment."""

    text: str = Field(..., max_length=5000, description="Comment text")


class CommentOut(BaseModel):
    id: int
    post_id: int
    user_id: int
    text: str
    edited: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
