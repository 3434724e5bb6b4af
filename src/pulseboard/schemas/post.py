"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pulseboard.core.enums import PostStatus


class _StatusNormalizer(BaseModel):
    @field_validator("status", mode="before", check_fields=False)
    @classmethod
    def _parse_status(cls, value: object) -> PostStatus:
        return PostStatus.parse(value)


class PostCreate(_StatusNormalizer):
    """Schema for creating a new post."""

    title: str = Field(..., max_length=300, description="Post title")
    content: str = Field(..., description="Post body")
    status: PostStatus = Field(..., description="public or private (any case)")
    image_url: str | None = Field(None, description="Path of an already uploaded image")
    category_ids: list[int] = Field(default_factory=list, description="Categories to attach")


class PostUpdate(PostCreate):
    """Schema for replacing a post's editable fields."""


class PostStatusUpdate(_StatusNormalizer):
    """Schema for switching a post between public and private."""

    status: PostStatus


class CreatorOut(BaseModel):
    """Public projection of a post's author."""

    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class CategoryOut(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class PostOut(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    content: str
    status: PostStatus
    image_url: str | None
    creator: CreatorOut
    categories: list[CategoryOut] = Field(default_factory=list)
    like_count: int = 0
    unlike_count: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostPage(BaseModel):
    """One page of a post listing."""

    items: list[PostOut]
    total: int
    page: int
    size: int


class ReactionResponse(BaseModel):
    """Result of a like/unlike toggle."""

    id: int = Field(..., description="Reaction created, or removed when toggled off")
    post_id: int
    active: bool


class FavoriteResponse(BaseModel):
    post_id: int
    favorited: bool
