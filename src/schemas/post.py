"""Post schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PostResponse(BaseModel):
    """Post response."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    category: str
    description: str
    thumbnail: str
    thumbnail_url: str | None = None
    creator: int = Field(validation_alias="creator_id")
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
