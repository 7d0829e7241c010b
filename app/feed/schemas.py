# app/feed/schemas.py
from pydantic import BaseModel, Field, AliasChoices
from datetime import datetime
from typing import List

from app.comments.schemas import CommentOut


class PostCreate(BaseModel):
    # Acepta image_url | imageUrl (el front web manda camelCase)
    image_url: str = Field(
        default="",
        validation_alias=AliasChoices("image_url", "imageUrl"),
    )
    caption: str | None = None


class PostOut(BaseModel):
    id: int
    author_id: int
    author_username: str
    author_avatar: str | None = None
    image_url: str
    caption: str
    like_count: int
    liked_by: List[int]
    comments: List[CommentOut]
    created_at: datetime


class LikeOut(BaseModel):
    like_count: int
    liked_by: List[int]


class MessageOut(BaseModel):
    message: str
