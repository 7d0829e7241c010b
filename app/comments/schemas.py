# app/comments/schemas.py
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    # vacío / solo espacios se rechaza en el service
    text: str = Field(..., max_length=1000)


class CommentOut(BaseModel):
    id: int
    post_id: int
    author_id: int
    author_username: str
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentsOut(BaseModel):
    comments: List[CommentOut]
