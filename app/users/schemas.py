# app/users/schemas.py
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from datetime import datetime

# Las longitudes mínimas (3 / 6) se validan en el service para que
# el mensaje sea el mismo por API o desde código.
class UserCreate(BaseModel):
    username: str = Field(..., max_length=50)
    password: str = Field(..., max_length=128)

class UserLogin(BaseModel):
    username: str
    password: str

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"

class AvatarUpdate(BaseModel):
    # Acepta avatar_url | avatarUrl | avatar
    avatar_url: str | None = Field(
        default=None,
        max_length=500,
        validation_alias=AliasChoices("avatar_url", "avatarUrl", "avatar"),
    )

class UserOut(BaseModel):
    id: int
    username: str
    avatar_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
