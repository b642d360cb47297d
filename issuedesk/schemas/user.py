from datetime import datetime

from pydantic import EmailStr, Field

from issuedesk.schemas.common import ApiModel


class UserBase(ApiModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=100)


class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=72)


class UserOut(UserBase):
    id: int
    avatar_url: str | None = None
    created_at: datetime
