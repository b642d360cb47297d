from pydantic import Field

from issuedesk.schemas.common import ApiModel
from issuedesk.schemas.user import UserOut


class LoginRequest(ApiModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=72)


class LoginResponse(UserOut):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
