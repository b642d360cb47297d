from datetime import datetime

from pydantic import Field

from issuedesk.schemas.common import ApiModel


class CommentCreate(ApiModel):
    content: str = Field(min_length=1, max_length=5000)


class CommentOut(ApiModel):
    id: int
    content: str
    issue_id: int
    user_id: int
    created_at: datetime
