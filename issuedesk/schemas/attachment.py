from datetime import datetime

from issuedesk.schemas.common import ApiModel


class AttachmentOut(ApiModel):
    id: int
    filename: str
    filepath: str
    content_type: str
    size: int
    issue_id: int
    uploader_id: int
    created_at: datetime
