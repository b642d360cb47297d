from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from issuedesk.api import deps
from issuedesk.api.routes.issues import issue_filters
from issuedesk.core.config import settings
from issuedesk.models import User
from issuedesk.schemas.issue import AnalyticsSummary, IssueFilters
from issuedesk.services import analytics
from issuedesk.services import issues as issue_service
from issuedesk.services.filters import filter_issues

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/summary", response_model=AnalyticsSummary)
def summary(
    filters: IssueFilters = Depends(issue_filters),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    issues = filter_issues(issue_service.list_issues(db), filters, current_user.id)
    return analytics.summarize(issues, recent_limit=settings.recent_issues_limit)
