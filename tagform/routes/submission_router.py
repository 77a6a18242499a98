from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session
from tagform.config.database_config import get_db
from tagform.config.env_config import settings
from tagform.constants.messages import MESSAGE
from tagform.middleware.auth_middleware import auth_middleware
from tagform.schema.common_schema import api_response
from tagform.schema.submission_schema import StartSubmissionRequest, CompleteSubmissionRequest
from tagform.services import submission_service
from tagform.utils.access_utils import public_form, readable_form
from tagform.utils.logger_utils import handle_route_error

submission_controller = APIRouter()


@submission_controller.post("/{form_id}/submissions/start", response_model=dict)
def start_submission(
    workspace_id: str,
    form_id: str,
    data: StartSubmissionRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Open a submission for a respondent (no auth). Calling it again while the
    submission is in progress returns the same submission.
    """
    try:
        form = public_form(db, workspace_id, form_id)
        metadata = {
            "ip_address": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
        }
        submission, created = submission_service.start_submission(db, form, data.email, metadata)

        if created:
            response.status_code = 201
            return api_response(201, MESSAGE.SUBMISSION_STARTED, submission)
        return api_response(200, MESSAGE.SUBMISSION_RESUMED, submission)
    except Exception as e:
        handle_route_error(error=e, context="POST /forms/{form_id}/submissions/start")


@submission_controller.post("/{form_id}/submissions/{submission_id}/complete", response_model=dict)
def complete_submission(
    workspace_id: str,
    form_id: str,
    submission_id: str,
    data: CompleteSubmissionRequest,
    db: Session = Depends(get_db),
):
    try:
        form = public_form(db, workspace_id, form_id)
        response = submission_service.complete_submission(db, form, submission_id, data)
        return api_response(200, MESSAGE.SUBMISSION_COMPLETED, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /forms/{form_id}/submissions/{submission_id}/complete")


@submission_controller.get("/{form_id}/submissions", response_model=dict, dependencies=[Depends(auth_middleware)])
def list_submissions(
    workspace_id: str,
    form_id: str,
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort_by: str = "created_at",
    sort_order: str = "desc",
    status: str | None = None,
    db: Session = Depends(get_db),
):
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        response = submission_service.list_submissions(db, form, page, limit, sort_by, sort_order, status)
        return api_response(200, MESSAGE.SUBMISSION_LIST, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /forms/{form_id}/submissions")


@submission_controller.get(
    "/{form_id}/submissions/{submission_id}",
    response_model=dict,
    dependencies=[Depends(auth_middleware)],
)
def get_submission(workspace_id: str, form_id: str, submission_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        response = submission_service.get_submission(db, form, submission_id)
        return api_response(200, MESSAGE.SUBMISSION_FOUND, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /forms/{form_id}/submissions/{submission_id}")
