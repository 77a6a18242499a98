from datetime import date

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session
from tagform.config.database_config import get_db
from tagform.constants.messages import MESSAGE
from tagform.middleware.auth_middleware import auth_middleware
from tagform.schema.common_schema import api_response
from tagform.services import analytics_service
from tagform.utils.access_utils import readable_form
from tagform.utils.logger_utils import handle_route_error

analytics_controller = APIRouter(dependencies=[Depends(auth_middleware)])


@analytics_controller.get("/{form_id}/analytics", response_model=dict)
def get_form_analytics(
    workspace_id: str,
    form_id: str,
    request: Request,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    """
    Cached form analytics; a date window computes them from the submissions instead
    """
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        response = analytics_service.get_form_analytics(db, form, start_date, end_date)
        return api_response(200, MESSAGE.ANALYTICS_FOUND, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /forms/{form_id}/analytics")


@analytics_controller.get("/{form_id}/analytics/export")
def export_analytics(
    workspace_id: str,
    form_id: str,
    request: Request,
    format: str = "csv",
    db: Session = Depends(get_db),
):
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        content, media_type, filename = analytics_service.export_analytics(db, form, format)
        headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

        if format == "json":
            return JSONResponse(content=jsonable_encoder(content), headers=headers)
        return Response(content=content, media_type=media_type, headers=headers)
    except Exception as e:
        handle_route_error(error=e, context="GET /forms/{form_id}/analytics/export")


@analytics_controller.get("/{form_id}/questions/{question_id}/analytics", response_model=dict)
def get_question_analytics(
    workspace_id: str,
    form_id: str,
    question_id: str,
    request: Request,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        response = analytics_service.get_question_analytics(db, form, question_id, start_date, end_date)
        return api_response(200, MESSAGE.ANALYTICS_FOUND, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /questions/{question_id}/analytics")
