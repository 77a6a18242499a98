from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tagform.config.database_config import get_db
from tagform.constants.messages import MESSAGE
from tagform.schema.common_schema import api_response
from tagform.services import form_service
from tagform.utils.logger_utils import handle_route_error

public_controller = APIRouter()


@public_controller.get("/by-path", response_model=dict)
def get_form_by_path(path: str, db: Session = Depends(get_db)):
    """
    Resolve "<workspace>/<form>" by slug or by display name
    """
    try:
        return api_response(200, MESSAGE.FORM_FOUND, form_service.get_form_by_path(db, path))
    except Exception as e:
        handle_route_error(error=e, context="GET /api/forms/by-path")


@public_controller.get("/{workspace_slug}/{form_slug}", response_model=dict)
def get_form_by_slug(workspace_slug: str, form_slug: str, db: Session = Depends(get_db)):
    try:
        response = form_service.get_form_by_slug(db, workspace_slug, form_slug)
        return api_response(200, MESSAGE.FORM_FOUND, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /api/forms/{workspace_slug}/{form_slug}")
