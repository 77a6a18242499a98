from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from tagform.config.database_config import get_db
from tagform.config.env_config import settings
from tagform.constants.messages import MESSAGE
from tagform.middleware.auth_middleware import auth_middleware
from tagform.schema.common_schema import api_response
from tagform.schema.form_schema import FormCreate, FormUpdate, FormSettingsUpdate
from tagform.services import form_service
from tagform.services.workspace_service import get_accessible_workspace, get_owned_workspace
from tagform.utils.access_utils import owned_form, readable_form
from tagform.utils.logger_utils import handle_route_error

form_controller = APIRouter(dependencies=[Depends(auth_middleware)])


@form_controller.get("", response_model=dict)
def list_forms(
    workspace_id: str,
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    try:
        get_accessible_workspace(db, workspace_id, request.state.user.id)
        response = form_service.list_forms(db, workspace_id, page, limit)
        return api_response(200, MESSAGE.FORM_LIST, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /api/workspaces/{id}/forms")


@form_controller.post("", response_model=dict, status_code=201)
def create_form(workspace_id: str, data: FormCreate, request: Request, db: Session = Depends(get_db)):
    """
    Create a form together with its default settings
    """
    try:
        get_owned_workspace(db, workspace_id, request.state.user.id)
        response = form_service.create_form(db, workspace_id, data)
        return api_response(201, MESSAGE.FORM_CREATED, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /api/workspaces/{id}/forms")


@form_controller.get("/{form_id}", response_model=dict)
def get_form(workspace_id: str, form_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        return api_response(200, MESSAGE.FORM_FOUND, form_service.get_form(db, form))
    except Exception as e:
        handle_route_error(error=e, context="GET /api/workspaces/{id}/forms/{form_id}")


@form_controller.put("/{form_id}", response_model=dict)
def update_form(workspace_id: str, form_id: str, data: FormUpdate, request: Request, db: Session = Depends(get_db)):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        return api_response(200, MESSAGE.FORM_UPDATED, form_service.update_form(db, form, data))
    except Exception as e:
        handle_route_error(error=e, context="PUT /api/workspaces/{id}/forms/{form_id}")


@form_controller.delete("/{form_id}", response_model=dict)
def delete_form(workspace_id: str, form_id: str, request: Request, db: Session = Depends(get_db)):
    """
    Delete a form with its questions, choices, submissions, analytics and settings
    """
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        form_service.delete_form(db, form)
        return api_response(200, MESSAGE.FORM_DELETED)
    except Exception as e:
        handle_route_error(error=e, context="DELETE /api/workspaces/{id}/forms/{form_id}")


@form_controller.get("/{form_id}/settings", response_model=dict)
def get_form_settings(workspace_id: str, form_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        return api_response(200, MESSAGE.SETTINGS_FOUND, form_service.get_form_settings(db, form))
    except Exception as e:
        handle_route_error(error=e, context="GET /api/workspaces/{id}/forms/{form_id}/settings")


@form_controller.put("/{form_id}/settings", response_model=dict)
def update_form_settings(
    workspace_id: str,
    form_id: str,
    data: FormSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        return api_response(200, MESSAGE.SETTINGS_UPDATED, form_service.update_form_settings(db, form, data))
    except Exception as e:
        handle_route_error(error=e, context="PUT /api/workspaces/{id}/forms/{form_id}/settings")
