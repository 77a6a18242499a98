from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from tagform.config.database_config import get_db
from tagform.config.env_config import settings
from tagform.constants.messages import MESSAGE
from tagform.middleware.auth_middleware import auth_middleware
from tagform.schema.common_schema import api_response
from tagform.schema.workspace_schema import WorkspaceCreate, WorkspaceUpdate
from tagform.services import workspace_service
from tagform.utils.logger_utils import handle_route_error

workspace_controller = APIRouter(dependencies=[Depends(auth_middleware)])


@workspace_controller.post("", response_model=dict, status_code=201)
def create_workspace(data: WorkspaceCreate, request: Request, db: Session = Depends(get_db)):
    try:
        response = workspace_service.create_workspace(db, data, request.state.user.id)
        return api_response(201, MESSAGE.WORKSPACE_CREATED, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /api/workspaces")


@workspace_controller.get("", response_model=dict)
def list_workspaces(
    request: Request,
    type: str | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """
    The caller's own workspaces plus every public one
    """
    try:
        response = workspace_service.list_workspaces(db, request.state.user.id, type, search, page, limit)
        return api_response(200, MESSAGE.WORKSPACE_LIST, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /api/workspaces")


@workspace_controller.get("/{workspace_id}", response_model=dict)
def get_workspace(workspace_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        response = workspace_service.get_workspace(db, workspace_id, request.state.user.id)
        return api_response(200, MESSAGE.WORKSPACE_FOUND, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /api/workspaces/{id}")


@workspace_controller.put("/{workspace_id}", response_model=dict)
def update_workspace(workspace_id: str, data: WorkspaceUpdate, request: Request, db: Session = Depends(get_db)):
    try:
        response = workspace_service.update_workspace(db, workspace_id, data, request.state.user.id)
        return api_response(200, MESSAGE.WORKSPACE_UPDATED, response)
    except Exception as e:
        handle_route_error(error=e, context="PUT /api/workspaces/{id}")


@workspace_controller.delete("/{workspace_id}", response_model=dict)
def delete_workspace(workspace_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        workspace_service.delete_workspace(db, workspace_id, request.state.user.id)
        return api_response(200, MESSAGE.WORKSPACE_DELETED)
    except Exception as e:
        handle_route_error(error=e, context="DELETE /api/workspaces/{id}")
