import math
import logging

from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tagform.config.env_config import settings
from tagform.constants.error import ERROR
from tagform.constants.utils import WORKSPACE_TYPE
from tagform.exceptions import CustomException
from tagform.models.workspace_model import Workspace
from tagform.models.form_model import Form
from tagform.schema.workspace_schema import WorkspaceCreate, WorkspaceUpdate
from tagform.services.form_service import remove_forms
from tagform.utils.logger_utils import handle_service_error, log_warning
from tagform.utils.serializer_utils import serialize_workspace
from tagform.utils.slug_utils import slugify, ensure_unique_slug

logger = logging.getLogger(__name__)


def _visible_to(user_id: str):
    """Owner's own workspaces plus every public one"""
    return or_(Workspace.user_id == user_id, Workspace.type == WORKSPACE_TYPE.PUBLIC)


def get_accessible_workspace(db: Session, workspace_id: str, user_id: str) -> Workspace:
    workspace = (
        db.query(Workspace)
        .filter(Workspace.id == workspace_id)
        .filter(_visible_to(user_id))
        .first()
    )
    if not workspace:
        raise CustomException(status_code=404, message=ERROR.WORKSPACE_NOT_FOUND)
    return workspace


def get_owned_workspace(db: Session, workspace_id: str, user_id: str) -> Workspace:
    """404 when the caller cannot see the workspace, 403 when they see but do not own it"""
    workspace = get_accessible_workspace(db, workspace_id, user_id)
    if workspace.user_id != user_id:
        raise CustomException(status_code=403, message=ERROR.WORKSPACE_OWNER_ONLY)
    return workspace


def _workspace_slug_exists(db: Session):
    def exists(slug: str) -> bool:
        return db.query(Workspace.id).filter(Workspace.slug == slug).first() is not None
    return exists


def create_workspace(db: Session, data: WorkspaceCreate, user_id: str) -> dict:
    base = slugify(data.name)

    for attempt in range(1, settings.SLUG_MAX_RETRIES + 1):
        try:
            workspace = Workspace(
                name=data.name,
                type=data.type or WORKSPACE_TYPE.PRIVATE,
                user_id=user_id,
                slug=ensure_unique_slug(_workspace_slug_exists(db), base),
            )
            db.add(workspace)
            db.commit()
            db.refresh(workspace)

            logger.info(f"Workspace {workspace.id} created with slug {workspace.slug}")
            return serialize_workspace(workspace)

        except IntegrityError:
            # Another request took the slug between the probe and the insert
            db.rollback()
            log_warning(context="create_workspace", message=f"slug race on '{base}', attempt {attempt}")
        except Exception as e:
            db.rollback()
            handle_service_error(error=e, context="create_workspace")

    raise CustomException(status_code=409, message=ERROR.SLUG_CONFLICT)


def list_workspaces(
    db: Session,
    user_id: str,
    type: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    try:
        limit = limit or settings.DEFAULT_PAGE_SIZE
        query = db.query(Workspace).filter(_visible_to(user_id))

        if type:
            if type not in WORKSPACE_TYPE.ALL:
                raise CustomException(status_code=400, message=ERROR.INVALID_WORKSPACE_TYPE)
            query = query.filter(Workspace.type == type)

        if search:
            query = query.filter(func.lower(Workspace.name).contains(search.lower(), autoescape=True))

        total = query.count()
        workspaces = (
            query.order_by(Workspace.created_at.desc(), Workspace.name)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "workspaces": [serialize_workspace(w) for w in workspaces],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        }

    except Exception as e:
        handle_service_error(error=e, context="list_workspaces")


def get_workspace(db: Session, workspace_id: str, user_id: str) -> dict:
    try:
        return serialize_workspace(get_accessible_workspace(db, workspace_id, user_id))
    except Exception as e:
        handle_service_error(error=e, context="get_workspace")


def update_workspace(db: Session, workspace_id: str, data: WorkspaceUpdate, user_id: str) -> dict:
    """Rename or change visibility; the slug stays stable so shared links keep working"""
    try:
        workspace = get_owned_workspace(db, workspace_id, user_id)

        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(workspace, field, value)

        db.commit()
        db.refresh(workspace)
        return serialize_workspace(workspace)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="update_workspace")


def delete_workspace(db: Session, workspace_id: str, user_id: str) -> None:
    try:
        workspace = get_owned_workspace(db, workspace_id, user_id)

        form_ids = [row.id for row in db.query(Form.id).filter(Form.workspace_id == workspace.id)]
        remove_forms(db, form_ids)
        db.delete(workspace)
        db.commit()

        logger.info(f"Workspace {workspace_id} deleted with {len(form_ids)} forms")

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="delete_workspace")
