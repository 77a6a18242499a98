from sqlalchemy.orm import Session

from tagform.constants.error import ERROR
from tagform.exceptions import CustomException
from tagform.models.form_model import Form
from tagform.services.form_service import get_workspace_form
from tagform.services.workspace_service import get_accessible_workspace, get_owned_workspace


def readable_form(db: Session, workspace_id: str, form_id: str, user_id: str) -> Form:
    """Form inside a workspace the caller can see"""
    get_accessible_workspace(db, workspace_id, user_id)
    return get_workspace_form(db, workspace_id, form_id)


def owned_form(db: Session, workspace_id: str, form_id: str, user_id: str) -> Form:
    """Form inside a workspace the caller owns"""
    get_owned_workspace(db, workspace_id, user_id)
    return get_workspace_form(db, workspace_id, form_id)


def public_form(db: Session, workspace_id: str, form_id: str) -> Form:
    """Form that anonymous respondents may fill in; private forms look missing"""
    form = get_workspace_form(db, workspace_id, form_id)
    if form.is_private:
        raise CustomException(status_code=404, message=ERROR.FORM_NOT_FOUND)
    return form
