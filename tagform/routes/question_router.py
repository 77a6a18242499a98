from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from tagform.config.database_config import get_db
from tagform.constants.messages import MESSAGE
from tagform.middleware.auth_middleware import auth_middleware
from tagform.schema.common_schema import api_response
from tagform.schema.question_schema import (
    QuestionCreate, QuestionUpdate, ReorderQuestionsRequest, MoveQuestionRequest,
    ChoiceCreate, ReorderChoicesRequest,
)
from tagform.services import form_service, question_service
from tagform.utils.access_utils import owned_form, readable_form
from tagform.utils.logger_utils import handle_route_error

question_controller = APIRouter(dependencies=[Depends(auth_middleware)])


@question_controller.post("/{form_id}/questions", response_model=dict, status_code=201)
def create_question(workspace_id: str, form_id: str, data: QuestionCreate, request: Request, db: Session = Depends(get_db)):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        response = question_service.create_question(db, form.id, data)
        return api_response(201, MESSAGE.QUESTION_CREATED, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /forms/{form_id}/questions")


@question_controller.get("/{form_id}/questions/hierarchy", response_model=dict)
def get_questions_hierarchy(workspace_id: str, form_id: str, request: Request, db: Session = Depends(get_db)):
    """
    Questions nested under their parents, every level sorted by order
    """
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        response = question_service.get_questions_hierarchy(db, form.id)
        return api_response(200, MESSAGE.QUESTION_HIERARCHY, response)
    except Exception as e:
        handle_route_error(error=e, context="GET /forms/{form_id}/questions/hierarchy")


@question_controller.post("/{form_id}/questions/reorder", response_model=dict)
def reorder_questions(
    workspace_id: str,
    form_id: str,
    data: ReorderQuestionsRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        response = form_service.reorder_questions(db, form, data.questionIds)
        return api_response(200, MESSAGE.QUESTIONS_REORDERED, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /forms/{form_id}/questions/reorder")


@question_controller.put("/{form_id}/questions/{question_id}", response_model=dict)
def update_question(
    workspace_id: str,
    form_id: str,
    question_id: str,
    data: QuestionUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        response = question_service.update_question(db, form.id, question_id, data)
        return api_response(200, MESSAGE.QUESTION_UPDATED, response)
    except Exception as e:
        handle_route_error(error=e, context="PUT /forms/{form_id}/questions/{question_id}")


@question_controller.delete("/{form_id}/questions/{question_id}", response_model=dict)
def delete_question(workspace_id: str, form_id: str, question_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        removed = question_service.delete_question(db, form.id, question_id)
        return api_response(200, MESSAGE.QUESTION_DELETED, {"deletedIds": removed})
    except Exception as e:
        handle_route_error(error=e, context="DELETE /forms/{form_id}/questions/{question_id}")


@question_controller.post("/{form_id}/questions/{question_id}/move", response_model=dict)
def move_question(
    workspace_id: str,
    form_id: str,
    question_id: str,
    data: MoveQuestionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        response = form_service.move_question(db, form, question_id, data.parentId)
        return api_response(200, MESSAGE.QUESTION_MOVED, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /forms/{form_id}/questions/{question_id}/move")


@question_controller.get("/{form_id}/questions/{question_id}/choices", response_model=dict)
def list_choices(workspace_id: str, form_id: str, question_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        form = readable_form(db, workspace_id, form_id, request.state.user.id)
        return api_response(200, MESSAGE.CHOICE_LIST, question_service.list_choices(db, form.id, question_id))
    except Exception as e:
        handle_route_error(error=e, context="GET /questions/{question_id}/choices")


@question_controller.post("/{form_id}/questions/{question_id}/choices", response_model=dict, status_code=201)
def create_choice(
    workspace_id: str,
    form_id: str,
    question_id: str,
    data: ChoiceCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        response = question_service.create_choice(db, form.id, question_id, data.text)
        return api_response(201, MESSAGE.CHOICE_CREATED, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /questions/{question_id}/choices")


@question_controller.post("/{form_id}/questions/{question_id}/choices/reorder", response_model=dict)
def reorder_choices(
    workspace_id: str,
    form_id: str,
    question_id: str,
    data: ReorderChoicesRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        response = question_service.reorder_choices(db, form.id, question_id, data.choiceIds)
        return api_response(200, MESSAGE.CHOICES_REORDERED, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /questions/{question_id}/choices/reorder")


@question_controller.put("/{form_id}/questions/{question_id}/choices/{choice_id}", response_model=dict)
def update_choice(
    workspace_id: str,
    form_id: str,
    question_id: str,
    choice_id: str,
    data: ChoiceCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        response = question_service.update_choice(db, form.id, question_id, choice_id, data.text)
        return api_response(200, MESSAGE.CHOICE_UPDATED, response)
    except Exception as e:
        handle_route_error(error=e, context="PUT /choices/{choice_id}")


@question_controller.delete("/{form_id}/questions/{question_id}/choices/{choice_id}", response_model=dict)
def delete_choice(
    workspace_id: str,
    form_id: str,
    question_id: str,
    choice_id: str,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        form = owned_form(db, workspace_id, form_id, request.state.user.id)
        question_service.delete_choice(db, form.id, question_id, choice_id)
        return api_response(200, MESSAGE.CHOICE_DELETED)
    except Exception as e:
        handle_route_error(error=e, context="DELETE /choices/{choice_id}")
