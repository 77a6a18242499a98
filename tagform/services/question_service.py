import uuid
import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tagform.constants.error import ERROR
from tagform.constants.utils import QUESTION_TYPE
from tagform.exceptions import CustomException
from tagform.models.analytics_model import QuestionAnalytics
from tagform.models.question_model import Question, QuestionChoice
from tagform.models.submission_model import QuestionResponse
from tagform.schema.question_schema import QuestionCreate, QuestionUpdate
from tagform.utils.hierarchy_utils import build_path, build_tree, compute_paths
from tagform.utils.logger_utils import handle_service_error, log_database_operation
from tagform.utils.serializer_utils import serialize_question, serialize_choice

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Ordering and hierarchy maintenance. These helpers only flush; the calling
# operation owns the transaction.
# ---------------------------------------------------------------------------

def _same_parent(parent_id: Optional[str]):
    if parent_id is None:
        return Question.parent_id.is_(None)
    return Question.parent_id == parent_id


def next_question_order(db: Session, form_id: str, parent_id: Optional[str]) -> int:
    db.flush()
    current = (
        db.query(func.max(Question.order))
        .filter(Question.form_id == form_id, _same_parent(parent_id))
        .scalar()
    )
    return (current or 0) + 1


def siblings_of(db: Session, form_id: str, parent_id: Optional[str]) -> List[Question]:
    db.flush()
    query = db.query(Question).filter(Question.form_id == form_id, _same_parent(parent_id))
    return query.order_by(Question.order, Question.created_at).all()


def compact_siblings(db: Session, form_id: str, parent_id: Optional[str]) -> None:
    """Renumber one sibling group densely from 1, keeping its current order"""
    for position, question in enumerate(siblings_of(db, form_id, parent_id), start=1):
        question.order = position


def rebuild_paths(db: Session, form_id: str) -> None:
    """Recompute the materialized path of every question in the form from parent_id"""
    db.flush()
    questions = db.query(Question).filter(Question.form_id == form_id).all()
    try:
        paths = compute_paths({q.id: q.parent_id for q in questions})
    except ValueError:
        raise CustomException(status_code=400, message=ERROR.QUESTION_CYCLE)

    for question in questions:
        if question.path != paths[question.id]:
            question.path = paths[question.id]
    log_database_operation("UPDATE", "rebuild_paths", {"form_id": form_id, "questions": len(questions)})


def _insert_choices(db: Session, question_id: str, texts: Iterable[str]) -> List[QuestionChoice]:
    choices = []
    for index, text in enumerate(texts):
        text = (text or "").strip()
        if not text:
            raise CustomException(status_code=400, message=ERROR.CHOICE_TEXT_REQUIRED)
        choices.append(QuestionChoice(question_id=question_id, text=text, order=index + 1))
    db.add_all(choices)
    return choices


def _ensure_choices_unreferenced(db: Session, question_id: str, choice_ids: Iterable[str]) -> None:
    """Refuse to drop choices that recorded answers point at"""
    choice_ids = set(choice_ids)
    if not choice_ids:
        return

    responses = db.query(QuestionResponse).filter(QuestionResponse.question_id == question_id).all()
    referenced = set()
    for response in responses:
        data = response.response_data or {}
        if response.choice_id in choice_ids:
            referenced.add(response.choice_id)
        if data.get("choiceId") in choice_ids:
            referenced.add(data["choiceId"])
        referenced.update(set(data.get("choiceIds") or []) & choice_ids)

    if referenced:
        raise CustomException(
            status_code=409,
            message=ERROR.CHOICES_IN_USE,
            data={"choiceIds": sorted(referenced)},
        )


def _validate_type_options(question_type: str, max_chars, choices) -> None:
    if question_type not in QUESTION_TYPE.ALL:
        raise CustomException(status_code=400, message=ERROR.INVALID_QUESTION_TYPE)
    if max_chars is not None and question_type not in QUESTION_TYPE.TEXT:
        raise CustomException(status_code=400, message=ERROR.MAX_CHARS_NOT_ALLOWED)
    if choices and question_type not in QUESTION_TYPE.CHOICE:
        raise CustomException(status_code=400, message=ERROR.CHOICES_NOT_ALLOWED)


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------

def get_form_question(db: Session, form_id: str, question_id: str) -> Question:
    question = (
        db.query(Question)
        .filter(Question.id == question_id, Question.form_id == form_id)
        .first()
    )
    if not question:
        raise CustomException(status_code=404, message=ERROR.QUESTION_NOT_FOUND)
    return question


def create_question(db: Session, form_id: str, data: QuestionCreate) -> dict:
    """Append a question at the end of its sibling group"""
    try:
        _validate_type_options(data.type, data.max_chars, data.choices)

        # An empty parent id places the question at root
        parent_id = data.parent_id or None
        parent = None
        if parent_id:
            parent = db.get(Question, parent_id)
            if not parent or parent.form_id != form_id:
                raise CustomException(status_code=400, message=ERROR.PARENT_NOT_IN_FORM)

        question_id = str(uuid.uuid4())
        question = Question(
            id=question_id,
            form_id=form_id,
            type=data.type,
            text=data.text,
            description=data.description,
            is_required=data.is_required,
            max_chars=data.max_chars,
            order=next_question_order(db, form_id, parent_id),
            parent_id=parent_id,
            path=build_path(parent.path if parent else None, question_id),
        )
        db.add(question)
        db.flush()

        choices = _insert_choices(db, question_id, data.choices or [])
        db.commit()
        db.refresh(question)

        return serialize_question(question, choices=choices)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="create_question")


def update_question(db: Session, form_id: str, question_id: str, data: QuestionUpdate) -> dict:
    """
    Update question fields. A supplied choice list replaces the existing
    choices entirely (new ids, order = position + 1).
    """
    try:
        question = get_form_question(db, form_id, question_id)
        fields = data.model_dump(exclude_unset=True)
        choices_in = fields.pop("choices", None)

        max_chars = fields.get("max_chars", None)
        _validate_type_options(question.type, max_chars, choices_in)

        for field, value in fields.items():
            if field == "is_required" and value is None:
                continue
            setattr(question, field, value)

        if choices_in is not None:
            existing = db.query(QuestionChoice).filter(QuestionChoice.question_id == question_id).all()
            _ensure_choices_unreferenced(db, question_id, [c.id for c in existing])
            for choice in existing:
                db.delete(choice)
            db.flush()
            _insert_choices(db, question_id, choices_in)

        db.commit()
        db.refresh(question)

        choices = db.query(QuestionChoice).filter(QuestionChoice.question_id == question_id).all()
        return serialize_question(question, choices=choices)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="update_question")


def subtree_ids(db: Session, question: Question) -> List[str]:
    rows = (
        db.query(Question.id)
        .filter(Question.form_id == question.form_id)
        .filter(
            (Question.id == question.id)
            | Question.path.startswith(f"{question.path}.", autoescape=True)
        )
        .all()
    )
    return [row.id for row in rows]


def remove_questions(db: Session, question_ids: List[str]) -> None:
    """Delete questions with their responses, choices and analytics (no commit)"""
    if not question_ids:
        return
    db.query(QuestionResponse).filter(QuestionResponse.question_id.in_(question_ids)).delete(synchronize_session=False)
    db.query(QuestionAnalytics).filter(QuestionAnalytics.question_id.in_(question_ids)).delete(synchronize_session=False)
    db.query(QuestionChoice).filter(QuestionChoice.question_id.in_(question_ids)).delete(synchronize_session=False)
    # Children before parents so the self reference never dangles
    rows = db.query(Question.id, Question.path).filter(Question.id.in_(question_ids)).all()
    for row in sorted(rows, key=lambda r: r.path.count("."), reverse=True):
        db.query(Question).filter(Question.id == row.id).delete(synchronize_session=False)
    log_database_operation("DELETE", "remove_questions", {"count": len(question_ids)})


def delete_question(db: Session, form_id: str, question_id: str) -> List[str]:
    """Delete a question together with everything nested under it"""
    try:
        question = get_form_question(db, form_id, question_id)
        parent_id = question.parent_id
        removed = subtree_ids(db, question)

        remove_questions(db, removed)
        db.expire_all()
        compact_siblings(db, form_id, parent_id)
        db.commit()

        logger.info(f"Deleted question {question_id} and {len(removed) - 1} nested questions")
        return removed

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="delete_question")


def list_form_questions(db: Session, form_id: str):
    """Questions of a form with their choices, keyed for serialization"""
    questions = db.query(Question).filter(Question.form_id == form_id).all()
    choices = (
        db.query(QuestionChoice)
        .filter(QuestionChoice.question_id.in_(select(Question.id).where(Question.form_id == form_id)))
        .all()
    )
    choices_by_question = {}
    for choice in choices:
        choices_by_question.setdefault(choice.question_id, []).append(choice)
    return questions, choices_by_question


def get_questions_hierarchy(db: Session, form_id: str) -> List[dict]:
    try:
        questions, choices_by_question = list_form_questions(db, form_id)
        nodes = [serialize_question(q, choices=choices_by_question.get(q.id, [])) for q in questions]
        return build_tree(nodes)
    except Exception as e:
        handle_service_error(error=e, context="get_questions_hierarchy")


# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------

def _get_question_choice(db: Session, question_id: str, choice_id: str) -> QuestionChoice:
    choice = (
        db.query(QuestionChoice)
        .filter(QuestionChoice.id == choice_id, QuestionChoice.question_id == question_id)
        .first()
    )
    if not choice:
        raise CustomException(status_code=404, message=ERROR.CHOICE_NOT_FOUND)
    return choice


def _ordered_choices(db: Session, question_id: str) -> List[QuestionChoice]:
    return (
        db.query(QuestionChoice)
        .filter(QuestionChoice.question_id == question_id)
        .order_by(QuestionChoice.order, QuestionChoice.created_at)
        .all()
    )


def list_choices(db: Session, form_id: str, question_id: str) -> List[dict]:
    try:
        get_form_question(db, form_id, question_id)
        return [serialize_choice(c) for c in _ordered_choices(db, question_id)]
    except Exception as e:
        handle_service_error(error=e, context="list_choices")


def create_choice(db: Session, form_id: str, question_id: str, text: str) -> dict:
    try:
        question = get_form_question(db, form_id, question_id)
        if question.type not in QUESTION_TYPE.CHOICE:
            raise CustomException(status_code=400, message=ERROR.CHOICES_NOT_ALLOWED)

        current = (
            db.query(func.max(QuestionChoice.order))
            .filter(QuestionChoice.question_id == question_id)
            .scalar()
        )
        choice = QuestionChoice(question_id=question_id, text=text, order=(current or 0) + 1)
        db.add(choice)
        db.commit()
        db.refresh(choice)
        return serialize_choice(choice)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="create_choice")


def update_choice(db: Session, form_id: str, question_id: str, choice_id: str, text: str) -> dict:
    try:
        get_form_question(db, form_id, question_id)
        choice = _get_question_choice(db, question_id, choice_id)
        choice.text = text
        db.commit()
        db.refresh(choice)
        return serialize_choice(choice)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="update_choice")


def delete_choice(db: Session, form_id: str, question_id: str, choice_id: str) -> None:
    try:
        get_form_question(db, form_id, question_id)
        choice = _get_question_choice(db, question_id, choice_id)
        _ensure_choices_unreferenced(db, question_id, [choice.id])

        db.delete(choice)
        db.flush()
        for position, remaining in enumerate(_ordered_choices(db, question_id), start=1):
            remaining.order = position
        db.commit()

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="delete_choice")


def reorder_choices(db: Session, form_id: str, question_id: str, choice_ids: List[str]) -> List[dict]:
    """
    Listed choices take positions 1..n in request order; choices left out keep
    their relative order after them.
    """
    try:
        get_form_question(db, form_id, question_id)
        current = _ordered_choices(db, question_id)
        by_id = {c.id: c for c in current}

        if len(set(choice_ids)) != len(choice_ids) or any(cid not in by_id for cid in choice_ids):
            raise CustomException(status_code=400, message=ERROR.CHOICE_NOT_IN_QUESTION)

        listed = [by_id[cid] for cid in choice_ids]
        rest = [c for c in current if c.id not in set(choice_ids)]
        for position, choice in enumerate(listed + rest, start=1):
            choice.order = position

        db.commit()
        return [serialize_choice(c) for c in _ordered_choices(db, question_id)]

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="reorder_choices")
