import math
import logging
from collections import defaultdict
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tagform.config.env_config import settings
from tagform.constants.error import ERROR
from tagform.constants.utils import DEFAULT_FORM_SETTINGS
from tagform.exceptions import CustomException
from tagform.models.analytics_model import FormAnalytics, QuestionAnalytics
from tagform.models.form_model import Form, FormSettings
from tagform.models.question_model import Question, QuestionChoice
from tagform.models.submission_model import FormSubmission, QuestionResponse
from tagform.models.workspace_model import Workspace
from tagform.schema.form_schema import FormCreate, FormUpdate, FormSettingsUpdate
from tagform.schema.question_schema import QuestionOrderItem
from tagform.services.question_service import (
    compact_siblings,
    get_form_question,
    list_form_questions,
    next_question_order,
    rebuild_paths,
)
from tagform.utils.hierarchy_utils import compute_paths, flatten_in_order, is_same_or_descendant
from tagform.utils.logger_utils import handle_service_error, log_database_operation, log_warning
from tagform.utils.serializer_utils import (
    serialize_form,
    serialize_question,
    serialize_settings,
)
from tagform.utils.slug_utils import slugify, ensure_unique_slug

logger = logging.getLogger(__name__)


def get_workspace_form(db: Session, workspace_id: str, form_id: str) -> Form:
    form = (
        db.query(Form)
        .filter(Form.id == form_id, Form.workspace_id == workspace_id)
        .first()
    )
    if not form:
        raise CustomException(status_code=404, message=ERROR.FORM_NOT_FOUND)
    return form


def list_forms(db: Session, workspace_id: str, page: int = 1, limit: Optional[int] = None) -> dict:
    try:
        limit = limit or settings.DEFAULT_PAGE_SIZE
        query = db.query(Form).filter(Form.workspace_id == workspace_id)

        total = query.count()
        forms = (
            query.order_by(Form.created_at.desc(), Form.name)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        log_database_operation("SELECT", "list_forms", {"workspace_id": workspace_id, "total": total})

        return {
            "forms": [serialize_form(f) for f in forms],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        }

    except Exception as e:
        handle_service_error(error=e, context="list_forms")


def _form_slug_exists(db: Session, workspace_id: str):
    def exists(slug: str) -> bool:
        return (
            db.query(Form.id)
            .filter(Form.workspace_id == workspace_id, Form.slug == slug)
            .first()
            is not None
        )
    return exists


def create_form(db: Session, workspace_id: str, data: FormCreate) -> dict:
    """
    Insert the form and its default settings in one transaction. The slug is
    unique per workspace; losing the race to a concurrent insert retries with
    a fresh probe.
    """
    base = slugify(data.name)

    for attempt in range(1, settings.SLUG_MAX_RETRIES + 1):
        try:
            form = Form(
                workspace_id=workspace_id,
                name=data.name,
                description=data.description,
                is_private=data.is_private,
                slug=ensure_unique_slug(_form_slug_exists(db, workspace_id), base),
            )
            db.add(form)
            db.flush()

            form_settings = FormSettings(
                form_id=form.id,
                landing_page_title=data.name,
                landing_page_description=data.description or "",
                **DEFAULT_FORM_SETTINGS,
            )
            db.add(form_settings)
            db.commit()
            db.refresh(form)
            db.refresh(form_settings)

            logger.info(f"Form {form.id} created in workspace {workspace_id} with slug {form.slug}")
            return {**serialize_form(form), "settings": serialize_settings(form_settings)}

        except IntegrityError:
            db.rollback()
            log_warning(context="create_form", message=f"slug race on '{base}', attempt {attempt}")
        except Exception as e:
            db.rollback()
            handle_service_error(error=e, context="create_form")

    raise CustomException(status_code=409, message=ERROR.SLUG_CONFLICT)


def _form_detail(db: Session, form: Form) -> dict:
    """Form with questions (parents before children, siblings by order), choices and settings"""
    questions, choices_by_question = list_form_questions(db, form.id)
    form_settings = db.query(FormSettings).filter(FormSettings.form_id == form.id).first()

    return {
        **serialize_form(form),
        "questions": [
            serialize_question(q, choices=choices_by_question.get(q.id, []))
            for q in flatten_in_order(questions)
        ],
        "settings": serialize_settings(form_settings) if form_settings else None,
    }


def get_form(db: Session, form: Form) -> dict:
    try:
        return _form_detail(db, form)
    except Exception as e:
        handle_service_error(error=e, context="get_form")


def _match_one(query, model, segment: str, not_found: str, ambiguous: str, by_name: bool):
    rows = query.filter(model.slug == segment).all()
    if not rows and by_name:
        names = {segment.lower(), segment.replace("-", " ").lower()}
        rows = query.filter(func.lower(model.name).in_(names)).all()

    if not rows:
        raise CustomException(status_code=404, message=not_found)
    if len(rows) > 1:
        raise CustomException(status_code=409, message=ambiguous)
    return rows[0]


def _resolve_public_form(db: Session, workspace_segment: str, form_segment: str, by_name: bool) -> dict:
    workspace = _match_one(
        db.query(Workspace), Workspace, workspace_segment,
        ERROR.WORKSPACE_NOT_FOUND, ERROR.AMBIGUOUS_WORKSPACE, by_name,
    )
    form = _match_one(
        db.query(Form).filter(Form.workspace_id == workspace.id), Form, form_segment,
        ERROR.FORM_NOT_FOUND, ERROR.AMBIGUOUS_FORM, by_name,
    )
    # Private forms are never served anonymously; 404 hides that they exist
    if form.is_private:
        raise CustomException(status_code=404, message=ERROR.FORM_NOT_FOUND)
    return _form_detail(db, form)


def get_form_by_slug(db: Session, workspace_slug: str, form_slug: str) -> dict:
    try:
        return _resolve_public_form(db, workspace_slug, form_slug, by_name=False)
    except Exception as e:
        handle_service_error(error=e, context="get_form_by_slug")


def get_form_by_path(db: Session, path: str) -> dict:
    """
    Resolve ``"<workspace>/<form>"``. Each segment is matched as a slug first
    and then, case-insensitively, against the display name (hyphens may stand
    for spaces).
    """
    try:
        segments = [s.strip() for s in (path or "").strip("/").split("/")]
        if len(segments) != 2 or not all(segments):
            raise CustomException(status_code=400, message=ERROR.INVALID_FORM_PATH)
        return _resolve_public_form(db, segments[0], segments[1], by_name=True)
    except Exception as e:
        handle_service_error(error=e, context="get_form_by_path")


def update_form(db: Session, form: Form, data: FormUpdate) -> dict:
    """Update name/description/privacy; the slug is left unchanged"""
    try:
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "is_private" and value is None:
                continue
            setattr(form, field, value)
        db.commit()
        db.refresh(form)
        return serialize_form(form)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="update_form")


def remove_forms(db: Session, form_ids: List[str]) -> None:
    """
    Delete forms and everything hanging off them in dependency order.
    Flushes only; the caller commits or rolls back the whole unit.
    """
    if not form_ids:
        return

    question_ids = select(Question.id).where(Question.form_id.in_(form_ids))
    submission_ids = select(FormSubmission.id).where(FormSubmission.form_id.in_(form_ids))

    steps = [
        ("question_responses", db.query(QuestionResponse).filter(QuestionResponse.submission_id.in_(submission_ids))),
        ("form_submissions", db.query(FormSubmission).filter(FormSubmission.form_id.in_(form_ids))),
        ("question_analytics", db.query(QuestionAnalytics).filter(QuestionAnalytics.question_id.in_(question_ids))),
        ("form_analytics", db.query(FormAnalytics).filter(FormAnalytics.form_id.in_(form_ids))),
        ("question_choices", db.query(QuestionChoice).filter(QuestionChoice.question_id.in_(question_ids))),
        ("questions", db.query(Question).filter(Question.form_id.in_(form_ids))),
        ("form_settings", db.query(FormSettings).filter(FormSettings.form_id.in_(form_ids))),
        ("forms", db.query(Form).filter(Form.id.in_(form_ids))),
    ]
    for table, query in steps:
        deleted = query.delete(synchronize_session=False)
        log_database_operation("DELETE", f"remove_forms.{table}", {"rows": deleted})


def delete_form(db: Session, form: Form) -> None:
    try:
        form_id = form.id
        remove_forms(db, [form_id])
        db.commit()
        db.expire_all()
        logger.info(f"Form {form_id} deleted")

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="delete_form")


def get_form_settings(db: Session, form: Form) -> dict:
    try:
        form_settings = db.query(FormSettings).filter(FormSettings.form_id == form.id).first()
        if not form_settings:
            raise CustomException(status_code=404, message=ERROR.FORM_SETTINGS_NOT_FOUND)
        return serialize_settings(form_settings)
    except Exception as e:
        handle_service_error(error=e, context="get_form_settings")


def update_form_settings(db: Session, form: Form, data: FormSettingsUpdate) -> dict:
    try:
        form_settings = db.query(FormSettings).filter(FormSettings.form_id == form.id).first()
        if not form_settings:
            raise CustomException(status_code=404, message=ERROR.FORM_SETTINGS_NOT_FOUND)

        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "redirect_url":
                value = str(value) if value is not None else None
            elif value is None and field != "landing_page_description" and field != "ending_page_description":
                continue
            setattr(form_settings, field, value)

        db.commit()
        db.refresh(form_settings)
        return serialize_settings(form_settings)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="update_form_settings")


def _ordered_questions(db: Session, form_id: str) -> List[dict]:
    questions, _ = list_form_questions(db, form_id)
    return [serialize_question(q) for q in flatten_in_order(questions)]


def reorder_questions(db: Session, form: Form, items: List[QuestionOrderItem]) -> List[dict]:
    """
    Apply a batch of ``{id, parentId, order}`` placements.

    Items are grouped by their target parent. Inside a group they are sorted by
    the requested ``order`` (request position breaks ties, items without an
    order go last) and renumbered 1..n. Questions of an affected group that the
    request does not mention follow in their previous order. Root placements
    are applied before child placements and paths are rebuilt at the end.
    """
    try:
        questions = {q.id: q for q in db.query(Question).filter(Question.form_id == form.id).all()}

        seen = set()
        for item in items:
            if item.id not in questions or item.id in seen:
                raise CustomException(status_code=400, message=ERROR.PARENT_NOT_IN_FORM)
            if item.parentId is not None and item.parentId not in questions:
                raise CustomException(status_code=400, message=ERROR.PARENT_NOT_IN_FORM)
            seen.add(item.id)

        parent_by_id = {qid: q.parent_id for qid, q in questions.items()}
        affected = []
        for item in items:
            for key in (parent_by_id[item.id], item.parentId):
                if key not in affected:
                    affected.append(key)
            parent_by_id[item.id] = item.parentId

        try:
            compute_paths(parent_by_id)
        except ValueError:
            raise CustomException(status_code=400, message=ERROR.QUESTION_CYCLE)

        requested = defaultdict(list)
        for position, item in enumerate(items):
            requested[item.parentId].append((position, item))

        # Root group first, then child groups in the order they were referenced
        affected.sort(key=lambda key: key is not None)

        for parent_id in affected:
            listed = sorted(
                requested.get(parent_id, []),
                key=lambda entry: (entry[1].order is None, entry[1].order or 0, entry[0]),
            )
            listed_ids = [item.id for _, item in listed]
            rest = sorted(
                (q for qid, q in questions.items()
                 if parent_by_id[qid] == parent_id and qid not in set(listed_ids)),
                key=lambda q: q.order,
            )
            for position, question in enumerate([questions[qid] for qid in listed_ids] + rest, start=1):
                question.parent_id = parent_id
                question.order = position

        rebuild_paths(db, form.id)
        db.commit()

        logger.info(f"Reordered {len(items)} questions in form {form.id}")
        return _ordered_questions(db, form.id)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="reorder_questions")


def move_question(db: Session, form: Form, question_id: str, new_parent_id: Optional[str]) -> dict:
    """Reparent a question (None for root); it goes to the end of its new sibling group"""
    try:
        question = get_form_question(db, form.id, question_id)

        if new_parent_id is not None:
            parent = db.get(Question, new_parent_id)
            if not parent or parent.form_id != question.form_id:
                raise CustomException(status_code=400, message=ERROR.PARENT_NOT_IN_FORM)

            parent_by_id = dict(
                db.query(Question.id, Question.parent_id).filter(Question.form_id == form.id).all()
            )
            if is_same_or_descendant(parent_by_id, new_parent_id, question.id):
                raise CustomException(status_code=400, message=ERROR.QUESTION_CYCLE)

        old_parent_id = question.parent_id
        if old_parent_id != new_parent_id:
            question.order = next_question_order(db, form.id, new_parent_id)
            question.parent_id = new_parent_id
            db.flush()
            compact_siblings(db, form.id, old_parent_id)
            rebuild_paths(db, form.id)

        db.commit()
        db.refresh(question)
        return serialize_question(question)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="move_question")
