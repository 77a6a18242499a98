import math
import logging
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tagform.config.env_config import settings
from tagform.constants.error import ERROR
from tagform.constants.utils import QUESTION_TYPE, SUBMISSION_STATUS, SUBMISSION_SORT_FIELDS
from tagform.exceptions import CustomException
from tagform.models.form_model import Form
from tagform.models.question_model import Question, QuestionChoice
from tagform.models.submission_model import FormSubmission, QuestionResponse
from tagform.schema.submission_schema import ANSWER_MODELS, CompleteSubmissionRequest, ResponseItem
from tagform.services.analytics_service import recompute_form_analytics
from tagform.utils.logger_utils import handle_service_error, log_warning
from tagform.utils.serializer_utils import serialize_submission

logger = logging.getLogger(__name__)


def _find_submission(db: Session, form_id: str, email: str) -> Optional[FormSubmission]:
    return (
        db.query(FormSubmission)
        .filter(FormSubmission.form_id == form_id, FormSubmission.email == email)
        .first()
    )


def _resume_or_reject(submission: FormSubmission) -> dict:
    if submission.status == SUBMISSION_STATUS.COMPLETED:
        raise CustomException(
            status_code=409,
            message=ERROR.DUPLICATE_SUBMISSION,
            data={"completed_at": submission.completed_at},
        )
    return serialize_submission(submission)


def start_submission(db: Session, form: Form, email: str, metadata: Optional[dict] = None):
    """
    Open a submission for ``email`` on the form.

    Returns ``(submission, created)``. An in-progress submission for the same
    email is handed back unchanged; a completed one is a 409.
    """
    try:
        email = email.lower()
        metadata = dict(metadata or {})

        existing = _find_submission(db, form.id, email)
        if existing:
            return _resume_or_reject(existing), False

        submission = FormSubmission(
            form_id=form.id,
            email=email,
            status=SUBMISSION_STATUS.IN_PROGRESS,
            started_at=datetime.utcnow(),
            ip_address=metadata.pop("ip_address", None),
            user_agent=metadata.pop("user_agent", None),
            extra_metadata=metadata or None,
        )
        db.add(submission)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent start won the unique (form_id, email) insert
            db.rollback()
            log_warning(context="start_submission", message=f"concurrent start for form {form.id}")
            existing = _find_submission(db, form.id, email)
            if not existing:
                raise
            return _resume_or_reject(existing), False

        db.refresh(submission)
        logger.info(f"Submission {submission.id} started on form {form.id}")
        return serialize_submission(submission), True

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="start_submission")


def _parse_answer(question: Question, item: ResponseItem, choice_ids: set):
    """Validate one answer against its question; returns (response_data, choice_id)"""
    try:
        answer = ANSWER_MODELS[question.type].model_validate(item.data)
    except ValidationError:
        raise CustomException(
            status_code=400,
            message=ERROR.INVALID_RESPONSE,
            data={"questionId": question.id, "type": question.type},
        )

    data = answer.model_dump(mode="json")

    if question.type in QUESTION_TYPE.SINGLE_CHOICE:
        if data["choiceId"] not in choice_ids:
            raise CustomException(status_code=400, message=ERROR.CHOICE_NOT_IN_QUESTION, data={"questionId": question.id})
        return data, data["choiceId"]

    if question.type == QUESTION_TYPE.CHECKBOX:
        if any(cid not in choice_ids for cid in data["choiceIds"]):
            raise CustomException(status_code=400, message=ERROR.CHOICE_NOT_IN_QUESTION, data={"questionId": question.id})
        if len(set(data["choiceIds"])) != len(data["choiceIds"]):
            raise CustomException(status_code=400, message=ERROR.INVALID_RESPONSE, data={"questionId": question.id})
        return data, None

    if question.type in QUESTION_TYPE.TEXT:
        if question.max_chars is not None and len(data["text"]) > question.max_chars:
            raise CustomException(
                status_code=400,
                message=ERROR.RESPONSE_TOO_LONG,
                data={"questionId": question.id, "max_chars": question.max_chars},
            )

    return data, None


def _completion_seconds(submission: FormSubmission, payload: CompleteSubmissionRequest, now: datetime) -> int:
    if payload.completionTime is not None:
        return payload.completionTime
    if payload.startTime is not None:
        started = datetime.utcfromtimestamp(payload.startTime / 1000)
        return max(0, int((now - started).total_seconds()))
    return max(0, int((now - submission.started_at).total_seconds()))


def complete_submission(db: Session, form: Form, submission_id: str, payload: CompleteSubmissionRequest) -> dict:
    """
    Validate the answers, store them and close the submission. The status flip,
    the responses and the analytics refresh are committed together.
    """
    try:
        submission = (
            db.query(FormSubmission)
            .filter(FormSubmission.id == submission_id, FormSubmission.form_id == form.id)
            .first()
        )
        if not submission:
            raise CustomException(status_code=404, message=ERROR.SUBMISSION_NOT_FOUND)
        if submission.status != SUBMISSION_STATUS.IN_PROGRESS:
            raise CustomException(
                status_code=409,
                message=ERROR.SUBMISSION_ALREADY_COMPLETED,
                data={"completed_at": submission.completed_at},
            )

        questions = {q.id: q for q in db.query(Question).filter(Question.form_id == form.id).all()}
        choice_ids = {}
        for choice in db.query(QuestionChoice).filter(QuestionChoice.question_id.in_(list(questions))):
            choice_ids.setdefault(choice.question_id, set()).add(choice.id)

        answered = set()
        rows: List[QuestionResponse] = []
        for item in payload.responses:
            question = questions.get(item.questionId)
            if not question:
                raise CustomException(status_code=400, message=ERROR.UNKNOWN_QUESTION, data={"questionId": item.questionId})
            if item.questionId in answered:
                raise CustomException(status_code=400, message=ERROR.DUPLICATE_RESPONSE, data={"questionId": item.questionId})
            answered.add(item.questionId)

            data, choice_id = _parse_answer(question, item, choice_ids.get(question.id, set()))
            rows.append(QuestionResponse(
                submission_id=submission.id,
                question_id=question.id,
                response_data=data,
                choice_id=choice_id,
            ))

        missing = sorted(qid for qid, q in questions.items() if q.is_required and qid not in answered)
        if missing:
            raise CustomException(status_code=400, message=ERROR.MISSING_REQUIRED, data={"questionIds": missing})

        now = datetime.utcnow()
        submission.status = SUBMISSION_STATUS.COMPLETED
        submission.completed_at = now
        submission.completion_time = _completion_seconds(submission, payload, now)
        db.add_all(rows)

        recompute_form_analytics(db, form.id)
        db.commit()
        db.refresh(submission)

        logger.info(f"Submission {submission.id} completed with {len(rows)} responses")
        return serialize_submission(submission, responses=rows)

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="complete_submission")


def _responses_for(db: Session, submission_ids: List[str]) -> dict:
    grouped = {sid: [] for sid in submission_ids}
    if submission_ids:
        for response in db.query(QuestionResponse).filter(QuestionResponse.submission_id.in_(submission_ids)):
            grouped[response.submission_id].append(response)
    return grouped


def list_submissions(
    db: Session,
    form: Form,
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    status: Optional[str] = None,
) -> dict:
    try:
        limit = limit or settings.DEFAULT_PAGE_SIZE
        if sort_by not in SUBMISSION_SORT_FIELDS or sort_order not in ("asc", "desc"):
            raise CustomException(status_code=400, message=ERROR.INVALID_SORT)

        query = db.query(FormSubmission).filter(FormSubmission.form_id == form.id)
        if status:
            if status not in SUBMISSION_STATUS.ALL:
                raise CustomException(status_code=400, message=ERROR.INVALID_STATUS)
            query = query.filter(FormSubmission.status == status)

        column = getattr(FormSubmission, sort_by)
        total = query.count()
        submissions = (
            query.order_by(column.asc() if sort_order == "asc" else column.desc(), FormSubmission.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        responses = _responses_for(db, [s.id for s in submissions])

        return {
            "submissions": [serialize_submission(s, responses=responses[s.id]) for s in submissions],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        }

    except Exception as e:
        handle_service_error(error=e, context="list_submissions")


def get_submission(db: Session, form: Form, submission_id: str) -> dict:
    try:
        submission = (
            db.query(FormSubmission)
            .filter(FormSubmission.id == submission_id, FormSubmission.form_id == form.id)
            .first()
        )
        if not submission:
            raise CustomException(status_code=404, message=ERROR.SUBMISSION_NOT_FOUND)
        return serialize_submission(submission, responses=_responses_for(db, [submission.id])[submission.id])

    except Exception as e:
        handle_service_error(error=e, context="get_submission")
