import csv
import io
import json
import logging
from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tagform.config.env_config import settings
from tagform.constants.error import ERROR
from tagform.constants.utils import QUESTION_TYPE, SUBMISSION_STATUS
from tagform.exceptions import CustomException
from tagform.models.analytics_model import FormAnalytics, QuestionAnalytics
from tagform.models.form_model import Form
from tagform.models.question_model import Question, QuestionChoice
from tagform.models.submission_model import FormSubmission, QuestionResponse
from tagform.services.question_service import get_form_question, list_form_questions
from tagform.utils.hierarchy_utils import flatten_in_order
from tagform.utils.logger_utils import handle_service_error, log_database_operation
from tagform.utils.serializer_utils import (
    serialize_form_analytics,
    serialize_question_analytics,
    serialize_submission,
)

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json")


def _completed_filters(form_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> list:
    filters = [
        FormSubmission.form_id == form_id,
        FormSubmission.status == SUBMISSION_STATUS.COMPLETED,
    ]
    if start_date:
        filters.append(FormSubmission.completed_at >= datetime.combine(start_date, time.min))
    if end_date:
        # end_date is inclusive
        filters.append(FormSubmission.completed_at < datetime.combine(end_date + timedelta(days=1), time.min))
    return filters


def compute_form_stats(db: Session, form_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
    db.flush()
    total, average, last = db.query(
        func.count(FormSubmission.id),
        func.avg(FormSubmission.completion_time),
        func.max(FormSubmission.completed_at),
    ).filter(*_completed_filters(form_id, start_date, end_date)).one()

    return {
        "form_id": form_id,
        "total_submissions": total or 0,
        "average_completion_time": float(average) if average is not None else None,
        "last_submission_at": last,
    }


def _answer_text(question_type: str, data: dict) -> Optional[str]:
    if question_type == QUESTION_TYPE.DATE:
        return data.get("date")
    return data.get("text")


def compute_question_stats(
    db: Session,
    question: Question,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    """
    Aggregate the answers a question received on completed submissions.

    Choice questions get a distribution that lists every choice (zero counts
    included) in choice order; yes-no questions are reported as Yes/No. Text
    questions get the average answer length and their most frequent answers.
    Date questions get the answer histogram only.
    """
    db.flush()
    submission_ids = select(FormSubmission.id).where(*_completed_filters(question.form_id, start_date, end_date))
    responses = (
        db.query(QuestionResponse)
        .filter(
            QuestionResponse.question_id == question.id,
            QuestionResponse.submission_id.in_(submission_ids),
        )
        .all()
    )

    stats = {
        "question_id": question.id,
        "total_responses": len(responses),
        "choice_distribution": None,
        "average_response_length": None,
        "common_responses": None,
    }

    if question.type == QUESTION_TYPE.YES_NO:
        values = Counter(bool((r.response_data or {}).get("value")) for r in responses)
        stats["choice_distribution"] = [
            {"choiceId": None, "text": "Yes", "count": values[True]},
            {"choiceId": None, "text": "No", "count": values[False]},
        ]

    elif question.type in QUESTION_TYPE.CHOICE:
        counts = Counter()
        for response in responses:
            data = response.response_data or {}
            if question.type == QUESTION_TYPE.CHECKBOX:
                counts.update(set(data.get("choiceIds") or []))
            elif data.get("choiceId"):
                counts[data["choiceId"]] += 1

        choices = (
            db.query(QuestionChoice)
            .filter(QuestionChoice.question_id == question.id)
            .order_by(QuestionChoice.order)
            .all()
        )
        stats["choice_distribution"] = [
            {"choiceId": c.id, "text": c.text, "count": counts[c.id]} for c in choices
        ]

    else:
        answers = [_answer_text(question.type, r.response_data or {}) for r in responses]
        answers = [a for a in answers if a is not None]
        if question.type in QUESTION_TYPE.TEXT and answers:
            stats["average_response_length"] = sum(len(a) for a in answers) / len(answers)
        stats["common_responses"] = [
            {"response": answer, "count": count}
            for answer, count in Counter(answers).most_common(settings.ANALYTICS_TOP_RESPONSES)
        ]

    return stats


def recompute_form_analytics(db: Session, form_id: str) -> None:
    """
    Rebuild the cached analytics rows of a form from its completed submissions.
    Safe to call repeatedly; flushes only, the caller commits.
    """
    form_stats = compute_form_stats(db, form_id)

    row = db.query(FormAnalytics).filter(FormAnalytics.form_id == form_id).first()
    if not row:
        row = FormAnalytics(form_id=form_id)
        db.add(row)
    row.total_submissions = form_stats["total_submissions"]
    row.average_completion_time = form_stats["average_completion_time"]
    row.last_submission_at = form_stats["last_submission_at"]

    questions = db.query(Question).filter(Question.form_id == form_id).all()
    existing = {
        a.question_id: a
        for a in db.query(QuestionAnalytics).filter(
            QuestionAnalytics.question_id.in_([q.id for q in questions])
        )
    }
    for question in questions:
        stats = compute_question_stats(db, question)
        analytics = existing.get(question.id)
        if not analytics:
            analytics = QuestionAnalytics(question_id=question.id)
            db.add(analytics)
        analytics.total_responses = stats["total_responses"]
        analytics.choice_distribution = stats["choice_distribution"]
        analytics.average_response_length = stats["average_response_length"]
        analytics.common_responses = stats["common_responses"]

    db.flush()
    log_database_operation("UPSERT", "recompute_form_analytics", {
        "form_id": form_id,
        "total_submissions": form_stats["total_submissions"],
        "questions": len(questions),
    })


def get_form_analytics(db: Session, form: Form, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
    try:
        if not start_date and not end_date:
            row = db.query(FormAnalytics).filter(FormAnalytics.form_id == form.id).first()
            if row:
                return serialize_form_analytics(row)
        return compute_form_stats(db, form.id, start_date, end_date)

    except Exception as e:
        handle_service_error(error=e, context="get_form_analytics")


def get_question_analytics(
    db: Session,
    form: Form,
    question_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    try:
        question = get_form_question(db, form.id, question_id)
        if not start_date and not end_date:
            row = db.query(QuestionAnalytics).filter(QuestionAnalytics.question_id == question.id).first()
            if row:
                return serialize_question_analytics(row)
        return compute_question_stats(db, question, start_date, end_date)

    except Exception as e:
        handle_service_error(error=e, context="get_question_analytics")


def _responses_by_submission(db: Session, submission_ids: List[str]) -> Dict[str, List[QuestionResponse]]:
    grouped: Dict[str, List[QuestionResponse]] = {sid: [] for sid in submission_ids}
    if submission_ids:
        rows = db.query(QuestionResponse).filter(QuestionResponse.submission_id.in_(submission_ids)).all()
        for response in rows:
            grouped[response.submission_id].append(response)
    return grouped


def _isoformat(value):
    return value.isoformat() if value else ""


def export_analytics(db: Session, form: Form, format: str = "csv"):
    """
    Export completed submissions.

    Returns ``(content, media_type, filename)`` where content is the CSV text
    or the JSON-ready list of submissions.
    """
    try:
        if format not in EXPORT_FORMATS:
            raise CustomException(status_code=400, message=ERROR.INVALID_EXPORT_FORMAT)

        submissions = (
            db.query(FormSubmission)
            .filter(*_completed_filters(form.id))
            .order_by(FormSubmission.completed_at)
            .all()
        )
        responses = _responses_by_submission(db, [s.id for s in submissions])

        if format == "json":
            data = [serialize_submission(s, responses=responses[s.id]) for s in submissions]
            return data, "application/json", f"form-{form.id}-responses.json"

        questions, _ = list_form_questions(db, form.id)
        question_ids = [q.id for q in flatten_in_order(questions)]

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(
            ["submission_id", "email", "started_at", "completed_at", "completion_time"]
            + [f"question_{qid}" for qid in question_ids]
        )
        for submission in submissions:
            answers = {r.question_id: r.response_data for r in responses[submission.id]}
            writer.writerow(
                [
                    submission.id,
                    submission.email,
                    _isoformat(submission.started_at),
                    _isoformat(submission.completed_at),
                    submission.completion_time if submission.completion_time is not None else "",
                ]
                + [json.dumps(answers[qid]) if qid in answers else "" for qid in question_ids]
            )

        logger.info(f"Exported {len(submissions)} submissions of form {form.id} as csv")
        return buffer.getvalue(), "text/csv", f"form-{form.id}-responses.csv"

    except Exception as e:
        handle_service_error(error=e, context="export_analytics")
