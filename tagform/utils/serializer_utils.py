from tagform.models.workspace_model import Workspace
from tagform.models.form_model import Form, FormSettings
from tagform.models.question_model import Question, QuestionChoice
from tagform.models.submission_model import FormSubmission, QuestionResponse
from tagform.models.analytics_model import FormAnalytics, QuestionAnalytics


def serialize_workspace(workspace: Workspace) -> dict:
    return {
        "id": workspace.id,
        "name": workspace.name,
        "type": workspace.type,
        "slug": workspace.slug,
        "user_id": workspace.user_id,
        "created_at": workspace.created_at,
        "updated_at": workspace.updated_at,
    }


def serialize_form(form: Form) -> dict:
    return {
        "id": form.id,
        "workspace_id": form.workspace_id,
        "name": form.name,
        "description": form.description,
        "is_private": form.is_private,
        "slug": form.slug,
        "created_at": form.created_at,
        "updated_at": form.updated_at,
    }


def serialize_settings(settings: FormSettings) -> dict:
    return {
        "id": settings.id,
        "form_id": settings.form_id,
        "landing_page_title": settings.landing_page_title,
        "landing_page_description": settings.landing_page_description,
        "landing_page_button_text": settings.landing_page_button_text,
        "show_progress_bar": settings.show_progress_bar,
        "ending_page_title": settings.ending_page_title,
        "ending_page_description": settings.ending_page_description,
        "ending_page_button_text": settings.ending_page_button_text,
        "redirect_url": settings.redirect_url,
        "created_at": settings.created_at,
        "updated_at": settings.updated_at,
    }


def serialize_choice(choice: QuestionChoice) -> dict:
    return {
        "id": choice.id,
        "question_id": choice.question_id,
        "text": choice.text,
        "order": choice.order,
    }


def serialize_question(question: Question, choices=None) -> dict:
    data = {
        "id": question.id,
        "form_id": question.form_id,
        "type": question.type,
        "text": question.text,
        "description": question.description,
        "is_required": question.is_required,
        "max_chars": question.max_chars,
        "order": question.order,
        "parent_id": question.parent_id,
        "path": question.path,
        "created_at": question.created_at,
        "updated_at": question.updated_at,
    }
    if choices is not None:
        data["choices"] = [serialize_choice(c) for c in sorted(choices, key=lambda c: c.order)]
    return data


def serialize_response(response: QuestionResponse) -> dict:
    return {
        "question_id": response.question_id,
        "response_data": response.response_data,
        "choice_id": response.choice_id,
    }


def serialize_submission(submission: FormSubmission, responses=None) -> dict:
    data = {
        "id": submission.id,
        "form_id": submission.form_id,
        "email": submission.email,
        "status": submission.status,
        "started_at": submission.started_at,
        "completed_at": submission.completed_at,
        "completion_time": submission.completion_time,
        "metadata": {
            "ip_address": submission.ip_address,
            "user_agent": submission.user_agent,
            **(submission.extra_metadata or {}),
        },
        "created_at": submission.created_at,
    }
    if responses is not None:
        data["question_responses"] = [serialize_response(r) for r in responses]
    return data


def serialize_form_analytics(analytics: FormAnalytics) -> dict:
    return {
        "form_id": analytics.form_id,
        "total_submissions": analytics.total_submissions,
        "average_completion_time": analytics.average_completion_time,
        "last_submission_at": analytics.last_submission_at,
        "updated_at": analytics.updated_at,
    }


def serialize_question_analytics(analytics: QuestionAnalytics) -> dict:
    return {
        "question_id": analytics.question_id,
        "total_responses": analytics.total_responses,
        "choice_distribution": analytics.choice_distribution,
        "average_response_length": analytics.average_response_length,
        "common_responses": analytics.common_responses,
        "updated_at": analytics.updated_at,
    }
