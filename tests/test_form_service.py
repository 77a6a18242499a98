import pytest

from tagform.exceptions import CustomException
from tagform.models.form_model import Form, FormSettings
from tagform.models.question_model import Question, QuestionChoice
from tagform.schema.form_schema import FormCreate, FormSettingsUpdate, FormUpdate
from tagform.schema.question_schema import QuestionCreate
from tagform.services import form_service, question_service


def test_duplicate_names_get_suffixed_slugs(db, workspace):
    first = form_service.create_form(db, workspace.id, FormCreate(name="Feedback"))
    second = form_service.create_form(db, workspace.id, FormCreate(name="Feedback"))

    assert first["slug"] == "feedback"
    assert second["slug"] == "feedback-1"


def test_lost_slug_race_ends_in_conflict(db, workspace, monkeypatch):
    form_service.create_form(db, workspace.id, FormCreate(name="Feedback"))
    # Every existence check misses, so each insert collides with the existing row
    monkeypatch.setattr(form_service, "_form_slug_exists", lambda db, workspace_id: lambda slug: False)

    with pytest.raises(CustomException) as exc:
        form_service.create_form(db, workspace.id, FormCreate(name="Feedback"))

    assert exc.value.status_code == 409
    assert db.query(Form).filter(Form.workspace_id == workspace.id).count() == 1


def test_create_form_inserts_default_settings(db, workspace):
    created = form_service.create_form(db, workspace.id, FormCreate(name="Onboarding", description="Tell us"))

    settings = created["settings"]
    assert settings["landing_page_title"] == "Onboarding"
    assert settings["landing_page_description"] == "Tell us"
    assert settings["landing_page_button_text"] == "Start"
    assert settings["ending_page_title"] == "Thank You!"
    assert db.query(FormSettings).filter(FormSettings.form_id == created["id"]).count() == 1


def test_update_keeps_slug(db, form):
    updated = form_service.update_form(db, form, FormUpdate(name="Renamed Form"))

    assert updated["name"] == "Renamed Form"
    assert updated["slug"] == "customer-feedback"


def test_update_settings_stores_redirect_url(db, form):
    updated = form_service.update_form_settings(
        db, form, FormSettingsUpdate(redirect_url="https://example.com/done", show_progress_bar=False)
    )
    assert updated["redirect_url"].startswith("https://example.com/done")
    assert updated["show_progress_bar"] is False


def test_list_forms_paginates(db, workspace):
    for name in ("One", "Two", "Three"):
        form_service.create_form(db, workspace.id, FormCreate(name=name))

    page = form_service.list_forms(db, workspace.id, page=1, limit=2)

    assert len(page["forms"]) == 2
    assert page["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}


def test_get_form_lists_questions_parents_first(db, form):
    parent = question_service.create_question(db, form.id, QuestionCreate(type="short-text", text="Parent"))
    question_service.create_question(db, form.id, QuestionCreate(type="short-text", text="Second root"))
    question_service.create_question(
        db, form.id, QuestionCreate(type="dropdown", text="Child", parent_id=parent["id"], choices=["A", "B"])
    )

    detail = form_service.get_form(db, form)

    assert [q["text"] for q in detail["questions"]] == ["Parent", "Child", "Second root"]
    assert [c["text"] for c in detail["questions"][1]["choices"]] == ["A", "B"]
    assert detail["settings"]["form_id"] == form.id


def test_delete_form_leaves_no_orphans(db, form):
    question = question_service.create_question(
        db, form.id, QuestionCreate(type="multiple-choice", text="Pick one", choices=["Yes", "No"])
    )
    question_service.create_question(
        db, form.id, QuestionCreate(type="long-text", text="Why?", parent_id=question["id"])
    )
    form_id = form.id

    form_service.delete_form(db, form)

    assert db.query(Form).filter(Form.id == form_id).count() == 0
    assert db.query(Question).filter(Question.form_id == form_id).count() == 0
    assert db.query(QuestionChoice).count() == 0
    assert db.query(FormSettings).filter(FormSettings.form_id == form_id).count() == 0


def test_public_lookup_by_slug(db, workspace, form):
    detail = form_service.get_form_by_slug(db, workspace.slug, form.slug)
    assert detail["id"] == form.id


def test_public_lookup_by_path_falls_back_to_name(db, workspace, form):
    detail = form_service.get_form_by_path(db, "Research/Customer-Feedback")
    assert detail["id"] == form.id


def test_public_lookup_rejects_malformed_path(db):
    with pytest.raises(CustomException) as exc:
        form_service.get_form_by_path(db, "just-one-segment")
    assert exc.value.status_code == 400


def test_public_lookup_hides_private_forms(db, workspace):
    created = form_service.create_form(db, workspace.id, FormCreate(name="Secret", is_private=True))

    with pytest.raises(CustomException) as exc:
        form_service.get_form_by_slug(db, workspace.slug, created["slug"])
    assert exc.value.status_code == 404


def test_public_lookup_reports_ambiguous_names(db, workspace):
    form_service.create_form(db, workspace.id, FormCreate(name="Survey"))
    form_service.create_form(db, workspace.id, FormCreate(name="survey"))

    # Exact slug still resolves
    assert form_service.get_form_by_path(db, "research/survey")["slug"] == "survey"

    with pytest.raises(CustomException) as exc:
        form_service.get_form_by_path(db, "research/SURVEY")
    assert exc.value.status_code == 409
