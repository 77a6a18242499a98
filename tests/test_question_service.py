from datetime import datetime

import pytest

from tagform.exceptions import CustomException
from tagform.models.question_model import Question, QuestionChoice
from tagform.models.submission_model import FormSubmission, QuestionResponse
from tagform.schema.form_schema import FormCreate
from tagform.schema.question_schema import QuestionCreate, QuestionOrderItem, QuestionUpdate
from tagform.services import form_service, question_service


def add_question(db, form, text, parent_id=None, type="short-text", choices=None):
    return question_service.create_question(
        db, form.id, QuestionCreate(type=type, text=text, parent_id=parent_id, choices=choices)
    )


def orders(db, form, parent_id=None):
    query = db.query(Question).filter(Question.form_id == form.id)
    if parent_id is None:
        query = query.filter(Question.parent_id.is_(None))
    else:
        query = query.filter(Question.parent_id == parent_id)
    return [(q.text, q.order) for q in query.order_by(Question.order)]


def test_questions_append_within_their_sibling_group(db, form):
    a = add_question(db, form, "A")
    b = add_question(db, form, "B")
    child = add_question(db, form, "A.1", parent_id=a["id"])

    assert (a["order"], b["order"]) == (1, 2)
    assert child["order"] == 1
    assert child["path"] == f"{a['id']}.{child['id']}"


def test_empty_parent_id_appends_at_root(db, form):
    add_question(db, form, "A")
    add_question(db, form, "B")

    c = add_question(db, form, "C", parent_id="")

    assert c["parent_id"] is None
    assert orders(db, form) == [("A", 1), ("B", 2), ("C", 3)]


def test_parent_must_belong_to_form(db, workspace, form):
    other = form_service.create_form(db, workspace.id, FormCreate(name="Other"))
    foreign = question_service.create_question(db, other["id"], QuestionCreate(type="short-text", text="X"))

    with pytest.raises(CustomException) as exc:
        add_question(db, form, "Child", parent_id=foreign["id"])
    assert exc.value.status_code == 400


def test_type_options_are_validated(db, form):
    with pytest.raises(CustomException):
        question_service.create_question(db, form.id, QuestionCreate(type="date", text="When", max_chars=10))
    with pytest.raises(CustomException):
        add_question(db, form, "Name", choices=["A"])
    with pytest.raises(CustomException):
        add_question(db, form, "Bogus", type="slider")


def test_reorder_renumbers_densely(db, form):
    q1 = add_question(db, form, "Q1")
    q2 = add_question(db, form, "Q2")
    q3 = add_question(db, form, "Q3")
    for question_id, order in ((q1["id"], 3), (q2["id"], 1), (q3["id"], 2)):
        db.get(Question, question_id).order = order
    db.commit()

    form_service.reorder_questions(db, form, [
        QuestionOrderItem(id=q1["id"], order=3),
        QuestionOrderItem(id=q2["id"], order=1),
        QuestionOrderItem(id=q3["id"], order=2),
    ])

    assert orders(db, form) == [("Q2", 1), ("Q3", 2), ("Q1", 3)]


def test_reorder_keeps_each_group_dense(db, form):
    a = add_question(db, form, "A")
    add_question(db, form, "B")
    c = add_question(db, form, "C")
    a1 = add_question(db, form, "A.1", parent_id=a["id"])

    # C becomes the second child of A, B stays at root
    form_service.reorder_questions(db, form, [
        QuestionOrderItem(id=a1["id"], parentId=a["id"], order=1),
        QuestionOrderItem(id=c["id"], parentId=a["id"], order=2),
    ])

    assert orders(db, form) == [("A", 1), ("B", 2)]
    assert orders(db, form, a["id"]) == [("A.1", 1), ("C", 2)]
    moved = db.get(Question, c["id"])
    assert moved.path == f"{a['id']}.{c['id']}"


def test_reorder_rejects_cycles(db, form):
    a = add_question(db, form, "A")
    child = add_question(db, form, "A.1", parent_id=a["id"])

    with pytest.raises(CustomException) as exc:
        form_service.reorder_questions(db, form, [QuestionOrderItem(id=a["id"], parentId=child["id"], order=1)])
    assert exc.value.status_code == 400


def test_move_then_delete_parent_removes_subtree(db, form):
    a = add_question(db, form, "A")
    b = add_question(db, form, "B")
    add_question(db, form, "C")

    moved = form_service.move_question(db, form, b["id"], a["id"])
    assert moved["parent_id"] == a["id"]
    assert moved["order"] == 1
    assert orders(db, form) == [("A", 1), ("C", 2)]

    question_service.delete_question(db, form.id, a["id"])

    assert db.get(Question, b["id"]) is None
    assert orders(db, form) == [("C", 1)]


def test_move_under_descendant_is_rejected(db, form):
    a = add_question(db, form, "A")
    child = add_question(db, form, "A.1", parent_id=a["id"])

    with pytest.raises(CustomException) as exc:
        form_service.move_question(db, form, a["id"], child["id"])
    assert exc.value.status_code == 400


def test_update_replaces_choices(db, form):
    q = add_question(db, form, "Colour", type="dropdown", choices=["Red", "Green"])

    updated = question_service.update_question(
        db, form.id, q["id"], QuestionUpdate(text="Favourite colour", choices=["Blue"])
    )

    assert updated["text"] == "Favourite colour"
    assert [(c["text"], c["order"]) for c in updated["choices"]] == [("Blue", 1)]


def test_referenced_choices_cannot_be_removed(db, form):
    q = add_question(db, form, "Colour", type="multiple-choice", choices=["Red", "Green"])
    red = q["choices"][0]["id"]

    submission = FormSubmission(form_id=form.id, email="a@example.com", status="completed",
                                started_at=datetime.utcnow())
    db.add(submission)
    db.flush()
    db.add(QuestionResponse(submission_id=submission.id, question_id=q["id"],
                            response_data={"choiceId": red}, choice_id=red))
    db.commit()

    with pytest.raises(CustomException) as exc:
        question_service.delete_choice(db, form.id, q["id"], red)
    assert exc.value.status_code == 409
    assert exc.value.data == {"choiceIds": [red]}

    with pytest.raises(CustomException):
        question_service.update_question(db, form.id, q["id"], QuestionUpdate(text="Colour", choices=["Blue"]))
    assert db.query(QuestionChoice).filter(QuestionChoice.question_id == q["id"]).count() == 2


def test_choice_crud_keeps_order_dense(db, form):
    q = add_question(db, form, "Size", type="checkbox", choices=["S", "M"])
    large = question_service.create_choice(db, form.id, q["id"], "L")
    assert large["order"] == 3

    small = q["choices"][0]["id"]
    question_service.delete_choice(db, form.id, q["id"], small)
    remaining = question_service.list_choices(db, form.id, q["id"])
    assert [(c["text"], c["order"]) for c in remaining] == [("M", 1), ("L", 2)]

    reordered = question_service.reorder_choices(db, form.id, q["id"], [large["id"]])
    assert [(c["text"], c["order"]) for c in reordered] == [("L", 1), ("M", 2)]


def test_reorder_choices_rejects_foreign_ids(db, form):
    q = add_question(db, form, "Size", type="checkbox", choices=["S"])

    with pytest.raises(CustomException) as exc:
        question_service.reorder_choices(db, form.id, q["id"], ["not-a-choice"])
    assert exc.value.status_code == 400


def test_hierarchy_nests_children(db, form):
    a = add_question(db, form, "A")
    add_question(db, form, "B")
    add_question(db, form, "A.1", parent_id=a["id"])

    tree = question_service.get_questions_hierarchy(db, form.id)

    assert [n["text"] for n in tree] == ["A", "B"]
    assert [n["text"] for n in tree[0]["children"]] == ["A.1"]
