import csv
import io


def setup_form(client, headers, is_private=False):
    workspace = client.post("/api/workspaces", json={"name": "Acme"}, headers=headers).json()["data"]
    base = f"/api/workspaces/{workspace['id']}/forms"
    form = client.post(base, json={"name": "Feedback", "is_private": is_private}, headers=headers).json()["data"]
    return workspace, f"{base}/{form['id']}", form


def test_form_crud_and_settings(client, auth_headers):
    workspace, form_url, form = setup_form(client, auth_headers)

    assert form["slug"] == "feedback"
    assert form["settings"]["landing_page_title"] == "Feedback"

    detail = client.get(form_url, headers=auth_headers).json()["data"]
    assert detail["questions"] == []

    settings = client.put(
        f"{form_url}/settings", json={"ending_page_title": "Thanks!"}, headers=auth_headers
    ).json()["data"]
    assert settings["ending_page_title"] == "Thanks!"

    renamed = client.put(form_url, json={"name": "Feedback 2024"}, headers=auth_headers).json()["data"]
    assert renamed["slug"] == "feedback"

    assert client.delete(form_url, headers=auth_headers).status_code == 200
    assert client.get(form_url, headers=auth_headers).status_code == 404


def test_question_endpoints(client, auth_headers):
    _, form_url, _ = setup_form(client, auth_headers)

    a = client.post(f"{form_url}/questions", json={"type": "short-text", "text": "A"}, headers=auth_headers).json()["data"]
    b = client.post(f"{form_url}/questions", json={"type": "short-text", "text": "B"}, headers=auth_headers).json()["data"]

    moved = client.post(f"{form_url}/questions/{b['id']}/move", json={"parentId": a["id"]}, headers=auth_headers)
    assert moved.status_code == 200

    tree = client.get(f"{form_url}/questions/hierarchy", headers=auth_headers).json()["data"]
    assert [n["id"] for n in tree] == [a["id"]]
    assert [n["id"] for n in tree[0]["children"]] == [b["id"]]

    reordered = client.post(
        f"{form_url}/questions/reorder",
        json={"questionIds": [{"id": b["id"], "parentId": None, "order": 1}]},
        headers=auth_headers,
    ).json()["data"]
    assert [(q["text"], q["order"]) for q in reordered] == [("B", 1), ("A", 2)]

    deleted = client.delete(f"{form_url}/questions/{a['id']}", headers=auth_headers)
    assert deleted.json()["data"]["deletedIds"] == [a["id"]]


def test_question_missing_text_uses_field_message(client, auth_headers):
    _, form_url, _ = setup_form(client, auth_headers)

    response = client.post(f"{form_url}/questions", json={"type": "short-text"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == [{"field": "text", "message": "Text is required."}]


def test_public_submission_flow(client, auth_headers):
    workspace, form_url, form = setup_form(client, auth_headers)
    question = client.post(
        f"{form_url}/questions",
        json={"type": "dropdown", "text": "Plan", "is_required": True, "choices": ["Free", "Pro"]},
        headers=auth_headers,
    ).json()["data"]
    pro = question["choices"][1]["id"]

    public = client.get(f"/api/forms/{workspace['slug']}/{form['slug']}")
    assert public.status_code == 200
    assert public.json()["data"]["questions"][0]["id"] == question["id"]

    by_path = client.get("/api/forms/by-path", params={"path": "acme/Feedback"})
    assert by_path.json()["data"]["id"] == form["id"]

    started = client.post(f"{form_url}/submissions/start", json={"email": "r@example.com"})
    assert started.status_code == 201
    resumed = client.post(f"{form_url}/submissions/start", json={"email": "r@example.com"})
    assert resumed.status_code == 200
    assert resumed.json()["data"]["id"] == started.json()["data"]["id"]

    submission_id = started.json()["data"]["id"]
    completed = client.post(
        f"{form_url}/submissions/{submission_id}/complete",
        json={"responses": [{"questionId": question["id"], "data": {"choiceId": pro}}]},
    )
    assert completed.status_code == 200
    assert completed.json()["data"]["status"] == "completed"

    conflict = client.post(f"{form_url}/submissions/start", json={"email": "r@example.com"})
    assert conflict.status_code == 409
    assert conflict.json()["data"]["completed_at"]

    listed = client.get(f"{form_url}/submissions", headers=auth_headers).json()["data"]
    assert listed["pagination"]["total"] == 1

    analytics = client.get(f"{form_url}/analytics", headers=auth_headers).json()["data"]
    assert analytics["total_submissions"] == 1

    question_stats = client.get(
        f"{form_url}/questions/{question['id']}/analytics", headers=auth_headers
    ).json()["data"]
    assert [(d["text"], d["count"]) for d in question_stats["choice_distribution"]] == [("Free", 0), ("Pro", 1)]

    export = client.get(f"{form_url}/analytics/export", params={"format": "csv"}, headers=auth_headers)
    assert export.headers["content-type"].startswith("text/csv")
    assert "attachment" in export.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(export.text)))
    assert len(rows) == 2

    bad_export = client.get(f"{form_url}/analytics/export", params={"format": "xml"}, headers=auth_headers)
    assert bad_export.status_code == 400


def test_private_form_is_hidden_from_public(client, auth_headers):
    workspace, form_url, form = setup_form(client, auth_headers, is_private=True)

    assert client.get(f"/api/forms/{workspace['slug']}/{form['slug']}").status_code == 404
    assert client.post(f"{form_url}/submissions/start", json={"email": "r@example.com"}).status_code == 404


def test_unknown_public_path_is_not_found(client):
    response = client.get("/api/forms/nowhere/nothing")
    assert response.status_code == 404
    assert response.json() == {"statusCode": 404, "message": "Workspace not found"}


def test_health(client):
    assert client.get("/health").json()["statusCode"] == 200


def test_unexpected_errors_use_generic_envelope(client, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("database exploded")

    monkeypatch.setattr("tagform.services.form_service.get_form_by_slug", explode)

    response = client.get("/api/forms/acme/feedback")

    assert response.status_code == 500
    assert response.json() == {"statusCode": 500, "message": "Something went wrong. Please try again later"}


def test_out_of_range_start_time_is_rejected(client, auth_headers):
    _, form_url, _ = setup_form(client, auth_headers)
    started = client.post(f"{form_url}/submissions/start", json={"email": "r@example.com"}).json()["data"]

    response = client.post(
        f"{form_url}/submissions/{started['id']}/complete",
        json={"responses": [], "startTime": 10**18},
    )

    assert response.status_code == 400
    assert response.json()["message"][0]["field"] == "startTime"
