def send(client, **fields):
    body = {"user_email": "Someone@Example.com", "type": "bug", "subject": " Crash ", "message": " It crashed "}
    body.update(fields)
    return client.post("/feedback", json=body)


def test_submit_feedback_without_token(client, admin_headers):
    response = send(client)
    assert response.status_code == 201
    feedback_id = response.json()["id"]

    data = client.get(f"/feedback/{feedback_id}", headers=admin_headers).json()
    assert data["user_email"] == "someone@example.com"
    assert data["subject"] == "Crash"
    assert data["message"] == "It crashed"
    assert data["status"] == "new"
    assert data["resolved_at"] is None


def test_submit_feedback_validation(client):
    assert send(client, type="praise").status_code == 422
    assert send(client, user_email="not-an-email").status_code == 422
    assert send(client, message="x" * 2001).status_code == 422
    assert send(client, subject="x" * 201).status_code == 422
    assert send(client, message="").status_code == 422
    assert send(client, message="   ").status_code == 422


def test_feedback_admin_only(client, auth_headers):
    assert client.get("/feedback", headers=auth_headers).status_code == 403
    assert client.get("/feedback/unread-count", headers=auth_headers).status_code == 403
    assert client.get("/feedback").status_code == 401


def test_list_filters_and_search(client, admin_headers):
    send(client, type="bug", message="Login is broken")
    send(client, type="suggestion", message="Add dark mode")
    send(client, type="other", user_email="fan@example.com", message="Thanks")

    data = client.get("/feedback?type=suggestion", headers=admin_headers).json()
    assert [f["message"] for f in data["feedbacks"]] == ["Add dark mode"]

    data = client.get("/feedback?search=FAN@", headers=admin_headers).json()
    assert [f["message"] for f in data["feedbacks"]] == ["Thanks"]

    data = client.get("/feedback?status=all&type=all", headers=admin_headers).json()
    assert data["pagination"]["total"] == 3


def test_resolve_and_reopen(client, admin_headers):
    feedback_id = send(client).json()["id"]
    assert client.get("/feedback/unread-count", headers=admin_headers).json() == {"count": 1}

    response = client.patch(f"/feedback/{feedback_id}", headers=admin_headers, json={"status": "resolved"})
    assert response.status_code == 200
    assert response.json()["feedback"]["resolved_at"] is not None
    assert client.get("/feedback/unread-count", headers=admin_headers).json() == {"count": 0}

    response = client.patch(f"/feedback/{feedback_id}", headers=admin_headers, json={"status": "new"})
    assert response.json()["feedback"]["resolved_at"] is None


def test_invalid_status(client, admin_headers):
    feedback_id = send(client).json()["id"]
    response = client.patch(f"/feedback/{feedback_id}", headers=admin_headers, json={"status": "closed"})
    assert response.status_code == 422


def test_delete_feedback(client, admin_headers):
    feedback_id = send(client).json()["id"]
    assert client.delete(f"/feedback/{feedback_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/feedback/{feedback_id}", headers=admin_headers).status_code == 404
