from datetime import datetime, timedelta


def test_dashboard_empty(client, auth_headers):
    response = client.get("/dashboard", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {
        "username": "Tester",
        "stats": {
            "active_tasks": 0,
            "overdue_tasks": 0,
            "completed_this_week": 0,
            "top_priority_tasks": [],
            "category_distribution": []
        }
    }


def test_dashboard_counts(client, auth_headers):
    category = client.post("/categories", headers=auth_headers, json={"name": "Work"}).json()
    yesterday = (datetime.utcnow() - timedelta(days=1)).isoformat()

    client.post("/tasks", headers=auth_headers, json={"name": "Late", "due_date": yesterday, "category_id": category["id"]})
    urgent = client.post("/tasks", headers=auth_headers, json={"name": "Urgent", "priority": 5}).json()
    done = client.post("/tasks", headers=auth_headers, json={"name": "Done"}).json()
    client.post(f"/tasks/{done['id']}/complete", headers=auth_headers)

    stats = client.get("/dashboard", headers=auth_headers).json()["stats"]
    assert stats["active_tasks"] == 2
    assert stats["overdue_tasks"] == 1
    assert stats["completed_this_week"] == 1
    assert stats["top_priority_tasks"][0]["id"] == urgent["id"]
    assert stats["category_distribution"] == [{"id": category["id"], "name": "Work", "active_tasks": 1}]
