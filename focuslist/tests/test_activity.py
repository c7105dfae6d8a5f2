"""
Activity (audit trail) endpoint tests
"""
from focuslist.models.task_activity import ActivityAction, StatusChange
from focuslist.models.task import TaskStatus
from focuslist.db import tasks as tasks_db
from focuslist.db import task_activity as activity_db


async def _create(client, title="Buy milk"):
    r = await client.post("/api/tasks/", json={"title": title})
    assert r.status_code == 200, r.text
    return r.json()["id"]


async def test_recent_activity_newest_first(client):
    first = await _create(client, "First")
    second = await _create(client, "Second")
    await client.post(f"/api/tasks/{first}/complete")

    r = await client.get("/api/activity/recent")
    assert r.status_code == 200
    body = r.json()
    assert [(a["task_id"], a["action"]) for a in body] == [
        (first, "completed"),
        (second, "created"),
        (first, "created"),
    ]
    assert body[0]["relative_time"] == "just now"


async def test_recent_activity_limit(client):
    await _create(client, "A")
    await _create(client, "B")
    r = await client.get("/api/activity/recent", params={"limit": 1})
    assert len(r.json()) == 1


async def test_recent_activity_only_own(client, other_client):
    await _create(other_client, "Theirs")
    r = await client.get("/api/activity/recent")
    assert r.json() == []


async def test_task_activity_limit(client):
    task_id = await _create(client)
    await client.patch(f"/api/tasks/{task_id}", json={"priority": "high"})
    r = await client.get(f"/api/activity/task/{task_id}", params={"limit": 1})
    assert [a["action"] for a in r.json()] == ["priority_changed"]


async def test_task_activity_of_foreign_task(client, other_client):
    task_id = await _create(other_client)
    r = await client.get(f"/api/activity/task/{task_id}")
    assert r.status_code == 403


async def test_deleted_task_history_private(client, other_client):
    task_id = await _create(other_client)
    await other_client.delete(f"/api/tasks/{task_id}")

    r = await client.get(f"/api/activity/task/{task_id}")
    assert r.status_code == 404


async def test_unknown_task_activity(client):
    r = await client.get("/api/activity/task/12345")
    assert r.status_code == 404


async def test_get_activity_by_id(client, db_session, seed_data):
    user_id = seed_data["user"].id
    task = await tasks_db.create_task(db_session, user_id, "Buy milk", position=1)
    activity = await activity_db.create_task_activity(
        db_session, task.id, user_id, ActivityAction.STATUS_CHANGED,
        StatusChange(from_=TaskStatus.PENDING, to=TaskStatus.IN_PROGRESS),
    )
    await db_session.commit()

    r = await client.get(f"/api/activity/{activity.id}")
    assert r.status_code == 200
    body = r.json()
    assert body["changes"] == {"kind": "status", "from": "pending", "to": "in_progress"}
    assert body["summary"] == "Changed status from pending to in_progress"


async def test_get_foreign_activity_forbidden(client, other_client, db_session):
    task_id = await _create(other_client)
    records = await activity_db.get_task_activity_by_task(db_session, task_id)

    r = await client.get(f"/api/activity/{records[0].id}")
    assert r.status_code == 403
    assert r.json()["detail"] == "Not authorized to view this activity"


async def test_purge_activity_after_delete(client, db_session, seed_data):
    task_id = await _create(client)
    await client.delete(f"/api/tasks/{task_id}")

    r = await client.delete(f"/api/activity/task/{task_id}")
    assert r.status_code == 200
    assert r.json() == {"deleted_count": 2}

    assert await activity_db.get_task_activity_by_user(db_session, seed_data["user"].id) == []
    r = await client.get(f"/api/activity/task/{task_id}")
    assert r.status_code == 404


async def test_purge_activity_of_live_task_rejected(client):
    task_id = await _create(client)
    r = await client.delete(f"/api/activity/task/{task_id}")
    assert r.status_code == 400
    assert r.json()["detail"] == "Task still exists"
