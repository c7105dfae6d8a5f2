"""
AI assistant endpoint tests - threads, messages and chat.
The completion collaborator is mocked; no external calls are made.
"""
from unittest.mock import AsyncMock, patch

import anthropic
import httpx

from focuslist.models.message import MessageRole
from focuslist.db import threads as threads_db
from focuslist.db import messages as messages_db
from focuslist.services.claude_service import claude_service, AssistantReply, AssistantUnavailableError


async def _seed_thread(db_session, user, title="Weekly planning"):
    thread = await threads_db.create_thread(db_session, user.id, title=title)
    await db_session.commit()
    return thread


# ===================== THREADS =====================


async def test_create_and_get_thread(client):
    r = await client.post("/api/agent/threads", json={"title": "Planning"})
    assert r.status_code == 200
    thread_id = r.json()["id"]

    r = await client.get(f"/api/agent/threads/{thread_id}")
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Planning"
    assert body["status"] == "active"
    assert body["last_message_at"] is None


async def test_create_thread_title_too_long(client):
    r = await client.post("/api/agent/threads", json={"title": "x" * 101})
    assert r.status_code == 400
    assert r.json()["detail"] == "Thread title must be max 100 characters"


async def test_create_thread_rate_limited(client):
    r = await client.post("/api/agent/threads", json={})
    assert r.status_code == 200
    r = await client.post("/api/agent/threads", json={})
    assert r.status_code == 429


async def test_list_threads_by_last_message(client, db_session, seed_data):
    user = seed_data["user"]
    quiet = await _seed_thread(db_session, user, "Quiet")
    chatty = await _seed_thread(db_session, user, "Chatty")
    older = await _seed_thread(db_session, user, "Older")

    r = await client.post(f"/api/agent/threads/{older.id}/messages", json={"content": "first"})
    assert r.status_code == 200
    r = await client.post(f"/api/agent/threads/{chatty.id}/messages", json={"content": "second"})
    assert r.status_code == 200

    r = await client.get("/api/agent/threads")
    assert [t["id"] for t in r.json()] == [chatty.id, older.id, quiet.id]


async def test_list_active_threads(client, db_session, seed_data):
    user = seed_data["user"]
    keep = await _seed_thread(db_session, user, "Keep")
    gone = await _seed_thread(db_session, user, "Gone")

    r = await client.post(f"/api/agent/threads/{gone.id}/archive")
    assert r.status_code == 200

    r = await client.get("/api/agent/threads/active")
    assert [t["id"] for t in r.json()] == [keep.id]


async def test_update_thread(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["user"])
    r = await client.patch(f"/api/agent/threads/{thread.id}", json={"title": "Renamed"})
    assert r.status_code == 200

    body = (await client.get(f"/api/agent/threads/{thread.id}")).json()
    assert body["title"] == "Renamed"


async def test_other_users_thread_forbidden(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["other_user"])

    r = await client.get(f"/api/agent/threads/{thread.id}")
    assert r.status_code == 403
    assert r.json()["detail"] == "Not authorized to view this thread"

    r = await client.patch(f"/api/agent/threads/{thread.id}", json={"title": "Mine"})
    assert r.status_code == 403

    r = await client.get(f"/api/agent/threads/{thread.id}/messages")
    assert r.status_code == 403
    assert r.json()["detail"] == "Not authorized to view messages in this thread"

    r = await client.post(f"/api/agent/threads/{thread.id}/messages", json={"content": "hi"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Not authorized to send messages in this thread"


async def test_missing_thread(client):
    r = await client.get("/api/agent/threads/999")
    assert r.status_code == 404
    assert r.json()["detail"] == "Thread not found"


async def test_delete_thread_cascades_messages(client, db_session, seed_data):
    user = seed_data["user"]
    thread = await _seed_thread(db_session, user)
    await messages_db.create_message(db_session, thread.id, user.id, MessageRole.USER, "hello")
    await db_session.commit()

    r = await client.delete(f"/api/agent/threads/{thread.id}")
    assert r.status_code == 200
    assert r.json() == {"success": True}

    assert await threads_db.get_thread_by_id(db_session, thread.id) is None
    assert await messages_db.get_message_count_by_thread(db_session, thread.id) == 0


# ===================== MESSAGES =====================


async def test_send_and_list_messages(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["user"])

    r = await client.post(f"/api/agent/threads/{thread.id}/messages", json={"content": "one"})
    assert r.status_code == 200
    r = await client.post(f"/api/agent/threads/{thread.id}/messages", json={"content": "two"})
    assert r.status_code == 200

    r = await client.get(f"/api/agent/threads/{thread.id}/messages")
    body = r.json()
    assert [m["content"] for m in body] == ["one", "two"]
    assert body[0]["role"] == "user"
    assert body[0]["metadata"] is None

    r = await client.get(f"/api/agent/threads/{thread.id}/messages/recent", params={"limit": 1})
    assert [m["content"] for m in r.json()] == ["two"]

    body = (await client.get(f"/api/agent/threads/{thread.id}")).json()
    assert body["last_message_at"] is not None


async def test_message_content_rules(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["user"])
    r = await client.post(f"/api/agent/threads/{thread.id}/messages", json={"content": "   "})
    assert r.status_code == 400
    assert r.json()["detail"] == "Message content must be between 1 and 10000 characters"
    assert await messages_db.get_message_count_by_thread(db_session, thread.id) == 0


# ===================== CHAT =====================


async def test_chat_without_assistant_stores_placeholder(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["user"])

    unavailable = AsyncMock(side_effect=AssistantUnavailableError("AI service not configured"))
    with patch.object(claude_service, "generate_reply", new=unavailable):
        r = await client.post(f"/api/agent/threads/{thread.id}/chat", json={"message": "Plan my day"})

    assert r.status_code == 200
    body = r.json()
    assert body["response"] == 'I received your message: "Plan my day". (AI assistant is not configured)'

    messages = (await client.get(f"/api/agent/threads/{thread.id}/messages")).json()
    assert [m["id"] for m in messages] == [body["user_message_id"], body["assistant_message_id"]]
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert messages[1]["metadata"]["model"] == "placeholder"
    assert messages[1]["metadata"]["fallback_reason"] == "AI service not configured"


async def test_chat_with_assistant_reply(client, db_session, seed_data):
    user = seed_data["user"]
    thread = await _seed_thread(db_session, user)
    await messages_db.create_message(db_session, thread.id, user.id, MessageRole.USER, "Earlier question")
    await messages_db.create_message(db_session, thread.id, user.id, MessageRole.ASSISTANT, "Earlier answer")
    await db_session.commit()

    reply = AssistantReply(content="Start with the hardest task.", model="claude-test", input_tokens=12, output_tokens=7)
    generate = AsyncMock(return_value=reply)
    with patch.object(claude_service, "generate_reply", new=generate):
        r = await client.post(f"/api/agent/threads/{thread.id}/chat", json={"message": "What first?"})

    assert r.status_code == 200
    assert r.json()["response"] == "Start with the hardest task."

    history = generate.call_args.args[0]
    assert history == [
        {"role": "user", "content": "Earlier question"},
        {"role": "assistant", "content": "Earlier answer"},
        {"role": "user", "content": "What first?"},
    ]

    stored = await messages_db.get_messages_by_thread_ordered(db_session, thread.id)
    assert stored[-1].content == "Start with the hardest task."
    assert stored[-1].message_metadata == {
        "model": "claude-test",
        "input_tokens": 12,
        "output_tokens": 7,
        "fallback_reason": None,
    }


async def test_chat_assistant_timeout_falls_back(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["user"])

    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    failing = AsyncMock(side_effect=anthropic.APITimeoutError(request=request))
    with patch.object(claude_service, "generate_reply", new=failing):
        r = await client.post(f"/api/agent/threads/{thread.id}/chat", json={"message": "Hello"})

    assert r.status_code == 200
    body = r.json()
    assert "AI assistant is not configured" in body["response"]

    stored = await messages_db.get_messages_by_thread_ordered(db_session, thread.id)
    assert len(stored) == 2
    assert stored[1].message_metadata["model"] == "placeholder"
    assert stored[1].message_metadata["fallback_reason"]


async def test_chat_empty_reply_falls_back(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["user"])

    empty = AsyncMock(return_value=AssistantReply(content="  \n", model="claude-test"))
    with patch.object(claude_service, "generate_reply", new=empty):
        r = await client.post(f"/api/agent/threads/{thread.id}/chat", json={"message": "Hello"})

    assert r.status_code == 200
    assert r.json()["response"] == 'I received your message: "Hello". (AI assistant is not configured)'

    stored = await messages_db.get_messages_by_thread_ordered(db_session, thread.id)
    assert len(stored) == 2
    assert stored[1].content == r.json()["response"]
    assert stored[1].message_metadata["model"] == "placeholder"
    assert stored[1].message_metadata["fallback_reason"] == "empty reply"


async def test_chat_rejects_blank_message(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["user"])
    generate = AsyncMock()
    with patch.object(claude_service, "generate_reply", new=generate):
        r = await client.post(f"/api/agent/threads/{thread.id}/chat", json={"message": ""})

    assert r.status_code == 400
    generate.assert_not_called()


async def test_chat_on_foreign_thread(client, db_session, seed_data):
    thread = await _seed_thread(db_session, seed_data["other_user"])
    r = await client.post(f"/api/agent/threads/{thread.id}/chat", json={"message": "hi"})
    assert r.status_code == 403
    assert await messages_db.get_message_count_by_thread(db_session, thread.id) == 0
