from datetime import datetime

from httpx import ASGITransport, AsyncClient

from todo_app.dependencies import get_todo_service
from todo_app.services.todo_service import TodoService


async def test_todo_lifecycle(client, login):
    headers = await login()

    res = await client.post("/api/todos", json={"title": "Buy milk"}, headers=headers)
    assert res.status_code == 201
    todo = res.json()
    assert todo["title"] == "Buy milk"
    assert todo["completed"] is False
    todo_id = todo["id"]

    res = await client.put(f"/api/todos/{todo_id}", json={"completed": True}, headers=headers)
    assert res.status_code == 200
    updated = res.json()
    assert updated["completed"] is True
    assert updated["title"] == "Buy milk"
    assert datetime.fromisoformat(updated["updated_at"]) >= datetime.fromisoformat(todo["updated_at"])

    res = await client.delete(f"/api/todos/{todo_id}", headers=headers)
    assert res.status_code == 204
    assert res.content == b""

    res = await client.get(f"/api/todos/{todo_id}", headers=headers)
    assert res.status_code == 404
    assert res.json()["error"] == "Todo not found"


async def test_requires_bearer_token(client):
    res = await client.get("/api/todos")
    assert res.status_code == 401
    assert res.json()["error"] == "No token provided"

    res = await client.get("/api/todos", headers={"Authorization": "Bearer"})
    assert res.status_code == 401

    res = await client.get("/api/todos", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["error"] == "Invalid or expired token"


async def test_list_is_owner_scoped(client, login):
    alice = await login()
    bob = await login(name="Bob", email="bob@example.com")

    await client.post("/api/todos", json={"title": "alice 1"}, headers=alice)
    await client.post("/api/todos", json={"title": "alice 2", "description": "notes"}, headers=alice)
    await client.post("/api/todos", json={"title": "bob 1"}, headers=bob)

    res = await client.get("/api/todos", headers=alice)
    assert res.status_code == 200
    titles = [t["title"] for t in res.json()["data"]]
    assert titles == ["alice 1", "alice 2"]

    res = await client.get("/api/todos", headers=bob)
    assert [t["title"] for t in res.json()["data"]] == ["bob 1"]


async def test_non_owner_is_forbidden(client, login):
    alice = await login()
    bob = await login(name="Bob", email="bob@example.com")
    todo_id = (await client.post("/api/todos", json={"title": "private"}, headers=alice)).json()["id"]

    res = await client.get(f"/api/todos/{todo_id}", headers=bob)
    assert res.status_code == 403
    res = await client.put(f"/api/todos/{todo_id}", json={"title": "mine now"}, headers=bob)
    assert res.status_code == 403
    assert res.json()["error"] == "Unauthorized access"
    res = await client.delete(f"/api/todos/{todo_id}", headers=bob)
    assert res.status_code == 403

    res = await client.get(f"/api/todos/{todo_id}", headers=alice)
    assert res.json()["title"] == "private"


async def test_missing_todo_and_bad_id(client, login):
    headers = await login()

    res = await client.put("/api/todos/999", json={"title": "x"}, headers=headers)
    assert res.status_code == 404
    res = await client.delete("/api/todos/999", headers=headers)
    assert res.status_code == 404

    res = await client.put("/api/todos/abc", json={"title": "x"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid ID format"


async def test_create_validation(client, login):
    headers = await login()

    res = await client.post("/api/todos", json={}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Missing title"

    res = await client.post("/api/todos", json={"title": "   "}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Title cannot be empty"

    res = await client.post("/api/todos", json={"title": "x" * 201}, headers=headers)
    assert res.status_code == 400


async def test_update_validation(client, login):
    headers = await login()
    todo_id = (await client.post("/api/todos", json={"title": "t"}, headers=headers)).json()["id"]

    res = await client.put(f"/api/todos/{todo_id}", json={}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"].startswith("At least one field")

    res = await client.put(f"/api/todos/{todo_id}", json={"title": ""}, headers=headers)
    assert res.status_code == 400

    res = await client.put(f"/api/todos/{todo_id}", json={"description": "more"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["description"] == "more"
    assert res.json()["title"] == "t"


async def test_search_and_stats(client, login):
    headers = await login()
    for title, description in [("Buy milk", None), ("Walk dog", "around the PARK"), ("Call mom", None)]:
        body = {"title": title}
        if description:
            body["description"] = description
        await client.post("/api/todos", json=body, headers=headers)

    res = await client.get("/api/todos/search", params={"q": "park"}, headers=headers)
    assert [t["title"] for t in res.json()] == ["Walk dog"]

    res = await client.get("/api/todos/search", params={"q": "MILK"}, headers=headers)
    assert [t["title"] for t in res.json()] == ["Buy milk"]

    res = await client.get("/api/todos/search", params={"q": " "}, headers=headers)
    assert len(res.json()) == 3

    todos = (await client.get("/api/todos", headers=headers)).json()["data"]
    await client.put(f"/api/todos/{todos[0]['id']}", json={"completed": True}, headers=headers)

    res = await client.get("/api/todos/stats", headers=headers)
    assert res.json() == {"total": 3, "completed": 1, "pending": 2, "completionRate": 33}


async def test_stats_empty(client, login):
    headers = await login()
    res = await client.get("/api/todos/stats", headers=headers)
    assert res.json() == {"total": 0, "completed": 0, "pending": 0, "completionRate": 0}


async def test_bulk_update(client, login):
    headers = await login()
    ids = [(await client.post("/api/todos", json={"title": f"t{i}"}, headers=headers)).json()["id"] for i in range(2)]

    res = await client.put(
        "/api/todos/bulk",
        json={"updates": [{"id": i, "updates": {"completed": True}} for i in ids]},
        headers=headers,
    )
    assert res.status_code == 200
    assert all(t["completed"] for t in res.json())

    res = await client.put("/api/todos/bulk", json={"updates": []}, headers=headers)
    assert res.status_code == 400


async def test_bulk_delete_is_all_or_nothing(client, login):
    alice = await login()
    bob = await login(name="Bob", email="bob@example.com")
    mine = (await client.post("/api/todos", json={"title": "mine"}, headers=alice)).json()["id"]
    theirs = (await client.post("/api/todos", json={"title": "theirs"}, headers=bob)).json()["id"]

    res = await client.request("DELETE", "/api/todos/bulk", json={"ids": [mine, theirs]}, headers=alice)
    assert res.status_code == 403
    assert (await client.get(f"/api/todos/{mine}", headers=alice)).status_code == 200

    res = await client.request("DELETE", "/api/todos/bulk", json={"ids": [mine, mine]}, headers=alice)
    assert res.status_code == 200
    assert res.json()["deletedCount"] == 1
    assert (await client.get(f"/api/todos/{mine}", headers=alice)).status_code == 404


async def test_health_and_unknown_endpoint(client):
    res = await client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert "timestamp" in res.json()

    res = await client.get("/api/nowhere")
    assert res.status_code == 404
    assert res.json() == {"error": "Invalid address: Endpoint not found"}


async def test_bulk_update_is_all_or_nothing(client, login):
    alice = await login()
    bob = await login(name="Bob", email="bob@example.com")
    mine = (await client.post("/api/todos", json={"title": "mine"}, headers=alice)).json()["id"]
    theirs = (await client.post("/api/todos", json={"title": "theirs"}, headers=bob)).json()["id"]

    res = await client.put(
        "/api/todos/bulk",
        json={"updates": [
            {"id": mine, "updates": {"completed": True, "title": "changed"}},
            {"id": theirs, "updates": {"completed": True}},
        ]},
        headers=alice,
    )
    assert res.status_code == 403

    res = await client.put(
        "/api/todos/bulk",
        json={"updates": [
            {"id": mine, "updates": {"completed": True}},
            {"id": 999, "updates": {"completed": True}},
        ]},
        headers=alice,
    )
    assert res.status_code == 404

    todo = (await client.get(f"/api/todos/{mine}", headers=alice)).json()
    assert todo["completed"] is False
    assert todo["title"] == "mine"
    assert (await client.get(f"/api/todos/{theirs}", headers=bob)).json()["completed"] is False


async def test_wrong_method_is_unknown_address(client, login):
    headers = await login()
    todo_id = (await client.post("/api/todos", json={"title": "t"}, headers=headers)).json()["id"]

    res = await client.patch(f"/api/todos/{todo_id}", json={"completed": True}, headers=headers)
    assert res.status_code == 404
    assert res.json() == {"error": "Invalid address: Endpoint not found"}


async def test_unexpected_error_returns_generic_500(app, login, caplog):
    headers = await login()

    class BrokenTodoService(TodoService):
        async def list_todos(self, db, owner_id):
            raise RuntimeError("database exploded")

    app.dependency_overrides[get_todo_service] = BrokenTodoService
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        res = await ac.get("/api/todos", headers=headers)

    assert res.status_code == 500
    assert res.json() == {"error": "Internal Server Error"}
    assert "database exploded" not in res.text
    assert "Unhandled error on GET /api/todos" in caplog.text
