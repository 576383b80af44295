"""Tests for the Flask JSON API."""

import threading


def test_index(client):
    res = client.get("/")
    assert res.status_code == 200
    assert b"Voice Shopping Assistant" in res.data


def test_command_adds_item(client):
    res = client.post("/api/command", json={"text": "add 2 apples", "lang": "en-US"})
    data = res.get_json()

    assert res.status_code == 200
    assert data["status"] == "ok"
    assert data["intent"] == "add"
    assert data["result"] == {"intent": "add", "name": "apples", "quantity": 2}
    assert data["message"] == "Added 2 apples"
    assert data["count"] == 1
    assert data["list"]["produce"][0]["name"] == "apples"
    assert data["lang"] == "en-US"


def test_command_returns_substitutes(client):
    data = client.post("/api/command", json={"text": "buy milk", "lang": "en"}).get_json()
    assert data["substitutes"] == ["almond milk", "soy milk", "oat milk"]


def test_empty_command(client):
    res = client.post("/api/command", json={"text": "  "})
    assert res.status_code == 400
    assert res.get_json() == {"status": "error", "message": "Empty command"}


def test_command_with_current_product(client):
    data = client.post(
        "/api/command", json={"text": "how much memory", "current_product": "oppo a9", "lang": "en"}
    ).get_json()
    assert data["intent"] == "product_query"
    assert data["message"] == "oppo a9: memory — 4GB/64GB"


def test_list_actions(client):
    data = client.post("/api/list", json={"action": "add", "item": "bread", "quantity": 2}).get_json()
    item_id = data["items"][0]["id"]
    assert data["message"] == "Added 2 bread"

    data = client.post("/api/list", json={"action": "increment", "id": item_id}).get_json()
    assert data["items"][0]["quantity"] == 3

    data = client.post("/api/list", json={"action": "set", "id": item_id, "quantity": 0}).get_json()
    assert data["items"][0]["quantity"] == 1

    data = client.post("/api/list", json={"action": "remove", "id": item_id}).get_json()
    assert data["count"] == 0


def test_list_unknown_action(client):
    res = client.post("/api/list", json={"action": "explode"})
    assert res.status_code == 400
    assert res.get_json()["message"] == "Unknown action"


def test_list_missing_id(client):
    res = client.post("/api/list", json={"action": "remove"})
    assert res.status_code == 400


def test_list_filter(client):
    client.post("/api/list", json={"action": "add", "item": "apple"})
    client.post("/api/list", json={"action": "add", "item": "milk"})

    data = client.get("/api/list?q=app").get_json()

    assert list(data["list"]) == ["produce"]
    assert data["count"] == 2


def test_suggestions(client):
    data = client.get("/api/suggestions").get_json()
    assert data["suggestions"][0]["kind"] == "seasonal"


def test_products_and_focus(client):
    products = client.get("/api/products").get_json()["products"]
    assert "iphone 12" in products

    data = client.post("/api/product", json={"name": "iphone 12"}).get_json()
    assert data["selected_product"] == "iphone 12"
    assert data["message"] == "Viewing iphone 12"


def test_language(client):
    data = client.post("/api/language", json={"lang": "hi-IN"}).get_json()
    assert data["language"] == "hi-IN"


def test_listening_flow(client):
    assert client.post("/api/listen/start", json={}).status_code == 200

    res = client.post("/api/listen/start", json={})
    assert res.status_code == 409
    assert res.get_json()["status"] == "error"

    client.post("/api/listen/interim", json={"text": "add three"})
    data = client.post("/api/listen/final", json={"text": "add three eggs"}).get_json()

    assert data["intent"] == "add"
    assert data["is_listening"] is False
    assert data["items"][0]["quantity"] == 3


def test_listening_cancel_and_error(client):
    client.post("/api/listen/start", json={})
    assert client.post("/api/listen/cancel", json={}).get_json()["is_listening"] is False
    assert client.post("/api/listen/cancel", json={}).status_code == 409

    client.post("/api/listen/start", json={})
    data = client.post("/api/listen/error", json={"error": "not-allowed"}).get_json()
    assert data["message"] == "Voice error: not-allowed"


def test_command_response_not_mixed_with_concurrent_request(client, assistant, monkeypatch):
    """A request arriving mid-response waits until the first response is built."""
    snapshot = assistant.snapshot
    others = []

    def slow_snapshot(*args):
        if not others:
            other = threading.Thread(
                target=assistant.submit_utterance, args=("add eggs",), kwargs={"lang": "en"})
            others.append(other)
            other.start()
            other.join(0.2)
        return snapshot(*args)

    monkeypatch.setattr(assistant, "snapshot", slow_snapshot)
    data = client.post("/api/command", json={"text": "add milk", "lang": "en"}).get_json()
    others[0].join()

    assert data["message"] == "Added 1 milk"
    assert data["feedback"] == "Added 1 milk"
    assert [i["name"] for i in data["items"]] == ["milk"]
    assert len(assistant.state.items) == 2


def test_non_object_json_body(client):
    res = client.post("/api/list", json=[1, 2])
    assert res.status_code == 400
    assert res.get_json()["message"] == "Unknown action"

    res = client.post("/api/command", json=[1, 2])
    assert res.status_code == 400
    assert res.get_json()["message"] == "Empty command"


def test_snapshot_reports_processing_flag(client):
    data = client.get("/api/list").get_json()
    assert data["is_processing"] is False
