def test_seeded_flavors(client):
    names = [f["name"] for f in client.get("/flavors").json()]
    assert names == ["Cheese", "Spinach Artichoke", "Potato Leek", "Seasonal"]


def test_catalog_writes_require_admin(client):
    assert client.post("/flavors", json={"name": "Za'atar"}).status_code == 401
    assert client.post("/menu-items", json={"name": "x", "category": "addon", "price_cents": 1}).status_code == 401
    assert client.post("/faqs", json={"question": "q", "answer": "a"}).status_code == 401


def test_add_flavor(admin):
    resp = admin.post("/flavors", json={"name": "Za'atar", "description": "herbs"})
    assert resp.status_code == 201
    assert resp.json()["sort_order"] == 5
    assert admin.post("/flavors", json={"name": "Za'atar"}).status_code == 400
    assert admin.post("/flavors", json={"name": "  "}).status_code == 400


def test_toggle_flavor(admin):
    assert admin.patch("/flavors/Seasonal", json={}).json()["available"] is False
    assert admin.patch("/flavors/Seasonal", json={}).json()["available"] is True
    assert admin.patch("/flavors/Seasonal", json={"available": True}).json()["available"] is True
    assert admin.patch("/flavors/Nope", json={}).status_code == 404


def test_delete_flavor_blocked_by_open_order(admin, create_order):
    order_id = create_order()
    resp = admin.delete("/flavors/Cheese")
    assert resp.status_code == 400
    assert "Cheese" in resp.json()["detail"]

    # rejected orders still hold the flavor
    admin.patch(f"/orders/{order_id}", json={"status": "rejected"})
    assert admin.delete("/flavors/Cheese").status_code == 400

    # unused flavors can go
    assert admin.delete("/flavors/Seasonal").status_code == 200
    assert admin.delete("/flavors/Seasonal").status_code == 404


def test_delete_flavor_after_completion(admin, create_order):
    order_id = create_order()
    for status in ("approved", "paid", "completed"):
        admin.patch(f"/orders/{order_id}", json={"status": status})
    assert admin.delete("/flavors/Cheese").status_code == 200
    assert "Cheese" not in [f["name"] for f in admin.get("/flavors").json()]


def test_menu_items(client, admin):
    assert client.get("/menu-items").json() == []
    resp = admin.post("/menu-items", json={"name": "Grated Tomato", "category": "addon", "price_cents": 600})
    assert resp.status_code == 201
    item_id = resp.json()["id"]
    admin.post("/menu-items", json={"name": "Lemonade", "category": "drink", "price_cents": 400})

    assert [m["name"] for m in client.get("/menu-items").json()] == ["Grated Tomato", "Lemonade"]

    admin.patch(f"/menu-items/{item_id}", json={"available": False})
    assert [m["name"] for m in client.get("/menu-items").json()] == ["Lemonade"]

    assert admin.post("/menu-items", json={"name": "No price", "category": "addon"}).status_code == 400
    assert admin.delete(f"/menu-items/{item_id}").status_code == 200
    assert admin.patch(f"/menu-items/{item_id}", json={"price_cents": 1}).status_code == 404


def test_faqs(client, admin):
    first = admin.post("/faqs", json={"question": "Do you deliver?", "answer": "Yes"}).json()
    admin.post("/faqs", json={"question": "Vegan?", "answer": "Some flavors"})
    assert [f["question"] for f in client.get("/faqs").json()] == ["Do you deliver?", "Vegan?"]

    updated = admin.put(f"/faqs/{first['id']}", json={"question": "Do you deliver?", "answer": "Within 10 miles",
                                                      "display_order": 10})
    assert updated.json()["answer"] == "Within 10 miles"
    assert [f["question"] for f in client.get("/faqs").json()] == ["Vegan?", "Do you deliver?"]

    assert admin.delete(f"/faqs/{first['id']}").status_code == 200
    assert admin.delete(f"/faqs/{first['id']}").status_code == 404


def test_editing_flavor_keeps_availability(admin):
    resp = admin.patch("/flavors/Cheese", json={"description": "new text"})
    assert resp.json()["description"] == "new text"
    assert resp.json()["available"] is True

    admin.patch("/flavors/Cheese", json={"available": False})
    resp = admin.patch("/flavors/Cheese", json={"sort_order": 9})
    assert resp.json()["sort_order"] == 9
    assert resp.json()["available"] is False
