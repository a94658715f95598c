from conftest import create_expense as create


def test_create_and_list_newest_first(client, auth_headers):
    create(client, auth_headers, title="Older", date="2024-02-01")
    create(client, auth_headers, title="Newer", date="2024-03-10")

    resp = client.get("/api/expenses", headers=auth_headers)

    assert resp.status_code == 200
    assert [e["title"] for e in resp.json()] == ["Newer", "Older"]
    assert resp.json()[0]["amount"] == 42.5


def test_create_rejects_unknown_category_and_negative_amount(client, auth_headers):
    bad_category = client.post(
        "/api/expenses",
        json={"title": "x", "amount": 1, "category": "Crypto", "date": "2024-03-01"},
        headers=auth_headers,
    )
    negative = client.post(
        "/api/expenses",
        json={"title": "x", "amount": -1, "category": "Food", "date": "2024-03-01"},
        headers=auth_headers,
    )

    assert bad_category.status_code == 400
    assert negative.status_code == 400


def test_update_replaces_every_field(client, auth_headers):
    expense = create(client, auth_headers)

    resp = client.put(
        f"/api/expenses/{expense['id']}",
        json={"title": "Cinema", "amount": 15, "category": "Entertainment", "date": "2024-03-05"},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    updated = resp.json()["expense"]
    assert updated["title"] == "Cinema"
    assert updated["amount"] == 15.0
    assert updated["category"] == "Entertainment"
    assert updated["description"] is None
    assert updated["date"] == "2024-03-05"


def test_owner_isolation(client, auth_headers, other_headers):
    expense = create(client, auth_headers)

    assert client.get("/api/expenses", headers=other_headers).json() == []
    put = client.put(
        f"/api/expenses/{expense['id']}",
        json={"title": "Hijack", "amount": 1, "category": "Food", "date": "2024-03-05"},
        headers=other_headers,
    )
    delete = client.delete(f"/api/expenses/{expense['id']}", headers=other_headers)

    assert put.status_code == 404
    assert delete.status_code == 404
    assert len(client.get("/api/expenses", headers=auth_headers).json()) == 1


def test_delete_is_permanent(client, auth_headers):
    expense = create(client, auth_headers)

    resp = client.delete(f"/api/expenses/{expense['id']}", headers=auth_headers)

    assert resp.json() == {"message": "Expense deleted successfully"}
    assert client.get("/api/expenses", headers=auth_headers).json() == []
    assert client.delete(f"/api/expenses/{expense['id']}", headers=auth_headers).status_code == 404
