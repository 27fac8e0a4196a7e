"""Tests for the mark-as-found workflow and the notifications it creates."""

from __future__ import annotations

from conftest import auth_headers, create_item, create_user
from models import db
from models.item import Item
from models.notification import Notification


def _mark_found(client, headers, item_id, finder_id, finder_name="Bob"):
    return client.post(
        "/items/found",
        json={"itemId": item_id, "finderId": finder_id, "finderName": finder_name},
        headers=headers,
    )


def test_mark_found_notifies_admin_and_owner(app, client):
    with app.app_context():
        admin_id = create_user("admin@example.com", role="admin")
        owner_id = create_user("owner@example.com")
        finder_id = create_user("finder@example.com")
        item_id = create_item(owner_id)

    response = _mark_found(client, auth_headers(app, finder_id), item_id, str(finder_id))

    assert response.status_code == 200
    assert response.get_json() == {"message": "Item marked as found, notifications sent"}

    with app.app_context():
        assert db.session.get(Item, item_id).status == "found"
        notifications = Notification.query.filter_by(item_id=item_id).all()
        assert sorted(n.recipient_id for n in notifications) == sorted([admin_id, owner_id])
        by_recipient = {n.recipient_id: n for n in notifications}
        assert by_recipient[admin_id].message == (
            'Item "Wallet" lost at Library has been found by Bob'
        )
        assert by_recipient[owner_id].message == 'Your item "Wallet" has been found by Bob'
        assert all(n.finder_id == str(finder_id) for n in notifications)
        assert all(n.finder_name == "Bob" for n in notifications)


def test_finder_need_not_be_a_registered_user(app, client):
    with app.app_context():
        create_user("admin@example.com", role="admin")
        owner_id = create_user("owner@example.com")
        reporter_id = create_user("desk@example.com")
        item_id = create_item(owner_id)

    response = _mark_found(
        client, auth_headers(app, reporter_id), item_id, "walk-in-42", "A visitor"
    )

    assert response.status_code == 200
    with app.app_context():
        assert Notification.query.count() == 2


def test_marking_own_item_found_is_rejected(app, client):
    with app.app_context():
        create_user("admin@example.com", role="admin")
        owner_id = create_user("owner@example.com")
        item_id = create_item(owner_id)

    response = _mark_found(client, auth_headers(app, owner_id), item_id, str(owner_id))

    assert response.status_code == 400
    assert response.get_json()["message"] == "Cannot mark your own item as found"
    with app.app_context():
        assert Notification.query.count() == 0
        assert db.session.get(Item, item_id).status == "lost"


def test_mark_found_requires_all_fields(app, client):
    with app.app_context():
        user_id = create_user("user@example.com")

    response = client.post(
        "/items/found",
        json={"itemId": 1, "finderName": "Bob"},
        headers=auth_headers(app, user_id),
    )

    assert response.status_code == 400
    assert "finderId" in response.get_json()["message"]


def test_mark_found_unknown_item_is_404(app, client):
    with app.app_context():
        user_id = create_user("user@example.com")

    response = _mark_found(client, auth_headers(app, user_id), 404, "someone")

    assert response.status_code == 404


def test_mark_found_without_admin_is_configuration_error(app, client):
    with app.app_context():
        owner_id = create_user("owner@example.com")
        finder_id = create_user("finder@example.com")
        item_id = create_item(owner_id)

    response = _mark_found(client, auth_headers(app, finder_id), item_id, str(finder_id))

    assert response.status_code == 500
    assert response.get_json()["message"] == "Admin not found"
    with app.app_context():
        assert Notification.query.count() == 0
        assert db.session.get(Item, item_id).status == "lost"


def test_mark_found_requires_authentication(app, client):
    with app.app_context():
        owner_id = create_user("owner@example.com")
        item_id = create_item(owner_id)

    response = client.post(
        "/items/found",
        json={"itemId": item_id, "finderId": "x", "finderName": "Bob"},
    )

    assert response.status_code == 401
    with app.app_context():
        assert db.session.get(Item, item_id).status == "lost"


def test_wallet_scenario(app, client):
    """Post as A, find as B, and A sees the item as found."""

    with app.app_context():
        create_user("admin@example.com", role="admin")
        user_a = create_user("a@example.com")
        user_b = create_user("b@example.com")

    headers_a = auth_headers(app, user_a)
    created = client.post(
        "/items",
        json={
            "name": "Wallet",
            "description": "Black wallet",
            "category": "accessories",
            "location": "Gym",
            "dateLost": "2024-06-01",
        },
        headers=headers_a,
    )
    assert created.status_code == 201
    item_id = created.get_json()["id"]

    assert client.get(f"/items/{item_id}").get_json()["status"] == "lost"

    found = _mark_found(client, auth_headers(app, user_b), item_id, str(user_b), "B")
    assert found.status_code == 200

    assert client.get(f"/items/{item_id}").get_json()["status"] == "found"
    with app.app_context():
        assert Notification.query.filter_by(item_id=item_id).count() == 2

    mine = client.get("/items/user", headers=headers_a).get_json()
    assert [(item["id"], item["status"]) for item in mine] == [(item_id, "found")]


def test_deleting_item_keeps_its_notifications(app, client):
    with app.app_context():
        create_user("admin@example.com", role="admin")
        owner_id = create_user("owner@example.com")
        finder_id = create_user("finder@example.com")
        item_id = create_item(owner_id)

    _mark_found(client, auth_headers(app, finder_id), item_id, str(finder_id))
    response = client.delete(f"/items/{item_id}", headers=auth_headers(app, owner_id))

    assert response.status_code == 200
    with app.app_context():
        notifications = Notification.query.all()
        assert len(notifications) == 2
        assert all(n.item_id is None for n in notifications)
