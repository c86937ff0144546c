from academy.models import AdminMessage, AdminMessageReply


def open_thread(client, headers, subject="Payment issue", **fields):
    body = {"subject": subject, "message": "My payment did not go through"}
    body.update(fields)
    return client.post("/messages/", json=body, headers=headers)


def test_student_message_round_trip(client, make_user, auth_headers, admin_headers):
    user = make_user()
    headers = auth_headers(user)

    created = open_thread(client, headers, category="payment", priority="high")
    assert created.status_code == 201
    message = created.json()
    assert message["user_id"] == user.id
    assert message["is_from_admin"] is False
    assert message["status"] == "unread"

    thread = client.get(f"/messages/admin/{message['id']}", headers=admin_headers).json()
    assert thread["status"] == "read"
    assert thread["replies"] == []

    reply = client.post(
        f"/messages/admin/{message['id']}/replies",
        json={"message": "Refund issued"},
        headers=admin_headers,
    )
    assert reply.status_code == 201
    assert reply.json()["is_from_admin"] is True
    assert reply.json()["user_id"] is None

    mine = client.get(f"/messages/{message['id']}", headers=headers).json()
    assert mine["status"] == "replied"
    assert mine["reply_count"] == 1
    assert [r["message"] for r in mine["replies"]] == ["Refund issued"]


def test_admin_lists_messages_per_student(client, make_user, auth_headers, admin_headers):
    first = make_user()
    second = make_user()
    open_thread(client, auth_headers(first), subject="One")
    open_thread(client, auth_headers(first), subject="Two", category="technical")
    open_thread(client, auth_headers(second), subject="Three")

    everything = client.get("/messages/admin", headers=admin_headers).json()
    assert everything["total"] == 3

    per_user = client.get(
        f"/messages/admin?user_id={first.id}", headers=admin_headers
    ).json()
    assert per_user["total"] == 2
    assert {m["subject"] for m in per_user["messages"]} == {"One", "Two"}

    technical = client.get(
        "/messages/admin?category=technical", headers=admin_headers
    ).json()
    assert [m["subject"] for m in technical["messages"]] == ["Two"]

    own = client.get("/messages/", headers=auth_headers(second)).json()
    assert own["total"] == 1
    assert own["messages"][0]["subject"] == "Three"


def test_students_only_see_their_own_threads(client, make_user, auth_headers):
    owner = make_user()
    other = make_user()
    message_id = open_thread(client, auth_headers(owner)).json()["id"]

    response = client.get(f"/messages/{message_id}", headers=auth_headers(other))
    assert response.status_code == 404
    assert response.json() == {"error": "Message not found", "type": "not_found"}

    reply = client.post(
        f"/messages/{message_id}/replies",
        json={"message": "hello"},
        headers=auth_headers(other),
    )
    assert reply.status_code == 404


def test_admin_writes_to_student(client, db, make_user, admin, auth_headers, admin_headers):
    user = make_user()
    headers = auth_headers(user)

    created = client.post(
        "/messages/admin",
        json={"user_id": user.id, "subject": "Welcome", "message": "Glad to have you"},
        headers=admin_headers,
    ).json()
    assert created["is_from_admin"] is True
    assert created["admin_id"] == admin.id

    thread = client.get(f"/messages/{created['id']}", headers=headers).json()
    assert thread["status"] == "read"

    client.post(
        f"/messages/{created['id']}/replies", json={"message": "Thanks"}, headers=headers
    )
    resolved = client.patch(
        f"/messages/admin/{created['id']}/status",
        json={"status": "resolved"},
        headers=admin_headers,
    )
    assert resolved.json()["status"] == "resolved"

    db.expire_all()
    reply = db.query(AdminMessageReply).one()
    assert reply.user_id == user.id
    assert reply.is_from_admin is False
    assert db.get(AdminMessage, created["id"]).status == "resolved"


def test_admin_message_to_unknown_user(client, admin_headers):
    response = client.post(
        "/messages/admin",
        json={"user_id": 999, "subject": "Hi", "message": "Hello"},
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == "User not found"


def test_message_validation(client, make_user, auth_headers):
    headers = auth_headers(make_user())
    assert open_thread(client, headers, priority="asap").status_code == 422
    assert open_thread(client, headers, subject="").status_code == 422


def test_students_cannot_use_admin_inbox(client, make_user, auth_headers):
    response = client.get("/messages/admin", headers=auth_headers(make_user()))
    assert response.status_code == 403
