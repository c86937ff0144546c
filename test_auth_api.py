from academy.core.security import jwt_manager


def register(client, email="new@example.com", password="password1"):
    return client.post(
        "/auth/register",
        json={"email": email, "password": password, "full_name": "New Student"},
    )


def test_register_and_me(client):
    response = register(client, email="New@Example.com")
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "new@example.com"
    assert data["token_type"] == "bearer"

    me = client.get(
        "/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["full_name"] == "New Student"


def test_register_duplicate_email(client):
    register(client)
    response = register(client)
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_register_weak_password(client):
    response = register(client, password="onlyletters")
    assert response.status_code == 422
    assert response.json()["error"] == "Validation error"


def test_login(client, make_user):
    make_user(email="learner@example.com")

    ok = client.post(
        "/auth/login", json={"email": "learner@example.com", "password": "secret123"}
    )
    assert ok.status_code == 200
    assert ok.json()["message"] == "Login successful"

    bad = client.post(
        "/auth/login", json={"email": "learner@example.com", "password": "wrong"}
    )
    assert bad.status_code == 401


def test_login_inactive_user(client, db, make_user):
    user = make_user(email="gone@example.com")
    user.is_active = False
    db.commit()

    response = client.post(
        "/auth/login", json={"email": "gone@example.com", "password": "secret123"}
    )
    assert response.status_code == 403


def test_refresh_token(client):
    tokens = register(client).json()

    refreshed = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200

    # an access token is not accepted as a refresh token
    wrong = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert wrong.status_code == 401


def test_invalid_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_admin_login(client, admin):
    response = client.post(
        "/auth/admin/login", json={"username_or_email": "root", "password": "Admin@123"}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]
    payload = jwt_manager.verify_token(token, "access")
    assert payload["role"] == "admin"
    assert payload["admin_id"] == admin.id

    me = client.get("/auth/admin/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["username"] == "root"

    wrong = client.post(
        "/auth/admin/login", json={"username_or_email": "root", "password": "nope"}
    )
    assert wrong.status_code == 401


def test_admin_token_is_not_a_student_token(client, admin_headers):
    response = client.get("/auth/me", headers=admin_headers)
    assert response.status_code == 401


def test_health(client):
    assert client.get("/health").json()["database"] == "healthy"
