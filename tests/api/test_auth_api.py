PASSWORD = "TestPassword123!"


def test_register_and_me(client):
    response = client.post("/api/v1/auth/register", json={
        "email": "new@example.com",
        "password": PASSWORD,
        "full_name": "New Buyer",
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body["user"]["role"] == "buyer"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.get_json()["email"] == "new@example.com"


def test_register_admin_is_refused(client):
    response = client.post("/api/v1/auth/register", json={
        "email": "boss@example.com",
        "password": PASSWORD,
        "full_name": "Boss",
        "role": "admin",
    })
    assert response.status_code == 422


def test_duplicate_email(client, buyer):
    response = client.post("/api/v1/auth/register", json={
        "email": buyer.email,
        "password": PASSWORD,
        "full_name": "Again",
    })
    assert response.status_code == 409
    assert response.get_json()["error"]["code"] == "USER_EXISTS"


def test_login(client, buyer):
    response = client.post("/api/v1/auth/login", json={"email": buyer.email, "password": PASSWORD})
    assert response.status_code == 200
    assert response.get_json()["user"]["id"] == buyer.id


def test_login_wrong_password(client, buyer):
    response = client.post("/api/v1/auth/login", json={"email": buyer.email, "password": "nope"})
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "AUTH_FAILED"


def test_suspended_login_is_forbidden(client, make_user):
    user = make_user("buyer", is_suspended=True)
    response = client.post("/api/v1/auth/login", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 403
    assert response.get_json()["error"]["code"] == "ACCOUNT_SUSPENDED"


def test_suspended_token_is_forbidden(client, buyer, auth_headers):
    headers = auth_headers(buyer)
    buyer.is_suspended = True
    response = client.get("/api/v1/auth/me", headers=headers)
    assert response.status_code == 403


def test_missing_token(client):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "UNAUTHORIZED"
