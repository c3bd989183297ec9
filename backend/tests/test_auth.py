from conftest import register, auth_headers

AUTH_URL = "/api/v1/auth"

def test_register_returns_token_pair_and_user(client, fake_db):
    tokens = register(client, "Alice", tz="PST")

    assert tokens["token_type"] == "bearer"
    assert tokens["access_token"] != tokens["refresh_token"]
    assert tokens["expires_in"] == 30 * 60
    assert tokens["user"]["email"] == "alice@example.com"
    assert tokens["user"]["timezone"] == "America/Los_Angeles"
    stored = fake_db.rows("users")[0]
    assert stored["password_hash"] != "secret123"
    assert "password" not in tokens["user"]

def test_register_duplicate_email_conflicts(client):
    register(client, "Alice")

    response = client.post(f"{AUTH_URL}/register", json={
        "name": "Other Alice",
        "email": "ALICE@example.com",
        "password": "secret123",
    })

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "User already exists with this email"}

def test_register_rejects_short_password_and_unknown_timezone(client):
    short = client.post(f"{AUTH_URL}/register", json={"name": "A", "email": "a@example.com", "password": "123"})
    bad_tz = client.post(f"{AUTH_URL}/register", json={
        "name": "A", "email": "a@example.com", "password": "secret123", "timezone": "Mars/Olympus",
    })

    assert short.status_code == 400
    assert bad_tz.status_code == 400
    assert "Unknown timezone" in bad_tz.json()["message"]

def test_login(client):
    register(client, "Alice")

    response = client.post(f"{AUTH_URL}/login", json={"email": "alice@example.com", "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Alice"

def test_login_wrong_password_or_unknown_user(client):
    register(client, "Alice")

    wrong = client.post(f"{AUTH_URL}/login", json={"email": "alice@example.com", "password": "nope-nope"})
    unknown = client.post(f"{AUTH_URL}/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Invalid email or password"
    assert unknown.status_code == 401

def test_me(client):
    tokens = register(client, "Alice")

    response = client.get(f"{AUTH_URL}/me", headers=auth_headers(tokens))

    assert response.status_code == 200
    assert response.json()["id"] == tokens["user"]["id"]

def test_refresh_issues_a_new_pair(client):
    tokens = register(client, "Alice")

    response = client.post(f"{AUTH_URL}/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 200
    refreshed = response.json()
    assert refreshed["access_token"] != tokens["access_token"]
    assert client.get(f"{AUTH_URL}/me", headers=auth_headers(refreshed)).status_code == 200

def test_access_token_cannot_be_used_to_refresh(client):
    tokens = register(client, "Alice")

    response = client.post(f"{AUTH_URL}/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401

def test_refresh_token_cannot_be_used_as_access_token(client):
    tokens = register(client, "Alice")

    response = client.get(f"{AUTH_URL}/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})

    assert response.status_code == 401

def test_logout_blacklists_the_access_token(client, fake_db):
    tokens = register(client, "Alice")
    headers = auth_headers(tokens)

    response = client.post(f"{AUTH_URL}/logout", headers=headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(fake_db.rows("blacklisted_tokens")) == 1
    assert client.get(f"{AUTH_URL}/me", headers=headers).status_code == 401
    assert client.get("/api/v1/habits", headers=headers).status_code == 401

def test_token_of_deleted_user_is_rejected(client, fake_db):
    tokens = register(client, "Alice")
    fake_db.tables["users"] = []

    response = client.get(f"{AUTH_URL}/me", headers=auth_headers(tokens))

    assert response.status_code == 401

def test_login_with_unreadable_stored_hash_is_rejected(client, fake_db):
    register(client, "Alice")
    fake_db.rows("users")[0]["password_hash"] = ""

    response = client.post(f"{AUTH_URL}/login", json={"email": "alice@example.com", "password": "secret123"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"

def test_openapi_token_url_includes_the_api_prefix(client):
    schema = client.get("/openapi.json").json()

    flows = schema["components"]["securitySchemes"]["OAuth2PasswordBearer"]["flows"]
    assert flows["password"]["tokenUrl"] == "/api/v1/auth/login"
