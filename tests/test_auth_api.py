def test_signup_creates_user_with_normalized_email(client, users_store):
    r = client.post("/api/signup", json={"name": "Dana", "email": "  Dana@Example.COM ", "password": "s3cret"})
    assert r.status_code == 201
    assert r.json() == {"message": "User created"}

    users = users_store.read_all()
    assert len(users) == 1
    user = users[0]
    assert user["email"] == "dana@example.com"
    assert user["name"] == "Dana"
    assert isinstance(user["id"], int)
    assert user["passwordHash"].startswith("$2")
    assert user["passwordHash"] != "s3cret"
    assert user["createdAt"].endswith("Z")


def test_signup_requires_email_and_password(client):
    assert client.post("/api/signup", json={"email": "a@example.com"}).status_code == 400
    r = client.post("/api/signup", json={"password": "x"})
    assert r.status_code == 400
    assert r.json() == {"message": "Email and password are required"}
    assert client.post("/api/signup").status_code == 400


def test_signup_duplicate_email_variants_conflict(client, users_store):
    assert client.post("/api/signup", json={"email": "dana@example.com", "password": "pw"}).status_code == 201
    for variant in ("DANA@example.com", " dana@Example.com  "):
        r = client.post("/api/signup", json={"email": variant, "password": "other"})
        assert r.status_code == 409
        assert r.json() == {"message": "User already exists"}
    assert len(users_store.read_all()) == 1


def test_login_success(client):
    client.post("/api/signup", json={"email": "dana@example.com", "password": "pw"})
    r = client.post("/api/login", json={"email": " DANA@example.com", "password": "pw"})
    assert r.status_code == 200
    assert r.json() == {"message": "Login successful"}


def test_login_missing_fields(client):
    r = client.post("/api/login", json={"email": "dana@example.com"})
    assert r.status_code == 400
    assert r.json() == {"message": "Missing credentials"}


def test_login_failure_is_indistinguishable(client):
    client.post("/api/signup", json={"email": "dana@example.com", "password": "pw"})
    unknown = client.post("/api/login", json={"email": "nobody@example.com", "password": "pw"})
    wrong = client.post("/api/login", json={"email": "dana@example.com", "password": "nope"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"message": "Invalid credentials"}


def test_store_failure_is_generic_500(client, tmp_path, users_store):
    with open(users_store.path, "w", encoding="utf-8") as f:
        f.write("{broken")
    r = client.post("/api/signup", json={"email": "dana@example.com", "password": "pw"})
    assert r.status_code == 500
    assert r.json() == {"message": "Server error"}


def test_password_longer_than_bcrypt_limit(client):
    long_password = "p" * 80
    r = client.post("/api/signup", json={"email": "long@example.com", "password": long_password})
    assert r.status_code == 201
    r = client.post("/api/login", json={"email": "long@example.com", "password": long_password})
    assert r.status_code == 200
    assert r.json() == {"message": "Login successful"}


def test_non_object_body_is_bad_request(client):
    for path in ("/api/signup", "/api/login"):
        r = client.post(path, json=["a"])
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid request body"
        assert "detail" not in r.json()


def test_malformed_json_is_bad_request(client):
    r = client.post("/api/login", content="{bad", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid request body"
