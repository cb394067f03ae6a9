from datetime import timedelta

from app import settings
from app.database import models
from app.security import hash_token, verify_password
from tests.helpers import TEST_PASSWORD, create_test_user


class TestSignUp:
    '''`POST /api/auth/sign-up/email`'''

    def test_creates_user_and_session(self, client, db):
        response = client.post("/api/auth/sign-up/email", json={
            "email": "New.User@Example.com",
            "name": "New User",
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "new.user@example.com"
        assert data["name"] == "New User"
        assert "password_hash" not in data
        assert settings.SESSION_COOKIE_NAME in response.cookies

        user = db.get(models.User, data["id"])
        assert user.password_hash != TEST_PASSWORD
        assert verify_password(TEST_PASSWORD, user.password_hash)

    def test_duplicate_email(self, client, db):
        create_test_user(db, email="taken@example.com")
        response = client.post("/api/auth/sign-up/email", json={
            "email": "taken@example.com",
            "name": "Someone",
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 409
        assert response.json()["code"] == "USER_ALREADY_EXISTS"

    def test_short_password(self, client):
        response = client.post("/api/auth/sign-up/email", json={
            "email": "short@example.com",
            "name": "Short",
            "password": "abc",
        })
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert response.json()["details"]

    def test_invalid_email(self, client):
        response = client.post("/api/auth/sign-up/email", json={
            "email": "not-an-email",
            "name": "Nobody",
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 400


class TestSignIn:
    '''`POST /api/auth/sign-in/email`'''

    def test_valid_credentials(self, client, db):
        user = create_test_user(db, email="jane@example.com")
        response = client.post("/api/auth/sign-in/email", json={
            "email": "jane@example.com",
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 200
        assert response.json()["data"]["id"] == user.id

        session = client.get("/api/auth/get-session")
        assert session.status_code == 200
        assert session.json()["data"]["user"]["id"] == user.id

    def test_wrong_password(self, client, db):
        create_test_user(db, email="jane@example.com")
        response = client.post("/api/auth/sign-in/email", json={
            "email": "jane@example.com",
            "password": "wrong-password",
        })
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_unknown_email(self, client):
        response = client.post("/api/auth/sign-in/email", json={
            "email": "ghost@example.com",
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"


class TestSession:
    '''Session lookup, expiry and sign-out.'''

    def test_get_session_without_cookie(self, client):
        response = client.get("/api/auth/get-session")
        assert response.status_code == 401

    def test_get_session(self, auth_client):
        response = auth_client.get("/api/auth/get-session")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "test@example.com"
        assert data["session"]["user_id"] == auth_client.user["id"]

    def test_token_is_stored_hashed(self, auth_client, db):
        token = auth_client.cookies.get(settings.SESSION_COOKIE_NAME)
        session = db.query(models.Session).one()
        assert session.token_hash == hash_token(token)
        assert session.token_hash != token

    def test_sign_out(self, auth_client, db):
        response = auth_client.post("/api/auth/sign-out")
        assert response.status_code == 200
        assert db.query(models.Session).count() == 0
        assert auth_client.get("/api/issues").status_code == 401

    def test_expired_session(self, auth_client, db):
        session = db.query(models.Session).one()
        session.expires_at = models.utcnow() - timedelta(minutes=1)
        db.commit()

        response = auth_client.get("/api/users/me")
        assert response.status_code == 401
        db.expire_all()
        assert db.query(models.Session).count() == 0

    def test_forged_cookie(self, client):
        headers = {"Cookie": f"{settings.SESSION_COOKIE_NAME}=forged-token"}
        assert client.get("/api/users/me", headers=headers).status_code == 401


class TestApiKeys:
    '''API keys authenticate tool integrations through `x-api-key`.'''

    def test_create_and_use(self, auth_client, client_factory):
        created = auth_client.post("/api/auth/api-key/create", json={"name": "tools"})
        assert created.status_code == 201
        key = created.json()["data"]["key"]
        assert created.json()["data"]["start"] == key[:8]

        anonymous = client_factory()
        response = anonymous.get("/api/users/me", headers={"x-api-key": key})
        assert response.status_code == 200
        assert response.json()["data"]["id"] == auth_client.user["id"]

    def test_list_hides_key(self, auth_client):
        auth_client.post("/api/auth/api-key/create", json={"name": "tools"})
        response = auth_client.get("/api/auth/api-key/list")
        assert response.status_code == 200
        keys = response.json()["data"]
        assert len(keys) == 1
        assert keys[0]["name"] == "tools"
        assert "key" not in keys[0]

    def test_invalid_key(self, client):
        response = client.get("/api/issues", headers={"x-api-key": "itk_nope"})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_API_KEY"

    def test_delete(self, auth_client, client_factory):
        created = auth_client.post("/api/auth/api-key/create", json={"name": "tools"}).json()["data"]

        response = auth_client.delete(f"/api/auth/api-key/{created['id']}")
        assert response.status_code == 200

        anonymous = client_factory()
        assert anonymous.get("/api/users/me", headers={"x-api-key": created["key"]}).status_code == 401

    def test_delete_unknown(self, auth_client):
        assert auth_client.delete("/api/auth/api-key/missing").status_code == 404
