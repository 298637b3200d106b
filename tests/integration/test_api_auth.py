"""
Integration Tests for API Sessions

With use_real_auth on, every data route needs a logged-in user and each user
only sees their own rows.
"""

import pytest

pytestmark = [pytest.mark.integration, pytest.mark.api]

CREDENTIALS = {"email": "ana@exemplo.com", "password": "segredo1"}


def _register_and_login(client, credentials=CREDENTIALS):
    assert client.post("/api/auth/register", json=credentials).status_code == 201
    response = client.post("/api/auth/login", json=credentials)
    assert response.status_code == 200
    return response.get_json()


class TestSessionFlow:
    """Test register, login and logout."""

    def test_data_routes_need_login(self, auth_client):
        response = auth_client.get("/api/accounts")
        assert response.status_code == 401
        assert response.get_json() == {"message": "Unauthorized"}
        assert auth_client.get("/api/health").status_code == 200

    def test_full_flow(self, auth_client):
        assert auth_client.get("/api/auth/user").status_code == 401

        user = _register_and_login(auth_client)
        assert user["email"] == "ana@exemplo.com"
        assert "password_hash" not in user

        assert auth_client.get("/api/auth/user").get_json()["id"] == user["id"]
        assert auth_client.get("/api/accounts").get_json() == []
        created = auth_client.post("/api/accounts", json={"name": "Conta da Ana"})
        assert created.status_code == 201

        assert auth_client.post("/api/auth/logout").status_code == 204
        assert auth_client.get("/api/accounts").status_code == 401

    def test_wrong_password(self, auth_client):
        auth_client.post("/api/auth/register", json=CREDENTIALS)
        response = auth_client.post("/api/auth/login",
                                    json={"email": CREDENTIALS["email"], "password": "errada"})
        assert response.status_code == 401
        assert response.get_json()["message"] == "E-mail ou senha inválidos."

    def test_register_validation(self, auth_client):
        response = auth_client.post("/api/auth/register",
                                    json={"email": "ana", "password": "segredo1"})
        assert response.status_code == 400
        assert auth_client.post("/api/auth/register", json=CREDENTIALS).status_code == 201
        assert auth_client.post("/api/auth/register", json=CREDENTIALS).status_code == 400

    def test_users_see_only_their_rows(self, auth_client):
        _register_and_login(auth_client)
        auth_client.post("/api/accounts", json={"name": "Conta da Ana"})
        auth_client.post("/api/auth/logout")

        _register_and_login(auth_client, {"email": "bia@exemplo.com", "password": "segredo2"})
        assert auth_client.get("/api/accounts").get_json() == []
