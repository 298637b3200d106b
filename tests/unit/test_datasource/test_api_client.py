"""Tests for the REST client and the remote repositories, with a fake HTTP session."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from datasource.api_client import ApiClient, ApiError, UnauthorizedError
from datasource.remote import RemoteAccountRepository, RemoteTransactionRepository
from models.transaction import TransactionFilters


def _response(status: int, payload=None, text: str = "", reason: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = text.encode("utf-8")
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return ApiClient("http://api.local/", retry_delay=0, session=session)


@pytest.mark.api
class TestRequests:
    """Test status handling and retries."""

    def test_ok_returns_json(self, client, session):
        session.request.return_value = _response(200, {"status": "ok"})
        assert client.get("/api/health") == {"status": "ok"}
        method, url = session.request.call_args.args
        assert (method, url) == ("GET", "http://api.local/api/health")
        assert session.request.call_args.kwargs["timeout"] == client.timeout

    def test_no_content(self, client, session):
        session.request.return_value = _response(204)
        assert client.delete("/api/accounts/1") is None

    def test_client_error_not_retried(self, client, session):
        session.request.return_value = _response(
            400, {"message": "O nome é obrigatório.", "details": {"type": "validation"}}
        )
        with pytest.raises(ApiError) as excinfo:
            client.post("/api/accounts", json={})
        assert excinfo.value.status == 400
        assert excinfo.value.message == "O nome é obrigatório."
        assert excinfo.value.details == {"type": "validation"}
        assert excinfo.value.is_client_error
        assert session.request.call_count == 1

    def test_unauthorized(self, client, session):
        session.request.return_value = _response(401, {"message": "Faça login."})
        with pytest.raises(UnauthorizedError):
            client.get("/api/accounts")

    def test_server_error_retried(self, client, session):
        session.request.side_effect = [_response(503, text="busy"), _response(200, [])]
        assert client.get("/api/accounts") == []
        assert session.request.call_count == 2

    def test_server_error_gives_up(self, client, session):
        session.request.return_value = _response(500, text="boom", reason="Internal Server Error")
        with pytest.raises(ApiError) as excinfo:
            client.get("/api/accounts")
        assert excinfo.value.status == 500
        assert excinfo.value.message == "boom"
        assert session.request.call_count == 3

    def test_connection_error(self, client, session):
        session.request.side_effect = requests.ConnectionError("recusada")
        with pytest.raises(ApiError) as excinfo:
            client.get("/api/accounts")
        assert excinfo.value.status == 0
        assert "conectar" in excinfo.value.message
        assert session.request.call_count == 3

    def test_read_timeout_not_resent(self, client, session):
        session.request.side_effect = [
            requests.ReadTimeout("lento"),
            _response(201, {"id": 7}),
        ]
        with pytest.raises(ApiError) as excinfo:
            client.post("/api/transactions", json={"description": "Mercado", "amount": 50})
        assert excinfo.value.status == 0
        assert "tempo" in excinfo.value.message
        assert session.request.call_count == 1

    def test_connect_timeout_retried(self, client, session):
        session.request.side_effect = [requests.ConnectTimeout("sem rota"), _response(201, {"id": 7})]
        assert client.post("/api/transactions", json={"amount": 50}) == {"id": 7}
        assert session.request.call_count == 2


@pytest.mark.api
class TestEndpoints:
    """Test the convenience wrappers."""

    def test_health(self, client, session):
        session.request.return_value = _response(200, {"status": "ok"})
        assert client.health()
        session.request.side_effect = requests.ConnectionError("fora do ar")
        assert not client.health()

    def test_current_user(self, client, session):
        session.request.return_value = _response(200, {"id": 2, "email": "ana@exemplo.com"})
        assert client.current_user()["id"] == 2
        session.request.return_value = _response(401, {"message": "Faça login."})
        assert client.current_user() is None

    def test_transactions_summary(self, client, session):
        session.request.return_value = _response(
            200, {"income": 1000.0, "expenses": 250.0, "balance": 750.0}
        )
        summary = client.transactions_summary({"start_date": "2024-03-01"})
        assert summary["balance"] == 750.0
        assert session.request.call_args.args[1].endswith("/api/transactions/summary")
        assert session.request.call_args.kwargs["params"] == {"start_date": "2024-03-01"}


@pytest.mark.api
class TestRemoteRepositories:
    """Test payload mapping in the remote repositories."""

    def test_get_by_id_missing(self, client, session):
        session.request.return_value = _response(404, {"message": "Conta 9 não encontrada."})
        assert RemoteAccountRepository(client).get_by_id(9) is None

    def test_get_by_id_other_errors_raise(self, client, session):
        session.request.return_value = _response(400, {"message": "Requisição inválida."})
        with pytest.raises(ApiError):
            RemoteAccountRepository(client).get_by_id(9)

    def test_unknown_keys_ignored(self, client, session):
        session.request.return_value = _response(200, [
            {"id": 1, "name": "Nubank", "balance": 10.5, "extra": "x"},
        ])
        accounts = RemoteAccountRepository(client).get_all()
        assert accounts[0].name == "Nubank"
        assert accounts[0].balance == 10.5

    def test_include_inactive_param(self, client, session):
        session.request.return_value = _response(200, [])
        RemoteAccountRepository(client).get_all(include_inactive=True)
        assert session.request.call_args.kwargs["params"] == {"include_inactive": "true"}

    def test_transaction_filters_become_params(self, client, session):
        session.request.return_value = _response(200, [])
        RemoteTransactionRepository(client).get_all(
            TransactionFilters(start_date="2024-03-01", min_amount=10.0)
        )
        assert session.request.call_args.kwargs["params"] == {
            "start_date": "2024-03-01", "min_amount": 10.0,
        }
