"""HTTP client for the Detetive Financeiro REST server."""
import logging

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
RETRY_MAX_WAIT = 8


class ApiError(Exception):
    """A failed API call. status is 0 when the server could not be reached."""

    def __init__(self, status: int, message: str, details=None):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.details = details

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500


class UnauthorizedError(ApiError):
    """401: the session is missing or expired."""


class ServerUnavailable(Exception):
    """A 5xx response, raised inside the retry loop so it can be retried."""

    def __init__(self, response: requests.Response):
        super().__init__(f"{response.status_code} {response.reason}")
        self.response = response


class ApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 2,
        retry_delay: float = 0.5,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        # The session keeps the login cookie between calls
        self._session = session or requests.Session()

    def request(self, method: str, path: str, json=None, params=None):
        """Send one request; returns parsed JSON, or None for 204.

        Refused connections and 5xx responses are retried with exponential
        backoff; 4xx never are. A read timeout is not retried, since the
        server may already have applied the request.
        """
        url = self.base_url + path
        retryer = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_delay, max=RETRY_MAX_WAIT),
            retry=retry_if_exception_type((requests.ConnectionError, ServerUnavailable)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            response = retryer(self._send, method, url, json, params)
        except ServerUnavailable as e:
            response = e.response
        except requests.ConnectionError as e:
            raise ApiError(0, f"Não foi possível conectar ao servidor: {e}") from e
        except requests.Timeout as e:
            raise ApiError(0, f"O servidor não respondeu a tempo: {e}") from e
        except requests.RequestException as e:
            raise ApiError(0, f"Falha na comunicação com o servidor: {e}") from e
        return self._handle(response)

    def _send(self, method: str, url: str, json, params) -> requests.Response:
        response = self._session.request(
            method, url, json=json, params=params, timeout=self.timeout
        )
        if response.status_code >= 500:
            raise ServerUnavailable(response)
        return response

    @staticmethod
    def _handle(response: requests.Response):
        if response.status_code == 204:
            return None
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.ok:
            return payload

        message = response.reason or "Erro"
        details = None
        if isinstance(payload, dict):
            message = payload.get("message", message)
            details = payload.get("details")
        elif response.text:
            message = response.text

        if response.status_code == 401:
            raise UnauthorizedError(401, message, details)
        raise ApiError(response.status_code, message, details)

    # ── Verbs ────────────────────────────────────────────────────────────────

    def get(self, path: str, params=None):
        return self.request("GET", path, params=params)

    def post(self, path: str, json=None):
        return self.request("POST", path, json=json)

    def put(self, path: str, json=None):
        return self.request("PUT", path, json=json)

    def delete(self, path: str):
        return self.request("DELETE", path)

    # ── Endpoints ────────────────────────────────────────────────────────────

    def health(self) -> bool:
        try:
            return (self.get("/api/health") or {}).get("status") == "ok"
        except ApiError:
            return False

    def login(self, email: str, password: str) -> dict:
        user = self.post("/api/auth/login", json={"email": email, "password": password})
        logger.info("Logged in as %s", email)
        return user

    def logout(self):
        self.post("/api/auth/logout")

    def current_user(self) -> dict | None:
        """The logged-in user, or None when the session is not authenticated."""
        try:
            return self.get("/api/auth/user")
        except UnauthorizedError:
            return None

    def transactions_summary(self, params: dict | None = None) -> dict:
        return self.get("/api/transactions/summary", params=params)
