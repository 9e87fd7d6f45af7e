import logging
from os import getenv
from typing import Callable, Optional

import httpx

from todo_app.client.result import ApiResult, ErrorKind, Failure, Success
from todo_app.client.session import TOKEN_KEY, SessionStore

logger = logging.getLogger(__name__)

API_BASE_URL = getenv("TODO_API_URL", "http://localhost:3000/api")

NETWORK_ERROR = "Network error occurred. Please check your connection."
SESSION_EXPIRED = "Session expired. Please login again."


class ApiClient:
    """Async client for the todo HTTP API; every call returns an ``ApiResult``."""

    def __init__(
        self,
        store: SessionStore,
        base_url: str = API_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: float = 10.0,
    ):
        self.store = store
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_headers(self) -> dict:
        token = self.store.get(TOKEN_KEY)
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, endpoint: str, **kwargs) -> ApiResult:
        headers = self._auth_headers()
        try:
            response = await self._client.request(method, endpoint, headers=headers, **kwargs)
            data = response.json() if response.content else None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"API request failed: {method} {endpoint}: {e}")
            return Failure(NETWORK_ERROR, ErrorKind.NETWORK)

        if response.is_success:
            return Success(data)

        if response.status_code == 401 and headers:
            # token rejected: drop the stored session and hand control to the login entry point
            self.store.clear_auth()
            if self.on_unauthorized:
                self.on_unauthorized()
            return Failure(SESSION_EXPIRED, ErrorKind.UNAUTHORIZED, 401)

        error = None
        if isinstance(data, dict):
            error = data.get("error")
        if not error:
            error = f"HTTP {response.status_code}: {response.reason_phrase}"
        return Failure(error, ErrorKind.from_status(response.status_code), response.status_code)

    # ------------------------ Auth ------------------------

    async def register(self, name: str, email: str, password: str) -> ApiResult:
        return await self._request(
            "POST", "/auth/register", json={"name": name, "email": email, "password": password}
        )

    async def login(self, email: str, password: str) -> ApiResult:
        return await self._request("POST", "/auth/login", json={"email": email, "password": password})

    async def verify_email(self, email: str, otp: str) -> ApiResult:
        return await self._request("POST", "/auth/verify", json={"email": email, "otp": otp})

    async def resend_verification_code(self, email: str) -> ApiResult:
        return await self._request("POST", "/auth/resend-verification", json={"email": email})

    # ------------------------ Todos ------------------------

    async def get_todos(self) -> ApiResult:
        return await self._request("GET", "/todos")

    async def get_todo(self, todo_id: int) -> ApiResult:
        return await self._request("GET", f"/todos/{todo_id}")

    async def create_todo(self, title: str, description: Optional[str] = None) -> ApiResult:
        if not title or not title.strip():
            return Failure("Title is required", ErrorKind.VALIDATION)
        body = {"title": title.strip()}
        if description and description.strip():
            body["description"] = description.strip()
        return await self._request("POST", "/todos", json=body)

    async def update_todo(self, todo_id: int, **updates) -> ApiResult:
        if not todo_id:
            return Failure("Todo ID is required", ErrorKind.VALIDATION)
        valid_updates = {k: v for k, v in updates.items() if v is not None}
        if not valid_updates:
            return Failure("No valid updates provided", ErrorKind.VALIDATION)
        return await self._request("PUT", f"/todos/{todo_id}", json=valid_updates)

    async def delete_todo(self, todo_id: int) -> ApiResult:
        if not todo_id:
            return Failure("Todo ID is required", ErrorKind.VALIDATION)
        return await self._request("DELETE", f"/todos/{todo_id}")

    async def search_todos(self, query: str) -> ApiResult:
        if not query or not query.strip():
            return await self.get_todos()
        return await self._request("GET", "/todos/search", params={"q": query.strip()})

    async def get_todo_stats(self) -> ApiResult:
        return await self._request("GET", "/todos/stats")

    async def bulk_update_todos(self, updates: list[dict]) -> ApiResult:
        if not updates:
            return Failure("No updates provided", ErrorKind.VALIDATION)
        return await self._request("PUT", "/todos/bulk", json={"updates": updates})

    async def bulk_delete_todos(self, ids: list[int]) -> ApiResult:
        if not ids:
            return Failure("No todo IDs provided", ErrorKind.VALIDATION)
        return await self._request("DELETE", "/todos/bulk", json={"ids": ids})

    async def health_check(self) -> ApiResult:
        return await self._request("GET", "/health")
