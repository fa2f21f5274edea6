"""Async HTTP client for the remote content API.

Wraps a single ``httpx.AsyncClient`` authenticated with a static developer
token. Every request goes through ``call_with_retry``; status codes are
mapped onto the ``StoreError`` taxonomy so callers never see raw HTTP.
"""

import logging
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from ..models.store import utcnow
from .errors import (
    AlreadyExistsError,
    BackendError,
    FolderNotEmptyError,
    InvalidArgumentError,
    NotFoundError,
)
from .retry import RETRYABLE_STATUS_CODES, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000


def parse_retry_after(value: str | None) -> float | None:
    """``Retry-After`` as seconds; accepts delta-seconds or an HTTP date."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        return max((parsedate_to_datetime(value) - utcnow()).total_seconds(), 0.0)
    except (TypeError, ValueError):
        return None


def error_for_response(response: httpx.Response) -> Exception:
    """Map an unsuccessful response onto the store error taxonomy."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    code = body.get("code") or ""
    message = body.get("message") or response.reason_phrase or f"HTTP {status}"

    if code == "folder_not_empty":
        return FolderNotEmptyError("Folder not empty")
    if status == 404:
        return NotFoundError(message)
    if status == 409:
        return AlreadyExistsError(message)
    if status == 400:
        return InvalidArgumentError(message)
    return BackendError(
        f"{status} {message}",
        status=status,
        retryable=status in RETRYABLE_STATUS_CODES,
        retry_after=parse_retry_after(response.headers.get("Retry-After")),
    )


class ApiClient:
    """Bearer-authenticated JSON client with bounded retries."""

    def __init__(
        self,
        developer_token: str,
        api_base_url: str,
        upload_base_url: str,
        *,
        timeout: float = 30.0,
        policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.upload_base_url = upload_base_url.rstrip("/")
        self.policy = policy or RetryPolicy()
        self._client = httpx.AsyncClient(
            base_url=api_base_url.rstrip("/") + "/",
            headers={"Authorization": f"Bearer {developer_token}"},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Any, transport: httpx.AsyncBaseTransport | None = None
    ) -> "ApiClient":
        return cls(
            settings.developer_token or "",
            settings.api_base_url,
            settings.upload_base_url,
            timeout=settings.request_timeout_seconds,
            policy=RetryPolicy.from_settings(settings),
            transport=transport,
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self._client.request(method, url.lstrip("/"), **kwargs)
        if response.is_success:
            return response
        raise error_for_response(response)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request, retrying transient failures per ``self.policy``."""
        return await call_with_retry(
            lambda: self._send(method, url, **kwargs),
            self.policy,
            label=f"{method} {url}",
        )

    async def json(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        response = await self.request(method, url, **kwargs)
        if not response.content:
            return {}
        return response.json()

    async def upload(self, url: str, **kwargs: Any) -> dict[str, Any]:
        """POST to the upload host (``url`` is relative to it)."""
        return await self.json("POST", f"{self.upload_base_url}/{url.lstrip('/')}", **kwargs)

    async def paginate(self, url: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Collect every entry of an offset/limit paginated listing."""
        entries: list[dict] = []
        offset = 0
        while True:
            page = await self.json(
                "GET", url, params={**(params or {}), "offset": offset, "limit": PAGE_SIZE}
            )
            batch = page.get("entries") or []
            entries.extend(batch)
            if len(batch) < PAGE_SIZE:
                return entries
            offset += PAGE_SIZE

    async def aclose(self) -> None:
        await self._client.aclose()
