"""HTTP access to the upstream user directory."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError
from fastapi.concurrency import run_in_threadpool
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from userdir.cache import TTLCache
from userdir.config import Config
from userdir.models import PagedUsers, User, UserResponse
from userdir.tracker import RequestTracker

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Transport = Callable[[str, str, Mapping[str, str]], requests.Response]


class DirectoryError(Exception):
    """Upstream directory request failed (transport, non-2xx or bad body)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UserNotFoundError(DirectoryError):
    """Upstream directory has no user with the requested id."""


def build_http_session() -> requests.Session:
    """requests session with connection pooling + light retries."""
    session = requests.Session()
    retry = Retry(
        total=2,
        connect=2,
        read=2,
        backoff_factor=0.2,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(pool_connections=10, pool_maxsize=10, max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class HttpTransport:
    """Blocking ``perform_request(method, url, headers)`` on a shared session."""

    def __init__(
        self,
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._timeout = timeout
        self._session = session or build_http_session()

    def __call__(self, method: str, url: str, headers: Mapping[str, str]) -> requests.Response:
        return self.perform_request(method, url, headers)

    def perform_request(self, method: str, url: str, headers: Mapping[str, str]) -> requests.Response:
        return self._session.request(method, url, headers=dict(headers), timeout=self._timeout)


class DirectoryClient:
    """
    Cached, tracked access to the directory's ``/users`` resource.

    Every fetch checks the cache first and only successful responses are
    cached. Network calls (never cache hits) are counted by the tracker,
    so the global loading flag reflects real traffic only.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        cache: TTLCache,
        tracker: RequestTracker,
        transport: Transport,
        cache_ttl: Optional[float] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._headers = {"x-api-key": api_key, "Accept": "application/json"}
        self._cache = cache
        self._tracker = tracker
        self._transport = transport
        self._cache_ttl = cache_ttl

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_users(self, page: int) -> PagedUsers:
        """Fetch one page (1-based) of the directory."""
        cache_key = self.page_cache_key(page)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit: {cache_key}")
            return cached

        response = await self._request(f"/users?page={page}")
        result = self._decode(response, PagedUsers)
        self._cache.set(cache_key, result, self._cache_ttl)
        return result

    async def fetch_user_by_id(self, user_id: int) -> User:
        """Fetch a single user; raises UserNotFoundError for unknown ids."""
        cache_key = self.user_cache_key(user_id)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit: {cache_key}")
            return cached

        try:
            response = await self._request(f"/users/{user_id}")
        except DirectoryError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User {user_id} not found", status_code=404) from exc
            raise

        user = self._decode(response, UserResponse).data
        self._cache.set(cache_key, user, self._cache_ttl)
        return user

    def invalidate_page(self, page: int) -> None:
        self._cache.delete(self.page_cache_key(page))

    def invalidate_user(self, user_id: int) -> None:
        self._cache.delete(self.user_cache_key(user_id))

    @staticmethod
    def page_cache_key(page: int) -> str:
        return f"users_page_{page}"

    @staticmethod
    def user_cache_key(user_id: int) -> str:
        return f"user_{user_id}"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(self, path: str) -> requests.Response:
        url = f"{self._base_url}{path}"
        logger.debug(f"GET {url}")

        with self._tracker.tracked():
            try:
                # Transport is blocking (requests); run in threadpool.
                response = await run_in_threadpool(self._transport, "GET", url, self._headers)
            except requests.RequestException as exc:
                logger.warning(f"Directory request failed: GET {url}: {exc}")
                raise DirectoryError(f"Request to {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            logger.warning(f"Directory returned {response.status_code} for GET {url}")
            raise DirectoryError(
                f"Directory returned {response.status_code} for {url}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: requests.Response, model: Type[M]) -> M:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise DirectoryError(f"Malformed directory response: {exc}") from exc
