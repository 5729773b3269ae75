"""Shared fixtures: fake directory transport and a test app."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest
import requests
from fastapi import FastAPI
from fastapi.testclient import TestClient

from userdir import create_app
from userdir.config import Config


def make_response(status_code: int, payload: Optional[Any] = None, url: str = "") -> requests.Response:
    """Build a real requests.Response carrying a JSON body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.headers["Content-Type"] = "application/json"
    response._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    return response


def user_payload(user_id: int) -> Dict[str, Any]:
    return {
        "id": user_id,
        "email": f"user{user_id}@reqres.in",
        "first_name": f"First{user_id}",
        "last_name": f"Last{user_id}",
        "avatar": f"https://reqres.in/img/faces/{user_id}-image.jpg",
    }


def page_payload(page: int, per_page: int = 6, total: int = 12) -> Dict[str, Any]:
    first = (page - 1) * per_page + 1
    ids = [i for i in range(first, first + per_page) if i <= total]
    return {
        "page": page,
        "per_page": per_page,
        "total": total,
        "total_pages": (total + per_page - 1) // per_page,
        "data": [user_payload(i) for i in ids],
    }


class FakeDirectoryTransport:
    """
    In-memory stand-in for the upstream directory.

    Serves ``known_ids`` users on ``/users/{id}`` and any page on
    ``/users?page=N``; records every call. Set ``fail_with`` to make the
    next calls raise (a requests exception) or ``status`` to force a code.
    """

    def __init__(self, known_ids=range(1, 13)):
        self.known_ids = set(known_ids)
        self.calls: List[Tuple[str, str, Dict[str, str]]] = []
        self.fail_with: Optional[Exception] = None
        self.status: Optional[int] = None

    def __call__(self, method: str, url: str, headers: Mapping[str, str]) -> requests.Response:
        self.calls.append((method, url, dict(headers)))
        if self.fail_with is not None:
            raise self.fail_with
        if self.status is not None:
            return make_response(self.status, {}, url)

        if "/users?page=" in url:
            page = int(url.rsplit("=", 1)[1])
            return make_response(200, page_payload(page), url)

        user_id = int(url.rsplit("/", 1)[1])
        if user_id not in self.known_ids:
            return make_response(404, {}, url)
        return make_response(200, {"data": user_payload(user_id)}, url)


class FastSearchConfig(Config):
    DIRECTORY_API_URL = "https://directory.test/api"
    DIRECTORY_API_KEY = "test-key"
    SEARCH_DEBOUNCE_SECONDS = 0.01


@pytest.fixture
def transport() -> FakeDirectoryTransport:
    return FakeDirectoryTransport()


@pytest.fixture
def app(transport: FakeDirectoryTransport) -> FastAPI:
    return create_app(config=FastSearchConfig, transport=transport)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
