"""
Application-lifetime collaborators and their FastAPI dependencies
"""

from dataclasses import dataclass
from typing import Optional, Type

from fastapi import Request

from userdir.cache import TTLCache
from userdir.client import DirectoryClient, HttpTransport, Transport
from userdir.config import Config
from userdir.tracker import RequestTracker


@dataclass
class Services:
    """One cache, one tracker and one directory client per application"""
    config: Type[Config]
    cache: TTLCache
    tracker: RequestTracker
    directory: DirectoryClient


def build_services(config: Type[Config] = Config, transport: Optional[Transport] = None) -> Services:
    """Construct the shared instances once at application start"""
    cache = TTLCache(default_ttl=config.CACHE_TTL_SECONDS)
    tracker = RequestTracker()
    if transport is None:
        transport = HttpTransport(timeout=config.HTTP_TIMEOUT_SECONDS)
    directory = DirectoryClient(
        base_url=config.DIRECTORY_API_URL,
        api_key=config.DIRECTORY_API_KEY,
        cache=cache,
        tracker=tracker,
        transport=transport,
    )
    return Services(config=config, cache=cache, tracker=tracker, directory=directory)


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_directory(request: Request) -> DirectoryClient:
    return get_services(request).directory


def get_tracker(request: Request) -> RequestTracker:
    return get_services(request).tracker
