"""
Root, health and loading routes for the userdir application
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, WebSocket

from userdir.models import LoadingStatus
from userdir.routes.search import forward_outbox
from userdir.services import Services, get_services, get_tracker
from userdir.tracker import RequestTracker

logger = logging.getLogger(__name__)

router = APIRouter()


def _loading_status(tracker: RequestTracker) -> LoadingStatus:
    return LoadingStatus(
        is_loading=tracker.is_busy(),
        active_requests=tracker.active_count(),
    )


@router.get("/", tags=["Root"])
async def root(request: Request):
    """Root endpoint with API information"""
    config = get_services(request).config
    return {
        "message": f"Welcome to {config.TITLE}",
        "directory": config.DIRECTORY_API_URL,
        "version": config.VERSION,
        "docs": config.DOCS_URL,
        "endpoints": {
            "users": "/users?page=1",
            "user": "/users/{user_id}",
            "loading": "/loading",
            "loading_stream": "/loading/ws",
            "search": "/search/ws",
        }
    }


@router.get("/health", tags=["Health"])
async def health_check(tracker: RequestTracker = Depends(get_tracker)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "message": "API is running",
        "active_requests": tracker.active_count(),
    }


@router.get("/loading", response_model=LoadingStatus, tags=["Health"])
async def loading_status(tracker: RequestTracker = Depends(get_tracker)):
    """Global loading indicator: true while any directory call is in flight"""
    return _loading_status(tracker)


@router.websocket("/loading/ws")
async def loading_socket(websocket: WebSocket):
    """Push the loading indicator on connect and after every change"""
    services: Services = websocket.app.state.services
    tracker = services.tracker
    await websocket.accept()

    loop = asyncio.get_running_loop()
    outbox: asyncio.Queue = asyncio.Queue()
    outbox.put_nowait(_loading_status(tracker).model_dump())

    # Tracker changes may be published from another thread's loop
    unsubscribe = tracker.subscribe(
        lambda count: loop.call_soon_threadsafe(
            outbox.put_nowait,
            LoadingStatus(is_loading=count > 0, active_requests=count).model_dump(),
        )
    )
    sender = asyncio.create_task(forward_outbox(websocket, outbox))

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
    finally:
        logger.debug("Loading socket disconnected")
        unsubscribe()
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
