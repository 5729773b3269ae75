"""
Live user-id search over a WebSocket

Each connection owns one SearchController. The client sends keystrokes
as ``{"action": "input", "value": ...}`` plus ``clear`` / ``confirm``
actions; the server pushes a SearchState snapshot after every change.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from userdir.models import ErrorResponse
from userdir.search import SearchController
from userdir.services import Services

logger = logging.getLogger(__name__)

router = APIRouter()


async def forward_outbox(websocket: WebSocket, outbox: asyncio.Queue) -> None:
    while True:
        payload = await outbox.get()
        await websocket.send_json(payload)


def _error(detail: str) -> dict:
    return ErrorResponse(detail=detail, error_type="InvalidMessage").model_dump()


@router.websocket("/search/ws")
async def search_socket(websocket: WebSocket):
    services: Services = websocket.app.state.services
    await websocket.accept()

    outbox: asyncio.Queue = asyncio.Queue()
    controller = SearchController(
        lookup=services.directory.fetch_user_by_id,
        delay=services.config.SEARCH_DEBOUNCE_SECONDS,
        on_select=lambda user: outbox.put_nowait({"navigate": f"/users/{user.id}"}),
    )
    unsubscribe = controller.subscribe(
        lambda state: outbox.put_nowait(state.model_dump(mode="json"))
    )
    sender = asyncio.create_task(forward_outbox(websocket, outbox))

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))

            text = frame.get("text")
            if text is None:
                outbox.put_nowait(_error("Message must be JSON"))
                continue
            try:
                message = json.loads(text)
            except ValueError:
                outbox.put_nowait(_error("Message must be JSON"))
                continue

            action = message.get("action") if isinstance(message, dict) else None
            if action == "input":
                controller.on_input(str(message.get("value", "")))
            elif action == "clear":
                controller.clear()
            elif action == "confirm":
                if controller.confirm_selection() is None:
                    outbox.put_nowait(_error("Nothing to confirm"))
            else:
                outbox.put_nowait(_error(f"Unknown action: {action}"))
    except WebSocketDisconnect:
        logger.debug("Search socket disconnected")
    finally:
        unsubscribe()
        controller.clear()
        await controller.close()
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
