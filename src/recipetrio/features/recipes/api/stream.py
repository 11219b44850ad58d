from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from recipetrio.features.recipes.api.deps import get_recipe_service
from recipetrio.features.recipes.app.streaming import DuplicateSessionError, SessionCoordinator
from recipetrio.features.recipes.app.use_cases import RecipeGenerationService
from recipetrio.features.recipes.domain.models import parse_recipe_input
from recipetrio.shared.errors import InputValidationError

router = APIRouter(tags=["stream"])
log = logging.getLogger("recipes.stream")


def _ws_send_json(ws: WebSocket, obj: dict):
    return ws.send_text(json.dumps(obj, ensure_ascii=False, default=str))


def _error(request_id: Optional[str], message: str) -> Dict[str, Any]:
    return {"type": "recipe-error", "request_id": request_id, "error": message}


class ConnectionOutbox:
    """
    Outbound events of one socket. Once closed, further events are dropped
    so sessions that outlive the connection do not pile up in memory.
    """

    def __init__(self) -> None:
        self.queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def put_nowait(self, event: Dict[str, Any]) -> None:
        if not self.closed:
            self.queue.put_nowait(event)

    async def emit(self, event: Dict[str, Any]) -> None:
        self.put_nowait(event)

    def close(self) -> None:
        self.closed = True
        while not self.queue.empty():
            self.queue.get_nowait()


def _handle_message(raw: str, coordinator: SessionCoordinator, outbox: ConnectionOutbox) -> None:
    try:
        msg = json.loads(raw)
    except ValueError:
        outbox.put_nowait(_error(None, "Message is not valid JSON"))
        return
    if not isinstance(msg, dict):
        outbox.put_nowait(_error(None, "Message must be a JSON object"))
        return

    request_id = msg.get("request_id") or msg.get("requestId")
    if not isinstance(request_id, str) or not request_id:
        outbox.put_nowait(_error(None, "request_id is required"))
        return
    if msg.get("type") != "generate-recipes":
        outbox.put_nowait(_error(request_id, f"Unknown message type: {msg.get('type')!r}"))
        return

    try:
        recipe_input = parse_recipe_input(msg.get("input"))
    except InputValidationError as e:
        log.warning("Invalid recipe input request_id=%s: %s", request_id, e.details)
        outbox.put_nowait(_error(request_id, str(e)))
        return

    try:
        coordinator.start(request_id, recipe_input)
    except DuplicateSessionError as e:
        outbox.put_nowait(_error(request_id, str(e)))
        return
    log.info("Starting recipe generation for request: %s", request_id)


@router.websocket("/recipes/stream")
async def recipes_stream_ws(ws: WebSocket, service: RecipeGenerationService = Depends(get_recipe_service)):
    await ws.accept()
    outbox = ConnectionOutbox()
    coordinator = SessionCoordinator(
        service.llm, outbox.emit, writer=service.writer, deadline_seconds=service.deadline_seconds
    )

    async def pump_outbox():
        try:
            while True:
                ev = await outbox.queue.get()
                await _ws_send_json(ws, ev)
        except Exception as e:
            log.debug("Outbox pump stopped: %s", e)

    sender = asyncio.create_task(pump_outbox())
    log.info("Client connected")
    try:
        while True:
            raw = await ws.receive_text()
            _handle_message(raw, coordinator, outbox)
    except WebSocketDisconnect:
        log.info("Client disconnected active_sessions=%s", coordinator.active_request_ids)
    finally:
        outbox.close()
        sender.cancel()
