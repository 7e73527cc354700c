"""
Chat relay.

Every inbound message is answered on its own: the scripted responder first,
then the external chat-completion API, and a fixed apology if either step
fails. Nothing is remembered between messages.
"""

import logging
from typing import Optional

import httpx
from fastapi import WebSocket, WebSocketDisconnect

from assistant import GREETING, scripted_reply
from config import CHAT_TIMEOUT, OPENROUTER_KEY, OPENROUTER_MODEL, OPENROUTER_URL
from models import ChatFrame

logger = logging.getLogger(__name__)

APOLOGY = "⚠️ Sorry, the assistant is unavailable right now. Please try again later."


class CompletionUnavailable(Exception):
    pass


class CompletionClient:
    """Minimal client for an OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(self, api_key: str = OPENROUTER_KEY, url: str = OPENROUTER_URL, model: str = OPENROUTER_MODEL, timeout: float = CHAT_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        self.transport = transport

    async def complete(self, text: str) -> str:
        if not self.api_key:
            raise CompletionUnavailable("No completion API key configured")
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                self.url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"model": self.model, "messages": [{"role": "user", "content": text}]},
            )
            response.raise_for_status()
            data = response.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise CompletionUnavailable("Completion response has no choices")
        if not content:
            raise CompletionUnavailable("Completion response is empty")
        return content.strip()


completion_client = CompletionClient()


def get_completion_client() -> CompletionClient:
    return completion_client


async def resolve_reply(text: str, completion: CompletionClient) -> str:
    try:
        local = scripted_reply(text)
        if local:
            return local
        return await completion.complete(text)
    except Exception as e:
        logger.warning("Chat reply failed: %r", e)
        return APOLOGY


def _frame(text: str) -> dict:
    return ChatFrame(text=text).model_dump(by_alias=True)


async def relay(websocket: WebSocket, completion: CompletionClient) -> None:
    await websocket.accept()
    logger.info("Chat connected")
    await websocket.send_json(_frame(GREETING))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            text = message.get("text")
            if text is None:
                # Binary frames carry the same text, UTF-8 encoded
                text = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            await websocket.send_json(_frame(await resolve_reply(text, completion)))
    except WebSocketDisconnect:
        pass
    logger.info("Chat disconnected")
