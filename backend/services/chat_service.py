"""
chat_service.py — HealthMate assistant
Keeps the per-user chat transcript in chat_messages and relays new
questions to the health-chat edge function, which answers with an
OpenAI-style Server-Sent Events stream of content deltas.
"""

import json
import logging

import httpx

from config import HEALTH_CHAT_URL, SUPABASE_ANON_KEY
from models.chat_message import ChatMessage
from supabase_rest import sb_select, sb_insert

logger = logging.getLogger(__name__)

GREETING = (
    "Hello! I'm HealthMate, your AI health companion. How are you feeling today? "
    "You can describe your symptoms, ask health questions, or request advice on "
    "wellness and home remedies."
)
GENERIC_FAILURE = "Failed to get response from health assistant"


class ChatServiceError(Exception):
    """Chat failure carrying a message that can be shown to the user as-is."""


def _delta_content(parsed) -> str | None:
    """``choices[0].delta.content`` when the payload has that shape, else None."""
    if not isinstance(parsed, dict):
        return None
    choices = parsed.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None


def _error_message(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


class SSEDeltaParser:
    """Incremental parser for ``data: {...}`` lines carrying ``choices[0].delta.content``.

    A ``data:`` line that is not valid JSON yet (split across network chunks)
    is pushed back into the buffer until more bytes arrive.
    """

    def __init__(self):
        self.buffer = ""
        self.done = False

    def feed(self, text: str) -> list[str]:
        self.buffer += text
        deltas = []
        while not self.done and "\n" in self.buffer:
            line, self.buffer = self.buffer.split("\n", 1)
            if line.endswith("\r"):
                line = line[:-1]
            if line.startswith(":") or line.strip() == "":
                continue
            if not line.startswith("data: "):
                continue

            payload = line[6:].strip()
            if payload == "[DONE]":
                self.done = True
                break

            try:
                parsed = json.loads(payload)
            except json.JSONDecodeError:
                self.buffer = line + "\n" + self.buffer
                break

            content = _delta_content(parsed)
            if content:
                deltas.append(content)
        return deltas

    def flush(self) -> list[str]:
        """Parse whatever is left once the upstream closes, dropping lines that never became valid."""
        if self.done or not self.buffer.strip():
            return []
        leftover, self.buffer = self.buffer, ""
        deltas = []
        for line in leftover.splitlines():
            line = line.strip()
            if not line.startswith("data: "):
                continue
            payload = line[6:].strip()
            if payload == "[DONE]":
                self.done = True
                break
            try:
                parsed = json.loads(payload)
            except json.JSONDecodeError:
                logger.warning(f"Dropping malformed chat stream line: {line[:80]}")
                continue
            content = _delta_content(parsed)
            if content:
                deltas.append(content)
        return deltas


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=60.0)


class ChatService:
    @staticmethod
    async def history(user_id: str) -> list[dict]:
        """Stored transcript oldest first, or the greeting when the user has none."""
        rows = await sb_select(
            ChatMessage.__tablename__,
            filters={"user_id": user_id},
            order="created_at.asc",
        )
        if not rows:
            return [{"role": "assistant", "content": GREETING}]
        messages = [ChatMessage.model_validate(r) for r in rows]
        return [m.model_dump(include={"role", "content"}) for m in messages]

    @staticmethod
    async def save_message(user_id: str, role: str, content: str) -> None:
        try:
            await sb_insert(ChatMessage.__tablename__, {"user_id": user_id, "role": role, "content": content})
        except Exception as e:
            logger.error(f"Error saving {role} message for {user_id}: {e}")

    @staticmethod
    async def _raise_for_upstream(resp: httpx.Response) -> None:
        if resp.status_code in (429, 402):
            await resp.aread()
            raise ChatServiceError(_error_message(resp) or GENERIC_FAILURE)
        raise ChatServiceError(GENERIC_FAILURE)

    @staticmethod
    async def stream_reply(user_id: str, message: str):
        """Yield assistant text deltas for ``message``; the full reply is saved on ``[DONE]``."""
        try:
            stored = await sb_select(
                ChatMessage.__tablename__,
                filters={"user_id": user_id},
                columns="role,content",
                order="created_at.asc",
            )
            messages = [
                ChatMessage.model_validate(m).model_dump(include={"role", "content"}) for m in stored or []
            ]
        except Exception as e:
            logger.error(f"Error loading chat history for {user_id}: {e}")
            messages = []

        await ChatService.save_message(user_id, "user", message)

        messages.append({"role": "user", "content": message})

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {SUPABASE_ANON_KEY}",
        }
        parser = SSEDeltaParser()
        reply = ""
        try:
            async with _client() as client:
                async with client.stream("POST", HEALTH_CHAT_URL, json={"messages": messages}, headers=headers) as resp:
                    if resp.status_code != 200:
                        await ChatService._raise_for_upstream(resp)
                    async for chunk in resp.aiter_text():
                        for delta in parser.feed(chunk):
                            reply += delta
                            yield delta
                        if parser.done:
                            break
            for delta in parser.flush():
                reply += delta
                yield delta
        except httpx.HTTPError as e:
            logger.error(f"Health chat request failed for {user_id}: {e}")
            raise ChatServiceError(GENERIC_FAILURE) from e

        if parser.done:
            await ChatService.save_message(user_id, "assistant", reply)
