"""
supabase_rest.py — HTTP-based database client using Supabase's PostgREST API.
Every table the app touches (symptoms, user_symptoms, health_scores, badges,
user_badges, chat_messages) is read and written through these helpers.
"""
import logging
import httpx
from urllib.parse import quote

from config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


def _headers():
    return {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }


def build_select_url(
    table: str,
    filters: dict = None,
    columns: str = "*",
    gte: dict = None,
    order: str = None,
    limit: int = None,
) -> str:
    """Compose a PostgREST select URL.

    ``filters`` are equality filters, ``gte`` lower bounds (``col >= value``),
    ``order`` a PostgREST order expression such as ``created_at.desc``.
    """
    url = f"{SUPABASE_URL}/rest/v1/{table}?select={columns}"
    if filters:
        for key, value in filters.items():
            url += f"&{key}=eq.{quote(str(value))}"
    if gte:
        for key, value in gte.items():
            url += f"&{key}=gte.{quote(str(value))}"
    if order:
        url += f"&order={order}"
    if limit is not None:
        url += f"&limit={int(limit)}"
    return url


async def sb_select(
    table: str,
    filters: dict = None,
    columns: str = "*",
    gte: dict = None,
    order: str = None,
    limit: int = None,
) -> list:
    """Select rows from a table with optional equality filters, lower bounds, ordering and limit."""
    url = build_select_url(table, filters, columns, gte, order, limit)
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
        resp = await client.get(url, headers=_headers())
        resp.raise_for_status()
        return resp.json()


async def sb_insert(table: str, data: dict) -> dict:
    """Insert a row and return the created record."""
    url = f"{SUPABASE_URL}/rest/v1/{table}"
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
        resp = await client.post(url, json=data, headers=_headers())
        resp.raise_for_status()
        result = resp.json()
        return result[0] if isinstance(result, list) and result else {}
