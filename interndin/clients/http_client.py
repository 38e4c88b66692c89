from __future__ import annotations

import httpx

from interndin.config import Settings


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    anon_key = settings.SUPABASE_ANON_KEY.get_secret_value()
    headers = {"Content-Type": "application/json"}
    if anon_key:
        headers["apikey"] = anon_key
    return httpx.AsyncClient(
        base_url=settings.SUPABASE_URL.rstrip("/"),
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT),
        verify=settings.VERIFY_SSL,
        headers=headers,
    )


async def close_http_client(client: httpx.AsyncClient) -> None:
    await client.aclose()
