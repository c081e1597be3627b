"""Shared httpx client construction and backend error decoding."""

import httpx

from client.config import settings


def create_http_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """AsyncClient bound to the backend base URL."""
    return httpx.AsyncClient(
        base_url=settings.API_BASE_URL,
        timeout=settings.REQUEST_TIMEOUT_SEC,
        transport=transport,
    )


def error_detail(resp: httpx.Response) -> str:
    """Human-readable message from a FastAPI error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or f"HTTP {resp.status_code}"

    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        # 422: [{"loc": [...], "msg": "..."}]
        parts = []
        for item in detail:
            field = ".".join(str(p) for p in item.get("loc", [])[1:])
            parts.append(f"{field}: {item.get('msg')}" if field else str(item.get("msg")))
        return "; ".join(parts)
    return f"HTTP {resp.status_code}"
