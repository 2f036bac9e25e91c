from __future__ import annotations

import httpx


def create_http_client(timeout: float = 120.0) -> httpx.AsyncClient:
    # Local multimodal models can take well over the default 30s to answer
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0))
