"""
cygaz/core/http_client.py
httpx client factory for the government e-form.
  • new_session() → fresh AsyncClient with its own cookie jar

The verification token on the form is bound to the session cookie, so every
fetch gets its own client instead of sharing one across petroleum types.
"""

from typing import Optional

import httpx

from cygaz.core.config import TIMEOUT_S, USER_AGENT

_LIMITS = httpx.Limits(max_connections=4, max_keepalive_connections=2)

_HEADERS = {
    "User-Agent":      USER_AGENT,
    "Accept":          "text/html,application/xhtml+xml,*/*",
    "Accept-Language": "el-GR,el;q=0.9,en;q=0.8",
    "Cache-Control":   "no-cache",
}


def new_session(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers=_HEADERS,
        timeout=httpx.Timeout(TIMEOUT_S, connect=min(TIMEOUT_S, 15.0)),
        follow_redirects=True,
        limits=_LIMITS,
        transport=transport,
    )
