"""
Shared aiohttp ClientSession: initialized once during FastAPI lifespan.

Reusing a single session avoids a TCP/TLS handshake on every remote image
fetch and inference call.

Usage:
    async with http_client.request_session() as sess:
        async with sess.get(url, timeout=...) as response:
            ...

The context manager yields the shared session when available, otherwise
creates and closes a temporary one (covers tests, scripts and pre-init calls).
Per-call timeouts are passed by callers; the session default is only a
backstop.
"""

import logging
from contextlib import asynccontextmanager

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=120)

session: aiohttp.ClientSession | None = None


async def initialize() -> None:
    global session
    session = aiohttp.ClientSession(timeout=DEFAULT_TIMEOUT)
    logger.info("[STARTUP] Shared HTTP session initialized")


async def close() -> None:
    global session
    if session and not session.closed:
        await session.close()
        session = None
        logger.info("[SHUTDOWN] Shared HTTP session closed")


@asynccontextmanager
async def request_session():
    """
    Yield the shared session if available, otherwise a temporary one.

    Never closes the shared session; http_client.close() handles that.
    """
    if session and not session.closed:
        yield session
    else:
        tmp = aiohttp.ClientSession(timeout=DEFAULT_TIMEOUT)
        try:
            yield tmp
        finally:
            await tmp.close()
