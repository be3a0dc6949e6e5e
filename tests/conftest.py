"""Root test configuration for cfdetect.

Keeps every test isolated from the developer's environment: no config file
from the working directory or home directory is picked up, and the in-memory
rate limiter starts empty for each test.

Also provides ``slow_drip_server``: a local HTTP server that never finishes
its response, for exercising outbound deadlines.
"""

import asyncio
from typing import AsyncIterator

import pytest
import pytest_asyncio

# Interval between header lines sent by slow_drip_server (seconds).
DRIP_INTERVAL_S = 0.1


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Point config discovery at paths that never exist and drop env overrides."""
    monkeypatch.delenv("CFDETECT_CONFIG", raising=False)
    monkeypatch.delenv("CFDETECT_PORT", raising=False)
    monkeypatch.setattr(
        "cfdetect.config.DEFAULT_CONFIG_PATHS",
        ["/nonexistent/cfdetect/config.yaml"],
    )


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Reset the in-memory rate limiter storage between tests.

    Prevents test-to-test rate limit bleed where many tests hitting /detect
    within the same minute would trigger a 429.
    """
    from cfdetect.limiter import limiter
    try:
        limiter._storage.reset()
    except Exception:
        pass  # Storage may not support reset in all backends — safe to ignore


@pytest_asyncio.fixture
async def slow_drip_server() -> AsyncIterator[str]:
    """Yield ``host:port`` of a server that sends a status line, then one
    header line every DRIP_INTERVAL_S, and never ends the header block.

    Each individual socket read succeeds quickly, so only a deadline on the
    whole exchange can end a request to it.
    """
    stop = asyncio.Event()
    writers: set[asyncio.StreamWriter] = set()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        writers.add(writer)
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 200 OK\r\n")
            await writer.drain()
            while not stop.is_set():
                writer.write(b"X-Drip: 1\r\n")
                await writer.drain()
                try:
                    await asyncio.wait_for(stop.wait(), timeout=DRIP_INTERVAL_S)
                except asyncio.TimeoutError:
                    pass
        except (ConnectionError, asyncio.IncompleteReadError, asyncio.LimitOverrunError):
            pass  # client gave up
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield f"127.0.0.1:{port}"
    finally:
        stop.set()
        server.close()
        for writer in writers:
            writer.close()
        await server.wait_closed()
