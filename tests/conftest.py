from __future__ import annotations

import asyncio
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright


SITE_DIR = Path(__file__).resolve().parent / "fixtures" / "site"


class _QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, *_args: Any) -> None:  # noqa: D401 - match base signature
        return


@pytest.fixture(scope="session")
def site_url():
    handler = lambda *a, **kw: _QuietHandler(*a, directory=str(SITE_DIR), **kw)  # noqa: E731
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    port = httpd.server_address[1]
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        httpd.shutdown()
        httpd.server_close()


async def _can_launch_chromium() -> bool:
    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=True)
        except PlaywrightError:
            return False
        await browser.close()
        return True


@pytest.fixture(scope="session")
def chromium():
    """Skip browser tests when Chromium is not installed (`playwright install chromium`)."""
    if not asyncio.run(_can_launch_chromium()):
        pytest.skip("Chromium not available for Playwright")
