"""
Page load metrics via Playwright (Chromium).

Collects TTFB, FCP, LCP, CLS, DOM counts, a resource byte breakdown, third-party
scripts, images and fonts for one URL, or for a list of routes behind a login.

LCP/CLS come from PerformanceObservers installed as an init script, i.e. before the
first navigation; observers attached after load miss earlier entries.

Usage:
  playwright install chromium
  page-metrics https://example.com/
  PERF_AUDIT_EMAIL=... PERF_AUDIT_PASSWORD=... page-metrics https://app.example.com --auth --route /dashboard
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import urljoin

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from perf_audit.console import Console
from perf_audit.credentials import LoginCredentials, MissingCredentialsError, get_login_credentials
from perf_audit.models import MetricsSnapshot


DEFAULT_SETTLE_MS = 2000
DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_LOGIN_PATH = "/login"

OBSERVER_SCRIPT = """
(() => {
    if (window.__perfAudit) return;
    window.__perfAudit = { lcp: 0, lcpElement: "", cls: 0, clsShifts: [] };
    try {
        performance.setResourceTimingBufferSize(1000);
    } catch (e) {}

    // Only the latest LCP candidate counts; it moves as larger elements paint.
    try {
        new PerformanceObserver((list) => {
            const entries = list.getEntries();
            const last = entries[entries.length - 1];
            if (!last) return;
            window.__perfAudit.lcp = last.startTime;
            window.__perfAudit.lcpElement = (last.element && last.element.tagName) || "unknown";
        }).observe({ type: "largest-contentful-paint", buffered: true });
    } catch (e) {}

    try {
        new PerformanceObserver((list) => {
            for (const entry of list.getEntries()) {
                if (entry.hadRecentInput) continue;
                window.__perfAudit.cls += entry.value;
                window.__perfAudit.clsShifts.push({
                    value: entry.value,
                    sources: (entry.sources || []).map((s) => (s.node && s.node.tagName) || "unknown"),
                });
            }
        }).observe({ type: "layout-shift", buffered: true });
    } catch (e) {}
})();
"""

READOUT_SCRIPT = """
() => {
    const state = window.__perfAudit || { lcp: 0, lcpElement: "", cls: 0, clsShifts: [] };
    const nav = performance.getEntriesByType("navigation")[0];
    const fcp = performance.getEntriesByType("paint").find((e) => e.name === "first-contentful-paint");

    return {
        url: location.href,
        ttfb: nav ? nav.responseStart - nav.requestStart : null,
        fcp: fcp ? fcp.startTime : null,
        lcp: state.lcp || null,
        lcpElement: state.lcpElement || null,
        cls: state.cls || 0,
        clsShifts: state.clsShifts || [],

        domCount: document.querySelectorAll("*").length,
        scriptCount: document.querySelectorAll("script").length,
        styleSheetCount: document.styleSheets.length,

        resources: performance.getEntriesByType("resource").map((r) => ({
            name: r.name,
            transferSize: r.transferSize || 0,
            initiatorType: r.initiatorType,
            duration: r.duration || 0,
        })),

        images: Array.from(document.querySelectorAll("img")).map((img) => ({
            src: (img.currentSrc || img.src || "").substring(0, 100),
            loading: img.loading || "eager",
            width: img.naturalWidth,
            height: img.naturalHeight,
            hasExplicitDimensions: img.hasAttribute("width") && img.hasAttribute("height"),
            decodingAttr: img.decoding || "auto",
        })),

        fonts: Array.from(document.fonts).map((f) => ({
            family: f.family,
            status: f.status,
            display: f.display || "unknown",
        })),
    };
}
"""


class NavigationError(RuntimeError):
    pass


class LoginError(RuntimeError):
    pass


@dataclasses.dataclass(frozen=True)
class LoginSelectors:
    email: str = 'input[type="email"], input[name="email"]'
    password: str = 'input[type="password"]'
    submit: str = 'button[type="submit"], input[type="submit"]'


async def _navigate(page: Page, url: str, timeout_ms: int, console: Console) -> None:
    try:
        response = await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
    except PlaywrightError as e:
        raise NavigationError(f"Failed to load {url}: {e}") from e

    if response is not None and not response.ok:
        try:
            body = await response.body()
        except PlaywrightError:
            body = b""
        if not body:
            raise NavigationError(f"{url} returned HTTP {response.status} with an empty body")
        console.log(f"{url} returned HTTP {response.status}; measuring the error page", "warning")


async def measure_page(
    page: Page,
    url: str,
    *,
    settle_ms: int = DEFAULT_SETTLE_MS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    console: Console | None = None,
) -> MetricsSnapshot:
    """Navigate and read out metrics. OBSERVER_SCRIPT must already be installed."""
    console = console or Console()
    console.log(f"Loading {url}", "debug")
    await _navigate(page, url, timeout_ms, console)

    # LCP and CLS can still move after network idle (late content, font swap).
    await page.wait_for_timeout(settle_ms)

    raw = await page.evaluate(READOUT_SCRIPT)
    snapshot = MetricsSnapshot.from_readout(raw)
    console.log(f"Measured {snapshot.url or url}", "debug")
    return snapshot


async def collect_metrics(
    url: str,
    *,
    headless: bool = True,
    settle_ms: int = DEFAULT_SETTLE_MS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    console: Console | None = None,
) -> MetricsSnapshot:
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            context = await browser.new_context()
            page = await context.new_page()
            await page.add_init_script(OBSERVER_SCRIPT)
            return await measure_page(
                page,
                url,
                settle_ms=settle_ms,
                timeout_ms=timeout_ms,
                console=console,
            )
        finally:
            await browser.close()


async def login(
    page: Page,
    login_url: str,
    credentials: LoginCredentials,
    selectors: LoginSelectors = LoginSelectors(),
    *,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    console: Console | None = None,
) -> None:
    """Submit the login form and wait for the post-login redirect."""
    console = console or Console()
    await _navigate(page, login_url, timeout_ms, console)
    start_url = page.url

    try:
        await page.fill(selectors.email, credentials.email, timeout=timeout_ms)
        await page.fill(selectors.password, credentials.password, timeout=timeout_ms)
        await page.click(selectors.submit, timeout=timeout_ms)
        await page.wait_for_url(lambda u: u != start_url, timeout=timeout_ms)
    except PlaywrightError as e:
        raise LoginError(f"Login at {login_url} did not redirect: {e}") from e

    console.log(f"Logged in as {credentials.email}", "success")


async def collect_authenticated_metrics(
    base_url: str,
    routes: Iterable[str],
    credentials: LoginCredentials,
    *,
    login_path: str = DEFAULT_LOGIN_PATH,
    selectors: LoginSelectors = LoginSelectors(),
    headless: bool = True,
    settle_ms: int = DEFAULT_SETTLE_MS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    console: Console | None = None,
) -> dict[str, MetricsSnapshot]:
    routes = list(routes)
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            context = await browser.new_context()
            # Context-level so every page in the session observes from its first paint.
            await context.add_init_script(OBSERVER_SCRIPT)

            page = await context.new_page()
            await login(
                page,
                urljoin(base_url, login_path),
                credentials,
                selectors,
                timeout_ms=timeout_ms,
                console=console,
            )
            await page.close()

            results: dict[str, MetricsSnapshot] = {}
            for route in routes:
                page = await context.new_page()
                try:
                    results[route] = await measure_page(
                        page,
                        urljoin(base_url, route),
                        settle_ms=settle_ms,
                        timeout_ms=timeout_ms,
                        console=console,
                    )
                finally:
                    await page.close()
            return results
        finally:
            await browser.close()


def _write_json(payload: Any, out: Path | None, console: Console) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    print(text)
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
        console.log(f"wrote {out}", "success")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="page-metrics",
        description="Collect page load metrics (TTFB, FCP, LCP, CLS, resources) with Playwright.",
    )
    parser.add_argument("url", nargs="?", help="Page URL (site base URL with --auth).")
    parser.add_argument("--auth", action="store_true", help="Log in with the test account before measuring.")
    parser.add_argument(
        "--route",
        action="append",
        default=[],
        help="Route to measure after login (repeatable, default: /). Requires --auth.",
    )
    parser.add_argument(
        "--login-path",
        default=None,
        help="Login page path (default: /login). Requires --auth.",
    )
    parser.add_argument("--settle-ms", type=int, default=DEFAULT_SETTLE_MS, help="Wait after network idle.")
    parser.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS, help="Navigation timeout.")
    parser.add_argument("--headed", action="store_true", help="Show the browser window.")
    parser.add_argument("--out", default="", help="Also write the JSON snapshot to this file.")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(argv)

    if not args.url:
        parser.print_usage(sys.stderr)
        return 1
    if not args.auth:
        if args.route:
            parser.error("--route requires --auth")
        if args.login_path is not None:
            parser.error("--login-path requires --auth")

    console = Console(debug=args.debug)
    out = Path(args.out) if args.out else None

    try:
        if args.auth:
            credentials = get_login_credentials()
            results = asyncio.run(
                collect_authenticated_metrics(
                    args.url,
                    args.route or ["/"],
                    credentials,
                    login_path=args.login_path or DEFAULT_LOGIN_PATH,
                    headless=not args.headed,
                    settle_ms=int(args.settle_ms),
                    timeout_ms=int(args.timeout_ms),
                    console=console,
                )
            )
            payload: Any = {route: snapshot.to_dict() for route, snapshot in results.items()}
        else:
            snapshot = asyncio.run(
                collect_metrics(
                    args.url,
                    headless=not args.headed,
                    settle_ms=int(args.settle_ms),
                    timeout_ms=int(args.timeout_ms),
                    console=console,
                )
            )
            payload = snapshot.to_dict()
    except MissingCredentialsError as e:
        raise SystemExit(str(e)) from e
    except (NavigationError, LoginError) as e:
        raise SystemExit(f"FAIL: {e}") from e

    _write_json(payload, out, console)
    return 0




if __name__ == "__main__":
    raise SystemExit(main())
