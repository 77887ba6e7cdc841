# Page renderers: give back the final HTML of an upstream URL.

import asyncio
from dataclasses import dataclass
import logging
from typing import Protocol

from playwright.async_api import Error as PWError, async_playwright
import requests

log = logging.getLogger("fids_proxy.renderers")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
)
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


@dataclass(frozen=True)
class RenderOptions:
    wait_until: str = "networkidle"
    user_agent: str = DEFAULT_USER_AGENT
    timeout_sec: float = 45.0


@dataclass(frozen=True)
class RenderResult:
    status_ok: bool
    status_code: int
    html: str


class RenderError(Exception):
    pass


class Renderer(Protocol):
    def render(self, url: str, options: RenderOptions) -> RenderResult:
        ...


class BrowserRenderer:
    """Headless Chromium via Playwright, one browser per render."""

    def __init__(self, headless: bool = True) -> None:
        self.headless = headless

    async def render_async(self, url: str, options: RenderOptions) -> RenderResult:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.headless, args=BROWSER_ARGS)
            try:
                page = await browser.new_page(user_agent=options.user_agent)
                response = await page.goto(
                    url,
                    wait_until=options.wait_until,
                    timeout=options.timeout_sec * 1000,
                )
                if response is None:
                    raise RenderError(f"no response for {url}")
                html = await page.content()
                return RenderResult(status_ok=response.ok, status_code=response.status, html=html)
            finally:
                await browser.close()

    def render(self, url: str, options: RenderOptions) -> RenderResult:
        log.info("Launching headless browser to fetch: %s", url)
        try:
            return asyncio.run(
                asyncio.wait_for(self.render_async(url, options), timeout=options.timeout_sec)
            )
        except asyncio.TimeoutError as exc:
            raise RenderError(f"render timed out after {options.timeout_sec:g}s") from exc
        except PWError as exc:
            raise RenderError(exc.message) from exc


class HttpRenderer:
    """Plain GET for upstreams that serve the table without scripts."""

    def __init__(self, connect_timeout_sec: float = 5.0) -> None:
        self.connect_timeout_sec = connect_timeout_sec
        self.session = requests.Session()

    def render(self, url: str, options: RenderOptions) -> RenderResult:
        log.info("Fetching: %s", url)
        try:
            resp = self.session.get(
                url,
                headers={"User-Agent": options.user_agent, "Accept": "text/html"},
                timeout=(self.connect_timeout_sec, options.timeout_sec),
            )
        except requests.RequestException as exc:
            raise RenderError(f"request failed: {exc}") from exc
        return RenderResult(status_ok=resp.ok, status_code=resp.status_code, html=resp.text)


def build_renderer(kind: str, *, connect_timeout_sec: float = 5.0) -> Renderer:
    kind = kind.strip().lower()
    if kind == "browser":
        return BrowserRenderer()
    if kind == "http":
        return HttpRenderer(connect_timeout_sec)
    raise ValueError(f"Unknown renderer: {kind}")
