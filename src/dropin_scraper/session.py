"""Playwright browser session for fetching facility pages.

BrowserFetcher owns one headless Chromium instance for the whole run and
opens a fresh page per facility. Fetches are paced like a person reading the
pages (a random pause after each load and between facilities) because the
city site blocks fast automated clients. The browser is always closed when
the `async with` block exits, including on errors.
"""

import asyncio
from collections.abc import Awaitable, Callable

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.dropin_scraper.config import ScraperConfig
from src.dropin_scraper.errors import FetchError, TransientError
from src.dropin_scraper.logging import get_logger
from src.dropin_scraper.utils import configure_page_for_scraping, random_delay_seconds

logger = get_logger(__name__)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
]


class BrowserFetcher:
    """Fetches facility page HTML with a shared headless browser.

    Usage:
        async with BrowserFetcher.from_config(config) as fetcher:
            html = await fetcher.fetch(url)
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        user_agent: str | None = None,
        viewport: tuple[int, int] = (1920, 1080),
        page_timeout_ms: int = 30000,
        settle_delay_ms: tuple[int, int] = (1500, 2000),
        between_fetch_delay_ms: tuple[int, int] = (1500, 4000),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.headless = headless
        self.user_agent = user_agent
        self.viewport = viewport
        self.page_timeout_ms = page_timeout_ms
        self.settle_delay_ms = settle_delay_ms
        self.between_fetch_delay_ms = between_fetch_delay_ms
        self._sleep = sleep

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._fetch_count = 0

    @classmethod
    def from_config(cls, config: ScraperConfig) -> "BrowserFetcher":
        return cls(
            headless=config.headless,
            user_agent=config.user_agent,
            viewport=(config.viewport_width, config.viewport_height),
            page_timeout_ms=config.page_timeout_ms,
            settle_delay_ms=config.settle_delay_ms,
            between_fetch_delay_ms=config.between_fetch_delay_ms,
        )

    async def __aenter__(self) -> "BrowserFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Launch Chromium and create the browsing context."""
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless, args=CHROMIUM_ARGS
            )
            width, height = self.viewport
            self._context = await self._browser.new_context(
                user_agent=self.user_agent,
                viewport={"width": width, "height": height},
            )
        except BaseException:
            await self.close()
            raise
        logger.info("browser_started", headless=self.headless)

    async def close(self) -> None:
        """Close the browser and stop Playwright. Safe to call more than once."""
        try:
            if self._browser is not None:
                await self._browser.close()
                logger.info("browser_closed", fetches=self._fetch_count)
        finally:
            self._browser = None
            self._context = None
            if self._playwright is not None:
                playwright, self._playwright = self._playwright, None
                await playwright.stop()

    async def fetch(self, url: str) -> str:
        """Return the rendered HTML of a facility page.

        Raises:
            FetchError: If the page could not be loaded after retries.
        """
        if self._context is None:
            raise RuntimeError("BrowserFetcher used outside of 'async with'")

        if self._fetch_count > 0:
            await self._sleep(random_delay_seconds(self.between_fetch_delay_ms))
        self._fetch_count += 1

        try:
            return await self._load(url)
        except (TransientError, PlaywrightError) as e:
            logger.warning("document_fetch_failed", url=url, error=str(e))
            raise FetchError(url, str(e)) from e

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_fixed(5),
        retry=retry_if_exception_type(TransientError),
        reraise=True,
    )
    async def _load(self, url: str) -> str:
        page = await self._context.new_page()
        try:
            await configure_page_for_scraping(page, timeout_ms=self.page_timeout_ms)
            try:
                response = await page.goto(url, wait_until="networkidle")
            except PlaywrightTimeoutError as e:
                raise TransientError(f"Facility page timed out: {url}") from e
            logger.debug("page_navigated", url=url)

            if response is not None and response.status >= 500:
                raise TransientError(f"Facility page returned {response.status}")
            if response is not None and response.status == 403:
                logger.warning("page_forbidden", url=url)

            # Mimic reading time before grabbing the rendered DOM
            await self._sleep(random_delay_seconds(self.settle_delay_ms))
            content = await page.content()
            logger.debug("page_content_read", url=url, size=len(content))
            return content
        finally:
            await page.close()
